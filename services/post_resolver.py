# Post Reference Resolver
# Looks up the Property or SearchAd a collaboration is about

from sqlalchemy.orm import Session
from typing import Optional
from dataclasses import dataclass
import logging

from database.listing_models import (
    Property, SearchAd, PropertyStatusDB, SearchAdStatusDB, TransactionTypeDB,
)
from database.collaboration_models import PostTypeDB

logger = logging.getLogger(__name__)


@dataclass
class PostReference:
    post_id: str
    post_type: PostTypeDB
    owner_actor_id: Optional[str]
    exists: bool
    archived: bool

    @property
    def gone(self) -> bool:
        return not self.exists or self.archived


class PostResolver:
    """Resolves (post_type, post_id) into a PostReference and applies completion status changes."""

    def __init__(self, db: Session):
        self.db = db

    def _load(self, post_type: PostTypeDB, post_id: str):
        model = Property if post_type == PostTypeDB.PROPERTY else SearchAd
        return self.db.query(model).filter(model.id == post_id).first()

    def resolve(self, post_type: PostTypeDB, post_id: str) -> PostReference:
        post = self._load(post_type, post_id)
        if post is None:
            return PostReference(post_id=post_id, post_type=post_type, owner_actor_id=None,
                                 exists=False, archived=False)

        if post_type == PostTypeDB.PROPERTY:
            return PostReference(
                post_id=post.id,
                post_type=post_type,
                owner_actor_id=post.owner_id,
                exists=True,
                archived=post.status == PropertyStatusDB.ARCHIVED,
            )
        return PostReference(
            post_id=post.id,
            post_type=post_type,
            owner_actor_id=post.author_id,
            exists=True,
            archived=post.status == SearchAdStatusDB.ARCHIVED,
        )

    def concluded_status(self, post_type: PostTypeDB, post) -> str:
        """Status a post takes once a deal was closed through a collaboration."""
        if post_type == PostTypeDB.PROPERTY:
            if post.transaction_type == TransactionTypeDB.RENTAL:
                return PropertyStatusDB.RENTED.value
            return PropertyStatusDB.SOLD.value
        return SearchAdStatusDB.FULFILLED.value

    def mark_concluded(self, post_type: PostTypeDB, post_id: str) -> Optional[str]:
        """
        Flip the post to sold/rented/fulfilled and commit. Returns the new status, or None
        when the post no longer exists.
        """
        post = self._load(post_type, post_id)
        if post is None:
            logger.warning(f"Post {post_type.value}:{post_id} not found, status left unchanged")
            return None

        new_status = self.concluded_status(post_type, post)
        if post_type == PostTypeDB.PROPERTY:
            post.status = PropertyStatusDB(new_status)
        else:
            post.status = SearchAdStatusDB(new_status)
        self.db.commit()
        logger.info(f"Post {post_type.value}:{post_id} status updated to {new_status}")
        return new_status

    def is_concluded(self, post_type: PostTypeDB, post_id: str) -> bool:
        post = self._load(post_type, post_id)
        if post is None:
            return True
        return post.status.value == self.concluded_status(post_type, post)
