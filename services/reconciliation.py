# Post Status Reconciliation
# Completing a collaboration and flipping its post to sold/rented/fulfilled are two
# separate commits. This job finds completed deals whose post was never updated.

from sqlalchemy.orm import Session
from typing import List
import logging

from database.collaboration_models import Collaboration, CollaborationStatusDB, CompletionReasonDB
from services.post_resolver import PostResolver

logger = logging.getLogger(__name__)


class PostStatusReconciler:

    def __init__(self, db: Session):
        self.db = db
        self.posts = PostResolver(db)

    def pending(self) -> List[Collaboration]:
        """Completed-through-collaboration deals whose post still shows its old status."""
        completed = self.db.query(Collaboration).filter(
            Collaboration.status == CollaborationStatusDB.COMPLETED,
            Collaboration.completion_reason == CompletionReasonDB.VENTE_CONCLUE_COLLABORATION,
        ).all()
        return [
            c for c in completed
            if not self.posts.resolve(c.post_type, c.post_id).gone
            and not self.posts.is_concluded(c.post_type, c.post_id)
        ]

    def run(self) -> List[str]:
        """Apply the missing status changes. Returns the ids of the updated posts."""
        repaired = []
        for collaboration in self.pending():
            try:
                new_status = self.posts.mark_concluded(collaboration.post_type, collaboration.post_id)
            except Exception:
                self.db.rollback()
                logger.exception(f"Could not reconcile post of collaboration {collaboration.id}")
                continue
            if new_status:
                logger.info(
                    f"Reconciled {collaboration.post_type.value}:{collaboration.post_id} -> {new_status} "
                    f"(collaboration {collaboration.id})"
                )
                repaired.append(collaboration.post_id)
        return repaired
