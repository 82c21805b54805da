# Actor Directory
# Resolves user ids into the profile data used by notifications and contracts

from sqlalchemy.orm import Session
from typing import Optional
from dataclasses import dataclass

from database.models import User
from auth.roles import get_user_type
from config.contract_templates import BLANK


@dataclass
class ActorProfile:
    id: str
    display_name: str
    avatar_url: Optional[str]
    account_role_type: str


class ActorDirectory:
    """Read-only lookups against the users table."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()


def to_profile(user: User) -> ActorProfile:
    return ActorProfile(
        id=user.id,
        display_name=user.display_name,
        avatar_url=user.profile_image,
        account_role_type=get_user_type(user).value,
    )


def public_party(user: Optional[User]) -> Optional[dict]:
    """Public view of a participant, as shown on contracts and collaboration pages."""
    if not user:
        return None
    return {
        "id": user.id,
        "name": f"{user.first_name or ''} {user.last_name or ''}".strip() or user.email,
        "email": user.email,
        "profile_image": user.profile_image,
    }


def professional_number(user: User) -> str:
    """Professional identifier with its label: T card first, then SIREN, then RSAC."""
    if user.t_card:
        return f"Carte T : {user.t_card}"
    if user.siren_number:
        return f"SIREN : {user.siren_number}"
    if user.rsac_number:
        return f"RSAC : {user.rsac_number}"
    return BLANK


def postal_address(user: User) -> str:
    if user.city and user.postal_code:
        return f"{user.city} ({user.postal_code})"
    return "Adresse non renseignée"
