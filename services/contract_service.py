# Contract Service
# Contract negotiation and dual signature on accepted collaborations

from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import logging

from database.models import User
from database.collaboration_models import (
    Collaboration, CollaborationStatusDB, CompensationTypeDB,
)
from config.app_config import PLATFORM_NAME
from config.contract_templates import BLANK, get_contract_template
from services.actor_directory import (
    to_profile, public_party, professional_number, postal_address,
)
from services.notification_service import NotificationService
from services.errors import AuthorizationError, NotFoundError, ValidationError
from auth.roles import UserType, get_user_type

logger = logging.getLogger(__name__)


def format_amount(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{value:g}"


def compensation_text(collaboration: Collaboration, commission_suffix: str = "% de commission") -> str:
    """Human-readable compensation, used by contracts and proposal activity messages."""
    if collaboration.compensation_type == CompensationTypeDB.FIXED_AMOUNT:
        return f"{format_amount(collaboration.compensation_amount)}€ de compensation"
    if collaboration.compensation_type == CompensationTypeDB.GIFT_VOUCHERS:
        return f"{format_amount(collaboration.compensation_amount)} chèques cadeaux"
    if collaboration.proposed_commission:
        return f"{format_amount(collaboration.proposed_commission)}{commission_suffix}"
    return BLANK


def render_contract(owner: User, collaborator: User, collaboration: Collaboration,
                    today: Optional[datetime] = None) -> str:
    """Fill the template matching the post owner's account type with both parties' details."""
    template = get_contract_template(get_user_type(owner).value)
    today = today or datetime.utcnow()

    values = {
        "platform": PLATFORM_NAME,
        "owner_name": f"{owner.first_name or ''} {owner.last_name or ''}".strip() or owner.email,
        "owner_first_name": owner.first_name or BLANK,
        "owner_last_name": owner.last_name or BLANK,
        "owner_address": postal_address(owner),
        "owner_phone": owner.phone or BLANK,
        "owner_email": owner.email,
        "owner_professional_number": professional_number(owner),
        "collaborator_name": f"{collaborator.first_name or ''} {collaborator.last_name or ''}".strip() or collaborator.email,
        "collaborator_address": postal_address(collaborator),
        "collaborator_phone": collaborator.phone or BLANK,
        "collaborator_email": collaborator.email,
        "collaborator_status": "Agent Immobilier" if get_user_type(collaborator) == UserType.AGENT else "Professionnel",
        "collaborator_professional_number": professional_number(collaborator),
        "compensation": compensation_text(collaboration, template["commission_suffix"]),
        "date": today.strftime("%d/%m/%Y"),
    }
    return template["body"].format(**values)


class ContractService:
    """Contract read, edit and signature operations for one request."""

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    def _load(self, collaboration_id: str) -> Collaboration:
        collaboration = self.db.query(Collaboration).filter(Collaboration.id == collaboration_id).first()
        if not collaboration:
            raise NotFoundError("Collaboration introuvable")
        return collaboration

    def contract_view(self, collaboration: Collaboration, user_id: str) -> dict:
        return {
            "id": collaboration.id,
            "contract_text": collaboration.contract_text,
            "additional_terms": collaboration.additional_terms,
            "contract_modified": collaboration.contract_modified,
            "owner_signed": collaboration.owner_signed,
            "owner_signed_at": collaboration.owner_signed_at,
            "collaborator_signed": collaboration.collaborator_signed,
            "collaborator_signed_at": collaboration.collaborator_signed_at,
            "status": collaboration.status.value,
            "current_step": collaboration.current_step,
            "property_owner": public_party(collaboration.post_owner),
            "collaborator": public_party(collaboration.collaborator),
            "can_edit": collaboration.is_participant(user_id),
            "can_sign": collaboration.can_sign(user_id),
            "requires_both_signatures": collaboration.requires_both_signatures,
        }

    def get_contract(self, collaboration_id: str, user: User) -> dict:
        """
        Return the contract view, seeding the contract text from the owner's template
        the first time it is read. An existing text is never regenerated.
        """
        collaboration = self._load(collaboration_id)
        if not collaboration.is_participant(user.id):
            raise AuthorizationError("Vous n'êtes pas autorisé à consulter ce contrat")

        if not (collaboration.contract_text or "").strip():
            collaboration.contract_text = render_contract(
                collaboration.post_owner, collaboration.collaborator, collaboration
            )
            collaboration.contract_modified = False
            self.db.commit()
            self.db.refresh(collaboration)
            logger.info(f"Contract initialized for collaboration {collaboration.id} by {user.id}")

        return self.contract_view(collaboration, user.id)

    def update_contract(self, collaboration_id: str, user: User,
                        contract_text: Optional[str], additional_terms: Optional[str]) -> dict:
        collaboration = self._load(collaboration_id)
        if collaboration.status != CollaborationStatusDB.ACCEPTED:
            raise ValidationError("Le contrat ne peut être modifié que pour les collaborations acceptées")
        if not collaboration.is_participant(user.id):
            raise AuthorizationError("Vous n'êtes pas autorisé à modifier ce contrat")

        changed = collaboration.edit_contract(contract_text, additional_terms, user.id)
        if changed:
            self.db.commit()
            self.db.refresh(collaboration)
            logger.info(f"Contract of collaboration {collaboration.id} modified by {user.id}, signatures reset")
            self.notifications.notify_contract_updated(
                collaboration.other_party_id(user.id), to_profile(user), collaboration.id
            )

        return {
            "success": True,
            "message": "Contrat mis à jour - les deux parties doivent signer à nouveau" if changed
            else "Contrat mis à jour avec succès",
            "contract": self.contract_view(collaboration, user.id),
            "requires_resigning": changed,
        }

    def sign_contract(self, collaboration_id: str, user: User) -> dict:
        """
        Record the caller's signature. When the second signature lands the
        collaboration becomes active and a separate activation notice goes out.
        """
        collaboration = self._load(collaboration_id)
        if not collaboration.is_participant(user.id):
            raise AuthorizationError("Vous n'êtes pas autorisé à signer ce contrat")
        if collaboration.status != CollaborationStatusDB.ACCEPTED:
            raise ValidationError("La collaboration doit être acceptée avant de signer")

        activated = collaboration.sign(user.id)
        self.db.commit()
        self.db.refresh(collaboration)
        logger.info(f"Contract of collaboration {collaboration.id} signed by {user.id}")
        if activated:
            logger.info(f"Collaboration {collaboration.id} activated")

        actor = to_profile(user)
        recipient_id = collaboration.other_party_id(user.id)
        self.notifications.notify_contract_signed(recipient_id, actor, collaboration.id)
        if activated:
            self.notifications.notify_activated(recipient_id, actor, collaboration.id)

        return {
            "success": True,
            "message": "Contrat signé avec succès",
            "contract": self.contract_view(collaboration, user.id),
            "activated": activated,
        }


def get_contract_service(db: Session) -> ContractService:
    return ContractService(db)
