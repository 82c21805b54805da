# Notification Service for the collaboration platform
# Provides centralized notification creation and management

from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
from enum import Enum
import logging

from database.models import Notification
from services.actor_directory import ActorProfile
from config.app_config import FRONTEND_URL

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Notification types emitted by collaboration and contract operations."""
    PROPOSAL_RECEIVED = "collab:proposal_received"
    PROPOSAL_ACCEPTED = "collab:proposal_accepted"
    PROPOSAL_REJECTED = "collab:proposal_rejected"
    NOTE_ADDED = "collab:note_added"
    PROGRESS_UPDATED = "collab:progress_updated"
    CANCELLED = "collab:cancelled"
    COMPLETED = "collab:completed"
    ACTIVATED = "collab:activated"
    CONTRACT_SIGNED = "contract:signed"
    CONTRACT_UPDATED = "contract:updated"


# User-facing texts
COLLAB_TEXTS = {
    "proposal_received_title": "Nouvelle proposition de collaboration",
    "proposal_received_body": "{actor_name} vous propose une collaboration ({terms}).",
    "proposal_accepted_title": "{actor_name} a accepté votre proposition",
    "proposal_accepted_body": "{actor_name} a accepté votre proposition de collaboration. Vous pouvez maintenant consulter et signer le contrat.",
    "proposal_rejected_title": "{actor_name} a refusé votre proposition",
    "proposal_rejected_body": "{actor_name} a refusé votre proposition de collaboration.",
    "note_added_title": "Nouvelle note de {actor_name}",
    "progress_updated_title": "Progression de la collaboration",
    "progress_updated_body": "Étape mise à jour : {step}",
    "cancelled_title": "Collaboration annulée",
    "cancelled_body": "La collaboration a été annulée.",
    "completed_title": "Collaboration terminée",
    "completed_body": "La collaboration a été marquée comme terminée.",
    "activated_title": "Collaboration activée",
    "activated_body": "La collaboration est maintenant active. Activée par {actor_name}.",
    "contract_signed_title": "Contrat signé",
    "contract_signed_body": "{actor_name} a signé le contrat.",
    "contract_updated_title": "Contrat mis à jour",
    "contract_updated_body": "Le contenu du contrat a été modifié. Signatures réinitialisées ; les deux parties doivent signer à nouveau.",
}


class NotificationService:
    """
    Service for creating and managing user notifications.

    Collaboration helpers are fire-and-forget: they run after the state change has
    been committed, persist in their own transaction, and never raise.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        type: NotificationType | str,
        title: str,
        message: str,
        actor_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        action_url: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Notification:
        """
        Create a new notification for a user.

        Args:
            user_id: The user to notify
            type: Notification type (use NotificationType enum)
            title: Short notification title
            message: Full notification message
            actor_id: The user whose action triggered the notification
            entity_type / entity_id: What the notification is about
            action_url: Optional URL for the notification action
            data: Optional additional data as JSON

        Returns:
            The created Notification object
        """
        notification = Notification(
            user_id=user_id,
            actor_id=actor_id,
            type=type.value if isinstance(type, NotificationType) else type,
            entity_type=entity_type,
            entity_id=entity_id,
            title=title,
            message=message,
            action_url=action_url,
            data=data or {},
        )
        self.db.add(notification)
        self.db.flush()  # Get the ID without committing
        return notification

    def notify_safely(self, **kwargs) -> Optional[Notification]:
        """Create and commit a notification; failures are logged and swallowed."""
        try:
            notification = self.create(**kwargs)
            self.db.commit()
            return notification
        except Exception:
            self.db.rollback()
            logger.exception(
                f"Failed to deliver {kwargs.get('type')} notification to {kwargs.get('user_id')}"
            )
            return None

    def mark_read(self, notification_id: str, user_id: str) -> bool:
        """
        Mark a notification as read.

        Returns:
            True if notification was marked read, False if not found
        """
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).first()

        if notification:
            notification.read = True
            notification.read_at = datetime.utcnow()
            return True
        return False

    def mark_all_read(self, user_id: str) -> int:
        """
        Mark all notifications as read for a user.

        Returns:
            Number of notifications marked as read
        """
        count = self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False
        ).update({
            "read": True,
            "read_at": datetime.utcnow()
        })
        return count

    def get_unread_count(self, user_id: str) -> int:
        """Get unread notification count for a user."""
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False
        ).count()

    # =========================================================================
    # COLLABORATION NOTIFICATION HELPERS
    # =========================================================================

    def _collab(
        self,
        recipient_id: str,
        actor: Optional[ActorProfile],
        collaboration_id: str,
        type: NotificationType,
        title: str,
        message: str,
        extra: Optional[dict] = None,
    ) -> Optional[Notification]:
        data = {
            "actor_name": actor.display_name if actor else None,
            "actor_avatar": actor.avatar_url if actor else None,
        }
        data.update(extra or {})
        return self.notify_safely(
            user_id=recipient_id,
            type=type,
            title=title,
            message=message,
            actor_id=actor.id if actor else None,
            entity_type="collaboration",
            entity_id=collaboration_id,
            action_url=f"{FRONTEND_URL}/collaboration/{collaboration_id}",
            data=data,
        )

    def notify_proposal_received(self, recipient_id: str, actor: ActorProfile, collaboration_id: str,
                                 terms: str, post_id: str, post_type: str,
                                 commission_percentage: Optional[float] = None):
        """Notify post owner of a new collaboration proposal."""
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.PROPOSAL_RECEIVED,
            COLLAB_TEXTS["proposal_received_title"],
            COLLAB_TEXTS["proposal_received_body"].format(actor_name=_name(actor), terms=terms),
            {"post_id": post_id, "post_type": post_type, "commission_percentage": commission_percentage},
        )

    def notify_proposal_answered(self, recipient_id: str, actor: ActorProfile, collaboration_id: str,
                                 accepted: bool):
        """Notify collaborator that the post owner accepted or rejected the proposal."""
        key = "proposal_accepted" if accepted else "proposal_rejected"
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.PROPOSAL_ACCEPTED if accepted else NotificationType.PROPOSAL_REJECTED,
            COLLAB_TEXTS[f"{key}_title"].format(actor_name=_name(actor)),
            COLLAB_TEXTS[f"{key}_body"].format(actor_name=_name(actor)),
        )

    def notify_note_added(self, recipient_id: str, actor: ActorProfile, collaboration_id: str, content: str):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.NOTE_ADDED,
            COLLAB_TEXTS["note_added_title"].format(actor_name=_name(actor)),
            content,
            {"content": content},
        )

    def notify_progress_updated(self, recipient_id: str, actor: ActorProfile, collaboration_id: str,
                                target_step: str, step_label: str, validated_by: str,
                                notes: Optional[str] = None):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.PROGRESS_UPDATED,
            COLLAB_TEXTS["progress_updated_title"],
            COLLAB_TEXTS["progress_updated_body"].format(step=step_label),
            {"target_step": target_step, "notes": notes or "", "validated_by": validated_by},
        )

    def notify_cancelled(self, recipient_id: str, actor: Optional[ActorProfile], collaboration_id: str):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.CANCELLED,
            COLLAB_TEXTS["cancelled_title"],
            COLLAB_TEXTS["cancelled_body"],
        )

    def notify_completed(self, recipient_id: str, actor: Optional[ActorProfile], collaboration_id: str,
                         completion_reason: Optional[str] = None):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.COMPLETED,
            COLLAB_TEXTS["completed_title"],
            COLLAB_TEXTS["completed_body"],
            {"completion_reason": completion_reason},
        )

    def notify_activated(self, recipient_id: str, actor: ActorProfile, collaboration_id: str):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.ACTIVATED,
            COLLAB_TEXTS["activated_title"],
            COLLAB_TEXTS["activated_body"].format(actor_name=_name(actor)),
        )

    # =========================================================================
    # CONTRACT NOTIFICATION HELPERS
    # =========================================================================

    def notify_contract_signed(self, recipient_id: str, actor: ActorProfile, collaboration_id: str):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.CONTRACT_SIGNED,
            COLLAB_TEXTS["contract_signed_title"],
            COLLAB_TEXTS["contract_signed_body"].format(actor_name=_name(actor)),
        )

    def notify_contract_updated(self, recipient_id: str, actor: ActorProfile, collaboration_id: str):
        return self._collab(
            recipient_id, actor, collaboration_id,
            NotificationType.CONTRACT_UPDATED,
            COLLAB_TEXTS["contract_updated_title"],
            COLLAB_TEXTS["contract_updated_body"],
        )


def _name(actor: Optional[ActorProfile]) -> str:
    return actor.display_name if actor else "Quelqu'un"


# Convenience function to get service
def get_notification_service(db: Session) -> NotificationService:
    """Get NotificationService instance."""
    return NotificationService(db)


