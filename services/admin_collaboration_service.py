# Admin Collaboration Service
# Privileged overrides on collaborations. These skip the participant checks and
# most state-machine guards, so every call is logged at WARNING for auditing.

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.models import User
from database.collaboration_models import (
    Collaboration, CollaborationStatusDB, CompletionReasonDB, ActivityTypeDB,
    ParticipantRoleDB, ROLE_LABELS,
)
from services.actor_directory import to_profile
from services.post_resolver import PostResolver
from services.notification_service import NotificationService
from services.errors import ValidationError, NotFoundError, ConflictError

logger = logging.getLogger(__name__)

ADMIN_LOG_PREFIX = "[admin-override]"

# Fields an admin may overwrite directly
ADMIN_UPDATABLE_FIELDS = ("proposed_commission", "commission", "status", "current_step")


class AdminCollaborationService:

    def __init__(self, db: Session):
        self.db = db
        self.posts = PostResolver(db)
        self.notifications = NotificationService(db)

    def _load(self, collaboration_id: str) -> Collaboration:
        collaboration = self.db.query(Collaboration).filter(Collaboration.id == collaboration_id).first()
        if not collaboration:
            raise NotFoundError("Collaboration introuvable")
        return collaboration

    def _commit(self, collaboration: Collaboration):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Une autre collaboration est déjà ouverte sur cette annonce")
        self.db.refresh(collaboration)

    def _notify_participants(self, collaboration: Collaboration, admin: User, completed: bool):
        actor = to_profile(admin)
        for recipient_id in (collaboration.post_owner_id, collaboration.collaborator_id):
            if completed:
                self.notifications.notify_completed(
                    recipient_id, actor, collaboration.id,
                    collaboration.completion_reason.value if collaboration.completion_reason else None,
                )
            else:
                self.notifications.notify_cancelled(recipient_id, actor, collaboration.id)

    def list_all(self) -> List[Collaboration]:
        """All collaborations whose post still exists and is not archived, newest first."""
        collaborations = self.db.query(Collaboration).order_by(desc(Collaboration.created_at)).all()
        return [
            c for c in collaborations
            if not self.posts.resolve(c.post_type, c.post_id).gone
        ]

    def force_close(self, collaboration_id: str, admin: User, action: str,
                    completion_reason: Optional[str] = None) -> Collaboration:
        """
        Cancel or complete a collaboration whatever its current state.
        `complete` closes every progress step and defaults the reason to sans_suite.
        """
        if action not in ("cancel", "complete"):
            raise ValidationError('L\'action doit être "cancel" ou "complete"')
        reason = CompletionReasonDB.SANS_SUITE
        if action == "complete" and completion_reason:
            try:
                reason = CompletionReasonDB(completion_reason)
            except ValueError:
                raise ValidationError("Raison de complétion invalide ou manquante")

        collaboration = self._load(collaboration_id)
        previous_status = collaboration.status.value

        if action == "cancel":
            collaboration.mark_cancelled(admin.id, f"Collaboration annulée par {ROLE_LABELS[ParticipantRoleDB.ADMIN]}")
        else:
            collaboration.mark_completed(
                admin.id, ParticipantRoleDB.ADMIN, reason,
                f"Collaboration terminée par {ROLE_LABELS[ParticipantRoleDB.ADMIN]}",
            )
        self._commit(collaboration)
        logger.warning(
            f"{ADMIN_LOG_PREFIX} Collaboration {collaboration.id} force-{action} by {admin.id} "
            f"({previous_status} -> {collaboration.status.value})"
        )

        self._notify_participants(collaboration, admin, completed=action == "complete")
        return collaboration

    def force_complete(self, collaboration_id: str, admin: User) -> Collaboration:
        """Validate the closing step for both parties, then complete with reason sans_suite."""
        collaboration = self._load(collaboration_id)
        previous_status = collaboration.status.value

        collaboration.validate_closing_step()
        collaboration.mark_completed(
            admin.id, ParticipantRoleDB.ADMIN, CompletionReasonDB.SANS_SUITE,
            f"Collaboration terminée par {ROLE_LABELS[ParticipantRoleDB.ADMIN]} (étape finale validée)",
            close_steps=False,
        )
        self._commit(collaboration)
        logger.warning(
            f"{ADMIN_LOG_PREFIX} Collaboration {collaboration.id} force-completed by {admin.id} "
            f"({previous_status} -> completed)"
        )

        self._notify_participants(collaboration, admin, completed=True)
        return collaboration

    def update(self, collaboration_id: str, admin: User, updates: dict,
               admin_note: Optional[str] = None) -> Collaboration:
        collaboration = self._load(collaboration_id)

        changes = {k: v for k, v in updates.items() if k in ADMIN_UPDATABLE_FIELDS and v is not None}
        if "status" in changes:
            try:
                changes["status"] = CollaborationStatusDB(changes["status"])
            except ValueError:
                raise ValidationError("Statut de collaboration invalide")

        for field, value in changes.items():
            setattr(collaboration, field, value)
        if admin_note:
            collaboration.add_activity(ActivityTypeDB.NOTE, f"[Admin] {admin_note}", admin.id)
        else:
            collaboration.touch()

        self._commit(collaboration)
        applied = {k: getattr(v, "value", v) for k, v in changes.items()}
        logger.warning(f"{ADMIN_LOG_PREFIX} Collaboration {collaboration.id} updated by {admin.id}: {applied}")
        return collaboration

    def delete(self, collaboration_id: str, admin: User):
        """Permanent removal of the collaboration and its own activity and step rows."""
        collaboration = self._load(collaboration_id)
        self.db.delete(collaboration)
        self.db.commit()
        logger.warning(f"{ADMIN_LOG_PREFIX} Collaboration {collaboration_id} deleted by {admin.id}")


def get_admin_collaboration_service(db: Session) -> AdminCollaborationService:
    return AdminCollaborationService(db)
