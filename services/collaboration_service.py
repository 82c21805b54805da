# Collaboration Service
# Lifecycle of a collaboration: proposal, response, progress tracking, notes,
# cancellation, completion and the participant read paths.

from sqlalchemy import or_, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.models import User
from database.collaboration_models import (
    Collaboration, CollaborationStatusDB, CompensationTypeDB, CompletionReasonDB,
    ActivityTypeDB, ParticipantRoleDB, PostTypeDB, OPEN_STATUSES, RETRYABLE_STATUSES,
    ROLE_LABELS,
)
from config.app_config import APPORTEUR_COMMISSION_CAP_PERCENT
from config.progress_steps import is_valid_step, step_title, CLOSING_STEP_ID
from services.actor_directory import ActorDirectory, to_profile
from services.post_resolver import PostResolver, PostReference
from services.notification_service import NotificationService
from services.contract_service import ContractService, compensation_text, format_amount
from services.errors import (
    AuthenticationError, AuthorizationError, ValidationError, NotFoundError,
    ConflictError, GoneError,
)
from auth.roles import UserType, Permission, get_user_type, has_any_permission

logger = logging.getLogger(__name__)

GONE_MESSAGE = "Le bien ou l'annonce associé à cette collaboration n'existe plus"


def proposal_activity_message(collaboration: Collaboration) -> str:
    if collaboration.compensation_type in (CompensationTypeDB.FIXED_AMOUNT, CompensationTypeDB.GIFT_VOUCHERS):
        return f"Collaboration proposée avec {compensation_text(collaboration)}"
    return f"Collaboration proposée avec {format_amount(collaboration.proposed_commission or 0)}% de commission"


class CollaborationService:
    """
    Collaboration lifecycle operations.

    Every precondition is checked before the aggregate is touched, so a rejected
    call never leaves a partial write behind. Notifications are sent after the
    commit and cannot fail the operation.
    """

    def __init__(self, db: Session):
        self.db = db
        self.directory = ActorDirectory(db)
        self.posts = PostResolver(db)
        self.notifications = NotificationService(db)

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    def get(self, collaboration_id: str) -> Collaboration:
        collaboration = self.db.query(Collaboration).filter(Collaboration.id == collaboration_id).first()
        if not collaboration:
            raise NotFoundError("Collaboration introuvable")
        return collaboration

    def _participant(self, collaboration_id: str, user: User, message: str) -> Collaboration:
        collaboration = self.get(collaboration_id)
        if not collaboration.is_participant(user.id):
            raise AuthorizationError(message)
        return collaboration

    def _commit(self, collaboration: Collaboration):
        self.db.commit()
        self.db.refresh(collaboration)

    # ------------------------------------------------------------------
    # Propose
    # ------------------------------------------------------------------

    def _resolve_target(self, user: User, property_id: Optional[str],
                        search_ad_id: Optional[str]) -> PostReference:
        if property_id:
            post = self.posts.resolve(PostTypeDB.PROPERTY, property_id)
            if not post.exists:
                raise NotFoundError("Propriété introuvable")
            if post.archived:
                raise GoneError(GONE_MESSAGE)
            if post.owner_actor_id == user.id:
                raise ValidationError("Vous ne pouvez pas collaborer sur votre propre propriété")
            return post

        if not search_ad_id:
            raise ValidationError("Un identifiant de propriété ou d'annonce de recherche est requis")

        post = self.posts.resolve(PostTypeDB.SEARCH_AD, search_ad_id)
        if not post.exists:
            raise NotFoundError("Annonce de recherche introuvable")
        if post.archived:
            raise GoneError(GONE_MESSAGE)
        if not post.owner_actor_id:
            raise ValidationError("Annonce sans auteur, action impossible")
        if post.owner_actor_id == user.id:
            raise ValidationError("Vous ne pouvez pas collaborer sur votre propre annonce")
        return post

    def propose(
        self,
        user: Optional[User],
        property_id: Optional[str] = None,
        search_ad_id: Optional[str] = None,
        commission_percentage: Optional[float] = None,
        message: Optional[str] = None,
        compensation_type: Optional[CompensationTypeDB] = None,
        compensation_amount: Optional[float] = None,
    ) -> Collaboration:
        """
        Create a pending collaboration on someone else's property or search ad.

        The record and its first activity are inserted in one transaction. The
        partial unique index on open collaborations backs the exclusivity checks
        below when two proposals race.
        """
        if user is None:
            raise AuthenticationError()
        user_type = get_user_type(user)
        if user_type == UserType.APPORTEUR:
            raise AuthorizationError(
                "Les apporteurs ne peuvent pas proposer de collaborations. "
                "Seuls les agents peuvent proposer des collaborations."
            )
        if not has_any_permission(user_type, [Permission.PROPOSE_COLLABORATION]):
            raise AuthorizationError("Seuls les agents peuvent proposer des collaborations.")

        if compensation_type in (None, CompensationTypeDB.PERCENTAGE):
            terms_missing = commission_percentage is None
        else:
            terms_missing = compensation_amount is None
        if terms_missing:
            raise ValidationError(
                "Le pourcentage de commission est requis pour le type pourcentage, "
                "le montant de compensation est requis pour les autres types"
            )

        post = self._resolve_target(user, property_id, search_ad_id)

        existing = self.db.query(Collaboration).filter(
            Collaboration.post_id == post.post_id,
            Collaboration.collaborator_id == user.id,
            Collaboration.status.in_(OPEN_STATUSES),
        ).first()
        if existing:
            raise ConflictError("Une collaboration existe déjà pour cette annonce")

        taken = self.db.query(Collaboration).filter(
            Collaboration.post_id == post.post_id,
            Collaboration.collaborator_id != user.id,
            Collaboration.status.in_(OPEN_STATUSES),
        ).first()
        if taken:
            label = "Cette propriété" if post.post_type == PostTypeDB.PROPERTY else "Cette annonce de recherche"
            raise ConflictError(f"{label} est déjà en collaboration")

        owner = self.directory.get_user(post.owner_actor_id)
        is_apporteur_post = owner is not None and get_user_type(owner) == UserType.APPORTEUR
        if is_apporteur_post:
            if compensation_type in (None, CompensationTypeDB.PERCENTAGE):
                if commission_percentage and commission_percentage >= APPORTEUR_COMMISSION_CAP_PERCENT:
                    raise ValidationError(
                        f"Le pourcentage de commission doit être inférieur à "
                        f"{APPORTEUR_COMMISSION_CAP_PERCENT:g}% pour les annonces d'apporteur"
                    )
            elif not compensation_amount or compensation_amount <= 0:
                raise ValidationError("Le montant de compensation doit être supérieur à 0")

        collaboration = Collaboration(
            post_id=post.post_id,
            post_type=post.post_type,
            post_owner_id=post.owner_actor_id,
            collaborator_id=user.id,
            proposed_commission=commission_percentage or 0,
            proposal_message=message,
            status=CollaborationStatusDB.PENDING,
            current_step="proposal",
            owner_signed=False,
            collaborator_signed=False,
        )
        if is_apporteur_post:
            collaboration.compensation_type = compensation_type
            collaboration.compensation_amount = compensation_amount
        collaboration.initialize_progress_steps()

        try:
            # Old cancelled/rejected attempts by the same collaborator make way for the new one
            previous = self.db.query(Collaboration).filter(
                Collaboration.post_id == post.post_id,
                Collaboration.collaborator_id == user.id,
                Collaboration.status.in_(RETRYABLE_STATUSES),
            ).all()
            for old in previous:
                self.db.delete(old)
            self.db.flush()

            collaboration.add_activity(ActivityTypeDB.PROPOSAL, proposal_activity_message(collaboration), user.id)
            self.db.add(collaboration)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent proposal rejected on post {post.post_id} for {user.id}")
            raise ConflictError("Cette annonce est déjà en collaboration")

        self.db.refresh(collaboration)
        logger.info(
            f"Collaboration {collaboration.id} proposed by {user.id} on "
            f"{post.post_type.value}:{post.post_id}"
        )

        self.notifications.notify_proposal_received(
            collaboration.post_owner_id,
            to_profile(user),
            collaboration.id,
            terms=compensation_text(collaboration, "% de commission"),
            post_id=post.post_id,
            post_type=post.post_type.value,
            commission_percentage=commission_percentage,
        )
        return collaboration

    # ------------------------------------------------------------------
    # Respond
    # ------------------------------------------------------------------

    def respond(self, collaboration_id: str, user: User, response: CollaborationStatusDB) -> Collaboration:
        if response not in (CollaborationStatusDB.ACCEPTED, CollaborationStatusDB.REJECTED):
            raise ValidationError("La réponse doit être \"accepted\" ou \"rejected\"")

        collaboration = self.get(collaboration_id)
        if not collaboration.is_owner(user.id):
            raise AuthorizationError("Seul le propriétaire peut répondre")
        if collaboration.status != CollaborationStatusDB.PENDING:
            raise ValidationError("Vous ne pouvez répondre qu'aux propositions en attente")

        accepted = response == CollaborationStatusDB.ACCEPTED
        collaboration.status = response
        collaboration.add_activity(
            ActivityTypeDB.STATUS_UPDATE,
            "Proposition acceptée par le propriétaire" if accepted else "Proposition refusée par le propriétaire",
            user.id,
        )
        self._commit(collaboration)
        logger.info(f"Collaboration {collaboration.id} {response.value} by {user.id}")

        self.notifications.notify_proposal_answered(
            collaboration.collaborator_id, to_profile(user), collaboration.id, accepted
        )
        return collaboration

    # ------------------------------------------------------------------
    # Notes and progress
    # ------------------------------------------------------------------

    def add_note(self, collaboration_id: str, user: User, content: str) -> Collaboration:
        collaboration = self._participant(
            collaboration_id, user, "Seuls les participants peuvent ajouter des notes"
        )
        if collaboration.status != CollaborationStatusDB.ACTIVE:
            raise ValidationError("Les notes ne peuvent être ajoutées que lorsque la collaboration est active")

        collaboration.add_activity(ActivityTypeDB.NOTE, content, user.id)
        self._commit(collaboration)
        logger.info(f"Note added to collaboration {collaboration.id} by {user.id}")

        self.notifications.notify_note_added(
            collaboration.other_party_id(user.id), to_profile(user), collaboration.id, content
        )
        return collaboration

    def update_progress(self, collaboration_id: str, user: User, target_step: str,
                        validated_by: str, notes: Optional[str] = None) -> Collaboration:
        """
        Validate `target_step` on behalf of the caller's side. The caller can only
        speak for the role they hold on this collaboration.
        """
        if not is_valid_step(target_step):
            raise ValidationError("Étape de progression invalide")
        if validated_by not in (ParticipantRoleDB.OWNER.value, ParticipantRoleDB.COLLABORATOR.value):
            raise ValidationError('Le champ validatedBy doit être "owner" ou "collaborator"')

        collaboration = self._participant(
            collaboration_id, user, "Non autorisé à mettre à jour cette collaboration"
        )
        if collaboration.status not in (CollaborationStatusDB.ACCEPTED, CollaborationStatusDB.ACTIVE):
            raise ValidationError("Mise à jour possible uniquement pour les collaborations actives ou acceptées")

        role = ParticipantRoleDB(validated_by)
        holds_role = collaboration.is_owner(user.id) if role == ParticipantRoleDB.OWNER \
            else collaboration.is_collaborator(user.id)
        if not holds_role:
            raise AuthorizationError(
                f"Vous ne pouvez pas valider une étape au nom de {ROLE_LABELS[role]}"
            )

        collaboration.update_progress_status(target_step, role, user.id, notes)
        self._commit(collaboration)
        logger.info(
            f"Collaboration {collaboration.id} step {target_step} validated by {user.id} as {role.value}"
        )

        self.notifications.notify_progress_updated(
            collaboration.other_party_id(user.id),
            to_profile(user),
            collaboration.id,
            target_step=target_step,
            step_label=step_title(target_step),
            validated_by=role.value,
            notes=notes,
        )
        return collaboration

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    def cancel(self, collaboration_id: str, user: User) -> Collaboration:
        collaboration = self._participant(
            collaboration_id, user, "Non autorisé à annuler cette collaboration"
        )
        if collaboration.status == CollaborationStatusDB.COMPLETED:
            raise ValidationError("Impossible d'annuler une collaboration terminée")
        if collaboration.status in (CollaborationStatusDB.CANCELLED, CollaborationStatusDB.REJECTED):
            raise ValidationError("Cette collaboration est déjà close")

        role = collaboration.role_of(user.id)
        collaboration.mark_cancelled(user.id, f"Collaboration annulée par {ROLE_LABELS[role]}")
        self._commit(collaboration)
        logger.info(f"Collaboration {collaboration.id} cancelled by {user.id}")

        self.notifications.notify_cancelled(
            collaboration.other_party_id(user.id), to_profile(user), collaboration.id
        )
        return collaboration

    def complete(self, collaboration_id: str, user: User, completion_reason: Optional[str]) -> Collaboration:
        """
        Close an active collaboration once both sides validated the closing step.

        A deal concluded through the collaboration also marks the post sold, rented or
        fulfilled. That write happens after the collaboration is committed and a
        failure there is logged and left to the reconciliation job.
        """
        try:
            reason = CompletionReasonDB(completion_reason)
        except ValueError:
            raise ValidationError("Raison de complétion invalide ou manquante")

        collaboration = self._participant(
            collaboration_id, user, "Non autorisé à terminer cette collaboration"
        )
        if collaboration.status != CollaborationStatusDB.ACTIVE:
            raise ValidationError("Seules les collaborations actives peuvent être terminées")
        if not collaboration.closing_step_validated():
            raise ValidationError(
                f"Impossible de terminer : \"{step_title(CLOSING_STEP_ID)}\" doit être validée par les deux parties"
            )

        role = collaboration.role_of(user.id)
        collaboration.mark_completed(user.id, role, reason, f"Collaboration terminée par {ROLE_LABELS[role]}")
        self._commit(collaboration)
        logger.info(f"Collaboration {collaboration.id} completed by {user.id} ({reason.value})")

        if reason == CompletionReasonDB.VENTE_CONCLUE_COLLABORATION:
            self.apply_post_conclusion(collaboration)

        self.notifications.notify_completed(
            collaboration.other_party_id(user.id), to_profile(user), collaboration.id, reason.value
        )
        return collaboration

    def apply_post_conclusion(self, collaboration: Collaboration) -> Optional[str]:
        try:
            return self.posts.mark_concluded(collaboration.post_type, collaboration.post_id)
        except Exception:
            self.db.rollback()
            logger.exception(
                f"Post status update failed after completing collaboration {collaboration.id}, "
                f"left for reconciliation"
            )
            return None

    def sign(self, collaboration_id: str, user: User) -> dict:
        return ContractService(self.db).sign_contract(collaboration_id, user)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_for_viewer(self, collaboration_id: str, user: User) -> Collaboration:
        """
        Load a collaboration for display. A collaboration whose post was deleted or
        archived answers 410 rather than 404.
        """
        collaboration = self.db.query(Collaboration).filter(Collaboration.id == collaboration_id).first()
        if not collaboration:
            raise NotFoundError("Cette collaboration n'existe plus")

        if self.posts.resolve(collaboration.post_type, collaboration.post_id).gone:
            raise GoneError(GONE_MESSAGE)

        if get_user_type(user) != UserType.ADMIN and not collaboration.is_participant(user.id):
            raise AuthorizationError("Non autorisé à voir cette collaboration")
        return collaboration

    def list_for_user(self, user: User) -> List[Collaboration]:
        return self.db.query(Collaboration).filter(
            or_(Collaboration.post_owner_id == user.id, Collaboration.collaborator_id == user.id)
        ).order_by(desc(Collaboration.created_at)).all()

    def list_for_post(self, post_type: PostTypeDB, post_id: str, user: User) -> List[Collaboration]:
        post = self.posts.resolve(post_type, post_id)
        if not post.exists:
            raise NotFoundError(
                "Propriété introuvable" if post_type == PostTypeDB.PROPERTY else "Annonce de recherche introuvable"
            )
        if post.archived:
            raise GoneError(GONE_MESSAGE)

        query = self.db.query(Collaboration).filter(
            Collaboration.post_id == post_id,
            Collaboration.post_type == post_type,
        )
        if get_user_type(user) != UserType.ADMIN:
            query = query.filter(
                or_(Collaboration.post_owner_id == user.id, Collaboration.collaborator_id == user.id)
            )
        return query.order_by(desc(Collaboration.created_at)).all()


def get_collaboration_service(db: Session) -> CollaborationService:
    return CollaborationService(db)
