# Collaboration Models for the MonHubImmo platform
# The Collaboration aggregate with its activity log and progress steps.
# Every write to progress-step state goes through Collaboration methods.

from sqlalchemy import (
    Column, String, Integer, DateTime, ForeignKey, Text, JSON, Enum, Boolean, Float,
    Index, UniqueConstraint, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime
from typing import Optional
import enum

from database.models import Base, generate_uuid
from config.progress_steps import PROGRESS_STEP_IDS, CLOSING_STEP_ID, step_position, step_title


# ============================================================================
# ENUMS
# ============================================================================

class PostTypeDB(str, enum.Enum):
    PROPERTY = "Property"
    SEARCH_AD = "SearchAd"


class CollaborationStatusDB(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CompensationTypeDB(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    GIFT_VOUCHERS = "gift_vouchers"


class ActivityTypeDB(str, enum.Enum):
    PROPOSAL = "proposal"
    STATUS_UPDATE = "status_update"
    NOTE = "note"
    SIGNING = "signing"


class ParticipantRoleDB(str, enum.Enum):
    OWNER = "owner"
    COLLABORATOR = "collaborator"
    ADMIN = "admin"


class CompletionReasonDB(str, enum.Enum):
    VENTE_CONCLUE_COLLABORATION = "vente_conclue_collaboration"
    VENTE_CONCLUE_SEUL = "vente_conclue_seul"
    BIEN_RETIRE = "bien_retire"
    MANDAT_EXPIRE = "mandat_expire"
    CLIENT_DESISTE = "client_desiste"
    VENDU_TIERS = "vendu_tiers"
    SANS_SUITE = "sans_suite"


# Statuses in which a post is considered taken by a collaborator
OPEN_STATUSES = (
    CollaborationStatusDB.PENDING,
    CollaborationStatusDB.ACCEPTED,
    CollaborationStatusDB.ACTIVE,
)

# Old records for the same (post, collaborator) pair in these statuses are replaced on re-proposal
RETRYABLE_STATUSES = (
    CollaborationStatusDB.CANCELLED,
    CollaborationStatusDB.REJECTED,
)

ROLE_LABELS = {
    ParticipantRoleDB.OWNER: "le propriétaire",
    ParticipantRoleDB.COLLABORATOR: "le collaborateur",
    ParticipantRoleDB.ADMIN: "l'administrateur",
}

_OPEN_STATUS_SQL = "status IN ('pending', 'accepted', 'active')"


def _enum(enum_cls, name):
    return Enum(enum_cls, values_callable=lambda x: [e.value for e in x], name=name)


# ============================================================================
# COLLABORATION
# ============================================================================

class Collaboration(Base):
    """Partnership between a post owner and a proposing collaborator over one post."""
    __tablename__ = "collaborations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    post_id = Column(String(36), nullable=False, index=True)
    post_type = Column(_enum(PostTypeDB, "posttypedb"), nullable=False)
    post_owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    collaborator_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Commercial terms
    proposed_commission = Column(Float, default=0)
    commission = Column(Float)  # Final agreed commission, set by admins
    compensation_type = Column(_enum(CompensationTypeDB, "compensationtypedb"), nullable=True)
    compensation_amount = Column(Float, nullable=True)
    proposal_message = Column(Text)

    # Lifecycle
    status = Column(_enum(CollaborationStatusDB, "collaborationstatusdb"), default=CollaborationStatusDB.PENDING, nullable=False)
    current_step = Column(String(50), default="proposal", nullable=False)

    # Contract and signatures
    contract_text = Column(Text)
    additional_terms = Column(Text)
    contract_modified = Column(Boolean, default=False, nullable=False)
    contract_last_modified_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    contract_last_modified_at = Column(DateTime)
    owner_signed = Column(Boolean, default=False, nullable=False)
    owner_signed_at = Column(DateTime)
    collaborator_signed = Column(Boolean, default=False, nullable=False)
    collaborator_signed_at = Column(DateTime)

    # Completion
    completed_at = Column(DateTime)
    completed_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_by_role = Column(_enum(ParticipantRoleDB, "participantroledb"), nullable=True)
    completion_reason = Column(_enum(CompletionReasonDB, "completionreasondb"), nullable=True)

    # Optimistic concurrency: every UPDATE is a compare-and-swap on this column
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())

    # Relationships
    post_owner = relationship("User", foreign_keys=[post_owner_id])
    collaborator = relationship("User", foreign_keys=[collaborator_id])
    activities = relationship(
        "CollaborationActivity",
        back_populates="collaboration",
        order_by="CollaborationActivity.sequence",
        cascade="all, delete-orphan",
    )
    progress_steps = relationship(
        "ProgressStep",
        back_populates="collaboration",
        order_by="ProgressStep.position",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # At most one open collaboration per post, whoever the collaborator is
        Index(
            "uq_collaborations_open_post",
            "post_id",
            unique=True,
            postgresql_where=text(_OPEN_STATUS_SQL),
            sqlite_where=text(_OPEN_STATUS_SQL),
        ),
        Index("ix_collaborations_post_collaborator", "post_id", "collaborator_id"),
    )

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    def is_owner(self, user_id: str) -> bool:
        return self.post_owner_id == user_id

    def is_collaborator(self, user_id: str) -> bool:
        return self.collaborator_id == user_id

    def is_participant(self, user_id: str) -> bool:
        return self.is_owner(user_id) or self.is_collaborator(user_id)

    def role_of(self, user_id: str) -> Optional[ParticipantRoleDB]:
        if self.is_owner(user_id):
            return ParticipantRoleDB.OWNER
        if self.is_collaborator(user_id):
            return ParticipantRoleDB.COLLABORATOR
        return None

    def other_party_id(self, user_id: str) -> str:
        return self.collaborator_id if self.is_owner(user_id) else self.post_owner_id

    # ------------------------------------------------------------------
    # Activity log (append-only)
    # ------------------------------------------------------------------

    def add_activity(self, type: ActivityTypeDB, message: str, created_by: Optional[str],
                     created_at: Optional[datetime] = None) -> "CollaborationActivity":
        activity = CollaborationActivity(
            sequence=len(self.activities),
            type=type,
            message=message,
            created_by=created_by,
            created_at=created_at or datetime.utcnow(),
        )
        self.activities.append(activity)
        self.touch()
        return activity

    def touch(self, now: Optional[datetime] = None):
        self.updated_at = now or datetime.utcnow()

    # ------------------------------------------------------------------
    # Progress steps
    # ------------------------------------------------------------------

    def initialize_progress_steps(self):
        if self.progress_steps:
            return
        for position, step_id in enumerate(PROGRESS_STEP_IDS):
            self.progress_steps.append(ProgressStep(step_id=step_id, position=position, notes=[]))

    def get_step(self, step_id: str) -> Optional["ProgressStep"]:
        for step in self.progress_steps:
            if step.step_id == step_id:
                return step
        return None

    def closing_step_validated(self) -> bool:
        step = self.get_step(CLOSING_STEP_ID)
        return bool(step and step.owner_validated and step.collaborator_validated)

    def update_progress_status(self, target_step: str, validated_by: ParticipantRoleDB,
                               user_id: str, notes: Optional[str] = None) -> "ProgressStep":
        """
        Record that one party reached `target_step`.

        Reaching a step implies the earlier ones for that party, so the target and every
        step before it get the party's validation flag. A step is completed once both
        parties validated it. Later steps are left untouched.
        """
        self.initialize_progress_steps()
        now = datetime.utcnow()
        target_position = step_position(target_step)

        target = None
        for step in self.progress_steps:
            if step.position > target_position:
                continue
            step.validate(validated_by)
            if step.step_id == target_step:
                target = step

        if notes:
            target.add_note(notes, user_id, validated_by, now)

        self.add_activity(
            ActivityTypeDB.STATUS_UPDATE,
            f"Étape « {step_title(target_step)} » validée par {ROLE_LABELS[validated_by]}",
            user_id,
            now,
        )
        return target

    def validate_closing_step(self):
        """Mark only the closing step as validated by both parties."""
        self.initialize_progress_steps()
        step = self.get_step(CLOSING_STEP_ID)
        step.owner_validated = True
        step.collaborator_validated = True
        step.completed = True

    def close_all_steps(self):
        """Mark every progress step completed and validated by both parties."""
        self.initialize_progress_steps()
        for step in self.progress_steps:
            step.completed = True
            step.owner_validated = True
            step.collaborator_validated = True

    # ------------------------------------------------------------------
    # Contract and signatures
    # ------------------------------------------------------------------

    @property
    def both_signed(self) -> bool:
        return bool(self.owner_signed and self.collaborator_signed)

    @property
    def requires_both_signatures(self) -> bool:
        """True when exactly one side has signed."""
        return bool(self.owner_signed) != bool(self.collaborator_signed)

    def can_sign(self, user_id: str) -> bool:
        return (self.is_owner(user_id) and not self.owner_signed) or \
            (self.is_collaborator(user_id) and not self.collaborator_signed)

    def edit_contract(self, contract_text: Optional[str], additional_terms: Optional[str],
                      user_id: str) -> bool:
        """
        Store new contract text. A field passed as None keeps its stored value.
        Returns True when the content changed, in which case both signatures are
        cleared and the edit is logged.
        """
        if contract_text is None:
            contract_text = self.contract_text
        if additional_terms is None:
            additional_terms = self.additional_terms

        changed = (self.contract_text or None) != (contract_text or None) or \
            (self.additional_terms or None) != (additional_terms or None)
        if not changed:
            return False

        had_signature = bool(self.owner_signed or self.collaborator_signed)
        now = datetime.utcnow()

        self.contract_text = contract_text
        self.additional_terms = additional_terms
        self.owner_signed = False
        self.owner_signed_at = None
        self.collaborator_signed = False
        self.collaborator_signed_at = None
        self.contract_modified = True
        self.contract_last_modified_by = user_id
        self.contract_last_modified_at = now

        role = ROLE_LABELS[self.role_of(user_id)]
        if had_signature:
            message = f"Contrat modifié par {role} - signatures réinitialisées, les deux parties doivent signer à nouveau"
        else:
            message = f"Contrat modifié par {role} - les deux parties doivent signer la nouvelle version"
        self.add_activity(ActivityTypeDB.NOTE, message, user_id, now)
        return True

    def sign(self, user_id: str) -> bool:
        """
        Sign the contract for whichever side(s) `user_id` holds.
        Returns True when this signature activated the collaboration.
        """
        now = datetime.utcnow()
        is_owner = self.is_owner(user_id)
        is_collaborator = self.is_collaborator(user_id)

        if is_owner:
            self.owner_signed = True
            self.owner_signed_at = now
        if is_collaborator:
            self.collaborator_signed = True
            self.collaborator_signed_at = now

        signer = ROLE_LABELS[ParticipantRoleDB.OWNER if is_owner else ParticipantRoleDB.COLLABORATOR]
        self.add_activity(ActivityTypeDB.SIGNING, f"Contrat signé par {signer}", user_id, now)

        if self.both_signed and self.status == CollaborationStatusDB.ACCEPTED:
            self.status = CollaborationStatusDB.ACTIVE
            self.current_step = "active"
            self.add_activity(
                ActivityTypeDB.STATUS_UPDATE,
                "Collaboration activée - les deux parties ont signé le contrat",
                user_id,
                now,
            )
            return True
        return False

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    def mark_completed(self, user_id: str, role: ParticipantRoleDB, reason: CompletionReasonDB,
                       message: str, close_steps: bool = True):
        now = datetime.utcnow()
        self.status = CollaborationStatusDB.COMPLETED
        self.current_step = "completed"
        self.completed_at = now
        self.completed_by = user_id
        self.completed_by_role = role
        self.completion_reason = reason
        if close_steps:
            self.close_all_steps()
        self.add_activity(ActivityTypeDB.STATUS_UPDATE, message, user_id, now)

    def mark_cancelled(self, user_id: str, message: str):
        self.status = CollaborationStatusDB.CANCELLED
        self.add_activity(ActivityTypeDB.STATUS_UPDATE, message, user_id)


# ============================================================================
# ACTIVITY
# ============================================================================

class CollaborationActivity(Base):
    """Audit log entry on a collaboration. Rows are only ever inserted."""
    __tablename__ = "collaboration_activities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    collaboration_id = Column(String(36), ForeignKey("collaborations.id", ondelete="CASCADE"), nullable=False)
    sequence = Column(Integer, nullable=False)

    type = Column(_enum(ActivityTypeDB, "activitytypedb"), nullable=False)
    message = Column(Text, nullable=False)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    collaboration = relationship("Collaboration", back_populates="activities")
    author = relationship("User")

    __table_args__ = (
        UniqueConstraint("collaboration_id", "sequence", name="uq_collaboration_activity_sequence"),
    )


# ============================================================================
# PROGRESS STEP
# ============================================================================

class ProgressStep(Base):
    """One of the ten deal milestones, validated independently by each party."""
    __tablename__ = "collaboration_progress_steps"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    collaboration_id = Column(String(36), ForeignKey("collaborations.id", ondelete="CASCADE"), nullable=False)
    step_id = Column(String(50), nullable=False)
    position = Column(Integer, nullable=False)

    completed = Column(Boolean, default=False, nullable=False)
    owner_validated = Column(Boolean, default=False, nullable=False)
    collaborator_validated = Column(Boolean, default=False, nullable=False)
    notes = Column(JSON)  # [{"content", "created_by", "validated_by", "created_at"}]

    # Relationships
    collaboration = relationship("Collaboration", back_populates="progress_steps")

    __table_args__ = (
        UniqueConstraint("collaboration_id", "step_id", name="uq_collaboration_progress_step"),
    )

    def validate(self, role: ParticipantRoleDB):
        if role == ParticipantRoleDB.OWNER:
            self.owner_validated = True
        elif role == ParticipantRoleDB.COLLABORATOR:
            self.collaborator_validated = True
        self.completed = bool(self.owner_validated and self.collaborator_validated)

    def add_note(self, content: str, user_id: str, role: ParticipantRoleDB, created_at: datetime):
        # Reassign so the JSON column is flagged dirty
        self.notes = list(self.notes or []) + [{
            "content": content,
            "created_by": user_id,
            "validated_by": role.value,
            "created_at": created_at.isoformat(),
        }]
