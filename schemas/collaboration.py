# Pydantic Schemas for collaborations, contracts and notifications

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class CompensationType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    GIFT_VOUCHERS = "gift_vouchers"


class ProposalResponse(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ValidatedBy(str, Enum):
    OWNER = "owner"
    COLLABORATOR = "collaborator"


class AdminCloseAction(str, Enum):
    CANCEL = "cancel"
    COMPLETE = "complete"


# ============================================================================
# COLLABORATION REQUESTS
# ============================================================================

class CollaborationPropose(BaseModel):
    property_id: Optional[str] = None
    search_ad_id: Optional[str] = None
    commission_percentage: Optional[float] = Field(None, ge=0, le=100)
    message: Optional[str] = Field(None, max_length=500)
    compensation_type: Optional[CompensationType] = None
    compensation_amount: Optional[float] = Field(None, ge=0)

    @validator("search_ad_id", always=True)
    def require_post(cls, v, values):
        if not v and not values.get("property_id"):
            raise ValueError(
                "Vous devez fournir soit un identifiant de propriété, soit un identifiant de recherche"
            )
        return v


class CollaborationRespond(BaseModel):
    response: ProposalResponse


class CollaborationNoteCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @validator("content")
    def content_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Le contenu de la note est requis")
        return v.strip()


class ProgressUpdate(BaseModel):
    target_step: str
    validated_by: str
    notes: Optional[str] = Field(None, max_length=1000)


class CollaborationComplete(BaseModel):
    completion_reason: Optional[str] = None


# ============================================================================
# COLLABORATION RESPONSES
# ============================================================================

class PartyInfo(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    profile_image: Optional[str] = None


class ActivityResponse(BaseModel):
    type: str
    message: str
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProgressStepResponse(BaseModel):
    id: str
    title: str
    completed: bool
    owner_validated: bool
    collaborator_validated: bool
    notes: List[Dict[str, Any]] = []


class CollaborationResponse(BaseModel):
    id: str
    post_id: str
    post_type: str
    post_owner_id: str
    collaborator_id: str
    post_owner: Optional[PartyInfo] = None
    collaborator: Optional[PartyInfo] = None

    proposed_commission: Optional[float] = None
    commission: Optional[float] = None
    compensation_type: Optional[str] = None
    compensation_amount: Optional[float] = None
    proposal_message: Optional[str] = None

    status: str
    current_step: str

    owner_signed: bool
    owner_signed_at: Optional[datetime] = None
    collaborator_signed: bool
    collaborator_signed_at: Optional[datetime] = None
    contract_modified: bool

    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    completed_by_role: Optional[str] = None
    completion_reason: Optional[str] = None

    progress_steps: List[ProgressStepResponse] = []
    activities: List[ActivityResponse] = []

    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# CONTRACT
# ============================================================================

class ContractUpdate(BaseModel):
    contract_text: Optional[str] = None
    additional_terms: Optional[str] = None


class ContractView(BaseModel):
    id: str
    contract_text: Optional[str] = None
    additional_terms: Optional[str] = None
    contract_modified: bool
    owner_signed: bool
    owner_signed_at: Optional[datetime] = None
    collaborator_signed: bool
    collaborator_signed_at: Optional[datetime] = None
    status: str
    current_step: str
    property_owner: Optional[PartyInfo] = None
    collaborator: Optional[PartyInfo] = None
    can_edit: bool
    can_sign: bool
    requires_both_signatures: bool


class ContractUpdateResponse(BaseModel):
    success: bool = True
    message: str
    contract: ContractView
    requires_resigning: bool


class ContractSignResponse(BaseModel):
    success: bool = True
    message: str
    contract: ContractView
    activated: bool


# ============================================================================
# ADMIN
# ============================================================================

class AdminCloseRequest(BaseModel):
    action: AdminCloseAction
    completion_reason: Optional[str] = None


class AdminCollaborationUpdate(BaseModel):
    proposed_commission: Optional[float] = Field(None, ge=0, le=100)
    commission: Optional[float] = Field(None, ge=0, le=100)
    status: Optional[str] = None
    current_step: Optional[str] = None
    admin_note: Optional[str] = Field(None, max_length=2000)


# ============================================================================
# NOTIFICATIONS
# ============================================================================

class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: Optional[str] = None
    actor_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    action_url: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    read: bool = False
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
