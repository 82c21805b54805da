"""
Collaborations Router
Proposal, response, progress tracking and closing of collaborations between agents
"""

from fastapi import APIRouter, Depends, status as http_status
from sqlalchemy.orm import Session
from typing import List

from database.config import get_db
from database.models import User
from database.collaboration_models import Collaboration, CollaborationStatusDB, CompensationTypeDB, PostTypeDB
from auth.dependencies import get_current_user
from auth.decorators import require_permission
from auth.roles import Permission
from config.progress_steps import step_title
from schemas.collaboration import (
    CollaborationPropose, CollaborationRespond, CollaborationNoteCreate, ProgressUpdate,
    CollaborationComplete, CollaborationResponse, ContractSignResponse,
)
from services.actor_directory import public_party
from services.collaboration_service import get_collaboration_service

router = APIRouter(prefix="/collaborations", tags=["collaborations"])


def _value(enum_value):
    return enum_value.value if enum_value is not None else None


def collaboration_to_response(collaboration: Collaboration) -> CollaborationResponse:
    return CollaborationResponse(
        id=collaboration.id,
        post_id=collaboration.post_id,
        post_type=collaboration.post_type.value,
        post_owner_id=collaboration.post_owner_id,
        collaborator_id=collaboration.collaborator_id,
        post_owner=public_party(collaboration.post_owner),
        collaborator=public_party(collaboration.collaborator),
        proposed_commission=collaboration.proposed_commission,
        commission=collaboration.commission,
        compensation_type=_value(collaboration.compensation_type),
        compensation_amount=collaboration.compensation_amount,
        proposal_message=collaboration.proposal_message,
        status=collaboration.status.value,
        current_step=collaboration.current_step,
        owner_signed=collaboration.owner_signed,
        owner_signed_at=collaboration.owner_signed_at,
        collaborator_signed=collaboration.collaborator_signed,
        collaborator_signed_at=collaboration.collaborator_signed_at,
        contract_modified=collaboration.contract_modified,
        completed_at=collaboration.completed_at,
        completed_by=collaboration.completed_by,
        completed_by_role=_value(collaboration.completed_by_role),
        completion_reason=_value(collaboration.completion_reason),
        progress_steps=[
            {
                "id": step.step_id,
                "title": step_title(step.step_id),
                "completed": step.completed,
                "owner_validated": step.owner_validated,
                "collaborator_validated": step.collaborator_validated,
                "notes": step.notes or [],
            }
            for step in collaboration.progress_steps
        ],
        activities=[
            {
                "type": activity.type.value,
                "message": activity.message,
                "created_by": activity.created_by,
                "created_at": activity.created_at,
            }
            for activity in collaboration.activities
        ],
        version=collaboration.version,
        created_at=collaboration.created_at,
        updated_at=collaboration.updated_at,
    )


@router.post("", response_model=CollaborationResponse, status_code=http_status.HTTP_201_CREATED)
async def propose_collaboration(
    data: CollaborationPropose,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Propose a collaboration on a property or a search ad.
    Only agents can propose; the post owner is notified.
    """
    collaboration = get_collaboration_service(db).propose(
        current_user,
        property_id=data.property_id,
        search_ad_id=data.search_ad_id,
        commission_percentage=data.commission_percentage,
        message=data.message,
        compensation_type=CompensationTypeDB(data.compensation_type.value) if data.compensation_type else None,
        compensation_amount=data.compensation_amount,
    )
    return collaboration_to_response(collaboration)


@router.get("", response_model=List[CollaborationResponse])
async def get_my_collaborations(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.VIEW_OWN_COLLABORATIONS))
):
    """Collaborations where the current user is the post owner or the collaborator, newest first."""
    return [collaboration_to_response(c) for c in get_collaboration_service(db).list_for_user(current_user)]


@router.get("/property/{property_id}", response_model=List[CollaborationResponse])
async def get_property_collaborations(
    property_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    collaborations = get_collaboration_service(db).list_for_post(PostTypeDB.PROPERTY, property_id, current_user)
    return [collaboration_to_response(c) for c in collaborations]


@router.get("/search-ad/{search_ad_id}", response_model=List[CollaborationResponse])
async def get_search_ad_collaborations(
    search_ad_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    collaborations = get_collaboration_service(db).list_for_post(PostTypeDB.SEARCH_AD, search_ad_id, current_user)
    return [collaboration_to_response(c) for c in collaborations]


@router.get("/{collaboration_id}", response_model=CollaborationResponse)
async def get_collaboration(
    collaboration_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get one collaboration. Participants and admins only.
    Answers 410 when the property or search ad behind it is gone.
    """
    return collaboration_to_response(get_collaboration_service(db).get_for_viewer(collaboration_id, current_user))


@router.post("/{collaboration_id}/respond", response_model=CollaborationResponse)
async def respond_to_collaboration(
    collaboration_id: str,
    data: CollaborationRespond,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.RESPOND_TO_COLLABORATION))
):
    """Accept or reject a pending proposal (post owner only)."""
    collaboration = get_collaboration_service(db).respond(
        collaboration_id, current_user, CollaborationStatusDB(data.response.value)
    )
    return collaboration_to_response(collaboration)


@router.post("/{collaboration_id}/notes", response_model=CollaborationResponse)
async def add_collaboration_note(
    collaboration_id: str,
    data: CollaborationNoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return collaboration_to_response(get_collaboration_service(db).add_note(collaboration_id, current_user, data.content))


@router.post("/{collaboration_id}/progress", response_model=CollaborationResponse)
async def update_progress_status(
    collaboration_id: str,
    data: ProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.TRACK_PROGRESS))
):
    """Validate a progress step for the caller's side of the collaboration."""
    collaboration = get_collaboration_service(db).update_progress(
        collaboration_id, current_user, data.target_step, data.validated_by, data.notes
    )
    return collaboration_to_response(collaboration)


@router.post("/{collaboration_id}/cancel", response_model=CollaborationResponse)
async def cancel_collaboration(
    collaboration_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return collaboration_to_response(get_collaboration_service(db).cancel(collaboration_id, current_user))


@router.post("/{collaboration_id}/complete", response_model=CollaborationResponse)
async def complete_collaboration(
    collaboration_id: str,
    data: CollaborationComplete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Complete an active collaboration.
    Both parties must have validated "Affaire conclue" first.
    """
    collaboration = get_collaboration_service(db).complete(collaboration_id, current_user, data.completion_reason)
    return collaboration_to_response(collaboration)


@router.post("/{collaboration_id}/sign", response_model=ContractSignResponse)
async def sign_collaboration(
    collaboration_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.SIGN_CONTRACTS))
):
    """Same as POST /contracts/{id}/sign."""
    return get_collaboration_service(db).sign(collaboration_id, current_user)
