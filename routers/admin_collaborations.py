"""
Admin Collaborations Router
Supervision and override endpoints for collaborations (admin only)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from database.config import get_db
from database.models import User
from auth.decorators import require_admin
from schemas.collaboration import CollaborationResponse, AdminCloseRequest, AdminCollaborationUpdate
from services.admin_collaboration_service import get_admin_collaboration_service
from routers.collaborations import collaboration_to_response

router = APIRouter(prefix="/admin/collaborations", tags=["Admin - Collaborations"])


@router.get("", response_model=List[CollaborationResponse])
async def list_all_collaborations(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin())
):
    """All collaborations whose post still exists, newest first."""
    return [collaboration_to_response(c) for c in get_admin_collaboration_service(db).list_all()]


@router.post("/{collaboration_id}/close", response_model=CollaborationResponse)
async def admin_close_collaboration(
    collaboration_id: str,
    data: AdminCloseRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin())
):
    """
    Force-cancel or force-complete a collaboration regardless of its state.
    Both participants are notified.
    """
    collaboration = get_admin_collaboration_service(db).force_close(
        collaboration_id, admin, data.action.value, data.completion_reason
    )
    return collaboration_to_response(collaboration)


@router.post("/{collaboration_id}/force-complete", response_model=CollaborationResponse)
async def admin_force_complete(
    collaboration_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin())
):
    return collaboration_to_response(get_admin_collaboration_service(db).force_complete(collaboration_id, admin))


@router.put("/{collaboration_id}", response_model=CollaborationResponse)
async def admin_update_collaboration(
    collaboration_id: str,
    data: AdminCollaborationUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin())
):
    """Overwrite commission, status or current step, optionally with an admin note."""
    updates = data.dict(exclude={"admin_note"}, exclude_unset=True)
    collaboration = get_admin_collaboration_service(db).update(collaboration_id, admin, updates, data.admin_note)
    return collaboration_to_response(collaboration)


@router.delete("/{collaboration_id}")
async def admin_delete_collaboration(
    collaboration_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin())
):
    get_admin_collaboration_service(db).delete(collaboration_id, admin)
    return {"success": True, "message": "Collaboration supprimée avec succès"}
