"""
Contracts Router
Contract text negotiation and dual signature on accepted collaborations
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.config import get_db
from database.models import User
from auth.dependencies import get_current_user
from auth.decorators import require_permission
from auth.roles import Permission
from schemas.collaboration import ContractView, ContractUpdate, ContractUpdateResponse, ContractSignResponse
from services.contract_service import get_contract_service

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("/{collaboration_id}", response_model=ContractView)
async def get_contract(
    collaboration_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the contract of a collaboration.
    The text is generated from the matching template on first access.
    """
    return get_contract_service(db).get_contract(collaboration_id, current_user)


@router.put("/{collaboration_id}", response_model=ContractUpdateResponse)
async def update_contract(
    collaboration_id: str,
    data: ContractUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update contract text and additional terms.
    Any actual change clears both signatures.
    """
    return get_contract_service(db).update_contract(
        collaboration_id, current_user, data.contract_text, data.additional_terms
    )


@router.post("/{collaboration_id}/sign", response_model=ContractSignResponse)
async def sign_contract(
    collaboration_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.SIGN_CONTRACTS))
):
    return get_contract_service(db).sign_contract(collaboration_id, current_user)
