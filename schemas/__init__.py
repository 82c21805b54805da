# Schemas module for the MonHubImmo collaboration platform
# Organizes all Pydantic schemas in a modular structure

from schemas.collaboration import (
    # Enums
    CompensationType,
    ProposalResponse,
    ValidatedBy,
    AdminCloseAction,

    # Collaboration schemas
    CollaborationPropose,
    CollaborationRespond,
    CollaborationNoteCreate,
    ProgressUpdate,
    CollaborationComplete,
    CollaborationResponse,

    # Contract schemas
    ContractUpdate,
    ContractView,
    ContractUpdateResponse,
    ContractSignResponse,

    # Admin schemas
    AdminCloseRequest,
    AdminCollaborationUpdate,

    # Notification schemas
    NotificationResponse,
)

__all__ = [
    # Enums
    "CompensationType",
    "ProposalResponse",
    "ValidatedBy",
    "AdminCloseAction",

    # Collaboration
    "CollaborationPropose",
    "CollaborationRespond",
    "CollaborationNoteCreate",
    "ProgressUpdate",
    "CollaborationComplete",
    "CollaborationResponse",

    # Contract
    "ContractUpdate",
    "ContractView",
    "ContractUpdateResponse",
    "ContractSignResponse",

    # Admin
    "AdminCloseRequest",
    "AdminCollaborationUpdate",

    # Notification
    "NotificationResponse",
]
