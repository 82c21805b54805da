# Role-Based Access Control for the collaboration platform
# This module defines account types and permissions

from enum import Enum
from typing import List, Set


class UserType(str, Enum):
    """Account types on the platform."""
    AGENT = "agent"
    APPORTEUR = "apporteur"
    GUEST = "guest"
    ADMIN = "admin"


class Permission(str, Enum):
    """Fine-grained permissions for the platform."""

    # Collaboration permissions
    PROPOSE_COLLABORATION = "propose_collaboration"
    RESPOND_TO_COLLABORATION = "respond_to_collaboration"
    VIEW_OWN_COLLABORATIONS = "view_own_collaborations"
    SIGN_CONTRACTS = "sign_contracts"
    TRACK_PROGRESS = "track_progress"

    # Common permissions
    VIEW_NOTIFICATIONS = "view_notifications"


_PARTICIPANT_PERMISSIONS = {
    Permission.RESPOND_TO_COLLABORATION,
    Permission.VIEW_OWN_COLLABORATIONS,
    Permission.SIGN_CONTRACTS,
    Permission.TRACK_PROGRESS,
    Permission.VIEW_NOTIFICATIONS,
}


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserType, Set[Permission]] = {
    # Only listing-management professionals may propose collaborations
    UserType.AGENT: {
        Permission.PROPOSE_COLLABORATION,
        *_PARTICIPANT_PERMISSIONS,
    },

    UserType.APPORTEUR: set(_PARTICIPANT_PERMISSIONS),

    UserType.GUEST: {
        Permission.VIEW_NOTIFICATIONS,
    },

    UserType.ADMIN: {
        # Admin has ALL permissions
        *Permission.__members__.values()
    },
}


def get_permissions_for_role(user_type: UserType) -> Set[Permission]:
    """Get all permissions for a given user type."""
    return ROLE_PERMISSIONS.get(user_type, set())


def has_any_permission(user_type: UserType, permissions: List[Permission]) -> bool:
    """Check if a user type has any of the given permissions."""
    user_permissions = get_permissions_for_role(user_type)
    return any(p in user_permissions for p in permissions)


def get_user_type(user) -> UserType:
    """Extract the UserType from a User whatever the stored representation."""
    val = user.user_type.value if hasattr(user.user_type, 'value') else user.user_type
    if val:
        try:
            return UserType(str(val).lower())
        except ValueError:
            pass
    return UserType.GUEST
