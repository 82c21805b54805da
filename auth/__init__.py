# Auth module for the collaboration platform
# Provides role-based access control and authentication dependencies

from auth.roles import (
    UserType,
    Permission,
    ROLE_PERMISSIONS,
    get_permissions_for_role,
    has_any_permission,
    get_user_type,
)

from auth.decorators import (
    AuthError,
    require_permission,
    require_admin,
)

__all__ = [
    # Roles
    "UserType",
    "Permission",
    "ROLE_PERMISSIONS",
    "get_permissions_for_role",
    "has_any_permission",

    # Dependencies
    "AuthError",
    "require_permission",
    "require_admin",
    "get_user_type",
]
