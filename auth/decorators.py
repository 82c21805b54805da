# Authentication and Authorization Dependencies for the collaboration platform
# These provide easy-to-use access control for API endpoints

from fastapi import Depends

from database.models import User
from auth.roles import UserType, Permission, has_any_permission, get_user_type
from auth.dependencies import get_current_user
from services.errors import AuthorizationError


class AuthError(AuthorizationError):
    """Raised when the current user lacks the account type or permission an endpoint needs."""


def require_permission(*permissions: Permission):
    """
    Dependency that requires the user to have specific permissions.

    Usage:
        @router.post("/collaborations")
        async def propose(
            user: User = Depends(require_permission(Permission.PROPOSE_COLLABORATION))
        ):
            ...
    """
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        user_type = get_user_type(current_user)

        if not has_any_permission(user_type, list(permissions)):
            raise AuthError("Vous n'avez pas la permission d'effectuer cette action")

        return current_user

    return dependency


def require_admin():
    """
    Dependency that requires the user to be an admin.

    Usage:
        @router.get("/admin/collaborations")
        async def list_all(user: User = Depends(require_admin())):
            ...
    """
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if get_user_type(current_user) != UserType.ADMIN:
            raise AuthError("Accès administrateur requis")
        return current_user

    return dependency

