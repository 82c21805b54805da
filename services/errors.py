# Error taxonomy for collaboration operations
# Every error is an HTTPException so FastAPI renders it with its status code and message.

from fastapi import HTTPException, status


class CollaborationError(HTTPException):
    """Base class for user-facing collaboration errors."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, headers: dict = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class AuthenticationError(CollaborationError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Non autorisé"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(CollaborationError):
    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(CollaborationError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(CollaborationError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(CollaborationError):
    status_code = status.HTTP_409_CONFLICT


class GoneError(CollaborationError):
    """The collaboration exists but the post it refers to was deleted or archived."""
    status_code = status.HTTP_410_GONE


class InternalError(CollaborationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "Une erreur interne est survenue"):
        super().__init__(detail)
