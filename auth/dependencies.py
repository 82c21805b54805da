# Authentication Dependencies for the collaboration platform
# Provides dependencies for getting the current user from JWT token

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional
from pydantic import BaseModel
import os

from database.config import get_db
from database.models import User
from services.errors import AuthenticationError


# JWT Configuration
JWT_SECRET = os.getenv("JWT_SECRET_KEY", "your-secret-key-here")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    user_id: Optional[str] = None


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token whose subject is the user id."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({"sub": user_id, "exp": expire}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenData]:
    """Decode and validate JWT token."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    user_id: str = payload.get("sub") or payload.get("id")
    if user_id is None:
        return None
    return TokenData(user_id=user_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Validate JWT token and return current user.
    This is the core authentication dependency.
    """
    if credentials is None:
        raise AuthenticationError("Authentification requise")

    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise AuthenticationError("Jeton d'authentification invalide")

    user = db.query(User).filter(User.id == token_data.user_id).first()
    if user is None:
        raise AuthenticationError("Utilisateur introuvable")

    return user
