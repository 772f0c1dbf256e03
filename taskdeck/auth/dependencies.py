"""FastAPI dependencies for authentication."""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from taskdeck.database.database import get_db
from taskdeck.database.models import UserDB
from taskdeck.auth.jwt import get_user_id_from_token
from taskdeck.models.user import User

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def _resolve_user(credentials: Optional[HTTPAuthorizationCredentials], db: Session) -> Optional[User]:
    if not credentials:
        return None
    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        return None
    user_db = db.query(UserDB).filter(UserDB.id == user_id).first()
    return user_db.to_pydantic() if user_db else None


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT token.

    Raises:
        HTTPException: If the token is missing, invalid, or the user does not exist
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = _resolve_user(credentials, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[str]:
    """Current user id, or None when the request carries no valid token."""
    user = _resolve_user(credentials, db)
    return user.id if user else None
