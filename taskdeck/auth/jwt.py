"""Bearer tokens for taskdeck.

Tokens carry only the user id (`sub`). Instance generation accepts a missing or
invalid token and simply does nothing, so verification never raises.
"""

import logging
import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
# Clock skew tolerated when checking `exp`
JWT_LEEWAY_SECONDS = int(os.getenv("JWT_LEEWAY_SECONDS", "30"))


def create_access_token(
    user_id: str,
    *,
    now: Optional[datetime] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Issue a signed token for a user.

    Args:
        user_id: Owner of every template and task the token can reach
        now: Issue time (defaults to current UTC time)
        expires_in: Lifetime (defaults to JWT_EXPIRATION_HOURS)
    """
    issued_at = now or datetime.utcnow()
    lifetime = expires_in if expires_in is not None else timedelta(hours=JWT_EXPIRATION_HOURS)
    payload = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Verified token payload, or None for expired, forged or garbled tokens."""
    try:
        return jwt.decode(
            token,
            JWT_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            leeway=JWT_LEEWAY_SECONDS,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired access token")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected access token: {type(e).__name__}: {str(e)}")
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    payload = decode_access_token(token)
    if not payload:
        return None
    user_id = payload.get("sub")
    return user_id if isinstance(user_id, str) and user_id else None
