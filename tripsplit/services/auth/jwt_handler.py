import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from tripsplit.core.config import settings


def create_access_token(user_id: str, display_name: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    """Issue a token in the user service's format (used by tools and tests)"""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"user_id": user_id, "exp": expire}
    if display_name:
        payload["display_name"] = display_name
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str):
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_current_user(token: str) -> Optional[Dict[str, str]]:
    """Extract user_id and display name from JWT token"""
    payload = decode_access_token(token)
    if not payload or not payload.get("user_id"):
        return None
    user_id = str(payload["user_id"])
    return {
        "user_id": user_id,
        "display_name": payload.get("display_name") or user_id,
    }
