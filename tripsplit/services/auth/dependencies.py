from fastapi import HTTPException, Header
from typing import Dict
from tripsplit.services.auth.jwt_handler import get_current_user


def get_current_identity(access_token: str = Header(..., description="Access token (without Bearer)")) -> Dict[str, str]:
    """Extract the caller's user_id and display name from the JWT token"""
    if access_token.startswith("Bearer "):
        access_token = access_token.replace("Bearer ", "")
    identity = get_current_user(access_token)
    if not identity:
        raise HTTPException(status_code=401, detail="Invalid token")
    return identity


def get_current_user_id(access_token: str = Header(..., description="Access token (without Bearer)")) -> str:
    """Extract current user ID from JWT token"""
    return get_current_identity(access_token)["user_id"]
