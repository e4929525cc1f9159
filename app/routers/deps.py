import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from app.core.errors import Unauthorized
from app.core.security import decode_access_token

logger = logging.getLogger(__name__)


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Extract user_id from JWT token"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")

    token = authorization[len("Bearer "):]
    try:
        payload = decode_access_token(token)
    except Unauthorized as e:
        logger.warning(f"Rejected bearer token: {e.message}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user_id
