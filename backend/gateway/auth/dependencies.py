"""
FastAPI dependencies for authentication.
Provides get_current_user, which verifies the bearer token and yields the uid.
"""
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from gateway.auth.firebase import verify_firebase_token
from gateway.exceptions import AuthError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header becomes our 401 JSON body, not a 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Verify the Authorization: Bearer <token> header.

    Returns:
        The caller's user ID (Firebase uid)

    Raises:
        AuthError: If the token is missing, invalid, or carries no uid
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Request without bearer token")
        raise AuthError("Unauthorized")

    try:
        decoded_token = verify_firebase_token(credentials.credentials)
    except (ValueError, RuntimeError) as e:
        logger.warning(f"Authentication error: {e}")
        raise AuthError("Unauthorized")

    user_id = decoded_token.get("uid")
    if not user_id:
        logger.warning("Token verified but has no uid claim")
        raise AuthError("Unauthorized")

    return user_id
