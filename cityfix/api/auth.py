import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from cityfix.dependencies import get_identity_provider
from cityfix.exceptions import AuthError, ForbiddenError, ValidationError
from cityfix.schemas.auth import LoginRequest
from cityfix.services.identity import LocalIdentityProvider
from cityfix.utils.security import get_bearer_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ===== LOGIN ENDPOINT =====

@router.post("/login")
def login(credentials: LoginRequest, identity: LocalIdentityProvider = Depends(get_identity_provider)):
    """Verify admin credentials and return the user with a session token pair"""
    if not credentials.email or not credentials.password:
        raise ValidationError("Email and password are required")

    try:
        auth_session = identity.sign_in(credentials.email, credentials.password)
    except AuthError:
        logger.info("Failed login for %s", credentials.email)
        raise

    if not auth_session.user.is_admin:
        raise ForbiddenError("Access denied - Admin privileges required")

    return {"success": True, **auth_session.model_dump()}


# ===== VERIFY ENDPOINT =====

@router.get("/verify")
def verify(
    authorization: Optional[str] = Header(None),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
):
    token = get_bearer_token(authorization)
    if not token:
        raise AuthError("No token provided")
    user = identity.resolve_token(token)
    return {"success": True, "user": user.model_dump()}


# ===== LOGOUT ENDPOINT =====

@router.post("/logout")
def logout(
    authorization: Optional[str] = Header(None),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
):
    token = get_bearer_token(authorization)
    if not token:
        return {"success": True, "message": "Already logged out"}
    identity.sign_out(token)
    return {"success": True, "message": "Logged out successfully"}
