"""
Session identity extraction.

The external session layer issues signed tokens whose ``sub`` claim is the
user's identity. This module only turns an inbound request into "current
identity, or none"; it never stores sessions or credentials.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from services.errors import UnauthorizedError
from services.identity import is_valid_identity
from services.security import security_config, SecurityUtils
import logging

logger = logging.getLogger(__name__)

bearer_scheme = OAuth2PasswordBearer(tokenUrl="/api/session", auto_error=False)

def create_session_token(user_id: str, expires_delta: timedelta = None) -> str:
    """
    Create a signed session token for ``user_id``.
    Used by the session layer and by tests.
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=security_config.session_token_expire_minutes)

    to_encode = {
        "sub": user_id,
        "exp": expire,
        "iat": now,
        "type": "session"
    }

    return jwt.encode(to_encode, security_config.session_secret_key, algorithm=security_config.session_algorithm)

def decode_session_token(token: str) -> Optional[str]:
    """Return the identity carried by ``token``, or None if it is unusable."""
    try:
        payload = jwt.decode(
            token,
            security_config.session_secret_key,
            algorithms=[security_config.session_algorithm]
        )
    except JWTError as e:
        logger.debug(f"Session token rejected: {e}")
        return None

    user_id = payload.get("sub")
    if payload.get("type") != "session" or not is_valid_identity(user_id):
        return None
    return user_id.lower()

async def get_session_identity(
    request: Request,
    token: Optional[str] = Depends(bearer_scheme)
) -> Optional[str]:
    """Current session identity from the bearer header or the session cookie."""
    if not token:
        token = request.cookies.get(security_config.session_cookie_name)
    if not token:
        return None
    return decode_session_token(token)

async def require_session(
    request: Request,
    identity: Optional[str] = Depends(get_session_identity)
) -> str:
    """
    Gate for every session-only route.

    Raises UnauthorizedError before any store access when the request carries
    no valid session identity.
    """
    if identity is None:
        SecurityUtils.log_security_event(
            "unauthorized_request",
            {"path": request.url.path, "method": request.method},
            client_ip=SecurityUtils.get_client_ip(request)
        )
        raise UnauthorizedError()
    return identity
