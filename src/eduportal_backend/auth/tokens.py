"""
Signed session tokens for the two principal kinds.

Tenant user tokens and provider tokens live in disjoint namespaces told
apart by the ``type`` claim. Lifetimes come from settings.
"""

import datetime
import logging
from typing import Any, Dict, Optional
from jose import jwt, JWTError, ExpiredSignatureError

from eduportal_backend.settings import settings

logger = logging.getLogger(__name__)

TENANT_USER = "tenant_user"
PROVIDER = "provider"


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


def _encode(claims: Dict[str, Any], ttl_seconds: int) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int((now + datetime.timedelta(seconds=ttl_seconds)).timestamp())
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def issue_tenant_token(user_id: str, tenant_id: str, ttl_seconds: Optional[int] = None) -> str:
    return _encode(
        {"sub": user_id, "tenant_id": tenant_id, "type": TENANT_USER},
        ttl_seconds if ttl_seconds is not None else settings.TENANT_TOKEN_TTL,
    )


def issue_provider_token(provider_user_id: str, ttl_seconds: Optional[int] = None) -> str:
    return _encode(
        {"sub": provider_user_id, "type": PROVIDER},
        ttl_seconds if ttl_seconds is not None else settings.PROVIDER_TOKEN_TTL,
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Check signature and expiry.

    Returns the claims with ``sub`` and a normalized ``type``: anything
    that is not a provider token is a tenant user token.
    """
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpired("Token expired") from e
    except JWTError as e:
        logger.debug(f"Token verification failed: {e}")
        raise TokenInvalid("Token invalid") from e

    if not claims.get("sub"):
        raise TokenInvalid("Token invalid")

    if claims.get("type") != PROVIDER:
        claims["type"] = TENANT_USER

    return claims
