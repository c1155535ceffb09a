"""
Signed session tokens and their revocation list.

Tokens are stateless JWTs; revoked token ids live in the Django cache with a
TTL equal to the token's remaining lifetime.
"""

import logging
import uuid
from datetime import timedelta
from typing import Any, Dict

import jwt
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from apps.core.exceptions import Unauthorized

logger = logging.getLogger(__name__)

REVOKED_KEY_PREFIX = 'revoked-token'


def _revoked_key(jti: str) -> str:
    return f"{REVOKED_KEY_PREFIX}:{jti}"


def create_session_token(user, lifetime_days: int) -> str:
    """
    Create a session token carrying the identity id and role.

    Args:
        user: The identity the token is issued to
        lifetime_days: Validity window in days

    Returns:
        Encoded JWT string
    """
    now = timezone.now()
    payload: Dict[str, Any] = {
        'sub': str(user.pk),
        'role': user.role,
        'jti': uuid.uuid4().hex,
        'iat': int(now.timestamp()),
        'exp': int((now + timedelta(days=lifetime_days)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry and revocation of ``token``.

    Raises:
        Unauthorized: If the token is malformed, expired or revoked
    """
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={'require': ['sub', 'exp', 'jti']},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized('Session has expired, please log in again')
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected session token: {e}")
        raise Unauthorized('Invalid session token')

    if is_revoked(claims['jti']):
        raise Unauthorized('Session has been logged out')
    return claims


def revoke_session_token(claims: Dict[str, Any]) -> None:
    """Blacklist a decoded token until it would have expired anyway."""
    remaining = int(claims['exp'] - timezone.now().timestamp())
    if remaining <= 0:
        return
    cache.set(_revoked_key(claims['jti']), True, timeout=remaining)
    logger.info(f"Revoked session token {claims['jti']} for user {claims['sub']}")


def is_revoked(jti: str) -> bool:
    return bool(cache.get(_revoked_key(jti)))
