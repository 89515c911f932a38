"""Authentication backend for password and token handling.

This module provides core authentication utilities including:
- Password hashing with bcrypt
- Session tokens (JWT) carrying the authentication method (``amr``)
- One-time sign-in link tokens
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from juris.config import settings
from juris.core.auth.schemas import LinkTokenData, SessionTokenData
from juris.core.constants import BCRYPT_ROUNDS, TOKEN_JTI_LENGTH


SESSION_TOKEN_TYPE = "session"
LINK_TOKEN_TYPE = "link"

# Password hashing context using bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


# ============================================================
# Password Utilities
# ============================================================


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================
# JWT Token Utilities
# ============================================================


def _encode(claims: dict[str, Any]) -> str:
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def _decode(token: str, token_type: str) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def create_session_token(
    user_id: str,
    amr: list[str],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a session token recording how the session was established.

    Args:
        user_id: The actor's ID
        amr: Authentication methods, e.g. ``["pwd"]`` or ``["otp"]``
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(days=settings.session_token_expire_days))
    return _encode(
        {
            "sub": user_id,
            "amr": list(amr),
            "exp": expire,
            "iat": now,
            "type": SESSION_TOKEN_TYPE,
            "jti": secrets.token_urlsafe(TOKEN_JTI_LENGTH),
        }
    )


def decode_session_token(token: str) -> SessionTokenData | None:
    """Decode and validate a session token.

    Returns:
        SessionTokenData if valid, None if invalid, expired or of another type
    """
    payload = _decode(token, SESSION_TOKEN_TYPE)
    if payload is None:
        return None

    user_id = payload.get("sub")
    exp = payload.get("exp")
    amr = payload.get("amr")
    if not user_id or exp is None or not isinstance(amr, list):
        return None

    return SessionTokenData(
        user_id=user_id,
        amr=[str(method) for method in amr],
        exp=datetime.fromtimestamp(exp, tz=UTC),
        jti=payload.get("jti"),
    )


def create_link_token(
    user_id: str,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a one-time sign-in link token for emailing to the account.

    Args:
        user_id: The actor's ID
        email: The registered email the link is sent to
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.link_token_expire_minutes))
    return _encode(
        {
            "sub": user_id,
            "email": email.strip().lower(),
            "exp": expire,
            "iat": now,
            "type": LINK_TOKEN_TYPE,
            "jti": secrets.token_urlsafe(TOKEN_JTI_LENGTH),
        }
    )


def decode_link_token(token: str) -> LinkTokenData | None:
    """Decode and validate a link token.

    Returns:
        LinkTokenData if valid, None otherwise
    """
    payload = _decode(token, LINK_TOKEN_TYPE)
    if payload is None:
        return None

    user_id = payload.get("sub")
    email = payload.get("email")
    exp = payload.get("exp")
    jti = payload.get("jti")
    if not user_id or not email or exp is None or not jti:
        return None

    return LinkTokenData(
        user_id=user_id,
        email=email,
        exp=datetime.fromtimestamp(exp, tz=UTC),
        jti=jti,
    )
