"""Database-backed credential authenticator.

Verifies passwords against the users table, issues and redeems one-time
sign-in links, and keeps the session token in the session state store so
a later process can restore it.
"""

import structlog
from sqlalchemy.exc import SQLAlchemyError

from juris.core.auth.backend import (
    create_link_token,
    create_session_token,
    decode_link_token,
    decode_session_token,
    verify_password,
)
from juris.core.auth.interfaces import SessionStateStore
from juris.core.auth.schemas import RawSession
from juris.core.constants import (
    AMR_ONE_TIME_LINK,
    AMR_PASSWORD,
    SESSION_TOKEN_KEY,
)
from juris.core.errors import AuthenticationError, BackingStoreError, NotFoundError
from juris.modules.users.models import User
from juris.modules.users.repos import UserRepository
from juris.modules.users.schemas import Actor


logger = structlog.get_logger()


class DatabaseAuthenticator:
    """Credential authenticator over ``UserRepository``.

    The authentication method is recorded in the session token's ``amr``
    claim; ``RawSession.verified_link`` is derived from it so callers never
    inspect token internals.
    """

    def __init__(self, users: UserRepository, store: SessionStateStore) -> None:
        self.users = users
        self.store = store

    async def _load_user_by_email(self, email: str) -> User | None:
        try:
            return await self.users.get_by_email(email)
        except SQLAlchemyError as e:
            raise BackingStoreError("Account lookup failed") from e

    async def _load_user_by_id(self, user_id: str) -> User | None:
        try:
            return await self.users.get_by_id(user_id)
        except SQLAlchemyError as e:
            raise BackingStoreError("Account lookup failed") from e

    async def authenticate(self, email: str, password: str) -> Actor:
        """Verify email and password and persist a password session token.

        Raises:
            AuthenticationError: If the credentials are rejected
            BackingStoreError: If the account store fails
        """
        user = await self._load_user_by_email(email)
        if not user or not user.password_hash:
            raise AuthenticationError()
        if not verify_password(password, user.password_hash):
            raise AuthenticationError()

        await self.store.set(SESSION_TOKEN_KEY, create_session_token(user.id, [AMR_PASSWORD]))
        return Actor.from_model(user)

    async def issue_link_token(self, email: str) -> str:
        """Create a one-time sign-in link token for the account's email.

        Delivery is the caller's concern.

        Raises:
            NotFoundError: If no account uses this email
        """
        user = await self._load_user_by_email(email)
        if user is None:
            raise NotFoundError("Account not found", resource="user")
        logger.info("sign_in_link_issued", actor_id=user.id)
        return create_link_token(user.id, user.email)

    async def verify_link(self, email: str, token: str) -> RawSession:
        """Redeem a one-time link token.

        The token must match the email, be unexpired, and not have been
        redeemed before.

        Raises:
            AuthenticationError: If the link is invalid, expired or reused
        """
        data = decode_link_token(token)
        if data is None or data.email != email.strip().lower():
            raise AuthenticationError(
                "Invalid or expired sign-in link", error_code="invalid_link"
            )

        user = await self._load_user_by_id(data.user_id)
        if user is None:
            raise AuthenticationError(
                "Invalid or expired sign-in link", error_code="invalid_link"
            )

        if not await self.users.consume_link_token(data.jti, user.id):
            logger.warning("sign_in_link_reused", actor_id=user.id)
            raise AuthenticationError(
                "This sign-in link has already been used", error_code="link_reused"
            )

        await self.store.set(
            SESSION_TOKEN_KEY, create_session_token(user.id, [AMR_ONE_TIME_LINK])
        )
        return RawSession(actor=Actor.from_model(user), verified_link=True)

    async def establish_from_persisted(self) -> RawSession | None:
        """Restore the session recorded in the state store, if still valid."""
        token = await self.store.get(SESSION_TOKEN_KEY)
        if not token:
            return None

        data = decode_session_token(token)
        if data is None:
            await self.store.delete(SESSION_TOKEN_KEY)
            return None

        user = await self._load_user_by_id(data.user_id)
        if user is None:
            await self.store.delete(SESSION_TOKEN_KEY)
            return None

        return RawSession(
            actor=Actor.from_model(user),
            verified_link=AMR_ONE_TIME_LINK in data.amr,
        )

    async def end_session(self) -> None:
        """Forget the persisted session token."""
        await self.store.delete(SESSION_TOKEN_KEY)
