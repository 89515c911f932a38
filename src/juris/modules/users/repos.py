"""User repository for database operations."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from juris.core.errors import BackingStoreError
from juris.modules.users.models import ConsumedLinkToken, User


logger = structlog.get_logger()


class UserRepository:
    """Repository for User database operations.

    Also serves as the account status store consulted by the account
    status gate (``get_suspension`` / ``clear_suspension``).
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by ID."""
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def consume_link_token(self, jti: str, user_id: str) -> bool:
        """Mark a one-time link token as redeemed.

        Returns:
            True if this call consumed the token, False if it was already
            consumed

        Raises:
            BackingStoreError: If the write fails for another reason
        """
        try:
            async with self.session.begin_nested():
                self.session.add(ConsumedLinkToken(jti=jti, user_id=user_id))
                await self.session.flush()
        except IntegrityError:
            return False
        except SQLAlchemyError as e:
            raise BackingStoreError(
                "Link redemption failed", details={"actor_id": user_id}
            ) from e
        return True

    async def set_current_office(self, user_id: str, office_id: str | None) -> None:
        """Record the office the user is working in."""
        user = await self.get_by_id(user_id)
        if user is not None:
            user.current_office_id = office_id
            await self.session.flush()

    # ============================================================
    # Account status
    # ============================================================

    async def suspend(self, user_id: str, at: datetime | None = None) -> None:
        """Soft-delete an account by setting its suspension marker."""
        user = await self.get_by_id(user_id)
        if user is None:
            return
        user.deleted_at = at or datetime.now(UTC)
        await self.session.flush()
        logger.info("account_suspended", actor_id=user_id)

    async def get_suspension(self, user_id: str) -> datetime | None:
        """Return the account's suspension marker, or None when active.

        Raises:
            BackingStoreError: If the lookup fails
        """
        try:
            result = await self.session.execute(
                select(User.deleted_at).where(User.id == user_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise BackingStoreError(
                "Account status lookup failed",
                details={"actor_id": user_id},
            ) from e

    async def clear_suspension(self, user_id: str) -> bool:
        """Clear the suspension marker and commit.

        Returns:
            True once the cleared marker is durable, False if the account
            does not exist

        Raises:
            BackingStoreError: If the write fails
        """
        try:
            user = await self.get_by_id(user_id)
            if user is None:
                return False
            user.deleted_at = None
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise BackingStoreError(
                "Account reactivation failed",
                details={"actor_id": user_id},
            ) from e
        return True
