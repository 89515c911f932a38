"""User database models."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from juris.core.constants import (
    ID_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PROVIDER_LENGTH,
    MAX_TOKEN_ID_LENGTH,
)
from juris.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """Durable account record behind an actor.

    Accounts are never hard-deleted. ``deleted_at`` is the suspension
    marker set by a soft delete and cleared by reactivation.

    Attributes:
        email: Unique email address
        name: Display name
        password_hash: Bcrypt-hashed password (nullable for OAuth users)
        provider: Registration provider tag (email, google, apple, microsoft)
        current_office_id: Office the actor last worked in
        deleted_at: Suspension marker, None when the account is active
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    password_hash: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    provider: Mapped[str] = mapped_column(
        String(MAX_PROVIDER_LENGTH),
        default="email",
        nullable=False,
    )
    current_office_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH),
        nullable=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def is_suspended(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, suspended={self.is_suspended})>"


class ConsumedLinkToken(Base):
    """Record of a redeemed one-time sign-in link.

    The token id is the primary key, so a second redemption of the same
    link fails on insert no matter which session attempts it.
    """

    __tablename__ = "consumed_link_tokens"

    jti: Mapped[str] = mapped_column(
        String(MAX_TOKEN_ID_LENGTH),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    consumed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
