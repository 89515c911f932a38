"""Pydantic schemas for actors."""

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from juris.core.constants import MAX_NAME_LENGTH


if TYPE_CHECKING:
    from juris.modules.users.models import User


class AuthProvider(str, Enum):
    """How the account was registered."""

    EMAIL = "email"
    GOOGLE = "google"
    APPLE = "apple"
    MICROSOFT = "microsoft"


class Actor(BaseModel):
    """An authenticated identity as seen by the access core.

    ``id`` is opaque and immutable; ``name`` and ``current_office_id`` are
    the mutable profile fields.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    email: EmailStr
    provider: AuthProvider = AuthProvider.EMAIL
    current_office_id: str | None = None

    @classmethod
    def from_model(cls, user: "User") -> "Actor":
        """Build an actor snapshot from a ``User`` row."""
        return cls.model_validate(user)


# Profile fields an actor may change on an established session.
MUTABLE_PROFILE_FIELDS: frozenset[str] = frozenset({"name", "current_office_id"})
