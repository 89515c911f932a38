"""Pydantic schemas for offices and memberships."""

import re
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from juris.core.constants import (
    MAX_LOCATION_LENGTH,
    MAX_NAME_LENGTH,
    OFFICE_HANDLE_PATTERN,
    OFFICE_HANDLE_PREFIX,
)
from juris.core.permissions.models import Resource, Role


if TYPE_CHECKING:
    from juris.modules.offices.models import Office, OfficeMember


_HANDLE_RE = re.compile(OFFICE_HANDLE_PATTERN)


def normalize_handle(handle: str) -> str:
    """Normalise an office handle: strip, lowercase, ensure the ``@`` prefix.

    Raises:
        ValueError: If the result does not match the handle pattern

    Examples:
        >>> normalize_handle("Silva_Advogados")
        '@silva_advogados'
    """
    value = handle.strip().lower()
    if not value.startswith(OFFICE_HANDLE_PREFIX):
        value = OFFICE_HANDLE_PREFIX + value
    if not _HANDLE_RE.match(value):
        raise ValueError(
            "Handle must be '@' followed by 3-20 lowercase letters, digits or underscores"
        )
    return value


# ============================================================
# Membership
# ============================================================


class MemberPermissions(BaseModel):
    """Per-member flags granting supplemental *view* access.

    Only these four resources carry a flag; clients and team never do.
    """

    model_config = ConfigDict(frozen=True)

    financial: bool = False
    cases: bool = False
    documents: bool = False
    settings: bool = False

    def grants_view(self, resource: Resource) -> bool:
        """Return True if the flag for ``resource`` is set."""
        match resource:
            case Resource.FINANCIAL:
                return self.financial
            case Resource.CASES:
                return self.cases
            case Resource.DOCUMENTS:
                return self.documents
            case Resource.SETTINGS:
                return self.settings
            case _:
                return False

    @classmethod
    def all_granted(cls) -> "MemberPermissions":
        return cls(financial=True, cases=True, documents=True, settings=True)


class Membership(BaseModel):
    """One actor's role and override flags within one office."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: Role
    permissions: MemberPermissions = Field(default_factory=MemberPermissions)
    name: str | None = None
    email: str | None = None
    joined_at: datetime | None = None

    @classmethod
    def from_model(cls, member: "OfficeMember") -> "Membership":
        """Build a membership snapshot from an ``OfficeMember`` row."""
        return cls(
            user_id=member.user_id,
            role=member.role,
            permissions=MemberPermissions(
                financial=member.can_view_financial,
                cases=member.can_view_cases,
                documents=member.can_view_documents,
                settings=member.can_view_settings,
            ),
            name=member.user.name if member.user else None,
            email=member.user.email if member.user else None,
            joined_at=member.created_at,
        )


# ============================================================
# Office
# ============================================================


class OfficeSnapshot(BaseModel):
    """An office (tenant) with its ordered member list.

    This is the in-hand data the access engine decides against.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    handle: str
    owner_id: str
    location: str | None = None
    members: tuple[Membership, ...] = ()

    @classmethod
    def from_model(cls, office: "Office") -> "OfficeSnapshot":
        """Build a snapshot from an ``Office`` row with members loaded."""
        return cls(
            id=office.id,
            name=office.name,
            handle=office.handle,
            owner_id=office.owner_id,
            location=office.location,
            members=tuple(Membership.from_model(m) for m in office.members),
        )


class OfficeCreate(BaseModel):
    """Schema for creating an office."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    handle: str
    location: str | None = Field(default=None, max_length=MAX_LOCATION_LENGTH)

    @field_validator("handle")
    @classmethod
    def validate_handle(cls, v: str) -> str:
        """Normalise and validate the handle."""
        return normalize_handle(v)


class MemberUpdate(BaseModel):
    """Schema for changing a member's role or override flags."""

    role: Role | None = None
    permissions: MemberPermissions | None = None
