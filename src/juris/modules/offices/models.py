"""Office database models."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from juris.core.constants import (
    MAX_HANDLE_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_ROLE_LENGTH,
)
from juris.core.database.base import Base, TimestampMixin, UUIDMixin
from juris.core.permissions.models import Role


if TYPE_CHECKING:
    from juris.modules.users.models import User


class Office(Base, UUIDMixin, TimestampMixin):
    """Office (tenant) model: the data-isolation boundary.

    The owner is all-powerful in the office whether or not a member row
    exists for them. Offices are never hard-deleted here.

    Attributes:
        name: Display name
        handle: Globally unique ``@handle``
        owner_id: The actor who created the office
        location: Free-form location
    """

    __tablename__ = "offices"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    handle: Mapped[str] = mapped_column(
        String(MAX_HANDLE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    location: Mapped[str | None] = mapped_column(
        String(MAX_LOCATION_LENGTH),
        nullable=True,
    )

    # Relationships
    members: Mapped[list["OfficeMember"]] = relationship(
        "OfficeMember",
        back_populates="office",
        cascade="all, delete-orphan",
        order_by="OfficeMember.created_at",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Office(id={self.id}, handle={self.handle}, owner_id={self.owner_id})>"


class OfficeMember(Base, UUIDMixin, TimestampMixin):
    """Links one user to one office with a role and view-override flags."""

    __tablename__ = "office_members"
    __table_args__ = (
        UniqueConstraint("office_id", "user_id", name="uq_office_member"),
    )

    office_id: Mapped[str] = mapped_column(
        ForeignKey("offices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[Role] = mapped_column(
        Enum(
            Role,
            native_enum=False,
            length=MAX_ROLE_LENGTH,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=Role.LAWYER,
    )
    can_view_financial: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_view_cases: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_view_documents: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_view_settings: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    office: Mapped["Office"] = relationship("Office", back_populates="members")
    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return (
            f"<OfficeMember(office_id={self.office_id}, user_id={self.user_id}, "
            f"role={self.role.value})>"
        )
