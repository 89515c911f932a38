"""Office repository for database operations."""

from datetime import UTC, datetime

from sqlalchemy import Select, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from juris.core.errors import BackingStoreError, NotFoundError
from juris.core.permissions.models import Role
from juris.modules.offices.models import Office, OfficeMember
from juris.modules.offices.schemas import MemberPermissions, OfficeSnapshot


class OfficeRepository:
    """Repository for Office and OfficeMember database operations.

    ``get_tenant`` and ``list_tenants_for_actor`` form the tenant store
    used by the access core and return immutable snapshots. The other
    methods return ORM rows for the office service.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _select_office(self) -> Select[tuple[Office]]:
        return (
            select(Office)
            .options(selectinload(Office.members).selectinload(OfficeMember.user))
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, office_id: str) -> Office | None:
        """Get an office by ID with members loaded."""
        result = await self.session.execute(
            self._select_office().where(Office.id == office_id)
        )
        return result.scalar_one_or_none()

    async def get_by_handle(self, handle: str) -> Office | None:
        """Get an office by its (normalised) handle."""
        result = await self.session.execute(
            self._select_office().where(Office.handle == handle.lower())
        )
        return result.scalar_one_or_none()

    async def handle_exists(self, handle: str) -> bool:
        """Check whether a handle is already taken."""
        result = await self.session.execute(
            select(Office.id).where(Office.handle == handle.lower())
        )
        return result.scalar_one_or_none() is not None

    async def create(self, office: Office) -> Office:
        """Create a new office.

        Args:
            office: Office instance to create

        Returns:
            The created office, reloaded with its members

        Raises:
            NotFoundError: If the inserted office cannot be read back
        """
        self.session.add(office)
        await self.session.flush()
        created = await self.get_by_id(office.id)
        if created is None:
            raise NotFoundError(
                "Office not found after insert", resource="office", resource_id=office.id
            )
        return created

    # ============================================================
    # Memberships
    # ============================================================

    async def get_member(self, office_id: str, user_id: str) -> OfficeMember | None:
        """Get one membership row."""
        result = await self.session.execute(
            select(OfficeMember).where(
                OfficeMember.office_id == office_id,
                OfficeMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_member(
        self,
        office_id: str,
        user_id: str,
        role: Role,
        permissions: MemberPermissions | None = None,
    ) -> OfficeMember:
        """Add a membership row.

        Raises:
            IntegrityError: If the user is already a member
        """
        permissions = permissions or MemberPermissions()
        member = OfficeMember(
            office_id=office_id,
            user_id=user_id,
            role=role,
            can_view_financial=permissions.financial,
            can_view_cases=permissions.cases,
            can_view_documents=permissions.documents,
            can_view_settings=permissions.settings,
            # Explicit timestamp keeps join order stable at sub-second resolution
            created_at=datetime.now(UTC),
        )
        self.session.add(member)
        await self.session.flush()
        return member

    async def update_member(
        self,
        member: OfficeMember,
        role: Role | None = None,
        permissions: MemberPermissions | None = None,
    ) -> OfficeMember:
        """Change a member's role and/or override flags."""
        if role is not None:
            member.role = role
        if permissions is not None:
            member.can_view_financial = permissions.financial
            member.can_view_cases = permissions.cases
            member.can_view_documents = permissions.documents
            member.can_view_settings = permissions.settings
        await self.session.flush()
        return member

    async def remove_member(self, member: OfficeMember) -> None:
        """Delete a membership row."""
        await self.session.delete(member)
        await self.session.flush()

    # ============================================================
    # Tenant store
    # ============================================================

    async def get_tenant(self, office_id: str) -> OfficeSnapshot | None:
        """Return an office snapshot (with members) or None.

        Raises:
            BackingStoreError: If the lookup fails
        """
        try:
            office = await self.get_by_id(office_id)
        except SQLAlchemyError as e:
            raise BackingStoreError(
                "Office lookup failed", details={"office_id": office_id}
            ) from e
        return OfficeSnapshot.from_model(office) if office else None

    async def list_tenants_for_actor(self, actor_id: str) -> list[OfficeSnapshot]:
        """Return every office the actor owns or is a member of.

        Raises:
            BackingStoreError: If the lookup fails
        """
        member_of = select(OfficeMember.office_id).where(OfficeMember.user_id == actor_id)
        stmt = (
            self._select_office()
            .where(or_(Office.owner_id == actor_id, Office.id.in_(member_of)))
            .order_by(Office.created_at, Office.name)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise BackingStoreError(
                "Office listing failed", details={"actor_id": actor_id}
            ) from e
        return [OfficeSnapshot.from_model(office) for office in result.scalars().all()]
