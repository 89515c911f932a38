"""Office service for business logic."""

import structlog
from sqlalchemy.exc import IntegrityError

from juris.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from juris.core.permissions.checker import can
from juris.core.permissions.models import Action, Resource, Role
from juris.modules.offices.models import Office, OfficeMember
from juris.modules.offices.repos import OfficeRepository
from juris.modules.offices.resolver import resolve_membership
from juris.modules.offices.schemas import (
    MemberPermissions,
    MemberUpdate,
    OfficeCreate,
    OfficeSnapshot,
    normalize_handle,
)
from juris.modules.users.repos import UserRepository
from juris.modules.users.schemas import Actor


logger = structlog.get_logger()

# Flags a member gets when joining an office by handle
JOIN_PERMISSIONS = MemberPermissions(cases=True, documents=True)


class OfficeService:
    """Service for office and membership management.

    Management operations are gated by the access engine (``team`` resource)
    and raise ``ForbiddenError`` when denied. The office owner can never be
    edited or removed. Changes are flushed; committing is the caller's job.
    """

    def __init__(self, offices: OfficeRepository, users: UserRepository) -> None:
        self.offices = offices
        self.users = users

    async def _load(self, office_id: str) -> Office:
        office = await self.offices.get_by_id(office_id)
        if office is None:
            raise NotFoundError("Office not found", resource="office", resource_id=office_id)
        return office

    async def create_office(self, actor: Actor, data: OfficeCreate) -> OfficeSnapshot:
        """Create an office owned by ``actor``.

        The creator also becomes its first member, as Admin with every
        view override set, and the office becomes their current office.

        Raises:
            ConflictError: If the handle is taken
        """
        if await self.offices.handle_exists(data.handle):
            raise ConflictError(
                "Handle already in use",
                error_code="handle_taken",
                details={"handle": data.handle},
            )

        try:
            office = await self.offices.create(
                Office(
                    name=data.name,
                    handle=data.handle,
                    owner_id=actor.id,
                    location=data.location,
                )
            )
            await self.offices.add_member(
                office.id, actor.id, Role.ADMIN, MemberPermissions.all_granted()
            )
        except IntegrityError as e:
            raise ConflictError(
                "Handle already in use",
                error_code="handle_taken",
                details={"handle": data.handle},
            ) from e

        await self.users.set_current_office(actor.id, office.id)
        logger.info("office_created", office_id=office.id, handle=office.handle, actor_id=actor.id)
        return OfficeSnapshot.from_model(await self._load(office.id))

    async def join_office(self, actor: Actor, handle: str) -> OfficeSnapshot:
        """Join the office identified by ``handle``.

        New members join as Lawyer with the ``cases`` and ``documents``
        view overrides. Joining an office one already belongs to (or owns)
        changes nothing.

        Raises:
            ValidationError: If the handle is malformed
            NotFoundError: If no office uses the handle
        """
        try:
            normalized = normalize_handle(handle)
        except ValueError as e:
            raise ValidationError(
                "Invalid office handle",
                errors=[{"field": "handle", "message": str(e)}],
            ) from e

        office = await self.offices.get_by_handle(normalized)
        if office is None:
            raise NotFoundError("Office not found", resource="office", resource_id=normalized)

        snapshot = OfficeSnapshot.from_model(office)
        if snapshot.owner_id != actor.id and resolve_membership(actor, snapshot) is None:
            try:
                await self.offices.add_member(office.id, actor.id, Role.LAWYER, JOIN_PERMISSIONS)
            except IntegrityError as e:
                raise ConflictError(
                    "Already a member of this office",
                    error_code="already_member",
                ) from e
            logger.info("office_joined", office_id=office.id, actor_id=actor.id)
            snapshot = OfficeSnapshot.from_model(await self._load(office.id))

        await self.users.set_current_office(actor.id, office.id)
        return snapshot

    async def _managed_member(
        self, actor: Actor, office_id: str, user_id: str, action: Action
    ) -> OfficeMember:
        office = await self._load(office_id)
        snapshot = OfficeSnapshot.from_model(office)

        if not can(actor, snapshot, Resource.TEAM, action):
            raise ForbiddenError(
                "Insufficient permissions",
                details={"required_permission": f"{Resource.TEAM.value}:{action.value}"},
            )
        if user_id == snapshot.owner_id:
            raise ForbiddenError(
                "The office owner cannot be modified",
                error_code="owner_protected",
            )

        member = await self.offices.get_member(office_id, user_id)
        if member is None:
            raise NotFoundError("Member not found", resource="office_member", resource_id=user_id)
        return member

    async def update_member(
        self, actor: Actor, office_id: str, user_id: str, data: MemberUpdate
    ) -> OfficeSnapshot:
        """Change a member's role and/or view overrides.

        Raises:
            NotFoundError: If the office or member does not exist
            ForbiddenError: Without ``team:edit``, or when targeting the owner
        """
        member = await self._managed_member(actor, office_id, user_id, Action.EDIT)
        await self.offices.update_member(member, role=data.role, permissions=data.permissions)
        logger.info(
            "office_member_updated",
            office_id=office_id,
            member_id=user_id,
            role=member.role.value,
            actor_id=actor.id,
        )
        return OfficeSnapshot.from_model(await self._load(office_id))

    async def remove_member(self, actor: Actor, office_id: str, user_id: str) -> OfficeSnapshot:
        """Revoke a membership.

        Raises:
            NotFoundError: If the office or member does not exist
            ForbiddenError: Without ``team:delete``, or when targeting the owner
        """
        member = await self._managed_member(actor, office_id, user_id, Action.DELETE)
        await self.offices.remove_member(member)

        removed = await self.users.get_by_id(user_id)
        if removed is not None and removed.current_office_id == office_id:
            await self.users.set_current_office(user_id, None)

        logger.info("office_member_removed", office_id=office_id, member_id=user_id, actor_id=actor.id)
        return OfficeSnapshot.from_model(await self._load(office_id))

    async def list_offices(self, actor: Actor) -> list[OfficeSnapshot]:
        """Offices the actor owns or belongs to."""
        return await self.offices.list_tenants_for_actor(actor.id)

    async def switch_office(self, actor: Actor, office_id: str) -> OfficeSnapshot:
        """Make ``office_id`` the actor's current office.

        Raises:
            NotFoundError: If the office does not exist
            ForbiddenError: If the actor neither owns nor belongs to it
        """
        snapshot = await self.offices.get_tenant(office_id)
        if snapshot is None:
            raise NotFoundError("Office not found", resource="office", resource_id=office_id)
        if snapshot.owner_id != actor.id and resolve_membership(actor, snapshot) is None:
            raise ForbiddenError("Not a member of this office", error_code="not_a_member")

        await self.users.set_current_office(actor.id, office_id)
        logger.info("office_switched", office_id=office_id, actor_id=actor.id)
        return snapshot
