"""Locate an actor's membership within an office."""

from juris.core.permissions.models import Role
from juris.modules.offices.schemas import Membership, OfficeSnapshot
from juris.modules.users.schemas import Actor


def resolve_membership(actor: Actor, office: OfficeSnapshot) -> Membership | None:
    """Return the actor's membership in ``office``, or None.

    Linear scan over the member list; offices hold practice staff, so the
    list is short. Absence is a normal outcome and never creates anything.
    """
    for member in office.members:
        if member.user_id == actor.id:
            return member
    return None


def current_membership(
    actor: Actor | None, office: OfficeSnapshot | None
) -> Membership | None:
    """Membership lookup that tolerates a missing actor or office."""
    if actor is None or office is None:
        return None
    return resolve_membership(actor, office)


def current_role(actor: Actor | None, office: OfficeSnapshot | None) -> Role | None:
    """Role of the actor in the office, or None when not a member."""
    membership = current_membership(actor, office)
    return membership.role if membership else None
