"""Access decisions for office-scoped resources.

Precedence, first match wins:

1. no actor or no office -> deny
2. office owner -> allow, bypassing the matrix
3. not a member -> deny
4. role grants the action in the matrix -> allow
5. ``view`` with the member's override flag for that resource -> allow
6. otherwise deny

Everything here is synchronous and side-effect free.
"""

from dataclasses import dataclass
from enum import Enum

from juris.core.permissions.models import (
    OVERRIDABLE_RESOURCES,
    Action,
    Resource,
    Role,
    matrix_actions,
)
from juris.modules.offices.resolver import resolve_membership
from juris.modules.offices.schemas import MemberPermissions, OfficeSnapshot
from juris.modules.users.schemas import Actor


class DecisionReason(str, Enum):
    """Which rule produced a decision."""

    UNAUTHENTICATED = "unauthenticated"
    NO_OFFICE = "no_office"
    OWNER = "owner"
    NOT_A_MEMBER = "not_a_member"
    ROLE = "role"
    VIEW_OVERRIDE = "view_override"
    DENIED_BY_ROLE = "denied_by_role"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access check.

    Attributes:
        allowed: Whether the action is permitted
        reason: The rule that decided
        resource: The resource checked
        action: The action checked
        role: The member's role, when a membership was found
    """

    allowed: bool
    reason: DecisionReason
    resource: Resource
    action: Action
    role: Role | None = None

    def describe(self) -> str:
        """Human-readable explanation for audit/debug surfaces."""
        match self.reason:
            case DecisionReason.UNAUTHENTICATED:
                return "Denied: not authenticated."
            case DecisionReason.NO_OFFICE:
                return "Denied: no active office context."
            case DecisionReason.OWNER:
                return "Allowed: office owner."
            case DecisionReason.NOT_A_MEMBER:
                return "Denied: not a member of this office."
            case DecisionReason.ROLE:
                return f"Allowed by the {_role_name(self.role)} role."
            case DecisionReason.VIEW_OVERRIDE:
                return f"Allowed by the '{self.resource.value}' view override."
            case _:
                return (
                    f"Denied: the {_role_name(self.role)} role lacks "
                    f"'{self.action.value}' on '{self.resource.value}'."
                )


def _role_name(role: Role | None) -> str:
    return role.value if role else "unknown"


def role_allows(
    role: Role,
    resource: Resource,
    action: Action,
    permissions: MemberPermissions | None = None,
) -> DecisionReason:
    """Evaluate the role and override rules for a known member.

    Returns ``ROLE``, ``VIEW_OVERRIDE`` or ``DENIED_BY_ROLE``.
    """
    if action in matrix_actions(role, resource):
        return DecisionReason.ROLE
    if (
        action is Action.VIEW
        and permissions is not None
        and resource in OVERRIDABLE_RESOURCES
        and permissions.grants_view(resource)
    ):
        return DecisionReason.VIEW_OVERRIDE
    return DecisionReason.DENIED_BY_ROLE


def decide(
    actor: Actor | None,
    office: OfficeSnapshot | None,
    resource: Resource,
    action: Action,
) -> AccessDecision:
    """Decide whether ``actor`` may perform ``action`` on ``resource`` in ``office``."""
    if actor is None:
        return AccessDecision(False, DecisionReason.UNAUTHENTICATED, resource, action)
    if office is None:
        return AccessDecision(False, DecisionReason.NO_OFFICE, resource, action)

    # Owners can never be locked out of their own office
    if office.owner_id == actor.id:
        return AccessDecision(True, DecisionReason.OWNER, resource, action)

    membership = resolve_membership(actor, office)
    if membership is None:
        return AccessDecision(False, DecisionReason.NOT_A_MEMBER, resource, action)

    reason = role_allows(membership.role, resource, action, membership.permissions)
    return AccessDecision(
        allowed=reason is not DecisionReason.DENIED_BY_ROLE,
        reason=reason,
        resource=resource,
        action=action,
        role=membership.role,
    )


def can(
    actor: Actor | None,
    office: OfficeSnapshot | None,
    resource: Resource,
    action: Action,
) -> bool:
    """Return True if the action is permitted. Denial is a value, not an error."""
    return decide(actor, office, resource, action).allowed


def explain(
    actor: Actor | None,
    office: OfficeSnapshot | None,
    resource: Resource,
    action: Action,
) -> str:
    """Explain the decision ``can`` would make for the same inputs."""
    return decide(actor, office, resource, action).describe()


def allowed_actions(
    actor: Actor | None,
    office: OfficeSnapshot | None,
    resource: Resource,
) -> frozenset[Action]:
    """All actions the actor may perform on ``resource``."""
    return frozenset(action for action in Action if can(actor, office, resource, action))


class PermissionChecker:
    """Access checks bound to one actor and office.

    Memoises decisions per (resource, action). Create one per request or
    render cycle; it does not observe later membership changes.
    """

    def __init__(self, actor: Actor | None, office: OfficeSnapshot | None) -> None:
        self.actor = actor
        self.office = office
        self._decisions: dict[tuple[Resource, Action], AccessDecision] = {}

    def decide(self, resource: Resource, action: Action) -> AccessDecision:
        key = (resource, action)
        decision = self._decisions.get(key)
        if decision is None:
            decision = decide(self.actor, self.office, resource, action)
            self._decisions[key] = decision
        return decision

    def can(self, resource: Resource, action: Action) -> bool:
        return self.decide(resource, action).allowed

    def explain(self, resource: Resource, action: Action) -> str:
        return self.decide(resource, action).describe()

    def has_any(self, permissions: list[tuple[Resource, Action]]) -> bool:
        """True if at least one (resource, action) pair is allowed."""
        return any(self.can(resource, action) for resource, action in permissions)

    def has_all(self, permissions: list[tuple[Resource, Action]]) -> bool:
        """True if every (resource, action) pair is allowed."""
        return all(self.can(resource, action) for resource, action in permissions)
