"""Closed role/resource/action sets and the permission matrix.

The matrix is exhaustive over ``Role x Resource``: an empty set is an
explicit "no access" entry, never a missing key. It is validated at
import time so an unhandled member of any enum fails loudly instead of
silently denying.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType


class Role(str, Enum):
    """Job function of an office member."""

    ADMIN = "Admin"
    LAWYER = "Lawyer"
    INTERN = "Intern"
    FINANCE = "Finance"


class Resource(str, Enum):
    """Record families guarded by the matrix."""

    FINANCIAL = "financial"
    CASES = "cases"
    CLIENTS = "clients"
    DOCUMENTS = "documents"
    SETTINGS = "settings"
    TEAM = "team"


class Action(str, Enum):
    """Operations on a resource."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    EXPORT = "export"


# Resources with a per-member view override flag. Clients and team have none.
OVERRIDABLE_RESOURCES: frozenset[Resource] = frozenset(
    {Resource.FINANCIAL, Resource.CASES, Resource.DOCUMENTS, Resource.SETTINGS}
)


def _actions(*actions: Action) -> frozenset[Action]:
    return frozenset(actions)


_ALL = _actions(Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.EXPORT)
_NONE: frozenset[Action] = frozenset()


PERMISSION_MATRIX: Mapping[Role, Mapping[Resource, frozenset[Action]]] = MappingProxyType(
    {
        Role.ADMIN: MappingProxyType(
            {
                Resource.FINANCIAL: _ALL,
                Resource.CASES: _ALL,
                Resource.CLIENTS: _ALL,
                Resource.DOCUMENTS: _ALL,
                Resource.SETTINGS: _actions(Action.VIEW, Action.EDIT),
                Resource.TEAM: _actions(
                    Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE
                ),
            }
        ),
        Role.LAWYER: MappingProxyType(
            {
                Resource.FINANCIAL: _actions(Action.VIEW),
                Resource.CASES: _actions(
                    Action.VIEW, Action.CREATE, Action.EDIT, Action.EXPORT
                ),
                Resource.CLIENTS: _actions(
                    Action.VIEW, Action.CREATE, Action.EDIT, Action.EXPORT
                ),
                Resource.DOCUMENTS: _actions(Action.VIEW, Action.CREATE, Action.EDIT),
                Resource.SETTINGS: _NONE,
                Resource.TEAM: _actions(Action.VIEW),
            }
        ),
        Role.INTERN: MappingProxyType(
            {
                Resource.FINANCIAL: _NONE,
                Resource.CASES: _actions(Action.VIEW, Action.CREATE),
                Resource.CLIENTS: _actions(Action.VIEW),
                Resource.DOCUMENTS: _actions(Action.VIEW, Action.CREATE),
                Resource.SETTINGS: _NONE,
                Resource.TEAM: _NONE,
            }
        ),
        Role.FINANCE: MappingProxyType(
            {
                Resource.FINANCIAL: _ALL,
                Resource.CASES: _actions(Action.VIEW),
                Resource.CLIENTS: _actions(Action.VIEW),
                Resource.DOCUMENTS: _actions(Action.VIEW),
                Resource.SETTINGS: _NONE,
                Resource.TEAM: _NONE,
            }
        ),
    }
)


def _validate_matrix() -> None:
    """Fail at import if any (role, resource) pair lacks an explicit entry."""
    for role in Role:
        entries = PERMISSION_MATRIX.get(role)
        if entries is None:
            raise RuntimeError(f"Permission matrix has no entry for role {role.value}")
        missing = [resource.value for resource in Resource if resource not in entries]
        if missing:
            raise RuntimeError(
                f"Permission matrix for role {role.value} is missing: {', '.join(missing)}"
            )


_validate_matrix()


def matrix_actions(role: Role, resource: Resource) -> frozenset[Action]:
    """Return the baseline actions a role has on a resource."""
    return PERMISSION_MATRIX[role][resource]
