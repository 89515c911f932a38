"""Role-based permission system.

The matrix lives in ``models``; access decisions in ``checker``.
"""

from juris.core.permissions.models import (
    OVERRIDABLE_RESOURCES,
    PERMISSION_MATRIX,
    Action,
    Resource,
    Role,
    matrix_actions,
)


__all__ = [
    "OVERRIDABLE_RESOURCES",
    "PERMISSION_MATRIX",
    "Action",
    "Resource",
    "Role",
    "matrix_actions",
]
