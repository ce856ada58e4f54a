"""Domain services."""

from guichet.domain.services.permission_scoper import (
    PermissionScoper,
    ScopedPermissions,
)

__all__ = ["PermissionScoper", "ScopedPermissions"]
