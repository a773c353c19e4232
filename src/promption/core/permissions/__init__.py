"""Role-based permissions for workspace members."""

from promption.core.permissions.evaluator import (
    can_perform_action,
    has_permission,
    parse_role,
    permission_map,
    require_permission,
    role_rank,
)
from promption.core.permissions.roles import (
    ROLE_PERMISSIONS,
    WorkspaceAction,
    WorkspaceRole,
)


__all__ = [
    "ROLE_PERMISSIONS",
    "WorkspaceAction",
    "WorkspaceRole",
    "can_perform_action",
    "has_permission",
    "parse_role",
    "permission_map",
    "require_permission",
    "role_rank",
]
