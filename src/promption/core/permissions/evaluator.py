"""Permission evaluation for workspace roles.

Every check here is a pure function of roles and actions. Values outside
the closed role and action sets are denied rather than raising, so a
stale or corrupted role can never grant access.
"""

from typing import Any

from promption.core.errors import ForbiddenError, ValidationError
from promption.core.permissions.roles import (
    ROLE_PERMISSIONS,
    ROLE_RANKS,
    WorkspaceAction,
    WorkspaceRole,
)


def _as_role(value: Any) -> WorkspaceRole | None:
    try:
        return WorkspaceRole(value)
    except ValueError:
        return None


def _as_action(value: Any) -> WorkspaceAction | None:
    try:
        return WorkspaceAction(value)
    except ValueError:
        return None


def parse_role(value: Any) -> WorkspaceRole:
    """Coerce input to a WorkspaceRole.

    Args:
        value: A role name such as ``"editor"``

    Returns:
        The matching role

    Raises:
        ValidationError: If the value is not a known role
    """
    role = _as_role(value)
    if role is None:
        raise ValidationError(
            f"Unknown role: {value!r}",
            error_code="invalid_role",
            errors=[{"field": "role", "message": "Unknown role"}],
        )
    return role


def role_rank(role: WorkspaceRole | str) -> int:
    """Return the privilege rank of a role.

    Viewer < Editor < Admin < Owner. Unknown roles rank 0, below every
    real role.
    """
    known = _as_role(role)
    return ROLE_RANKS[known] if known else 0


def has_permission(role: WorkspaceRole | str, action: WorkspaceAction | str) -> bool:
    """Check whether a role grants an action.

    Args:
        role: The member's role
        action: The action being attempted

    Returns:
        True if allowed; False for denied, unknown roles or unknown actions
    """
    known_role = _as_role(role)
    known_action = _as_action(action)
    if known_role is None or known_action is None:
        return False
    return known_action in ROLE_PERMISSIONS[known_role]


def can_perform_action(
    acting_role: WorkspaceRole | str,
    target_role: WorkspaceRole | str,
    action: WorkspaceAction | str,
    new_role: WorkspaceRole | str | None = None,
) -> bool:
    """Check whether one member may act on another.

    The acting role must grant ``action``, the target must rank strictly
    below the actor, and any role being assigned must also rank strictly
    below the actor. An Owner therefore manages everyone else but can
    never hand out Owner; that only happens through ownership transfer.

    Args:
        acting_role: Role of the member performing the action
        target_role: Current role of the member being acted upon
        action: The action being attempted
        new_role: Role being assigned, for role changes

    Returns:
        True if the action is allowed
    """
    if not has_permission(acting_role, action):
        return False

    acting_rank = role_rank(acting_role)
    if role_rank(target_role) >= acting_rank:
        return False

    if new_role is not None:
        new_rank = role_rank(new_role)
        if new_rank == 0 or new_rank >= acting_rank:
            return False

    return True


def require_permission(
    role: WorkspaceRole | str | None,
    action: WorkspaceAction,
) -> None:
    """Raise unless ``role`` grants ``action``.

    Args:
        role: The member's role, or None for non-members
        action: The action being attempted

    Raises:
        ForbiddenError: If the action is not allowed
    """
    if role is None or not has_permission(role, action):
        raise ForbiddenError(
            "You do not have permission to perform this action",
            error_code="permission_denied",
            details={"required_permission": action.value},
        )


def permission_map(role: WorkspaceRole | str) -> dict[WorkspaceAction, bool]:
    """List every action with whether ``role`` grants it."""
    return {action: has_permission(role, action) for action in WorkspaceAction}
