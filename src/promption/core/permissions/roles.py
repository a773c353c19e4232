"""Workspace roles, actions and the fixed role/permission table."""

import enum


class WorkspaceRole(str, enum.Enum):
    """Role of a member within a workspace, from most to least privileged."""

    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class WorkspaceAction(str, enum.Enum):
    """Actions gated by a member's role."""

    # Workspace
    VIEW_WORKSPACE = "view_workspace"
    MANAGE_WORKSPACE = "manage_workspace"
    EDIT_WORKSPACE_SETTINGS = "edit_workspace_settings"
    DELETE_WORKSPACE = "delete_workspace"

    # Members
    INVITE_MEMBERS = "invite_members"
    REMOVE_MEMBERS = "remove_members"
    CHANGE_ROLES = "change_roles"

    # Content
    CREATE_PROMPTS = "create_prompts"
    EDIT_ALL_PROMPTS = "edit_all_prompts"
    DELETE_ALL_PROMPTS = "delete_all_prompts"
    CREATE_CATEGORIES = "create_categories"
    MANAGE_CATEGORIES = "manage_categories"

    # System
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_DATA = "export_data"


# Higher rank means more privilege; unknown roles rank 0
ROLE_RANKS: dict[WorkspaceRole, int] = {
    WorkspaceRole.VIEWER: 1,
    WorkspaceRole.EDITOR: 2,
    WorkspaceRole.ADMIN: 3,
    WorkspaceRole.OWNER: 4,
}

ROLE_PERMISSIONS: dict[WorkspaceRole, frozenset[WorkspaceAction]] = {
    WorkspaceRole.OWNER: frozenset(WorkspaceAction),
    WorkspaceRole.ADMIN: frozenset(WorkspaceAction)
    - {WorkspaceAction.MANAGE_WORKSPACE, WorkspaceAction.DELETE_WORKSPACE},
    WorkspaceRole.EDITOR: frozenset(
        {
            WorkspaceAction.VIEW_WORKSPACE,
            WorkspaceAction.CREATE_PROMPTS,
            WorkspaceAction.EDIT_ALL_PROMPTS,
            WorkspaceAction.CREATE_CATEGORIES,
        }
    ),
    WorkspaceRole.VIEWER: frozenset({WorkspaceAction.VIEW_WORKSPACE}),
}
