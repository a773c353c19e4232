"""Workspaces module - tenant containers and their memberships."""

from promption.modules.workspaces.routes import router


__all__ = ["router"]
