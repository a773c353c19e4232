"""Notifications module - per-user event inbox."""

from promption.modules.notifications.routes import router


__all__ = ["router"]
