"""Members module - role changes, removal and ownership transfer."""

from promption.modules.members.routes import router


__all__ = ["router"]
