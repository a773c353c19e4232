"""Users module - local accounts mapped from auth provider subjects."""

from promption.modules.users.routes import router


__all__ = ["router"]
