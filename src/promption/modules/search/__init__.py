"""Search module - scoped keyword search."""

from promption.modules.search.routes import router


__all__ = ["router"]
