"""Categories module - prompt folders within a workspace."""

from promption.modules.categories.routes import router


__all__ = ["router"]
