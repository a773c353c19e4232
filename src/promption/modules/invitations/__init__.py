"""Invitations module - invitation lifecycle for workspace membership."""

from promption.modules.invitations.routes import router


__all__ = ["router"]
