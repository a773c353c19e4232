"""Prompts module - prompt texts and templates."""

from promption.modules.prompts.routes import router


__all__ = ["router"]
