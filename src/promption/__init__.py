"""Promption - shared prompt libraries organised into workspaces."""

__version__ = "0.1.0"
