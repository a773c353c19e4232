"""Transactional email rendering and delivery."""

from promption.core.email.dispatcher import EmailDispatcher, EmailResult
from promption.core.email.templates import (
    EmailTemplate,
    RenderedEmail,
    WorkspaceInvitationData,
    render,
)


__all__ = [
    "EmailDispatcher",
    "EmailResult",
    "EmailTemplate",
    "RenderedEmail",
    "WorkspaceInvitationData",
    "render",
]
