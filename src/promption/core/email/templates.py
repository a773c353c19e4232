"""Transactional email templates.

Templates are plain format strings. Every interpolated value is HTML
escaped before it reaches the HTML body.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from html import escape
from typing import Any


class EmailTemplate(str, Enum):
    """Identifiers of the emails this service can send."""

    WORKSPACE_INVITATION = "workspace_invitation"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class WorkspaceInvitationData:
    """Values substituted into the workspace invitation email."""

    workspace_name: str
    inviter_name: str
    inviter_email: str
    role: str
    invitation_url: str
    expires_in_days: int
    message: str | None = None


WORKSPACE_INVITATION_SUBJECT = "Invitation to join {workspace_name} on Promption"

WORKSPACE_INVITATION_HTML = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .button {{ display: inline-block; padding: 12px 24px; background-color: #4f46e5; color: white; text-decoration: none; border-radius: 6px; }}
        .note {{ border-left: 3px solid #ddd; padding-left: 12px; color: #555; }}
        .footer {{ margin-top: 40px; font-size: 12px; color: #666; }}
    </style>
</head>
<body>
    <div class="container">
        <p>Hi,</p>
        <p><strong>{inviter_name}</strong> ({inviter_email}) has invited you to join <strong>{workspace_name}</strong> on Promption as <strong>{role}</strong>.</p>
        {message_block}
        <p><a href="{invitation_url}" class="button">Accept Invitation</a></p>
        <p>This invitation expires in {expires_in_days} days.</p>
        <p>If you weren't expecting this invitation, you can safely ignore this email.</p>
        <div class="footer">
            <p>This email was sent by Promption.</p>
        </div>
    </div>
</body>
</html>
"""

WORKSPACE_INVITATION_TEXT = """
Hi,

{inviter_name} ({inviter_email}) has invited you to join {workspace_name} on Promption as {role}.
{message_block}
Accept Invitation: {invitation_url}

This invitation expires in {expires_in_days} days.

If you weren't expecting this invitation, you can safely ignore this email.
"""


def render_workspace_invitation(data: WorkspaceInvitationData) -> RenderedEmail:
    """Render the invitation email in HTML and plain text.

    Args:
        data: Invitation details

    Returns:
        Subject, HTML body and text body
    """
    values = asdict(data)
    message = values.pop("message")
    html_values = {key: escape(str(value)) for key, value in values.items()}

    html = WORKSPACE_INVITATION_HTML.format(
        message_block=f'<p class="note">{escape(message)}</p>' if message else "",
        **html_values,
    )
    text = WORKSPACE_INVITATION_TEXT.format(
        message_block=f"\n\"{message}\"\n" if message else "",
        **values,
    )
    return RenderedEmail(
        subject=WORKSPACE_INVITATION_SUBJECT.format(workspace_name=data.workspace_name),
        html=html,
        text=text,
    )


def render(template: EmailTemplate, template_data: dict[str, Any]) -> RenderedEmail:
    """Render a template from its identifier and raw data.

    Raises:
        TypeError: If ``template_data`` does not fit the template
        ValueError: If the template is unknown
    """
    if template == EmailTemplate.WORKSPACE_INVITATION:
        return render_workspace_invitation(WorkspaceInvitationData(**template_data))
    raise ValueError(f"Unknown email template: {template}")
