"""Email delivery through an HTTP email API.

Speaks the Resend ``POST /emails`` protocol. Sending never raises:
delivery problems come back as a failed ``EmailResult`` and are logged,
so email trouble can never undo the change that triggered it.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from promption.config import settings
from promption.core.email.templates import EmailTemplate, render


logger = structlog.get_logger()


@dataclass(frozen=True)
class EmailResult:
    """Outcome of a send attempt."""

    success: bool
    message_id: str | None = None
    error: str | None = None


class EmailDispatcher:
    """Client for the transactional email API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        from_address: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.email_api_key
        self.base_url = base_url or settings.email_api_base_url
        self.from_address = from_address or settings.email_from
        self.timeout = timeout or settings.email_timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        to: str,
        template_id: EmailTemplate | str,
        template_data: dict[str, Any],
    ) -> EmailResult:
        """Render and send one email.

        Args:
            to: Recipient address
            template_id: Which template to render
            template_data: Values for the template

        Returns:
            Success with the provider message id, or failure with a reason
        """
        if not self.enabled:
            logger.info("email_disabled", to=to, template=str(template_id))
            return EmailResult(success=False, error="email_disabled")

        try:
            rendered = render(EmailTemplate(template_id), template_data)
        except (TypeError, ValueError) as e:
            logger.error("email_render_failed", template=str(template_id), error=str(e))
            return EmailResult(success=False, error="render_failed")

        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": rendered.subject,
            "html": rendered.html,
            "text": rendered.text,
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers={"Authorization": f"Bearer {self.api_key}"},
            ) as client:
                response = await client.post("/emails", json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "email_send_rejected",
                to=to,
                status_code=e.response.status_code,
            )
            return EmailResult(success=False, error=f"http_{e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("email_send_failed", to=to, error=str(e))
            return EmailResult(success=False, error="transport_error")

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        logger.info("email_sent", to=to, template=str(template_id), message_id=message_id)
        return EmailResult(success=True, message_id=message_id)
