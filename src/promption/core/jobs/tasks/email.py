"""Email delivery job."""

from typing import Any

import structlog

from promption.core.email import EmailDispatcher


log = structlog.get_logger()


async def send_email(
    ctx: dict[str, Any],
    to: str,
    template_id: str,
    template_data: dict[str, Any],
) -> dict[str, Any]:
    """Send one transactional email.

    Delivery failures are reported in the result rather than raised, so
    the worker does not retry a message the email API rejected.

    Args:
        ctx: Worker context, optionally holding a shared ``email_dispatcher``
        to: Recipient address
        template_id: Template to render
        template_data: Values for the template

    Returns:
        Dict describing the outcome
    """
    dispatcher: EmailDispatcher = ctx.get("email_dispatcher") or EmailDispatcher()
    result = await dispatcher.send(to, template_id, template_data)

    log.info(
        "send_email_complete",
        template_id=template_id,
        success=result.success,
        message_id=result.message_id,
        error=result.error,
    )
    return {
        "success": result.success,
        "message_id": result.message_id,
        "error": result.error,
    }
