"""Invitation maintenance jobs."""

from datetime import UTC, datetime
from typing import Any

import structlog

from promption.modules.invitations.repos import InvitationRepository


log = structlog.get_logger()


async def expire_stale_invitations(ctx: dict[str, Any]) -> dict[str, int]:
    """Mark every pending invitation past its expiry as expired.

    Args:
        ctx: Worker context containing the database session factory

    Returns:
        Dict with the number of invitations expired
    """
    session_factory = ctx["db_session_factory"]
    now = datetime.now(UTC)

    async with session_factory() as session:
        expired = await InvitationRepository(session).expire_stale(now)
        await session.commit()

    log.info("expire_stale_invitations_complete", expired=expired)
    return {"expired": expired}
