"""Background job processing with ARQ.

Invitation email is sent by the ``send_email`` job; stale invitations
are swept hourly by a cron job.
"""

from promption.core.jobs.registry import close_arq_pool, enqueue, init_arq_pool


__all__ = [
    "close_arq_pool",
    "enqueue",
    "init_arq_pool",
]
