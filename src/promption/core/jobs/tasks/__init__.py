"""Background job tasks.

Each task module defines async functions registered with the worker.
"""

from promption.core.jobs.tasks.email import send_email
from promption.core.jobs.tasks.invitations import expire_stale_invitations


__all__ = [
    "expire_stale_invitations",
    "send_email",
]
