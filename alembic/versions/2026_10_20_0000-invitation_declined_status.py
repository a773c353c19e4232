"""invitation_declined_status

Revision ID: 0002_invitation_declined
Revises: 0001_initial
Create Date: 2026-10-20 00:00:00.000000

Invitees may now decline an invitation. Restricts ``invitations.status``
to the known lifecycle states, including the new ``declined``.
"""

from collections.abc import Sequence

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_invitation_declined"
down_revision: str | None = "0001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_check_constraint(
        "ck_invitations_status",
        "invitations",
        "status IN ('pending', 'accepted', 'expired', 'revoked', 'declined')",
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.execute("UPDATE invitations SET status = 'revoked' WHERE status = 'declined'")
    op.drop_constraint("ck_invitations_status", "invitations", type_="check")
