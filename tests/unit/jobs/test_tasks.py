"""Unit tests for background job tasks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from promption.core.email import EmailResult
from promption.core.jobs.tasks import expire_stale_invitations, send_email


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_uses_worker_dispatcher(self):
        dispatcher = MagicMock()
        dispatcher.send = AsyncMock(
            return_value=EmailResult(success=True, message_id="msg_1")
        )

        result = await send_email(
            {"email_dispatcher": dispatcher},
            to="bob@example.com",
            template_id="workspace_invitation",
            template_data={"workspace_name": "Acme"},
        )

        assert result == {"success": True, "message_id": "msg_1", "error": None}
        dispatcher.send.assert_awaited_once_with(
            "bob@example.com", "workspace_invitation", {"workspace_name": "Acme"}
        )

    @pytest.mark.asyncio
    async def test_failure_is_returned_not_raised(self):
        with patch(
            "promption.core.jobs.tasks.email.EmailDispatcher.send",
            new_callable=AsyncMock,
            return_value=EmailResult(success=False, error="http_500"),
        ):
            result = await send_email(
                {},
                to="bob@example.com",
                template_id="workspace_invitation",
                template_data={},
            )

        assert result["success"] is False
        assert result["error"] == "http_500"


class TestExpireStaleInvitations:
    @pytest.mark.asyncio
    async def test_expires_and_commits(self):
        session = AsyncMock()
        session_factory = MagicMock()
        session_factory.return_value.__aenter__ = AsyncMock(return_value=session)
        session_factory.return_value.__aexit__ = AsyncMock(return_value=None)

        with patch(
            "promption.core.jobs.tasks.invitations.InvitationRepository"
        ) as mock_repo:
            mock_repo.return_value.expire_stale = AsyncMock(return_value=3)

            result = await expire_stale_invitations({"db_session_factory": session_factory})

        assert result == {"expired": 3}
        mock_repo.assert_called_once_with(session)
        session.commit.assert_awaited_once()
