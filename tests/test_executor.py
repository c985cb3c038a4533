"""
Tribunal - Resolution Executor Tests
====================================

Tests for mapping resolutions to moderation calls.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import discord
import pytest

from tribunal.core.errors import ResolutionExecutionError
from tribunal.services.escalation.executor import ResolutionExecutor

from conftest import make_http_error


ESCALATION = {"id": "esc-1"}


class TestResolutionExecutor:
    """Tests for ResolutionExecutor.execute()."""

    @pytest.mark.asyncio
    async def test_track_does_nothing(self, reported_member):
        await ResolutionExecutor().execute("track", ESCALATION, reported_member)
        reported_member.timeout.assert_not_called()
        reported_member.kick.assert_not_called()
        reported_member.ban.assert_not_called()
        reported_member.add_roles.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout_uses_configured_hours(self, reported_member):
        await ResolutionExecutor(timeout_hours=12).execute("timeout", ESCALATION, reported_member)
        reported_member.timeout.assert_awaited_once_with(timedelta(hours=12), reason="voted resolution")

    @pytest.mark.asyncio
    async def test_kick(self, reported_member):
        await ResolutionExecutor().execute("kick", ESCALATION, reported_member)
        reported_member.kick.assert_awaited_once_with(reason="voted resolution")

    @pytest.mark.asyncio
    async def test_ban(self, reported_member):
        await ResolutionExecutor(reason="custom").execute("ban", ESCALATION, reported_member)
        reported_member.ban.assert_awaited_once_with(reason="custom")

    @pytest.mark.asyncio
    async def test_restrict_adds_role(self, reported_member, mock_guild):
        role = MagicMock(id=515151)
        mock_guild.get_role.return_value = role

        await ResolutionExecutor().execute("restrict", ESCALATION, reported_member, restricted_role_id=515151)

        mock_guild.get_role.assert_called_once_with(515151)
        reported_member.add_roles.assert_awaited_once_with(role, reason="voted resolution")

    @pytest.mark.asyncio
    async def test_restrict_without_role_fails(self, reported_member, mock_guild):
        with pytest.raises(ResolutionExecutionError) as exc_info:
            await ResolutionExecutor().execute("restrict", ESCALATION, reported_member)
        assert exc_info.value.resolution == "restrict"
        reported_member.add_roles.assert_not_called()

    @pytest.mark.asyncio
    async def test_discord_failure_is_wrapped(self, reported_member):
        error = make_http_error(discord.Forbidden, 403, "Forbidden", "Missing Permissions")
        reported_member.ban.side_effect = error

        with pytest.raises(ResolutionExecutionError) as exc_info:
            await ResolutionExecutor().execute("ban", ESCALATION, reported_member)
        assert exc_info.value.cause is error
        assert exc_info.value.escalation_id == "esc-1"
