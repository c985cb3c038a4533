"""
Tribunal - Escalation View Tests
================================

Tests for vote buttons, their custom ids and callbacks.

Views need a running event loop, so these tests are async.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from tribunal.core.errors import NotAuthorizedError, ResolutionExecutionError
from tribunal.services.escalation.handlers import VoteOutcome
from tribunal.services.escalation.settings import GuildSettings
from tribunal.services.escalation.views import (
    EscalateButton,
    ExpediteButton,
    VoteButton,
    build_confirmed_view,
    build_escalation_controls_view,
    build_vote_view,
    render_vote_outcome,
    setup_escalation_views,
)
from tribunal.services.escalation.voting import tally_votes


ESCALATION = {
    "id": "esc-1",
    "initiator_id": 111,
    "reported_user_id": 222,
    "created_at": 1000.0,
    "scheduled_for": 87400.0,
    "voting_strategy": "simple",
}


def _tally(*pairs):
    return tally_votes([{"voter_id": voter, "vote": vote} for voter, vote in pairs])


def _buttons(view):
    return [child.item for child in view.children]


class TestBuildVoteView:
    """Tests for build_vote_view()."""

    @pytest.mark.asyncio
    async def test_button_order_without_restrict(self):
        view = build_vote_view(ESCALATION, _tally(), restrict_enabled=False)
        ids = [child.custom_id for child in view.children]
        assert ids == [
            "esc_vote:track:esc-1",
            "esc_vote:timeout:esc-1",
            "esc_vote:kick:esc-1",
            "esc_vote:ban:esc-1",
            "esc_escalate:222:1:esc-1",
        ]

    @pytest.mark.asyncio
    async def test_restrict_offered_when_enabled(self):
        view = build_vote_view(ESCALATION, _tally(), restrict_enabled=True)
        assert "esc_vote:restrict:esc-1" in [child.custom_id for child in view.children]

    @pytest.mark.asyncio
    async def test_labels_show_counts_and_styles(self):
        view = build_vote_view(ESCALATION, _tally((1, "ban"), (2, "ban")), restrict_enabled=False)
        buttons = {button.custom_id: button for button in _buttons(view)}

        assert buttons["esc_vote:ban:esc-1"].label == "Ban (2)"
        assert buttons["esc_vote:ban:esc-1"].style is discord.ButtonStyle.danger
        assert buttons["esc_vote:track:esc-1"].label == "No action (abstain)"
        assert buttons["esc_vote:track:esc-1"].style is discord.ButtonStyle.success
        assert buttons["esc_escalate:222:1:esc-1"].label == "Require majority vote"

    @pytest.mark.asyncio
    async def test_tiebreak_disables_untied_options(self):
        view = build_vote_view(ESCALATION, _tally((1, "kick"), (2, "ban")), False, tiebreak=True)
        disabled = {button.custom_id for button in _buttons(view) if button.disabled}
        assert disabled == {"esc_vote:track:esc-1", "esc_vote:timeout:esc-1"}

    @pytest.mark.asyncio
    async def test_disabled_view(self):
        view = build_vote_view(ESCALATION, _tally(), False, disabled=True)
        assert all(button.disabled for button in _buttons(view))

    @pytest.mark.asyncio
    async def test_majority_hides_escalate_button(self):
        escalation = {**ESCALATION, "voting_strategy": "majority"}
        view = build_vote_view(escalation, _tally(), False)
        assert not any(child.custom_id.startswith("esc_escalate") for child in view.children)

    @pytest.mark.asyncio
    async def test_confirmed_view_has_expedite_only(self):
        view = build_confirmed_view(ESCALATION)
        assert [child.custom_id for child in view.children] == ["esc_expedite:esc-1"]


class TestCustomIds:
    """Tests for restoring buttons from their custom ids."""

    @pytest.mark.asyncio
    async def test_vote_button_round_trip(self):
        match = VoteButton.__discord_ui_compiled_template__.fullmatch("esc_vote:kick:esc-9")
        button = await VoteButton.from_custom_id(MagicMock(), MagicMock(), match)
        assert button.resolution == "kick"
        assert button.escalation_id == "esc-9"

    @pytest.mark.asyncio
    async def test_escalate_button_levels(self):
        match = EscalateButton.__discord_ui_compiled_template__.fullmatch("esc_escalate:222:0:esc-9")
        button = await EscalateButton.from_custom_id(MagicMock(), MagicMock(), match)
        assert button.level == 0
        assert button.reported_user_id == 222
        assert button.item.label == "Escalate"

    @pytest.mark.asyncio
    async def test_controls_view_mints_matching_id(self):
        view = build_escalation_controls_view(222)
        (button,) = view.children
        match = EscalateButton.__discord_ui_compiled_template__.fullmatch(button.custom_id)
        assert match is not None
        assert match.group("level") == "0"
        assert match.group("user_id") == "222"

    @pytest.mark.asyncio
    async def test_controls_view_keeps_given_id(self):
        view = build_escalation_controls_view(222, "esc-7")
        assert view.children[0].custom_id == "esc_escalate:222:0:esc-7"

    @pytest.mark.asyncio
    async def test_expedite_template(self):
        assert ExpediteButton.__discord_ui_compiled_template__.fullmatch("esc_expedite:esc-9")

    def test_setup_registers_dynamic_items(self):
        bot = MagicMock()
        setup_escalation_views(bot)
        bot.add_dynamic_items.assert_called_once_with(VoteButton, ExpediteButton, EscalateButton)


class TestRenderVoteOutcome:
    """Tests for render_vote_outcome()."""

    def _outcome(self, tally, early=False, strategy="simple"):
        return VoteOutcome(
            escalation=ESCALATION,
            tally=tally,
            is_new=True,
            quorum=2,
            strategy=strategy,
            settings=GuildSettings(guild_id=1, quorum=2),
            early=early,
        )

    @pytest.mark.asyncio
    async def test_below_quorum_shows_vote_message(self):
        content, view = render_vote_outcome(self._outcome(_tally((1, "ban"))))
        assert "quorum at 2" in content
        assert len(view.children) == 5

    @pytest.mark.asyncio
    async def test_confirmed_leader(self):
        content, view = render_vote_outcome(self._outcome(_tally((1, "ban"), (2, "ban")), early=True))
        assert content.startswith("**Ban** ✅")
        assert [child.custom_id for child in view.children] == ["esc_expedite:esc-1"]

    @pytest.mark.asyncio
    async def test_tie_at_quorum_shows_tiebreak(self):
        tally = _tally((1, "ban"), (2, "kick"), (3, "ban"), (4, "kick"))
        content, view = render_vote_outcome(self._outcome(tally, early=True))
        assert "Waiting for tiebreaker" in content
        assert any(button.disabled for button in _buttons(view))


class TestVoteButtonCallback:
    """Tests for VoteButton.callback()."""

    @pytest.mark.asyncio
    async def test_error_answered_ephemerally(self, mock_interaction):
        handlers = MagicMock()
        handlers.vote = AsyncMock(side_effect=NotAuthorizedError(operation="vote", user_id=999))
        mock_interaction.client.escalation_handlers = handlers

        await VoteButton("ban", "esc-1").callback(mock_interaction)

        mock_interaction.response.defer.assert_awaited_once()
        mock_interaction.followup.send.assert_awaited_once_with(
            content="Only moderators can vote on escalations.", ephemeral=True,
        )
        mock_interaction.edit_original_response.assert_not_called()

    @pytest.mark.asyncio
    async def test_updates_message_when_not_processed(self, mock_interaction):
        outcome = VoteOutcome(
            escalation=ESCALATION,
            tally=_tally((201, "ban")),
            is_new=True,
            quorum=3,
            strategy="simple",
            settings=GuildSettings(guild_id=1, quorum=3),
        )
        handlers = MagicMock()
        handlers.vote = AsyncMock(return_value=outcome)
        mock_interaction.client.escalation_handlers = handlers

        await VoteButton("ban", "esc-1").callback(mock_interaction)

        handlers.vote.assert_awaited_once_with(
            "esc-1", mock_interaction.user, "ban", vote_message=mock_interaction.message,
        )
        kwargs = mock_interaction.edit_original_response.await_args.kwargs
        assert "-# • Ban: <@201>" in kwargs["content"]
        mock_interaction.followup.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_processing_error_reported(self, mock_interaction):
        outcome = VoteOutcome(
            escalation=ESCALATION,
            tally=_tally((201, "ban")),
            is_new=True,
            quorum=1,
            strategy="simple",
            settings=GuildSettings(guild_id=1, quorum=1),
            early=True,
            error=ResolutionExecutionError(escalation_id="esc-1", resolution="ban"),
        )
        handlers = MagicMock()
        handlers.vote = AsyncMock(return_value=outcome)
        mock_interaction.client.escalation_handlers = handlers

        await VoteButton("ban", "esc-1").callback(mock_interaction)

        mock_interaction.edit_original_response.assert_awaited_once()
        message = mock_interaction.followup.send.await_args.kwargs["content"]
        assert "retried automatically" in message


class TestEscalateButtonCallback:
    """Tests for EscalateButton.callback()."""

    @pytest.mark.asyncio
    async def test_level_zero_starts_vote(self, mock_interaction):
        handlers = MagicMock()
        handlers.start = AsyncMock(return_value=({"id": "esc-1"}, True))
        mock_interaction.client.escalation_handlers = handlers

        await EscalateButton(222, 0, "esc-1").callback(mock_interaction)

        handlers.start.assert_awaited_once_with(
            mock_interaction.channel, mock_interaction.user, 222, escalation_id="esc-1",
        )
        assert mock_interaction.followup.send.await_args.kwargs["content"] == "Escalation started"

    @pytest.mark.asyncio
    async def test_level_one_upgrades(self, mock_interaction):
        escalation = {**ESCALATION, "voting_strategy": "majority"}
        handlers = MagicMock()
        handlers.upgrade = AsyncMock(return_value=(escalation, _tally(), GuildSettings(guild_id=1, quorum=3)))
        handlers.service.quorum_of = MagicMock(return_value=3)
        mock_interaction.client.escalation_handlers = handlers

        await EscalateButton(222, 1, "esc-1").callback(mock_interaction)

        content = mock_interaction.message.edit.await_args.kwargs["content"]
        assert "(majority)" in content
        assert mock_interaction.followup.send.await_args.kwargs["content"] == (
            "Escalation upgraded to majority voting"
        )
