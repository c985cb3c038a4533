"""
Tribunal - Escalation Views
===========================

Persistent buttons on vote messages.

DESIGN:
    Every button is a DynamicItem whose custom_id carries the escalation
    id, so votes keep working across restarts without re-registering a
    view per message:

        esc_vote:{resolution}:{escalation_id}
        esc_expedite:{escalation_id}
        esc_escalate:{reported_user_id}:{level}:{escalation_id}

    Callbacks reach the workflow through interaction.client, which is the
    TribunalBot holding the EscalationHandlers instance.
"""

import uuid
from typing import TYPE_CHECKING, Optional, Tuple

import discord

from tribunal.core.database import EscalationRecord
from tribunal.core.errors import ESCALATION_ERRORS, describe_error
from tribunal.core.logger import logger
from tribunal.services.escalation.constants import (
    Resolution,
    VotingStrategy,
    resolution_label,
    vote_options,
)
from tribunal.services.escalation.strings import (
    build_confirmed_message_content,
    build_vote_message_content,
)
from tribunal.services.escalation.voting import Tally
from tribunal.utils.interaction import safe_respond

if TYPE_CHECKING:
    from tribunal.bot import TribunalBot
    from tribunal.services.escalation.handlers import VoteOutcome


# =============================================================================
# Vote Button
# =============================================================================

class VoteButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=r"esc_vote:(?P<resolution>[a-z]+):(?P<escalation_id>[A-Za-z0-9-]+)",
):
    """Toggle this moderator's vote for one resolution."""

    def __init__(
        self,
        resolution: str,
        escalation_id: str,
        count: int = 0,
        disabled: bool = False,
    ):
        self.resolution = Resolution(resolution).value
        self.escalation_id = escalation_id

        style = discord.ButtonStyle.secondary
        if self.resolution == Resolution.BAN.value:
            style = discord.ButtonStyle.danger
        elif self.resolution == Resolution.TRACK.value:
            style = discord.ButtonStyle.success

        label = resolution_label(self.resolution)
        if count > 0:
            label = f"{label} ({count})"

        super().__init__(
            discord.ui.Button(
                label=label,
                style=style,
                custom_id=f"esc_vote:{self.resolution}:{escalation_id}",
                disabled=disabled,
                row=0,
            )
        )

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "VoteButton":
        return cls(match.group("resolution"), match.group("escalation_id"))

    async def callback(self, interaction: discord.Interaction) -> None:
        handlers = interaction.client.escalation_handlers
        await interaction.response.defer()

        try:
            outcome = await handlers.vote(
                self.escalation_id,
                interaction.user,
                self.resolution,
                vote_message=interaction.message,
            )
        except ESCALATION_ERRORS as e:
            await safe_respond(interaction, describe_error(e))
            return

        if outcome.processed is None:
            content, view = render_vote_outcome(outcome)
            try:
                await interaction.edit_original_response(content=content, view=view)
            except discord.HTTPException as e:
                logger.warning("Vote Message Update Failed", [
                    ("Escalation", self.escalation_id),
                    ("Error", str(e)[:100]),
                ])

        if outcome.error is not None:
            await safe_respond(interaction, describe_error(outcome.error))


# =============================================================================
# Expedite Button
# =============================================================================

class ExpediteButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=r"esc_expedite:(?P<escalation_id>[A-Za-z0-9-]+)",
):
    """Resolve now with the current leader (moderators only)."""

    def __init__(self, escalation_id: str, disabled: bool = False):
        self.escalation_id = escalation_id
        super().__init__(
            discord.ui.Button(
                label="Expedite",
                style=discord.ButtonStyle.primary,
                custom_id=f"esc_expedite:{escalation_id}",
                disabled=disabled,
            )
        )

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "ExpediteButton":
        return cls(match.group("escalation_id"))

    async def callback(self, interaction: discord.Interaction) -> None:
        handlers = interaction.client.escalation_handlers
        await interaction.response.defer()

        try:
            await handlers.expedite(
                self.escalation_id,
                interaction.user,
                vote_message=interaction.message,
            )
        except ESCALATION_ERRORS as e:
            await safe_respond(interaction, describe_error(e))


# =============================================================================
# Escalate Button
# =============================================================================

class EscalateButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=r"esc_escalate:(?P<user_id>[0-9]+):(?P<level>[0-9]+):(?P<escalation_id>[A-Za-z0-9-]+)",
):
    """
    Level 0 starts a vote on the user in this channel; level 1 or above
    switches an existing vote to majority voting.
    """

    def __init__(self, reported_user_id: int, level: int, escalation_id: str, disabled: bool = False):
        self.reported_user_id = int(reported_user_id)
        self.level = int(level)
        self.escalation_id = escalation_id
        super().__init__(
            discord.ui.Button(
                label="Require majority vote" if self.level >= 1 else "Escalate",
                style=discord.ButtonStyle.primary,
                custom_id=f"esc_escalate:{self.reported_user_id}:{self.level}:{escalation_id}",
                disabled=disabled,
                row=1,
            )
        )

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "EscalateButton":
        return cls(
            int(match.group("user_id")),
            int(match.group("level")),
            match.group("escalation_id"),
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        handlers = interaction.client.escalation_handlers
        await interaction.response.defer(ephemeral=True, thinking=True)

        try:
            if self.level >= 1:
                escalation, tally, settings = await handlers.upgrade(self.escalation_id, interaction.user)
                await interaction.message.edit(
                    content=build_vote_message_content(
                        escalation, tally,
                        quorum=handlers.service.quorum_of(escalation),
                        strategy=escalation["voting_strategy"],
                        moderator_role_id=settings.moderator_role_id,
                    ),
                    view=build_vote_view(escalation, tally, settings.restrict_enabled),
                )
                await safe_respond(interaction, "Escalation upgraded to majority voting")
            else:
                _, created = await handlers.start(
                    interaction.channel,
                    interaction.user,
                    self.reported_user_id,
                    escalation_id=self.escalation_id,
                )
                await safe_respond(
                    interaction,
                    "Escalation started" if created else "An escalation is already open for this user",
                )
        except ESCALATION_ERRORS as e:
            await safe_respond(interaction, describe_error(e))
        except discord.HTTPException as e:
            logger.error("Escalate Button Failed", [
                ("Escalation", self.escalation_id),
                ("Level", str(self.level)),
                ("Error", str(e)[:100]),
            ])
            await safe_respond(interaction, "Failed to update the escalation vote")


# =============================================================================
# View Builders
# =============================================================================

def build_vote_view(
    escalation: EscalationRecord,
    tally: Tally,
    restrict_enabled: bool,
    tiebreak: bool = False,
    disabled: bool = False,
) -> discord.ui.View:
    """
    Buttons for a vote message.

    Args:
        escalation: The escalation row.
        tally: Current tally (labels show counts).
        restrict_enabled: Offer the restrict option.
        tiebreak: Quorum reached with a tie; only tied options stay enabled.
        disabled: Escalation resolved; every button is disabled.
    """
    view = discord.ui.View(timeout=None)

    for resolution in vote_options(restrict_enabled):
        locked = tiebreak and tally.is_tied and resolution.value not in tally.tied_resolutions
        view.add_item(VoteButton(
            resolution.value,
            escalation["id"],
            count=tally.count(resolution),
            disabled=disabled or locked,
        ))

    if escalation.get("voting_strategy", VotingStrategy.SIMPLE.value) != VotingStrategy.MAJORITY.value:
        view.add_item(EscalateButton(
            escalation["reported_user_id"], 1, escalation["id"], disabled=disabled,
        ))

    return view


def build_escalation_controls_view(
    reported_user_id: int,
    escalation_id: Optional[str] = None,
) -> discord.ui.View:
    """
    Controls for a report thread: a single level-0 Escalate button.

    The escalation id is minted here and baked into the custom_id, so
    repeated clicks on the same controls message resolve to one vote.
    """
    view = discord.ui.View(timeout=None)
    view.add_item(EscalateButton(reported_user_id, 0, escalation_id or str(uuid.uuid4())))
    return view


def build_confirmed_view(escalation: EscalationRecord) -> discord.ui.View:
    """Quorum reached with a clear leader: only the expedite button remains."""
    view = discord.ui.View(timeout=None)
    view.add_item(ExpediteButton(escalation["id"]))
    return view


def render_vote_outcome(outcome: "VoteOutcome") -> Tuple[str, discord.ui.View]:
    """Content and buttons for the vote message after a vote that did not resolve it."""
    tally = outcome.tally
    if outcome.early and tally.leader is not None and not tally.is_tied:
        return (
            build_confirmed_message_content(outcome.escalation, tally.leader, tally),
            build_confirmed_view(outcome.escalation),
        )

    content = build_vote_message_content(
        outcome.escalation,
        tally,
        quorum=outcome.quorum,
        strategy=outcome.strategy,
        moderator_role_id=outcome.settings.moderator_role_id,
    )
    view = build_vote_view(
        outcome.escalation,
        tally,
        outcome.settings.restrict_enabled,
        tiebreak=outcome.early,
    )
    return content, view


# =============================================================================
# Registration
# =============================================================================

def setup_escalation_views(bot: "TribunalBot") -> None:
    """Register escalation dynamic items for persistence."""
    bot.add_dynamic_items(VoteButton, ExpediteButton, EscalateButton)
    logger.tree("Escalation Views Registered", [
        ("Buttons", "VoteButton, ExpediteButton, EscalateButton"),
    ], emoji="🔘")


__all__ = [
    "VoteButton",
    "ExpediteButton",
    "EscalateButton",
    "build_vote_view",
    "build_escalation_controls_view",
    "build_confirmed_view",
    "render_vote_outcome",
    "setup_escalation_views",
]
