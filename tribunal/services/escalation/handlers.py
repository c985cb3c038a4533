"""
Tribunal - Escalation Handlers
==============================

Interactive entry points: start a vote, cast or retract a vote, expedite,
and upgrade to majority voting.

DESIGN:
    Each handler checks authorization before touching any state and
    raises one of the escalation error kinds on failure; the buttons and
    commands turn those into ephemeral replies with describe_error().
"""

import time
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

import discord

from tribunal.core.config import has_mod_role
from tribunal.core.database import EscalationRecord
from tribunal.core.errors import (
    ESCALATION_ERRORS,
    AlreadyResolvedError,
    EscalationError,
    ExternalApiError,
    NoLeaderError,
    NotAuthorizedError,
)
from tribunal.core.logger import logger
from tribunal.services.escalation.constants import VotingStrategy
from tribunal.services.escalation.resolver import EscalationResolver, ProcessResult
from tribunal.services.escalation.service import EscalationService
from tribunal.services.escalation.settings import GuildSettings, GuildSettingsCache
from tribunal.services.escalation.strings import build_vote_message_content
from tribunal.services.escalation.views import build_vote_view
from tribunal.services.escalation.voting import Tally, tally_votes


@dataclass
class VoteOutcome:
    """
    State after a vote toggle.

    Attributes:
        escalation: Escalation row with the recomputed deadline.
        tally: Tally including this vote.
        is_new: True if the vote was added, False if retracted.
        quorum: The escalation's quorum.
        strategy: The escalation's voting strategy.
        settings: Guild settings used for rendering.
        early: Quorum reached under simple voting.
        processed: Set when the vote resolved the escalation.
        error: Set when quorum was reached but processing failed.
    """

    escalation: EscalationRecord
    tally: Tally
    is_new: bool
    quorum: int
    strategy: str
    settings: GuildSettings
    early: bool = False
    processed: Optional[ProcessResult] = None
    error: Optional[EscalationError] = None


class EscalationHandlers:
    """Authorization and flow for the escalation buttons and commands."""

    def __init__(
        self,
        service: EscalationService,
        settings: GuildSettingsCache,
        resolver: EscalationResolver,
    ) -> None:
        self.service = service
        self.settings = settings
        self.resolver = resolver

    def require_moderator(self, member: discord.Member, operation: str) -> GuildSettings:
        """
        Raises:
            NotAuthorizedError: If the member is not a moderator in their guild.
        """
        settings = self.settings.get(member.guild.id)
        if not has_mod_role(member, settings.moderator_role_id):
            logger.warning("Escalation Permission Denied", [
                ("Operation", operation),
                ("User", f"{member} ({member.id})"),
            ])
            raise NotAuthorizedError(operation=operation, user_id=member.id, required_role="moderator")
        return settings

    # =========================================================================
    # Start
    # =========================================================================

    async def start(
        self,
        channel: discord.abc.Messageable,
        initiator: discord.Member,
        reported_user_id: int,
        escalation_id: Optional[str] = None,
    ) -> Tuple[EscalationRecord, bool]:
        """
        Post a vote message and create its escalation.

        Returns:
            (escalation, created). created is False when an escalation with
            this id, or an open one for the user, already existed.

        Raises:
            NotAuthorizedError: If the initiator is not a moderator.
            ExternalApiError: If the vote message could not be sent.
        """
        settings = self.require_moderator(initiator, "escalate")
        guild_id = initiator.guild.id

        if escalation_id:
            existing = self.service.db.get_escalation(escalation_id)
            if existing is not None:
                return existing, False
        existing = self.service.get_open_for_user(guild_id, reported_user_id)
        if existing is not None:
            return existing, False

        escalation_id = escalation_id or str(uuid.uuid4())
        created_at = time.time()
        draft: EscalationRecord = {
            "id": escalation_id,
            "guild_id": guild_id,
            "thread_id": channel.id,
            "vote_message_id": 0,
            "reported_user_id": reported_user_id,
            "initiator_id": initiator.id,
            "voting_strategy": VotingStrategy.SIMPLE.value,
            "created_at": created_at,
            "scheduled_for": self.service.policy.scheduled_for(created_at, 0),
            "resolved_at": None,
            "resolution": None,
        }
        tally = tally_votes([])

        try:
            message = await channel.send(
                content=build_vote_message_content(
                    draft, tally,
                    quorum=settings.quorum,
                    strategy=VotingStrategy.SIMPLE.value,
                    moderator_role_id=settings.moderator_role_id,
                ),
                view=build_vote_view(draft, tally, settings.restrict_enabled),
                allowed_mentions=discord.AllowedMentions(users=False, roles=True),
            )
        except discord.HTTPException as e:
            raise ExternalApiError(operation="send_vote_message", cause=e) from e

        escalation = self.service.create(
            guild_id=guild_id,
            thread_id=channel.id,
            vote_message_id=message.id,
            reported_user_id=reported_user_id,
            initiator_id=initiator.id,
            quorum=settings.quorum,
            escalation_id=escalation_id,
            created_at=created_at,
        )
        return escalation, True

    # =========================================================================
    # Vote
    # =========================================================================

    async def vote(
        self,
        escalation_id: str,
        member: discord.Member,
        resolution: str,
        vote_message: Optional[discord.Message] = None,
    ) -> VoteOutcome:
        """
        Toggle a vote and move the deadline.

        Under simple voting, reaching quorum with a clear leader resolves
        the escalation right away. A failure while doing so is returned in
        VoteOutcome.error rather than raised, since the vote itself stands.

        Raises:
            NotAuthorizedError, NotFoundError, AlreadyResolvedError.
        """
        settings = self.require_moderator(member, "vote")
        escalation = self.service.get(escalation_id)
        if escalation["resolved_at"] is not None:
            raise AlreadyResolvedError(escalation_id=escalation_id, resolved_at=escalation["resolved_at"])

        is_new = self.service.record_vote(escalation_id, member.id, resolution)
        tally = self.service.tally(escalation_id)
        quorum = self.service.quorum_of(escalation)
        strategy = self.service.strategy_of(escalation).value

        scheduled_for = self.service.reschedule(escalation, tally.total_votes)
        escalation = {**escalation, "scheduled_for": scheduled_for}
        early = self.service.policy.should_trigger_early(tally, quorum, strategy)

        outcome = VoteOutcome(
            escalation=escalation,
            tally=tally,
            is_new=is_new,
            quorum=quorum,
            strategy=strategy,
            settings=settings,
            early=early,
        )

        if early and tally.leader is not None and not tally.is_tied:
            logger.tree("Quorum Reached", [
                ("Escalation", escalation_id),
                ("Leader", tally.leader),
                ("Votes", str(tally.leader_count)),
            ], emoji="🎯")
            try:
                outcome.processed = await self.resolver.process(escalation, vote_message=vote_message)
            except ESCALATION_ERRORS as e:
                logger.warning("Early Resolution Deferred To Sweep", [
                    ("Escalation", escalation_id),
                    ("Kind", e.tag),
                    ("Error", str(e)[:100]),
                ])
                outcome.error = e

        return outcome

    # =========================================================================
    # Expedite
    # =========================================================================

    async def expedite(
        self,
        escalation_id: str,
        member: discord.Member,
        vote_message: Optional[discord.Message] = None,
    ) -> ProcessResult:
        """
        Resolve now with the current leader.

        Raises:
            NotAuthorizedError, NotFoundError, AlreadyResolvedError,
            NoLeaderError, ExternalApiError, ResolutionExecutionError.
        """
        self.require_moderator(member, "expedite")
        escalation = self.service.get(escalation_id)
        if escalation["resolved_at"] is not None:
            raise AlreadyResolvedError(escalation_id=escalation_id, resolved_at=escalation["resolved_at"])

        tally = self.service.tally(escalation_id)
        if tally.leader is None:
            raise NoLeaderError(
                escalation_id=escalation_id,
                reason="no_votes" if tally.total_votes == 0 else "tied",
                tied_resolutions=tally.tied_resolutions if tally.is_tied else None,
            )

        result = await self.resolver.process(
            escalation,
            resolution=tally.leader,
            expedited_by=member.id,
            vote_message=vote_message,
        )

        logger.tree("Escalation Expedited", [
            ("Escalation", escalation_id),
            ("Resolution", result.resolution),
            ("Expedited By", f"{member} ({member.id})"),
            ("Total Votes", str(tally.total_votes)),
        ], emoji="⏩")

        return result

    # =========================================================================
    # Upgrade
    # =========================================================================

    async def upgrade(
        self,
        escalation_id: str,
        member: discord.Member,
    ) -> Tuple[EscalationRecord, Tally, GuildSettings]:
        """
        Switch to majority voting.

        Raises:
            NotAuthorizedError, NotFoundError, AlreadyResolvedError.
        """
        settings = self.require_moderator(member, "upgrade")
        escalation = self.service.upgrade_strategy(escalation_id)
        return escalation, self.service.tally(escalation_id), settings


__all__ = ["EscalationHandlers", "VoteOutcome"]
