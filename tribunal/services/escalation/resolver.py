"""
Tribunal - Escalation Resolver
==============================

Drives one escalation to its terminal state, and sweeps every due one.

DESIGN:
    process() is the single path to resolution, shared by the periodic
    sweep, a vote that reaches quorum and the expedite button:

        1. Tally the votes and pick the resolution (no votes or a tie
           falls back to track).
        2. Fetch the reported member. If they are gone, resolve as track
           without any moderation action.
        3. Otherwise execute the action, then resolve. A failed action
           raises before resolve(), so the escalation stays open and due,
           and the next sweep retries it.
        4. Best-effort: disable the buttons, reply with a notice and
           forward it to the mod log. Failures here are only logged.

    Processing is serialized by one asyncio lock and the escalation is
    re-read under it, so two triggers in this process never run the
    action twice. The conditional UPDATE in resolve() remains the final
    guard.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import discord

from tribunal.core.database import EscalationRecord
from tribunal.core.errors import (
    ESCALATION_ERRORS,
    AlreadyResolvedError,
    ExternalApiError,
)
from tribunal.core.logger import logger
from tribunal.services.escalation.constants import Resolution, resolution_label
from tribunal.services.escalation.service import EscalationService
from tribunal.services.escalation.settings import GuildSettings, GuildSettingsCache
from tribunal.services.escalation.strings import (
    build_resolution_notice,
    build_resolved_message_content,
)
from tribunal.services.escalation.views import build_vote_view
from tribunal.services.escalation.voting import Tally, tally_votes
from tribunal.utils.async_utils import safe_async_operation
from tribunal.utils.rate_limiter import RateLimiter, get_rate_limiter

if TYPE_CHECKING:
    from tribunal.bot import TribunalBot


USER_LEFT = "left the server"
USER_DELETED = "account no longer exists"


# =============================================================================
# Results
# =============================================================================

@dataclass
class ProcessResult:
    """Outcome of processing one escalation."""

    escalation_id: str
    resolution: str
    user_gone: bool = False
    gone_reason: Optional[str] = None


@dataclass
class SweepResult:
    """Summary of one sweep over due escalations."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


# =============================================================================
# Resolver
# =============================================================================

class EscalationResolver:
    """
    Per-escalation processing against Discord.

    Attributes:
        bot: Bot used to fetch guilds, channels, users and messages.
        service: Escalation state transitions.
        settings: Per-guild settings cache.
        rate_limiter: Paces the sweep between escalations.
    """

    def __init__(
        self,
        bot: "TribunalBot",
        service: EscalationService,
        settings: GuildSettingsCache,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.bot = bot
        self.service = service
        self.settings = settings
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self._processing_lock = asyncio.Lock()

    # =========================================================================
    # Decision
    # =========================================================================

    @staticmethod
    def decide_resolution(escalation_id: str, tally: Tally) -> str:
        """Leader of the tally, or track when there are no votes or a tie."""
        if tally.total_votes == 0:
            return Resolution.TRACK.value
        if tally.is_tied or tally.leader is None:
            logger.warning("Auto-Resolve Defaulting To Track (Tie)", [
                ("Escalation", escalation_id),
                ("Tied", ", ".join(tally.tied_resolutions)),
            ])
            return Resolution.TRACK.value
        return tally.leader

    # =========================================================================
    # Processing
    # =========================================================================

    async def process(
        self,
        escalation: EscalationRecord,
        resolution: Optional[str] = None,
        expedited_by: Optional[int] = None,
        vote_message: Optional[discord.Message] = None,
    ) -> ProcessResult:
        """
        Resolve one escalation, executing its moderation action first.

        Args:
            escalation: The escalation row.
            resolution: Forced resolution (expedite); decided from votes if None.
            expedited_by: Moderator id when expedited.
            vote_message: The vote message if the caller already has it.

        Raises:
            AlreadyResolvedError: If it was resolved before or during processing.
            ExternalApiError: If the guild or member could not be fetched.
            ResolutionExecutionError: If the moderation action failed.
        """
        async with self._processing_lock:
            escalation = self.service.get(escalation["id"])
            if escalation["resolved_at"] is not None:
                raise AlreadyResolvedError(
                    escalation_id=escalation["id"],
                    resolved_at=escalation["resolved_at"],
                )

            votes = self.service.get_votes(escalation["id"])
            tally = tally_votes(votes)
            if resolution is None:
                resolution = self.decide_resolution(escalation["id"], tally)

            settings = self.settings.get(escalation["guild_id"])
            guild = await self._fetch_guild(escalation["guild_id"])
            member = await self._fetch_member(guild, escalation["reported_user_id"])

            logger.tree("Processing Escalation", [
                ("ID", escalation["id"]),
                ("Resolution", resolution_label(resolution)),
                ("Votes", str(tally.total_votes)),
                ("Expedited By", str(expedited_by) if expedited_by else "-"),
            ], emoji="⚖️")

            if member is None:
                user = await self._fetch_user(escalation["reported_user_id"])
                gone_reason = USER_LEFT if user is not None else USER_DELETED
                resolution = Resolution.TRACK.value
                now = time.time()

                logger.tree("Resolving Escalation - User Gone", [
                    ("ID", escalation["id"]),
                    ("Reason", gone_reason),
                ], emoji="👻")

                self.service.resolve(escalation["id"], resolution, now)
                await self._announce(
                    guild, escalation, resolution, tally, votes, now, settings,
                    vote_message=vote_message,
                    reported_name=user.display_name if user is not None else None,
                    gone_reason=gone_reason,
                    expedited_by=expedited_by,
                )
                return ProcessResult(
                    escalation_id=escalation["id"],
                    resolution=resolution,
                    user_gone=True,
                    gone_reason=gone_reason,
                )

            await self.service.execute(resolution, escalation, member, settings.restricted_role_id)
            now = time.time()
            self.service.resolve(escalation["id"], resolution, now)
            await self._announce(
                guild, escalation, resolution, tally, votes, now, settings,
                vote_message=vote_message,
                reported_name=member.display_name,
                expedited_by=expedited_by,
            )
            return ProcessResult(escalation_id=escalation["id"], resolution=resolution)

    async def _announce(
        self,
        guild: discord.Guild,
        escalation: EscalationRecord,
        resolution: str,
        tally: Tally,
        votes,
        now: float,
        settings: GuildSettings,
        vote_message: Optional[discord.Message] = None,
        reported_name: Optional[str] = None,
        gone_reason: Optional[str] = None,
        expedited_by: Optional[int] = None,
    ) -> None:
        """Disable the buttons and post the notice. Never raises on Discord errors."""
        message = vote_message or await self._fetch_vote_message(escalation)
        notice = build_resolution_notice(
            escalation, resolution, votes, now,
            reported_name=reported_name,
            gone_reason=gone_reason,
            expedited_by=expedited_by,
        )

        if message is not None:
            await safe_async_operation(
                "Disable Vote Buttons",
                message.edit(
                    content=build_resolved_message_content(escalation, resolution, tally, now, expedited_by),
                    view=build_vote_view(escalation, tally, settings.restrict_enabled, disabled=True),
                ),
            )
            await safe_async_operation(
                "Reply Resolution Notice",
                message.reply(notice, allowed_mentions=discord.AllowedMentions.none()),
            )

        if settings.mod_log_channel_id:
            channel = guild.get_channel(settings.mod_log_channel_id)
            if channel is None:
                logger.warning("Mod Log Channel Not Found", [
                    ("Guild", str(guild.id)),
                    ("Channel", str(settings.mod_log_channel_id)),
                ])
                return
            text = f"{notice}\n{message.jump_url}" if message is not None else notice
            async with self.rate_limiter.limit("send_message"):
                await safe_async_operation(
                    "Forward Resolution Notice",
                    channel.send(text, allowed_mentions=discord.AllowedMentions.none()),
                )

    # =========================================================================
    # Sweep
    # =========================================================================

    async def run_sweep(self) -> SweepResult:
        """
        Process every due escalation, one at a time.

        A failing escalation is logged and counted; the sweep moves on.
        One resolved by a vote after the due list was read is skipped.
        """
        due = self.service.due_escalations()
        result = SweepResult(processed=len(due))

        if not due:
            return result

        logger.debug("Processing Due Escalations", [("Count", str(len(due)))])

        for escalation in due:
            await self.rate_limiter.acquire("escalation_sweep")
            try:
                await self.process(escalation)
                result.succeeded += 1
            except AlreadyResolvedError:
                result.skipped += 1
                logger.debug("Escalation Already Resolved", [
                    ("Escalation", escalation["id"]),
                    ("Action", "Skipped"),
                ])
            except ESCALATION_ERRORS as e:
                result.failed += 1
                logger.error("Escalation Processing Failed", [
                    ("Escalation", escalation["id"]),
                    ("Kind", e.tag),
                    ("Error", str(e)[:100]),
                ])
            except Exception as e:
                result.failed += 1
                logger.error("Escalation Processing Failed", [
                    ("Escalation", escalation["id"]),
                    ("Kind", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])

        logger.tree("Escalation Sweep Complete", [
            ("Processed", str(result.processed)),
            ("Succeeded", str(result.succeeded)),
            ("Failed", str(result.failed)),
            ("Skipped", str(result.skipped)),
        ], emoji="🧹")

        return result

    # =========================================================================
    # Discord Fetch Helpers
    # =========================================================================

    async def _fetch_guild(self, guild_id: int) -> discord.Guild:
        guild = self.bot.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self.bot.fetch_guild(guild_id)
        except discord.HTTPException as e:
            raise ExternalApiError(operation="fetch_guild", cause=e) from e

    async def _fetch_member(self, guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
        """Member of the guild, or None if they left or the account is gone."""
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound:
            return None
        except discord.HTTPException as e:
            raise ExternalApiError(operation="fetch_member", cause=e) from e

    async def _fetch_user(self, user_id: int) -> Optional[discord.User]:
        try:
            return await self.bot.fetch_user(user_id)
        except discord.NotFound:
            return None
        except discord.HTTPException as e:
            raise ExternalApiError(operation="fetch_user", cause=e) from e

    async def _fetch_vote_message(self, escalation: EscalationRecord) -> Optional[discord.Message]:
        try:
            channel = self.bot.get_channel(escalation["thread_id"])
            if channel is None:
                channel = await self.bot.fetch_channel(escalation["thread_id"])
            return await channel.fetch_message(escalation["vote_message_id"])
        except discord.HTTPException as e:
            logger.warning("Vote Message Unavailable", [
                ("Escalation", escalation["id"]),
                ("Thread", str(escalation["thread_id"])),
                ("Error", str(e)[:100]),
            ])
            return None


__all__ = [
    "EscalationResolver",
    "ProcessResult",
    "SweepResult",
    "USER_LEFT",
    "USER_DELETED",
]
