"""
Tribunal - Escalation Service
=============================

Orchestrates escalation state: creation, vote toggling, strategy upgrade,
resolution and the due-escalation query.

DESIGN:
    All state lives in the database; the service holds no per-escalation
    memory. Resolution goes through a single conditional UPDATE, which is
    the only thing that stops the sweep, a quorum-reaching vote and an
    expedite from resolving (and acting on) the same escalation twice.
"""

import time
import uuid
from typing import List, Optional

import discord

from tribunal.core.config import get_config
from tribunal.core.database import (
    DatabaseManager,
    EscalationRecord,
    VoteRecord,
    _safe_json_loads,
    get_db,
)
from tribunal.core.errors import AlreadyResolvedError, NotFoundError
from tribunal.core.logger import logger
from tribunal.services.escalation.constants import (
    Resolution,
    VotingStrategy,
    resolution_label,
)
from tribunal.services.escalation.executor import ResolutionExecutor
from tribunal.services.escalation.scheduling import SchedulingPolicy
from tribunal.services.escalation.voting import Tally, tally_votes


class EscalationService:
    """
    Escalation state transitions on top of the database.

    Attributes:
        db: Database manager.
        policy: Deadline rules.
        executor: Moderation action runner.
        default_quorum: Quorum used when an escalation's flags are unreadable.
    """

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        policy: Optional[SchedulingPolicy] = None,
        executor: Optional[ResolutionExecutor] = None,
        default_quorum: Optional[int] = None,
    ) -> None:
        config = get_config()
        self.db = db or get_db()
        self.policy = policy or SchedulingPolicy.from_config(config)
        self.executor = executor or ResolutionExecutor(timeout_hours=config.escalation_timeout_hours)
        self.default_quorum = default_quorum if default_quorum is not None else config.default_quorum

    # =========================================================================
    # Creation & Lookup
    # =========================================================================

    def create(
        self,
        guild_id: int,
        thread_id: int,
        vote_message_id: int,
        reported_user_id: int,
        initiator_id: int,
        quorum: int,
        escalation_id: Optional[str] = None,
        created_at: Optional[float] = None,
    ) -> EscalationRecord:
        """
        Create an escalation under simple voting.

        Passing the same escalation_id twice returns the stored row the
        second time without changing it.
        """
        escalation_id = escalation_id or str(uuid.uuid4())
        created_at = created_at if created_at is not None else time.time()

        escalation = self.db.create_escalation(
            escalation_id=escalation_id,
            guild_id=guild_id,
            thread_id=thread_id,
            vote_message_id=vote_message_id,
            reported_user_id=reported_user_id,
            initiator_id=initiator_id,
            quorum=quorum,
            created_at=created_at,
            scheduled_for=self.policy.scheduled_for(created_at, 0),
            voting_strategy=VotingStrategy.SIMPLE.value,
        )

        logger.tree("Escalation Created", [
            ("ID", escalation["id"]),
            ("Guild", str(guild_id)),
            ("Reported User", str(reported_user_id)),
            ("Initiator", str(initiator_id)),
            ("Quorum", str(self.quorum_of(escalation))),
            ("Resolves", f"<t:{int(escalation['scheduled_for'])}:R>"),
        ], emoji="🗳️")

        return escalation

    def get(self, escalation_id: str) -> EscalationRecord:
        """
        Raises:
            NotFoundError: If no escalation has this id.
        """
        escalation = self.db.get_escalation(escalation_id)
        if escalation is None:
            raise NotFoundError(id=escalation_id, resource="escalation")
        return escalation

    def get_open_for_user(self, guild_id: int, reported_user_id: int) -> Optional[EscalationRecord]:
        return self.db.get_open_escalation_for_user(guild_id, reported_user_id)

    def quorum_of(self, escalation: EscalationRecord) -> int:
        """Quorum stored in the escalation's flags, or the default if unreadable."""
        flags = _safe_json_loads(escalation.get("flags"), default={})
        quorum = flags.get("quorum") if isinstance(flags, dict) else None
        if not isinstance(quorum, int) or quorum < 1:
            return self.default_quorum
        return quorum

    @staticmethod
    def strategy_of(escalation: EscalationRecord) -> VotingStrategy:
        return VotingStrategy(escalation.get("voting_strategy") or VotingStrategy.SIMPLE.value)

    # =========================================================================
    # Votes
    # =========================================================================

    def get_votes(self, escalation_id: str) -> List[VoteRecord]:
        return self.db.get_votes(escalation_id)

    def tally(self, escalation_id: str) -> Tally:
        return tally_votes(self.db.get_votes(escalation_id))

    def record_vote(self, escalation_id: str, voter_id: int, resolution: str) -> bool:
        """
        Toggle a vote for (escalation, voter, resolution).

        Returns:
            True if the vote was added, False if it was retracted.
        """
        resolution = Resolution(resolution).value
        is_new = self.db.toggle_vote(escalation_id, voter_id, resolution)

        logger.tree("Vote Recorded" if is_new else "Vote Retracted", [
            ("Escalation", escalation_id),
            ("Voter", str(voter_id)),
            ("Vote", resolution_label(resolution)),
        ], emoji="✋" if is_new else "↩️")

        return is_new

    def reschedule(self, escalation: EscalationRecord, vote_count: int) -> float:
        """Recompute and persist the deadline for the current vote count."""
        scheduled_for = self.policy.scheduled_for(escalation["created_at"], vote_count)
        self.db.update_scheduled_for(escalation["id"], scheduled_for)
        return scheduled_for

    # =========================================================================
    # Strategy
    # =========================================================================

    def upgrade_strategy(self, escalation_id: str) -> EscalationRecord:
        """
        Switch to majority voting, keeping votes already cast.

        The deadline is recomputed from the current vote count. There is
        no way back to simple voting.

        Raises:
            NotFoundError: If the escalation does not exist.
            AlreadyResolvedError: If it was resolved already.
        """
        escalation = self.get(escalation_id)
        tally = self.tally(escalation_id)
        scheduled_for = self.policy.scheduled_for(escalation["created_at"], tally.total_votes)

        if not self.db.set_majority_strategy(escalation_id, scheduled_for):
            current = self.get(escalation_id)
            raise AlreadyResolvedError(escalation_id=escalation_id, resolved_at=current["resolved_at"])

        logger.tree("Escalation Upgraded To Majority", [
            ("ID", escalation_id),
            ("Votes", str(tally.total_votes)),
            ("Resolves", f"<t:{int(scheduled_for)}:R>"),
        ], emoji="📈")

        return self.get(escalation_id)

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self, escalation_id: str, resolution: str, now: Optional[float] = None) -> EscalationRecord:
        """
        Mark an escalation resolved.

        Raises:
            NotFoundError: If the escalation does not exist.
            AlreadyResolvedError: If another caller resolved it first.
        """
        resolution = Resolution(resolution).value
        resolved_at = now if now is not None else time.time()

        if not self.db.resolve_escalation_if_open(escalation_id, resolution, resolved_at):
            current = self.db.get_escalation(escalation_id)
            if current is None:
                raise NotFoundError(id=escalation_id, resource="escalation")
            raise AlreadyResolvedError(escalation_id=escalation_id, resolved_at=current["resolved_at"])

        logger.tree("Escalation Resolved", [
            ("ID", escalation_id),
            ("Resolution", resolution_label(resolution)),
        ], emoji="✅")

        return self.get(escalation_id)

    def due_escalations(self, now: Optional[float] = None) -> List[EscalationRecord]:
        """Open escalations whose deadline has passed."""
        return self.db.get_due_escalations(now)

    async def execute(
        self,
        resolution: str,
        escalation: EscalationRecord,
        member: discord.Member,
        restricted_role_id: Optional[int] = None,
    ) -> None:
        """Apply the moderation action. Raises ResolutionExecutionError on failure."""
        await self.executor.execute(resolution, escalation, member, restricted_role_id)


__all__ = ["EscalationService"]
