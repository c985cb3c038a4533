"""
Tribunal - Escalation Scheduling Policy
=======================================

Deadline arithmetic for auto-resolution.

DESIGN:
    The deadline shrinks as votes arrive:
        timeout_hours(v) = max(0, base_hours - hours_per_vote * v)
    With the defaults (24, 8) an escalation resolves after 24h with no
    votes and is due immediately once three moderators have voted.
    The function is non-increasing in v for any non-negative settings,
    so a new vote can never push a deadline later.
"""

from dataclasses import dataclass

from tribunal.core.constants import (
    ESCALATION_BASE_HOURS,
    ESCALATION_HOURS_PER_VOTE,
    SECONDS_PER_HOUR,
)
from tribunal.services.escalation.constants import VotingStrategy
from tribunal.services.escalation.voting import Tally


@dataclass(frozen=True)
class SchedulingPolicy:
    """Deadline and early-trigger rules. Timestamps are epoch seconds."""

    base_hours: float = ESCALATION_BASE_HOURS
    hours_per_vote: float = ESCALATION_HOURS_PER_VOTE

    def __post_init__(self) -> None:
        if self.base_hours < 0 or self.hours_per_vote < 0:
            raise ValueError("Scheduling hours must be non-negative")

    @classmethod
    def from_config(cls, config) -> "SchedulingPolicy":
        return cls(
            base_hours=config.escalation_base_hours,
            hours_per_vote=config.escalation_hours_per_vote,
        )

    def timeout_hours(self, vote_count: int) -> float:
        """Hours from creation until auto-resolution for a given vote count."""
        return max(0, self.base_hours - self.hours_per_vote * vote_count)

    def scheduled_for(self, created_at: float, vote_count: int) -> float:
        """Epoch seconds at which the escalation becomes due."""
        return created_at + self.timeout_hours(vote_count) * SECONDS_PER_HOUR

    def is_due(self, created_at: float, vote_count: int, now: float) -> bool:
        return (now - created_at) >= self.timeout_hours(vote_count) * SECONDS_PER_HOUR

    @staticmethod
    def should_trigger_early(tally: Tally, quorum: int, strategy: str) -> bool:
        """
        Whether a vote should resolve the escalation before its deadline.

        Majority voting never resolves early; simple voting does once the
        leading count reaches quorum (the caller still checks for a tie).
        """
        if VotingStrategy(strategy) is VotingStrategy.MAJORITY:
            return False
        return tally.leader_count >= quorum


__all__ = ["SchedulingPolicy"]
