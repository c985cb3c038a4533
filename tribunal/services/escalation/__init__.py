"""
Tribunal - Escalation Service Package
=====================================

Moderator voting on reported users, with quorum-based early resolution,
a shrinking auto-resolution deadline and a background sweep.

Structure:
    - constants.py: Resolution / VotingStrategy values and labels
    - voting.py: Vote tally (counts, leader, ties)
    - scheduling.py: Deadline policy
    - settings.py: Per-guild settings cache
    - service.py: Escalation state transitions
    - executor.py: Moderation actions
    - resolver.py: Per-escalation processing and the sweep
    - handlers.py: Vote / expedite / upgrade / start flows
    - scheduler.py: Periodic sweep task
    - strings.py: Message rendering
    - views.py: Persistent buttons
"""

from tribunal.services.escalation.constants import Resolution, VotingStrategy
from tribunal.services.escalation.voting import Tally, tally_votes
from tribunal.services.escalation.scheduling import SchedulingPolicy
from tribunal.services.escalation.settings import GuildSettings, GuildSettingsCache
from tribunal.services.escalation.service import EscalationService
from tribunal.services.escalation.executor import ResolutionExecutor
from tribunal.services.escalation.resolver import (
    EscalationResolver,
    ProcessResult,
    SweepResult,
)
from tribunal.services.escalation.handlers import EscalationHandlers, VoteOutcome
from tribunal.services.escalation.scheduler import AutoResolutionScheduler
from tribunal.services.escalation.views import setup_escalation_views

__all__ = [
    "Resolution",
    "VotingStrategy",
    "Tally",
    "tally_votes",
    "SchedulingPolicy",
    "GuildSettings",
    "GuildSettingsCache",
    "EscalationService",
    "ResolutionExecutor",
    "EscalationResolver",
    "ProcessResult",
    "SweepResult",
    "EscalationHandlers",
    "VoteOutcome",
    "AutoResolutionScheduler",
    "setup_escalation_views",
]
