"""
Tribunal - Escalation Constants
===============================

Resolution and voting strategy values plus their display labels.
"""

from enum import Enum
from typing import Dict, List


class Resolution(str, Enum):
    """Outcome a vote can settle on. Values are stored in the database."""

    TRACK = "track"
    TIMEOUT = "timeout"
    RESTRICT = "restrict"
    KICK = "kick"
    BAN = "ban"


class VotingStrategy(str, Enum):
    """How an escalation decides when to resolve."""

    SIMPLE = "simple"      # resolve early once the leader reaches quorum
    MAJORITY = "majority"  # always wait for the deadline, plurality wins


HUMAN_READABLE_RESOLUTIONS: Dict[str, str] = {
    Resolution.TRACK.value: "No action (abstain)",
    Resolution.TIMEOUT.value: "Timeout Overnight",
    Resolution.RESTRICT.value: "Restrict",
    Resolution.KICK.value: "Kick",
    Resolution.BAN.value: "Ban",
}


def resolution_label(resolution: str) -> str:
    """Display label for a resolution value, falling back to the raw value."""
    return HUMAN_READABLE_RESOLUTIONS.get(str(getattr(resolution, "value", resolution)), str(resolution))


def vote_options(restrict_enabled: bool) -> List[Resolution]:
    """Resolutions offered on a vote message, in button order."""
    options = [Resolution.TRACK, Resolution.TIMEOUT]
    if restrict_enabled:
        options.append(Resolution.RESTRICT)
    options.extend([Resolution.KICK, Resolution.BAN])
    return options


__all__ = [
    "Resolution",
    "VotingStrategy",
    "HUMAN_READABLE_RESOLUTIONS",
    "resolution_label",
    "vote_options",
]
