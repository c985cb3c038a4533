"""
Tribunal - Vote Tally
=====================

Pure aggregation of vote records into counts, leader and tie state.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional


@dataclass
class Tally:
    """
    Aggregated vote state for one escalation.

    Attributes:
        total_votes: Number of distinct voters, however many options each picked.
        by_resolution: Resolution -> voter ids in the order the votes came in.
        leader: Sole resolution with the most votes, None when tied or empty.
        leader_count: Highest per-resolution count (shared max when tied).
        is_tied: More than one resolution shares the highest count.
        tied_resolutions: Resolutions at the highest count, by first appearance.
    """

    total_votes: int = 0
    by_resolution: Dict[str, List[int]] = field(default_factory=dict)
    leader: Optional[str] = None
    leader_count: int = 0
    is_tied: bool = False
    tied_resolutions: List[str] = field(default_factory=list)

    def count(self, resolution: str) -> int:
        """Number of votes for a resolution."""
        return len(self.by_resolution.get(str(getattr(resolution, "value", resolution)), []))


def tally_votes(votes: Iterable[Mapping]) -> Tally:
    """
    Tally vote records.

    Args:
        votes: Records with "voter_id" and "vote" keys, in the order cast.

    Returns:
        The aggregated Tally. An empty input gives the zero Tally.
    """
    by_resolution: Dict[str, List[int]] = {}
    voters = set()

    for record in votes:
        resolution = str(getattr(record["vote"], "value", record["vote"]))
        by_resolution.setdefault(resolution, []).append(record["voter_id"])
        voters.add(record["voter_id"])

    leader: Optional[str] = None
    leader_count = 0
    tied: List[str] = []

    # dicts keep insertion order, so this walks resolutions by first appearance
    for resolution, resolution_voters in by_resolution.items():
        count = len(resolution_voters)
        if count > leader_count:
            leader = resolution
            leader_count = count
            tied = [resolution]
        elif count == leader_count and count > 0:
            tied.append(resolution)

    is_tied = len(tied) > 1

    return Tally(
        total_votes=len(voters),
        by_resolution=by_resolution,
        leader=None if is_tied else leader,
        leader_count=leader_count,
        is_tied=is_tied,
        tied_resolutions=tied,
    )


__all__ = ["Tally", "tally_votes"]
