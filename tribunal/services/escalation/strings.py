"""
Tribunal - Escalation Message Rendering
=======================================

Text for vote messages, confirmations and resolution notices.

Timestamps use Discord's <t:epoch:style> markup so each reader sees
their own timezone.
"""

from typing import Optional, Sequence

from tribunal.core.database import EscalationRecord, VoteRecord
from tribunal.services.escalation.constants import VotingStrategy, resolution_label
from tribunal.services.escalation.voting import Tally


def _ts(value: float) -> int:
    return int(value)


def build_votes_list_content(tally: Tally) -> str:
    """Voter mentions grouped under each resolution that has votes."""
    lines = [
        f"-# • {resolution_label(resolution)}: {', '.join(f'<@{voter}>' for voter in voters)}"
        for resolution, voters in tally.by_resolution.items()
        if voters
    ]
    if tally.total_votes > 0:
        lines.insert(0, "-# Vote record:")
    return "\n".join(lines)


def _tied_labels(tally: Tally) -> str:
    return ", ".join(resolution_label(r) for r in tally.tied_resolutions)


def build_status_line(
    escalation: EscalationRecord,
    tally: Tally,
    quorum: int,
    strategy: str,
) -> str:
    """One-line status that depends on strategy and vote state."""
    scheduled_for = _ts(escalation["scheduled_for"])

    if VotingStrategy(strategy) is VotingStrategy.MAJORITY:
        if tally.total_votes == 0:
            return f"Majority voting. Resolves <t:{scheduled_for}:R> with a simple majority of participants."
        if tally.is_tied:
            return f"Tied between: {_tied_labels(tally)}. Tiebreak needed before timeout."
        return (
            f"Leading: {resolution_label(tally.leader)} ({tally.leader_count} votes). "
            f"Resolves <t:{scheduled_for}:R>."
        )

    if tally.leader_count >= quorum:
        if tally.is_tied or not tally.leader:
            return f"Tied between: {_tied_labels(tally)}. Waiting for tiebreaker."
        return f"Quorum reached. Leading: {resolution_label(tally.leader)} ({tally.leader_count} votes)"

    status = f"{tally.total_votes} voter(s), quorum at {quorum}."
    if tally.leader_count > 0 and not tally.is_tied:
        status += f" Auto-resolves with `{tally.leader}` <t:{scheduled_for}:R> if no more votes."
    elif tally.leader_count > 0 and tally.is_tied:
        status += f" Tiebreak needed <t:{scheduled_for}:R> if no more votes are cast"
    return status


def build_vote_message_content(
    escalation: EscalationRecord,
    tally: Tally,
    quorum: int,
    strategy: str,
    moderator_role_id: Optional[int] = None,
) -> str:
    """Full vote message: header, status line and vote record."""
    strategy_label = " (majority)" if VotingStrategy(strategy) is VotingStrategy.MAJORITY else ""
    audience = f"<@&{moderator_role_id}>" if moderator_role_id else "moderators"

    header = (
        f"<@{escalation['initiator_id']}> called for a vote{strategy_label} by {audience} "
        f"<t:{_ts(escalation['created_at'])}:R> regarding user <@{escalation['reported_user_id']}>"
    )
    status = build_status_line(escalation, tally, quorum, strategy)
    votes_list = build_votes_list_content(tally) or "_No votes yet_"

    return f"{header}\n{status}\n\n{votes_list}"


def build_confirmed_message_content(
    escalation: EscalationRecord,
    resolution: str,
    tally: Tally,
) -> str:
    """Quorum reached with a clear leader, but the action has not run yet."""
    return (
        f"**{resolution_label(resolution)}** ✅ <@{escalation['reported_user_id']}>\n"
        f"Executes <t:{_ts(escalation['scheduled_for'])}:R>\n\n"
        f"{build_votes_list_content(tally)}"
    )


def build_resolved_message_content(
    escalation: EscalationRecord,
    resolution: str,
    tally: Tally,
    now: float,
    expedited_by: Optional[int] = None,
) -> str:
    """Vote message body once the escalation is resolved."""
    expedite_note = (
        f"\nResolved early by <@{expedited_by}> at <t:{_ts(now)}:f>" if expedited_by else ""
    )
    return (
        f"**{resolution_label(resolution)}** ✅ <@{escalation['reported_user_id']}>{expedite_note}\n"
        f"{build_votes_list_content(tally)}"
    )


def build_resolution_notice(
    escalation: EscalationRecord,
    resolution: str,
    votes: Sequence[VoteRecord],
    now: float,
    reported_name: Optional[str] = None,
    gone_reason: Optional[str] = None,
    expedited_by: Optional[int] = None,
) -> str:
    """
    Notice posted under the vote message and forwarded to the mod log.

    Args:
        escalation: The escalation being resolved.
        resolution: Final resolution.
        votes: All vote records (count of records and of distinct voters).
        now: Resolution time, epoch seconds.
        reported_name: Display name of the reported user, if fetchable.
        gone_reason: "left the server" or "account no longer exists".
        expedited_by: Moderator who expedited, if any.
    """
    voters = {vote["voter_id"] for vote in votes}
    elapsed_hours = int((now - escalation["created_at"]) // 3600)

    text = (
        f"Resolved with {len(votes)} votes from {len(voters)} voters: "
        f"**{resolution_label(resolution)}** <@{escalation['reported_user_id']}> "
        f"({reported_name or 'no user'})"
    )
    timing = f"-# Resolved <t:{_ts(now)}:s>, {elapsed_hours}hrs after escalation"
    if gone_reason:
        timing += f" ({gone_reason})"
    if expedited_by:
        timing += f"\n-# Resolved early by <@{expedited_by}>"

    return f"{text}\n{timing}"


__all__ = [
    "build_votes_list_content",
    "build_status_line",
    "build_vote_message_content",
    "build_confirmed_message_content",
    "build_resolved_message_content",
    "build_resolution_notice",
]
