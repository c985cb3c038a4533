"""
Tribunal - Database Type Definitions
====================================

TypedDict definitions for database records.
"""

from typing import Optional, TypedDict


class EscalationRecord(TypedDict, total=False):
    """Type for escalation records returned from database."""
    id: str
    guild_id: int
    thread_id: int
    vote_message_id: int
    reported_user_id: int
    initiator_id: int
    flags: str
    voting_strategy: str
    created_at: float
    scheduled_for: float
    resolved_at: Optional[float]
    resolution: Optional[str]


class VoteRecord(TypedDict, total=False):
    """Type for escalation vote records."""
    id: str
    escalation_id: str
    voter_id: int
    vote: str
    voted_at: float


class GuildSettingsRecord(TypedDict, total=False):
    """Type for per-guild escalation settings."""
    guild_id: int
    moderator_role_id: Optional[int]
    restricted_role_id: Optional[int]
    mod_log_channel_id: Optional[int]
    quorum: Optional[int]
    updated_at: float
