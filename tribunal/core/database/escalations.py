"""
Tribunal - Database Escalation Operations
=========================================

Escalation CRUD, the conditional resolve write, and the due-sweep query.
"""

import json
import time
from typing import Optional, List, TYPE_CHECKING

from tribunal.core.logger import logger
from tribunal.core.database.models import EscalationRecord

if TYPE_CHECKING:
    from tribunal.core.database.manager import DatabaseManager


class EscalationsMixin:
    """Mixin for escalation database operations."""

    def create_escalation(
        self: "DatabaseManager",
        escalation_id: str,
        guild_id: int,
        thread_id: int,
        vote_message_id: int,
        reported_user_id: int,
        initiator_id: int,
        quorum: int,
        created_at: float,
        scheduled_for: float,
        voting_strategy: str = "simple",
    ) -> EscalationRecord:
        """
        Insert an escalation, or do nothing if the id already exists.

        DESIGN: Callers supply a stable id so a retried creation is a no-op.
        The stored row is always returned, whether it was just written or not.
        """
        cursor = self.execute(
            """INSERT OR IGNORE INTO escalations
               (id, guild_id, thread_id, vote_message_id, reported_user_id,
                initiator_id, flags, voting_strategy, created_at, scheduled_for)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                escalation_id, guild_id, thread_id, vote_message_id,
                reported_user_id, initiator_id, json.dumps({"quorum": quorum}),
                voting_strategy, created_at, scheduled_for,
            ),
        )
        if cursor.rowcount == 0:
            logger.debug("Escalation Create Skipped (exists)", [("ID", escalation_id)])

        return self.get_escalation(escalation_id)

    def get_escalation(self: "DatabaseManager", escalation_id: str) -> Optional[EscalationRecord]:
        """Get an escalation by id."""
        row = self.fetchone("SELECT * FROM escalations WHERE id = ?", (escalation_id,))
        return dict(row) if row else None

    def get_open_escalation_for_user(
        self: "DatabaseManager",
        guild_id: int,
        reported_user_id: int,
    ) -> Optional[EscalationRecord]:
        """Get the most recent unresolved escalation for a user in a guild."""
        row = self.fetchone(
            """SELECT * FROM escalations
               WHERE guild_id = ? AND reported_user_id = ? AND resolved_at IS NULL
               ORDER BY created_at DESC LIMIT 1""",
            (guild_id, reported_user_id),
        )
        return dict(row) if row else None

    def update_scheduled_for(
        self: "DatabaseManager",
        escalation_id: str,
        scheduled_for: float,
    ) -> bool:
        """
        Move the auto-resolution deadline of an open escalation.

        Returns:
            True if a row was updated, False if missing or already resolved.
        """
        cursor = self.execute(
            "UPDATE escalations SET scheduled_for = ? WHERE id = ? AND resolved_at IS NULL",
            (scheduled_for, escalation_id),
        )
        return cursor.rowcount > 0

    def set_majority_strategy(
        self: "DatabaseManager",
        escalation_id: str,
        scheduled_for: float,
    ) -> bool:
        """
        Switch an open escalation to majority voting with a new deadline.

        Returns:
            True if a row was updated, False if missing or already resolved.
        """
        cursor = self.execute(
            """UPDATE escalations SET voting_strategy = 'majority', scheduled_for = ?
               WHERE id = ? AND resolved_at IS NULL""",
            (scheduled_for, escalation_id),
        )
        return cursor.rowcount > 0

    def resolve_escalation_if_open(
        self: "DatabaseManager",
        escalation_id: str,
        resolution: str,
        resolved_at: Optional[float] = None,
    ) -> bool:
        """
        Mark an escalation resolved in a single conditional write.

        DESIGN: `WHERE resolved_at IS NULL` is the only guard against two
        triggers resolving the same escalation. Never pair this with a
        separate read-then-write.

        Returns:
            True if this call resolved it, False if it was missing or
            already resolved.
        """
        cursor = self.execute(
            """UPDATE escalations SET resolved_at = ?, resolution = ?
               WHERE id = ? AND resolved_at IS NULL""",
            (resolved_at if resolved_at is not None else time.time(), resolution, escalation_id),
        )
        return cursor.rowcount > 0

    def get_due_escalations(self: "DatabaseManager", now: Optional[float] = None) -> List[EscalationRecord]:
        """Get unresolved escalations whose deadline has passed, oldest deadline first."""
        rows = self.fetchall(
            """SELECT * FROM escalations
               WHERE resolved_at IS NULL AND scheduled_for <= ?
               ORDER BY scheduled_for ASC""",
            (now if now is not None else time.time(),),
        )
        return [dict(row) for row in rows]
