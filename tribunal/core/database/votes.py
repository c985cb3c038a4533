"""
Tribunal - Database Vote Operations
===================================

Toggle-style vote records for escalations.
"""

import sqlite3
import time
import uuid
from typing import List, TYPE_CHECKING

from tribunal.core.logger import logger
from tribunal.core.database.models import VoteRecord

if TYPE_CHECKING:
    from tribunal.core.database.manager import DatabaseManager


class VotesMixin:
    """Mixin for escalation vote operations."""

    def toggle_vote(
        self: "DatabaseManager",
        escalation_id: str,
        voter_id: int,
        vote: str,
    ) -> bool:
        """
        Add the vote if absent, remove it if present.

        DESIGN: Runs in one immediate transaction. A voter may hold votes
        for several resolutions at once; only the exact
        (escalation, voter, resolution) triple is toggled. A unique-constraint
        hit means a concurrent click already inserted the row and is
        treated as a no-op.

        Returns:
            True if a vote was inserted, False if one was removed or the
            insert lost a race.
        """
        try:
            with self.transaction() as tx:
                tx.execute(
                    """DELETE FROM escalation_votes
                       WHERE escalation_id = ? AND voter_id = ? AND vote = ?""",
                    (escalation_id, voter_id, vote),
                )
                if tx.rowcount > 0:
                    return False

                tx.execute(
                    """INSERT INTO escalation_votes (id, escalation_id, voter_id, vote, voted_at)
                       VALUES (?, ?, ?, ?, ?)""",
                    (str(uuid.uuid4()), escalation_id, voter_id, vote, time.time()),
                )
                return True
        except sqlite3.IntegrityError as e:
            logger.warning("Vote Insert Conflict (ignored)", [
                ("Escalation", escalation_id),
                ("Voter", str(voter_id)),
                ("Vote", vote),
                ("Error", str(e)[:100]),
            ])
            return False

    def get_votes(self: "DatabaseManager", escalation_id: str) -> List[VoteRecord]:
        """Get all votes for an escalation in the order they were cast."""
        rows = self.fetchall(
            """SELECT * FROM escalation_votes
               WHERE escalation_id = ?
               ORDER BY voted_at ASC, rowid ASC""",
            (escalation_id,),
        )
        return [dict(row) for row in rows]
