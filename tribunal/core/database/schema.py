"""
Tribunal - Database Schema
==========================

Table definitions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tribunal.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Indexes added for the sweep query and vote lookups.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Escalations
        # DESIGN: resolved_at and resolution are set together, exactly once
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS escalations (
                id TEXT PRIMARY KEY,
                guild_id INTEGER NOT NULL,
                thread_id INTEGER NOT NULL,
                vote_message_id INTEGER NOT NULL,
                reported_user_id INTEGER NOT NULL,
                initiator_id INTEGER NOT NULL,
                flags TEXT NOT NULL,
                voting_strategy TEXT NOT NULL DEFAULT 'simple',
                created_at REAL NOT NULL,
                scheduled_for REAL NOT NULL,
                resolved_at REAL,
                resolution TEXT,
                CHECK ((resolved_at IS NULL) = (resolution IS NULL))
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_escalations_due "
            "ON escalations(resolved_at, scheduled_for)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_escalations_pending "
            "ON escalations(guild_id, reported_user_id, resolved_at)"
        )

        # -----------------------------------------------------------------
        # Escalation Votes
        # DESIGN: one row per (escalation, voter, resolution) - toggled
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS escalation_votes (
                id TEXT PRIMARY KEY,
                escalation_id TEXT NOT NULL REFERENCES escalations(id),
                voter_id INTEGER NOT NULL,
                vote TEXT NOT NULL,
                voted_at REAL NOT NULL,
                UNIQUE (escalation_id, voter_id, vote)
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_escalation_votes_escalation "
            "ON escalation_votes(escalation_id)"
        )

        # -----------------------------------------------------------------
        # Guild Settings
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guild_settings (
                guild_id INTEGER PRIMARY KEY,
                moderator_role_id INTEGER,
                restricted_role_id INTEGER,
                mod_log_channel_id INTEGER,
                quorum INTEGER,
                updated_at REAL NOT NULL
            )
        """)

        conn.commit()
