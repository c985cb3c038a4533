"""
Tribunal - Database Guild Settings Operations
=============================================

Per-guild escalation settings (moderator role, quorum, restricted role,
mod-log channel).
"""

import time
from typing import Optional, TYPE_CHECKING

from tribunal.core.logger import logger
from tribunal.core.database.models import GuildSettingsRecord

if TYPE_CHECKING:
    from tribunal.core.database.manager import DatabaseManager


_SETTINGS_COLUMNS = ("moderator_role_id", "restricted_role_id", "mod_log_channel_id", "quorum")


class GuildSettingsMixin:
    """Mixin for guild settings operations."""

    def get_guild_settings(self: "DatabaseManager", guild_id: int) -> Optional[GuildSettingsRecord]:
        """Get the stored settings row for a guild, if any."""
        row = self.fetchone("SELECT * FROM guild_settings WHERE guild_id = ?", (guild_id,))
        return dict(row) if row else None

    def update_guild_settings(self: "DatabaseManager", guild_id: int, **values) -> GuildSettingsRecord:
        """
        Upsert the given settings columns for a guild.

        Only keyword arguments naming a known column are written; others
        are left untouched.

        Raises:
            ValueError: If an unknown column is passed.
        """
        unknown = set(values) - set(_SETTINGS_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown guild settings: {', '.join(sorted(unknown))}")

        now = time.time()
        self.execute(
            "INSERT OR IGNORE INTO guild_settings (guild_id, updated_at) VALUES (?, ?)",
            (guild_id, now),
        )
        if values:
            assignments = ", ".join(f"{column} = ?" for column in values)
            self.execute(
                f"UPDATE guild_settings SET {assignments}, updated_at = ? WHERE guild_id = ?",
                (*values.values(), now, guild_id),
            )

        logger.tree("Guild Settings Updated", [
            ("Guild ID", str(guild_id)),
            *[(column, str(value)) for column, value in values.items()],
        ], emoji="⚙️")

        return self.get_guild_settings(guild_id)
