"""
Tribunal - Guild Escalation Settings
====================================

Per-guild settings resolved against config defaults, behind a TTL cache.

DESIGN:
    The cache is an explicit object owned by the bot and handed to the
    code that needs it. Writes go through GuildSettingsCache.update(),
    which invalidates the guild's entry, so a stale quorum or role is
    never served after /escalation-config changes it.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from tribunal.core.config import Config, get_config
from tribunal.core.constants import GUILD_SETTINGS_CACHE_SIZE, GUILD_SETTINGS_TTL
from tribunal.core.database import DatabaseManager, get_db
from tribunal.core.logger import logger
from tribunal.utils.cache import TTLCache


@dataclass(frozen=True)
class GuildSettings:
    """Effective escalation settings for one guild."""

    guild_id: int
    quorum: int
    moderator_role_id: Optional[int] = None
    restricted_role_id: Optional[int] = None
    mod_log_channel_id: Optional[int] = None

    @property
    def restrict_enabled(self) -> bool:
        """The restrict option is only offered when a restricted role is set."""
        return self.restricted_role_id is not None


class GuildSettingsCache:
    """TTL cache of GuildSettings keyed by guild id."""

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        config: Optional[Config] = None,
        ttl: timedelta = timedelta(seconds=GUILD_SETTINGS_TTL),
        max_size: int = GUILD_SETTINGS_CACHE_SIZE,
    ) -> None:
        self.db = db or get_db()
        self.config = config or get_config()
        self._cache: TTLCache[int, GuildSettings] = TTLCache(ttl=ttl, max_size=max_size)

    def get(self, guild_id: int) -> GuildSettings:
        """Get effective settings, loading from the database on a miss."""
        cached = self._cache.get(guild_id)
        if cached is not None:
            return cached

        settings = self._load(guild_id)
        self._cache.set(guild_id, settings)
        return settings

    def update(self, guild_id: int, **values) -> GuildSettings:
        """Persist settings for a guild and drop its cached entry."""
        self.db.update_guild_settings(guild_id, **values)
        self.invalidate(guild_id)
        return self.get(guild_id)

    def invalidate(self, guild_id: int) -> None:
        if self._cache.delete(guild_id):
            logger.debug("Guild Settings Invalidated", [("Guild ID", str(guild_id))])

    def clear(self) -> None:
        self._cache.clear()

    def _load(self, guild_id: int) -> GuildSettings:
        row = self.db.get_guild_settings(guild_id) or {}

        def pick(column: str, fallback):
            value = row.get(column)
            return value if value is not None else fallback

        return GuildSettings(
            guild_id=guild_id,
            quorum=pick("quorum", self.config.default_quorum),
            moderator_role_id=pick("moderator_role_id", self.config.moderation_role_id),
            restricted_role_id=pick("restricted_role_id", self.config.restricted_role_id),
            mod_log_channel_id=pick("mod_log_channel_id", self.config.mod_log_channel_id),
        )


__all__ = ["GuildSettings", "GuildSettingsCache"]
