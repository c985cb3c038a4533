"""
Tribunal - Configuration Module
===============================

Centralized configuration management with environment variable validation.

DESIGN:
    A single source of truth for process-wide settings, loaded from
    environment variables at startup. Per-guild settings (quorum,
    moderator role) live in the database; the values here are the
    fallbacks used when a guild has not configured its own.

    Key patterns:
    - Singleton via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Permission helpers centralize authorization logic
"""

import os
from dataclasses import dataclass
from typing import Optional, Set

from tribunal.core.constants import (
    DEFAULT_QUORUM,
    ESCALATION_BASE_HOURS,
    ESCALATION_CHECK_INTERVAL,
    ESCALATION_CHECK_INTERVAL_MAX,
    ESCALATION_CHECK_INTERVAL_MIN,
    ESCALATION_HOURS_PER_VOTE,
    ESCALATION_TIMEOUT_HOURS,
    QUORUM_MAX,
    QUORUM_MIN,
)


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        developer_id: User ID of the bot developer (always authorized).
        moderation_role_id: Fallback moderator role for guilds without settings.
        restricted_role_id: Fallback role applied by the "restrict" resolution.
        mod_log_channel_id: Fallback channel resolution notices are forwarded to.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str
    developer_id: int

    # -------------------------------------------------------------------------
    # Optional: Roles & Channels
    # -------------------------------------------------------------------------

    moderation_role_id: Optional[int] = None
    restricted_role_id: Optional[int] = None
    mod_log_channel_id: Optional[int] = None

    # -------------------------------------------------------------------------
    # Optional: Escalation Voting
    # -------------------------------------------------------------------------

    escalation_check_interval: int = ESCALATION_CHECK_INTERVAL
    default_quorum: int = DEFAULT_QUORUM
    escalation_base_hours: int = ESCALATION_BASE_HOURS
    escalation_hours_per_vote: int = ESCALATION_HOURS_PER_VOTE
    escalation_timeout_hours: int = ESCALATION_TIMEOUT_HOURS

    # -------------------------------------------------------------------------
    # Optional: Permissions
    # -------------------------------------------------------------------------

    moderator_ids: Set[int] = None

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Color palette for embeds and log notices."""

    GREEN = 0x1F5E2E
    GOLD = 0xE6B84A
    RED = 0xDC3545
    BLUE = 0x3498DB

    SUCCESS = GREEN
    WARNING = GOLD
    ERROR = RED
    INFO = BLUE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int(value: Optional[str], name: str) -> int:
    """
    Parse string to integer with descriptive error handling.

    Raises:
        ConfigValidationError: If value is missing or not a valid integer.
    """
    if not value:
        raise ConfigValidationError(f"Missing required: {name}")
    try:
        return int(value)
    except ValueError:
        raise ConfigValidationError(f"Invalid integer for {name}: {value}")


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """Parse optional string to integer, returning None on failure."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_set(value: Optional[str]) -> Set[int]:
    """Parse comma-separated string ("123,456") to a set of integers."""
    if not value:
        return set()
    result = set()
    for part in value.split(","):
        part = part.strip()
        if part:
            try:
                result.add(int(part))
            except ValueError:
                pass  # Skip invalid entries silently
    return result


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Out-of-range values are clamped and malformed values fall back to the
    default, both with a logged warning.
    """
    if not value:
        return default
    from tribunal.core.logger import logger
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL if it looks like http(s), otherwise None."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from tribunal.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    missing = []

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        missing.append("DISCORD_TOKEN")

    developer_id_str = os.getenv("DEVELOPER_ID")
    if not developer_id_str:
        missing.append("DEVELOPER_ID")

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    moderator_ids = _parse_int_set(os.getenv("MODERATOR_IDS"))

    return Config(
        discord_token=discord_token,
        developer_id=_parse_int(developer_id_str, "DEVELOPER_ID"),
        moderation_role_id=_parse_int_optional(os.getenv("MODERATION_ROLE_ID")),
        restricted_role_id=_parse_int_optional(os.getenv("RESTRICTED_ROLE_ID")),
        mod_log_channel_id=_parse_int_optional(os.getenv("MOD_LOG_CHANNEL_ID")),
        escalation_check_interval=_parse_int_with_default(
            os.getenv("ESCALATION_CHECK_INTERVAL"), ESCALATION_CHECK_INTERVAL,
            "ESCALATION_CHECK_INTERVAL",
            min_val=ESCALATION_CHECK_INTERVAL_MIN, max_val=ESCALATION_CHECK_INTERVAL_MAX,
        ),
        default_quorum=_parse_int_with_default(
            os.getenv("ESCALATION_DEFAULT_QUORUM"), DEFAULT_QUORUM,
            "ESCALATION_DEFAULT_QUORUM", min_val=QUORUM_MIN, max_val=QUORUM_MAX,
        ),
        escalation_base_hours=_parse_int_with_default(
            os.getenv("ESCALATION_BASE_HOURS"), ESCALATION_BASE_HOURS,
            "ESCALATION_BASE_HOURS", min_val=0, max_val=24 * 14,
        ),
        escalation_hours_per_vote=_parse_int_with_default(
            os.getenv("ESCALATION_HOURS_PER_VOTE"), ESCALATION_HOURS_PER_VOTE,
            "ESCALATION_HOURS_PER_VOTE", min_val=0, max_val=24 * 14,
        ),
        escalation_timeout_hours=_parse_int_with_default(
            os.getenv("ESCALATION_TIMEOUT_HOURS"), ESCALATION_TIMEOUT_HOURS,
            "ESCALATION_TIMEOUT_HOURS", min_val=1, max_val=24 * 28,
        ),
        moderator_ids=moderator_ids if moderator_ids else None,
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> None:
    """
    Validate configuration and log a summary at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from tribunal.core.logger import logger

    config = get_config()

    if not config.moderation_role_id:
        logger.info("Optional config not set: MODERATION_ROLE_ID")
    if not config.mod_log_channel_id:
        logger.info("Optional config not set: MOD_LOG_CHANNEL_ID")

    logger.tree("Configuration Validated", [
        ("Required", "✅ All required variables set"),
        ("Sweep Interval", f"{config.escalation_check_interval}s"),
        ("Default Quorum", str(config.default_quorum)),
        ("Deadline", f"max(0, {config.escalation_base_hours} - "
                     f"{config.escalation_hours_per_vote} × votes) hours"),
    ], emoji="⚙️")


# =============================================================================
# Permission Helpers
# =============================================================================

def is_developer(user_id: int) -> bool:
    """Check if user is the bot developer."""
    return user_id == get_config().developer_id


def is_moderator(user_id: int) -> bool:
    """Check if user is in the configured moderator ID list."""
    config = get_config()
    if config.moderator_ids:
        return user_id in config.moderator_ids
    return False


def has_mod_role(member, moderator_role_id: Optional[int] = None) -> bool:
    """
    Check if a member may act as a moderator in escalations.

    Args:
        member: Discord member object to check.
        moderator_role_id: The guild's moderator role, if configured.

    Returns:
        True for the developer, configured moderator IDs, administrators,
        or holders of the moderator role.
    """
    if member is None:
        return False

    if is_developer(member.id) or is_moderator(member.id):
        return True

    permissions = getattr(member, "guild_permissions", None)
    if permissions is not None and permissions.administrator:
        return True

    if moderator_role_id:
        for role in getattr(member, "roles", []):
            if role.id == moderator_role_id:
                return True

    return False


__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    "load_config",
    "validate_and_log_config",
    "is_developer",
    "is_moderator",
    "has_mod_role",
]
