"""
Tribunal - Centralized Constants
================================

Magic numbers and fixed strings live here. Import from this module
instead of hardcoding values.
"""

# =============================================================================
# Time Constants (in seconds)
# =============================================================================

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600

# =============================================================================
# Interval Constants (in seconds)
# =============================================================================

ESCALATION_CHECK_INTERVAL = 15 * SECONDS_PER_MINUTE   # Auto-resolution sweep
ESCALATION_CHECK_INTERVAL_MIN = SECONDS_PER_MINUTE
ESCALATION_CHECK_INTERVAL_MAX = SECONDS_PER_HOUR

# Cache TTL
GUILD_SETTINGS_TTL = 300              # 5 minutes - per-guild settings cache
GUILD_SETTINGS_CACHE_SIZE = 200

# =============================================================================
# Escalation Defaults
# =============================================================================

DEFAULT_QUORUM = 3
QUORUM_MIN = 1
QUORUM_MAX = 25

# Auto-resolution deadline: max(0, BASE - PER_VOTE * votes) hours
ESCALATION_BASE_HOURS = 24
ESCALATION_HOURS_PER_VOTE = 8

# "Timeout Overnight"
ESCALATION_TIMEOUT_HOURS = 12

VOTED_RESOLUTION_REASON = "voted resolution"

# =============================================================================
# Database Constants
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0
SQLITE_BUSY_TIMEOUT = 5000            # milliseconds
