"""
Tribunal - Database Module
==========================

SQLite persistence for escalations, votes and guild settings.
"""

from tribunal.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)
from tribunal.core.database.base import _safe_json_loads

from tribunal.core.database.models import (
    EscalationRecord,
    VoteRecord,
    GuildSettingsRecord,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",

    # Helpers
    "_safe_json_loads",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "EscalationRecord",
    "VoteRecord",
    "GuildSettingsRecord",
]
