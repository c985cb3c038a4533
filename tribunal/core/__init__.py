"""
Tribunal - Core Package
=======================

Configuration, logging, errors and persistence.

DESIGN:
    Core modules are singletons or global instances so state is
    consistent across the application:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    get_config,
    has_mod_role,
    is_developer,
    is_moderator,
)

from .logger import logger, TreeLogger


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    "has_mod_role",
    "is_developer",
    "is_moderator",
    # Logger
    "logger",
    "TreeLogger",
]
