#!/usr/bin/env python3
"""
Tribunal - Entry Point
======================

Loads .env, validates configuration and runs the bot until interrupted.
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from tribunal.core.config import ConfigValidationError, get_config, validate_and_log_config
from tribunal.core.logger import logger


async def main() -> None:
    """
    Main entry point.

    1. Validates configuration (required env vars)
    2. Creates the bot instance
    3. Connects to Discord and runs until closed

    Raises:
        SystemExit: If configuration is invalid.
    """
    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        sys.exit(1)

    from tribunal.bot import TribunalBot

    logger.tree("TRIBUNAL STARTING", [
        ("Commands", "/escalate, /escalation-controls, /escalation-config, /escalation-sweep"),
    ], emoji="⚖️")

    bot = TribunalBot()
    async with bot:
        await bot.start(get_config().discord_token)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
