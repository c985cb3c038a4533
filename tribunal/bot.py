"""
Tribunal - Bot Core
===================

Main bot class: wires the escalation services, loads command cogs,
registers persistent buttons and runs the auto-resolution scheduler.
"""

from datetime import datetime

import discord
from discord.ext import commands

from tribunal.core.config import get_config
from tribunal.core.database import get_db
from tribunal.core.logger import logger
from tribunal.services.escalation import (
    AutoResolutionScheduler,
    EscalationHandlers,
    EscalationResolver,
    EscalationService,
    GuildSettingsCache,
    setup_escalation_views,
)


class TribunalBot(commands.Bot):
    """
    Main Discord bot class.

    DESIGN: Central orchestrator that holds references to all services
    so buttons and cogs can reach them through interaction.client.

    SERVICE INITIALIZATION ORDER:
    1. __init__: database, settings cache, escalation service, resolver,
       handlers and scheduler (not started)
    2. setup_hook: command cogs, persistent buttons, command sync
    3. on_ready: error webhook, scheduler start
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        """Initialize the bot with the intents escalations need."""
        self.config = get_config()

        intents = discord.Intents.default()
        intents.members = True

        super().__init__(
            command_prefix="!",
            intents=intents,
            help_command=None,
        )

        self.db = get_db()
        self.start_time: datetime = datetime.now()

        self.guild_settings = GuildSettingsCache(db=self.db, config=self.config)
        self.escalation_service = EscalationService(db=self.db)
        self.escalation_resolver = EscalationResolver(self, self.escalation_service, self.guild_settings)
        self.escalation_handlers = EscalationHandlers(
            self.escalation_service, self.guild_settings, self.escalation_resolver,
        )
        self.escalation_scheduler = AutoResolutionScheduler(
            self, self.escalation_resolver, self.config.escalation_check_interval,
        )

        # Ready state guard
        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load cogs, register persistent buttons and sync commands."""
        from tribunal.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        setup_escalation_views(self)

        try:
            synced = await self.tree.sync()
            logger.tree("Commands Synced", [("Count", str(len(synced)))], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Start background services once connected."""
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        await self.escalation_scheduler.start()

        logger.tree("TRIBUNAL READY", [
            ("Sweep Interval", f"{self.config.escalation_check_interval}s"),
            ("Default Quorum", str(self.config.default_quorum)),
        ], emoji="⚖️")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")

        if self.escalation_scheduler:
            await self.escalation_scheduler.stop()

        self.db.close()
        await super().close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


__all__ = ["TribunalBot"]
