"""
Tribunal - Escalation Commands
==============================

Slash commands for escalation voting:
    /escalate              Start a moderator vote on a user in this channel
    /escalation-controls   Post an Escalate button for a user in this channel
    /escalation-config     View or change this guild's escalation settings
    /escalation-sweep      Resolve every due escalation now
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from tribunal.core.config import EmbedColors, has_mod_role
from tribunal.core.constants import QUORUM_MAX, QUORUM_MIN
from tribunal.core.errors import ESCALATION_ERRORS, describe_error
from tribunal.core.logger import logger
from tribunal.services.escalation.views import build_escalation_controls_view
from tribunal.utils.interaction import safe_defer, safe_respond

if TYPE_CHECKING:
    from tribunal.bot import TribunalBot


class EscalateCog(commands.Cog):
    """Cog for starting and managing escalation votes."""

    def __init__(self, bot: "TribunalBot") -> None:
        self.bot = bot

    # =========================================================================
    # /escalate
    # =========================================================================

    @app_commands.command(name="escalate", description="Call a moderator vote on a user")
    @app_commands.describe(user="The user to vote on")
    @app_commands.guild_only()
    async def escalate(self, interaction: discord.Interaction, user: discord.Member) -> None:
        """Post a vote message in the current channel."""
        await safe_defer(interaction, ephemeral=True, thinking=True)

        if user.bot:
            await safe_respond(interaction, "Bots can't be escalated.")
            return

        try:
            escalation, created = await self.bot.escalation_handlers.start(
                interaction.channel, interaction.user, user.id,
            )
        except ESCALATION_ERRORS as e:
            await safe_respond(interaction, describe_error(e))
            return

        if not created:
            await safe_respond(
                interaction,
                f"An escalation for {user.mention} is already open: "
                f"https://discord.com/channels/{escalation['guild_id']}/"
                f"{escalation['thread_id']}/{escalation['vote_message_id']}",
            )
            return

        await safe_respond(interaction, "Escalation started")

    # =========================================================================
    # /escalation-controls
    # =========================================================================

    @app_commands.command(name="escalation-controls", description="Post moderator controls for a user")
    @app_commands.describe(user="The user the controls act on")
    @app_commands.guild_only()
    async def escalation_controls(self, interaction: discord.Interaction, user: discord.Member) -> None:
        """Post a message with an Escalate button in the current channel."""
        settings = self.bot.guild_settings.get(interaction.guild.id)
        if not has_mod_role(interaction.user, settings.moderator_role_id):
            await safe_respond(interaction, "❌ You don't have permission to use this command.")
            return

        if user.bot:
            await safe_respond(interaction, "Bots can't be escalated.")
            return

        await safe_defer(interaction, ephemeral=True)

        try:
            message = await interaction.channel.send(
                content=f"Moderator controls for <@{user.id}>",
                view=build_escalation_controls_view(user.id),
                allowed_mentions=discord.AllowedMentions.none(),
            )
        except discord.HTTPException as e:
            logger.error("Escalation Controls Failed", [
                ("User", str(user.id)),
                ("Channel", str(interaction.channel.id)),
                ("Error", str(e)[:100]),
            ])
            await safe_respond(interaction, "Failed to post escalation controls")
            return

        logger.tree("Escalation Controls Posted", [
            ("User", str(user.id)),
            ("By", f"{interaction.user} ({interaction.user.id})"),
            ("Message", str(message.id)),
        ], emoji="🎛️")
        await safe_respond(interaction, "Controls posted")

    # =========================================================================
    # /escalation-config
    # =========================================================================

    @app_commands.command(name="escalation-config", description="View or change escalation settings")
    @app_commands.describe(
        quorum="Votes for one option that resolve a simple vote early",
        moderator_role="Role allowed to vote",
        restricted_role="Role applied by the Restrict resolution",
        mod_log_channel="Channel resolution notices are forwarded to",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def escalation_config(
        self,
        interaction: discord.Interaction,
        quorum: Optional[app_commands.Range[int, QUORUM_MIN, QUORUM_MAX]] = None,
        moderator_role: Optional[discord.Role] = None,
        restricted_role: Optional[discord.Role] = None,
        mod_log_channel: Optional[discord.TextChannel] = None,
    ) -> None:
        """Show the effective settings, updating any that were passed."""
        settings = self.bot.guild_settings.get(interaction.guild.id)
        if not has_mod_role(interaction.user, settings.moderator_role_id):
            await safe_respond(interaction, "❌ You don't have permission to use this command.")
            return

        values = {}
        if quorum is not None:
            values["quorum"] = quorum
        if moderator_role is not None:
            values["moderator_role_id"] = moderator_role.id
        if restricted_role is not None:
            values["restricted_role_id"] = restricted_role.id
        if mod_log_channel is not None:
            values["mod_log_channel_id"] = mod_log_channel.id

        if values:
            settings = self.bot.guild_settings.update(interaction.guild.id, **values)
            logger.tree("Escalation Config Updated", [
                ("Guild", f"{interaction.guild.name} ({interaction.guild.id})"),
                ("By", f"{interaction.user} ({interaction.user.id})"),
                *[(key, str(value)) for key, value in values.items()],
            ], emoji="⚙️")

        embed = discord.Embed(
            title="Escalation Settings",
            color=EmbedColors.SUCCESS if values else EmbedColors.INFO,
        )
        embed.add_field(name="Quorum", value=str(settings.quorum), inline=True)
        embed.add_field(
            name="Moderator Role",
            value=f"<@&{settings.moderator_role_id}>" if settings.moderator_role_id else "Not set",
            inline=True,
        )
        embed.add_field(
            name="Restricted Role",
            value=f"<@&{settings.restricted_role_id}>" if settings.restricted_role_id else "Not set (Restrict hidden)",
            inline=True,
        )
        embed.add_field(
            name="Mod Log",
            value=f"<#{settings.mod_log_channel_id}>" if settings.mod_log_channel_id else "Not set",
            inline=True,
        )
        await safe_respond(interaction, embed=embed)

    # =========================================================================
    # /escalation-sweep
    # =========================================================================

    @app_commands.command(name="escalation-sweep", description="Resolve every escalation that is due now")
    @app_commands.guild_only()
    async def escalation_sweep(self, interaction: discord.Interaction) -> None:
        """Run one sweep immediately."""
        settings = self.bot.guild_settings.get(interaction.guild.id)
        if not has_mod_role(interaction.user, settings.moderator_role_id):
            await safe_respond(interaction, "❌ You don't have permission to use this command.")
            return

        await safe_defer(interaction, ephemeral=True, thinking=True)

        logger.tree("Manual Escalation Sweep", [
            ("By", f"{interaction.user} ({interaction.user.id})"),
        ], emoji="🧹")

        result = await self.bot.escalation_scheduler.run_once()
        if result is None:
            await safe_respond(interaction, "A sweep is already running, try again shortly.")
            return

        await safe_respond(
            interaction,
            f"Sweep finished: {result.processed} due, "
            f"{result.succeeded} resolved, {result.failed} failed.",
        )


async def setup(bot: "TribunalBot") -> None:
    """Load the Escalate cog."""
    await bot.add_cog(EscalateCog(bot))
    logger.tree("Escalate Cog Loaded", [
        ("Commands", "/escalate, /escalation-controls, /escalation-config, /escalation-sweep"),
    ], emoji="🗳️")


__all__ = ["EscalateCog", "setup"]
