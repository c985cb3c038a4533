"""
Tribunal - Commands Package
===========================

Slash command cogs.

DESIGN:
    Each command module contains a Cog class and an async setup(bot).
    Cogs listed in COMMAND_COGS are loaded by the bot in setup_hook.

Available Commands:
    /escalate: Start a moderator vote on a user (moderator)
    /escalation-controls: Post an Escalate button for a user (moderator)
    /escalation-config: View or change escalation settings (manage server)
    /escalation-sweep: Resolve every due escalation now (moderator)
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "tribunal.commands.escalate",
]


__all__ = [
    "COMMAND_COGS",
]
