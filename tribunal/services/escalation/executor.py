"""
Tribunal - Resolution Executor
==============================

Applies the moderation action for a resolution to a guild member.

DESIGN:
    The executor assumes the member was already resolved; callers handle
    "left the server" and "account no longer exists" before getting here.
    Any Discord failure surfaces as ResolutionExecutionError so the
    caller can leave the escalation open for the next sweep.
"""

from datetime import timedelta
from typing import Optional

import discord

from tribunal.core.constants import ESCALATION_TIMEOUT_HOURS, VOTED_RESOLUTION_REASON
from tribunal.core.database import EscalationRecord
from tribunal.core.errors import ResolutionExecutionError
from tribunal.core.logger import logger
from tribunal.services.escalation.constants import Resolution, resolution_label


class ResolutionExecutor:
    """
    Maps a resolution to a Discord moderation call.

    Attributes:
        timeout_hours: Length of the "Timeout Overnight" resolution.
        reason: Audit log reason attached to every action.
    """

    def __init__(
        self,
        timeout_hours: int = ESCALATION_TIMEOUT_HOURS,
        reason: str = VOTED_RESOLUTION_REASON,
    ) -> None:
        self.timeout_hours = timeout_hours
        self.reason = reason

    async def execute(
        self,
        resolution: str,
        escalation: EscalationRecord,
        member: discord.Member,
        restricted_role_id: Optional[int] = None,
    ) -> None:
        """
        Apply a resolution to the reported member.

        Raises:
            ResolutionExecutionError: If the action failed or cannot be applied.
        """
        resolution = Resolution(resolution)

        if resolution is Resolution.TRACK:
            logger.debug("Resolution Is Track, No Action", [("Escalation", escalation["id"])])
            return

        try:
            if resolution is Resolution.TIMEOUT:
                await member.timeout(timedelta(hours=self.timeout_hours), reason=self.reason)

            elif resolution is Resolution.RESTRICT:
                role = member.guild.get_role(restricted_role_id) if restricted_role_id else None
                if role is None:
                    raise ResolutionExecutionError(
                        escalation_id=escalation["id"],
                        resolution=resolution.value,
                        cause="restricted role is not configured",
                    )
                await member.add_roles(role, reason=self.reason)

            elif resolution is Resolution.KICK:
                await member.kick(reason=self.reason)

            elif resolution is Resolution.BAN:
                await member.ban(reason=self.reason)

        except discord.HTTPException as e:
            logger.error("Resolution Execution Failed", [
                ("Escalation", escalation["id"]),
                ("Resolution", resolution.value),
                ("User", f"{member} ({member.id})"),
                ("Error", str(e)[:100]),
            ])
            raise ResolutionExecutionError(
                escalation_id=escalation["id"],
                resolution=resolution.value,
                cause=e,
            ) from e

        logger.tree("Resolution Executed", [
            ("Escalation", escalation["id"]),
            ("Action", resolution_label(resolution)),
            ("User", f"{member} ({member.id})"),
            ("Reason", self.reason),
        ], emoji="⚖️")


__all__ = ["ResolutionExecutor"]
