"""
Tribunal - Escalation Errors
============================

Tagged error kinds raised by the escalation workflow.

DESIGN:
    Each failure kind is its own dataclass carrying a payload and a
    `tag`. The kinds deliberately share no base class besides Exception;
    `EscalationError` is the closed union of all of them and
    `ESCALATION_ERRORS` is the matching tuple for `except` clauses.
    Interaction handlers turn any of them into a user-visible message via
    describe_error().
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Union


@dataclass(eq=False)
class NotAuthorizedError(Exception):
    """The invoking user lacks the role an operation requires."""

    operation: str
    user_id: int
    required_role: str = "moderator"
    tag: ClassVar[str] = "NotAuthorizedError"

    def __str__(self) -> str:
        return f"User {self.user_id} requires role '{self.required_role}' for {self.operation}"


@dataclass(eq=False)
class NotFoundError(Exception):
    """A keyed entity does not exist."""

    id: str
    resource: str = "escalation"
    tag: ClassVar[str] = "NotFoundError"

    def __str__(self) -> str:
        return f"{self.resource} {self.id} not found"


@dataclass(eq=False)
class AlreadyResolvedError(Exception):
    """The escalation reached its terminal state before this call."""

    escalation_id: str
    resolved_at: float
    tag: ClassVar[str] = "AlreadyResolvedError"

    def __str__(self) -> str:
        return f"Escalation {self.escalation_id} already resolved at {self.resolved_at}"


@dataclass(eq=False)
class NoLeaderError(Exception):
    """Expedite was requested without a decisive leading resolution."""

    escalation_id: str
    reason: str  # "no_votes" | "tied"
    tied_resolutions: Optional[List[str]] = field(default=None)
    tag: ClassVar[str] = "NoLeaderError"

    def __str__(self) -> str:
        if self.reason == "tied" and self.tied_resolutions:
            return f"Escalation {self.escalation_id} tied between {', '.join(self.tied_resolutions)}"
        return f"Escalation {self.escalation_id} has no leader ({self.reason})"


@dataclass(eq=False)
class ExternalApiError(Exception):
    """A platform call needed by the operation failed."""

    operation: str
    cause: Any = None
    tag: ClassVar[str] = "ExternalApiError"

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.cause}"


@dataclass(eq=False)
class ResolutionExecutionError(Exception):
    """The moderation action for a resolution could not be applied."""

    escalation_id: str
    resolution: str
    cause: Any = None
    tag: ClassVar[str] = "ResolutionExecutionError"

    def __str__(self) -> str:
        return f"Executing {self.resolution} for {self.escalation_id} failed: {self.cause}"


EscalationError = Union[
    NotAuthorizedError,
    NotFoundError,
    AlreadyResolvedError,
    NoLeaderError,
    ExternalApiError,
    ResolutionExecutionError,
]

ESCALATION_ERRORS = (
    NotAuthorizedError,
    NotFoundError,
    AlreadyResolvedError,
    NoLeaderError,
    ExternalApiError,
    ResolutionExecutionError,
)


def describe_error(error: EscalationError) -> str:
    """
    Map an escalation error to the message shown to the invoking user.

    Args:
        error: Any member of the EscalationError union.

    Returns:
        Short, ephemeral-friendly text.
    """
    if isinstance(error, NotAuthorizedError):
        if error.operation == "expedite":
            return "Only moderators can expedite resolutions."
        if error.operation == "vote":
            return "Only moderators can vote on escalations."
        return "❌ You don't have permission to do that."
    if isinstance(error, NotFoundError):
        return "Escalation not found."
    if isinstance(error, AlreadyResolvedError):
        return f"This escalation has already been resolved (<t:{int(error.resolved_at)}:R>)."
    if isinstance(error, NoLeaderError):
        if error.reason == "no_votes":
            return "Cannot expedite: no votes have been cast."
        tied = ", ".join(error.tied_resolutions or [])
        return f"Cannot expedite: no clear leading resolution ({tied})."
    if isinstance(error, ExternalApiError):
        return "Discord request failed, please try again."
    if isinstance(error, ResolutionExecutionError):
        return "Something went wrong while executing the resolution. It will be retried automatically."
    return "An unexpected error occurred."


__all__ = [
    "NotAuthorizedError",
    "NotFoundError",
    "AlreadyResolvedError",
    "NoLeaderError",
    "ExternalApiError",
    "ResolutionExecutionError",
    "EscalationError",
    "ESCALATION_ERRORS",
    "describe_error",
]
