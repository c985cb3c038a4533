"""
Tribunal - Error Tests
======================

Tests for escalation error kinds and their user-facing messages.
"""

import pytest

from tribunal.core.errors import (
    ESCALATION_ERRORS,
    AlreadyResolvedError,
    ExternalApiError,
    NoLeaderError,
    NotAuthorizedError,
    NotFoundError,
    ResolutionExecutionError,
    describe_error,
)


class TestDescribeError:
    """Tests for describe_error()."""

    @pytest.mark.parametrize("error, message", [
        (NotAuthorizedError("expedite", 1), "Only moderators can expedite resolutions."),
        (NotAuthorizedError("vote", 1), "Only moderators can vote on escalations."),
        (NotAuthorizedError("escalate", 1), "❌ You don't have permission to do that."),
        (NotFoundError("esc-1"), "Escalation not found."),
        (NoLeaderError("esc-1", "no_votes"), "Cannot expedite: no votes have been cast."),
        (NoLeaderError("esc-1", "tied", ["kick", "ban"]),
         "Cannot expedite: no clear leading resolution (kick, ban)."),
        (ExternalApiError("fetch_member"), "Discord request failed, please try again."),
    ])
    def test_messages(self, error, message):
        assert describe_error(error) == message

    def test_already_resolved_shows_time(self):
        text = describe_error(AlreadyResolvedError("esc-1", 1234.5))
        assert "<t:1234:R>" in text

    def test_execution_error_mentions_retry(self):
        text = describe_error(ResolutionExecutionError("esc-1", "ban"))
        assert "retried automatically" in text


class TestErrorKinds:
    """Tests for the error classes themselves."""

    def test_all_kinds_are_exceptions(self):
        for kind in ESCALATION_ERRORS:
            assert issubclass(kind, Exception)

    def test_tags_are_distinct(self):
        assert len({kind.tag for kind in ESCALATION_ERRORS}) == len(ESCALATION_ERRORS)

    def test_can_be_raised_and_caught(self):
        with pytest.raises(ESCALATION_ERRORS) as exc_info:
            raise NotFoundError("esc-1")
        assert str(exc_info.value) == "escalation esc-1 not found"
