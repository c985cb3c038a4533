"""
Tribunal - Database Tests
=========================

Tests for the database layer to ensure data integrity.
"""

import json
import sqlite3
import time

import pytest


def _create(db, escalation_id="esc-1", created_at=1000.0, scheduled_for=2000.0, **overrides):
    values = dict(
        escalation_id=escalation_id,
        guild_id=1,
        thread_id=2,
        vote_message_id=3,
        reported_user_id=4,
        initiator_id=5,
        quorum=3,
        created_at=created_at,
        scheduled_for=scheduled_for,
    )
    values.update(overrides)
    return db.create_escalation(**values)


class TestEscalations:
    """Tests for escalation rows."""

    def test_create_and_get(self, test_db):
        row = _create(test_db)
        assert row["id"] == "esc-1"
        assert row["voting_strategy"] == "simple"
        assert json.loads(row["flags"]) == {"quorum": 3}
        assert row["resolved_at"] is None
        assert row["resolution"] is None

    def test_create_is_idempotent(self, test_db):
        """A second create with the same id returns the original row unchanged."""
        first = _create(test_db)
        second = _create(test_db, quorum=9, scheduled_for=9999.0)
        assert second == first

    def test_get_missing_returns_none(self, test_db):
        assert test_db.get_escalation("nope") is None

    def test_open_escalation_for_user(self, test_db):
        _create(test_db, "esc-old", created_at=1000.0)
        _create(test_db, "esc-new", created_at=2000.0)
        assert test_db.get_open_escalation_for_user(1, 4)["id"] == "esc-new"

        test_db.resolve_escalation_if_open("esc-new", "track")
        assert test_db.get_open_escalation_for_user(1, 4)["id"] == "esc-old"

    def test_resolve_only_once(self, test_db):
        _create(test_db)
        assert test_db.resolve_escalation_if_open("esc-1", "ban", 5000.0) is True
        assert test_db.resolve_escalation_if_open("esc-1", "kick", 6000.0) is False

        row = test_db.get_escalation("esc-1")
        assert row["resolution"] == "ban"
        assert row["resolved_at"] == 5000.0

    def test_resolve_missing_returns_false(self, test_db):
        assert test_db.resolve_escalation_if_open("nope", "ban") is False

    def test_resolved_and_resolution_set_together(self, test_db):
        _create(test_db)
        with pytest.raises(sqlite3.IntegrityError):
            test_db.execute("UPDATE escalations SET resolved_at = 1 WHERE id = 'esc-1'")

    def test_update_scheduled_for_skips_resolved(self, test_db):
        _create(test_db)
        assert test_db.update_scheduled_for("esc-1", 3000.0) is True
        test_db.resolve_escalation_if_open("esc-1", "track")
        assert test_db.update_scheduled_for("esc-1", 4000.0) is False
        assert test_db.get_escalation("esc-1")["scheduled_for"] == 3000.0

    def test_set_majority_strategy(self, test_db):
        _create(test_db)
        assert test_db.set_majority_strategy("esc-1", 1500.0) is True
        row = test_db.get_escalation("esc-1")
        assert row["voting_strategy"] == "majority"
        assert row["scheduled_for"] == 1500.0


class TestDueEscalations:
    """Tests for the sweep query."""

    def test_due_excludes_future_and_resolved(self, test_db):
        now = time.time()
        _create(test_db, "esc-due", scheduled_for=now - 10)
        _create(test_db, "esc-future", scheduled_for=now + 3600)
        _create(test_db, "esc-done", scheduled_for=now - 20)
        test_db.resolve_escalation_if_open("esc-done", "track")

        due = test_db.get_due_escalations(now)
        assert [row["id"] for row in due] == ["esc-due"]

    def test_due_oldest_deadline_first(self, test_db):
        _create(test_db, "esc-b", scheduled_for=200.0)
        _create(test_db, "esc-a", scheduled_for=100.0)
        assert [row["id"] for row in test_db.get_due_escalations(300.0)] == ["esc-a", "esc-b"]


class TestVotes:
    """Tests for toggle-style votes."""

    def test_toggle_adds_then_removes(self, test_db):
        _create(test_db)
        assert test_db.toggle_vote("esc-1", 10, "ban") is True
        assert len(test_db.get_votes("esc-1")) == 1

        assert test_db.toggle_vote("esc-1", 10, "ban") is False
        assert test_db.get_votes("esc-1") == []

    def test_voter_can_hold_several_resolutions(self, test_db):
        _create(test_db)
        test_db.toggle_vote("esc-1", 10, "ban")
        test_db.toggle_vote("esc-1", 10, "kick")
        assert [vote["vote"] for vote in test_db.get_votes("esc-1")] == ["ban", "kick"]

    def test_votes_require_existing_escalation(self, test_db):
        """Foreign keys are enforced; the conflict is logged and ignored."""
        assert test_db.toggle_vote("missing", 10, "ban") is False
        assert test_db.get_votes("missing") == []


class TestGuildSettings:
    """Tests for guild settings rows."""

    def test_missing_guild_returns_none(self, test_db):
        assert test_db.get_guild_settings(1) is None

    def test_update_creates_row(self, test_db):
        row = test_db.update_guild_settings(1, quorum=5)
        assert row["quorum"] == 5
        assert row["moderator_role_id"] is None

    def test_update_keeps_other_columns(self, test_db):
        test_db.update_guild_settings(1, quorum=5)
        row = test_db.update_guild_settings(1, moderator_role_id=77)
        assert row["quorum"] == 5
        assert row["moderator_role_id"] == 77

    def test_unknown_column_rejected(self, test_db):
        with pytest.raises(ValueError):
            test_db.update_guild_settings(1, prefix="!")
