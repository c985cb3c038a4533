"""
Tribunal - Configuration Tests
==============================

Tests for environment loading and permission helpers.
"""

from unittest.mock import MagicMock

import pytest

from tribunal.core import config as config_module
from tribunal.core.config import ConfigValidationError, has_mod_role, load_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "MODERATION_ROLE_ID", "RESTRICTED_ROLE_ID", "MOD_LOG_CHANNEL_ID",
        "ESCALATION_CHECK_INTERVAL", "ESCALATION_DEFAULT_QUORUM",
        "ESCALATION_BASE_HOURS", "ESCALATION_HOURS_PER_VOTE",
        "ESCALATION_TIMEOUT_HOURS", "MODERATOR_IDS", "ERROR_WEBHOOK_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DISCORD_TOKEN", "test-token")
    monkeypatch.setenv("DEVELOPER_ID", "1")
    monkeypatch.setattr(config_module, "_config", None)
    return monkeypatch


def _member(user_id, role_ids=(), administrator=False):
    member = MagicMock()
    member.id = user_id
    member.guild_permissions = MagicMock(administrator=administrator)
    member.roles = [MagicMock(id=role_id) for role_id in role_ids]
    return member


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults(self, clean_env):
        config = load_config()
        assert config.discord_token == "test-token"
        assert config.developer_id == 1
        assert config.default_quorum == 3
        assert config.escalation_base_hours == 24
        assert config.escalation_hours_per_vote == 8
        assert config.escalation_check_interval == 900
        assert config.moderation_role_id is None

    def test_missing_required(self, clean_env):
        clean_env.delenv("DISCORD_TOKEN")
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config()
        assert "DISCORD_TOKEN" in str(exc_info.value)

    def test_invalid_developer_id(self, clean_env):
        clean_env.setenv("DEVELOPER_ID", "abc")
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_interval_clamped(self, clean_env):
        clean_env.setenv("ESCALATION_CHECK_INTERVAL", "5")
        assert load_config().escalation_check_interval == 60

    def test_quorum_clamped_and_invalid(self, clean_env):
        clean_env.setenv("ESCALATION_DEFAULT_QUORUM", "500")
        assert load_config().default_quorum == 25
        clean_env.setenv("ESCALATION_DEFAULT_QUORUM", "many")
        assert load_config().default_quorum == 3

    def test_optional_ids(self, clean_env):
        clean_env.setenv("MODERATION_ROLE_ID", "42")
        clean_env.setenv("MODERATOR_IDS", "5, 6,bad")
        config = load_config()
        assert config.moderation_role_id == 42
        assert config.moderator_ids == {5, 6}

    def test_bad_webhook_ignored(self, clean_env):
        clean_env.setenv("ERROR_WEBHOOK_URL", "ftp://example.com")
        assert load_config().error_webhook_url is None


class TestHasModRole:
    """Tests for has_mod_role()."""

    def test_none_member(self, clean_env):
        assert has_mod_role(None, 42) is False

    def test_developer(self, clean_env):
        assert has_mod_role(_member(1), None) is True

    def test_moderator_ids(self, clean_env):
        clean_env.setenv("MODERATOR_IDS", "77")
        assert has_mod_role(_member(77), None) is True

    def test_administrator(self, clean_env):
        assert has_mod_role(_member(50, administrator=True), None) is True

    def test_role_holder(self, clean_env):
        assert has_mod_role(_member(50, role_ids=(42,)), 42) is True

    def test_plain_member(self, clean_env):
        assert has_mod_role(_member(50, role_ids=(43,)), 42) is False
