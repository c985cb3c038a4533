"""
Tribunal - Test Fixtures
========================

Shared fixtures for all tests.
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set up test environment before importing modules
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ.setdefault("DEVELOPER_ID", "1")
os.environ.setdefault("TRIBUNAL_LOGS_DIR", tempfile.mkdtemp(prefix="tribunal-logs-"))

import discord

from tribunal.core.config import Config


GUILD_ID = 987654321
THREAD_ID = 555666777
VOTE_MESSAGE_ID = 888999000
REPORTED_USER_ID = 123456789
INITIATOR_ID = 111222333
MOD_ROLE_ID = 424242
RESTRICTED_ROLE_ID = 515151


def make_http_error(cls=discord.NotFound, status=404, reason="Not Found", text="Unknown Member"):
    """Build a discord.py HTTP exception without a real response."""
    return cls(MagicMock(status=status, reason=reason), text)


def make_moderator(user_id, guild_id=GUILD_ID, role_id=MOD_ROLE_ID):
    """Member holding the moderator role."""
    member = MagicMock()
    member.id = user_id
    member.name = f"mod{user_id}"
    member.guild = MagicMock()
    member.guild.id = guild_id
    member.guild_permissions = MagicMock(administrator=False)
    member.roles = [MagicMock(id=role_id)]
    return member


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_tribunal.db"


@pytest.fixture
def test_db(temp_db_path, monkeypatch):
    """Create a fresh test database instance."""
    from tribunal.core.database import manager as manager_module

    manager_module.DatabaseManager._instance = None
    monkeypatch.setattr(manager_module, "DB_PATH", temp_db_path)
    monkeypatch.setattr(manager_module, "DATA_DIR", temp_db_path.parent)

    db = manager_module.DatabaseManager()
    yield db

    db.close()
    manager_module.DatabaseManager._instance = None


# =============================================================================
# Config & Services
# =============================================================================

@pytest.fixture
def test_config():
    """Config with a moderator role and no restricted role."""
    return Config(
        discord_token="test-token",
        developer_id=1,
        moderation_role_id=MOD_ROLE_ID,
    )


@pytest.fixture
def settings_cache(test_db, test_config):
    from tribunal.services.escalation.settings import GuildSettingsCache
    return GuildSettingsCache(db=test_db, config=test_config)


@pytest.fixture
def service(test_db):
    from tribunal.services.escalation.executor import ResolutionExecutor
    from tribunal.services.escalation.scheduling import SchedulingPolicy
    from tribunal.services.escalation.service import EscalationService
    return EscalationService(
        db=test_db,
        policy=SchedulingPolicy(base_hours=24, hours_per_vote=8),
        executor=ResolutionExecutor(timeout_hours=12),
        default_quorum=3,
    )


@pytest.fixture
def create_escalation(service):
    """Factory for escalations in the test guild."""
    counter = {"n": 0}

    def _create(quorum=3, created_at=None, reported_user_id=REPORTED_USER_ID, escalation_id=None):
        counter["n"] += 1
        return service.create(
            guild_id=GUILD_ID,
            thread_id=THREAD_ID,
            vote_message_id=VOTE_MESSAGE_ID,
            reported_user_id=reported_user_id,
            initiator_id=INITIATOR_ID,
            quorum=quorum,
            escalation_id=escalation_id or f"esc-{counter['n']}",
            created_at=created_at,
        )

    return _create


# =============================================================================
# Mock Discord Objects
# =============================================================================

@pytest.fixture
def reported_member():
    """The member being voted on."""
    member = MagicMock()
    member.id = REPORTED_USER_ID
    member.name = "reported"
    member.display_name = "Reported User"
    member.timeout = AsyncMock()
    member.kick = AsyncMock()
    member.ban = AsyncMock()
    member.add_roles = AsyncMock()
    return member


@pytest.fixture
def mock_guild(reported_member):
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.fetch_member = AsyncMock(return_value=reported_member)
    guild.get_role = MagicMock(return_value=None)
    guild.get_channel = MagicMock(return_value=None)
    reported_member.guild = guild
    return guild


@pytest.fixture
def vote_message():
    message = MagicMock()
    message.id = VOTE_MESSAGE_ID
    message.jump_url = f"https://discord.com/channels/{GUILD_ID}/{THREAD_ID}/{VOTE_MESSAGE_ID}"
    message.edit = AsyncMock()
    message.reply = AsyncMock()
    return message


@pytest.fixture
def mock_thread(vote_message):
    thread = MagicMock()
    thread.id = THREAD_ID
    thread.send = AsyncMock(return_value=MagicMock(id=VOTE_MESSAGE_ID))
    thread.fetch_message = AsyncMock(return_value=vote_message)
    return thread


@pytest.fixture
def mock_bot(mock_guild, mock_thread):
    """Bot with a cached guild and thread."""
    bot = MagicMock()
    bot.get_guild = MagicMock(return_value=mock_guild)
    bot.fetch_guild = AsyncMock(return_value=mock_guild)
    bot.get_channel = MagicMock(return_value=mock_thread)
    bot.fetch_channel = AsyncMock(return_value=mock_thread)
    bot.fetch_user = AsyncMock()
    bot.wait_until_ready = AsyncMock()
    return bot


@pytest.fixture
def rate_limiter():
    limiter = MagicMock()
    limiter.acquire = AsyncMock(return_value=0.0)
    return limiter


@pytest.fixture
def resolver(mock_bot, service, settings_cache, rate_limiter):
    from tribunal.services.escalation.resolver import EscalationResolver
    return EscalationResolver(mock_bot, service, settings_cache, rate_limiter=rate_limiter)


@pytest.fixture
def handlers(service, settings_cache, resolver):
    from tribunal.services.escalation.handlers import EscalationHandlers
    return EscalationHandlers(service, settings_cache, resolver)


@pytest.fixture
def moderator():
    return make_moderator(201)


@pytest.fixture
def non_moderator():
    member = MagicMock()
    member.id = 999
    member.guild = MagicMock()
    member.guild.id = GUILD_ID
    member.guild_permissions = MagicMock(administrator=False)
    member.roles = []
    return member


@pytest.fixture
def mock_interaction(moderator, vote_message):
    """Component interaction from a moderator on the vote message."""
    interaction = MagicMock()
    interaction.user = moderator
    interaction.message = vote_message
    interaction.channel = MagicMock(id=THREAD_ID)
    interaction.client = MagicMock()
    interaction.response = MagicMock()
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=True)
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction
