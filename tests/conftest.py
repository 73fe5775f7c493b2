"""
Shared fixtures: a small moderation bot catalog and engines built on it.
"""

import pytest

from commandless.config import CommandlessConfig
from commandless.metrics import EngineMetrics
from commandless.runtime.engine import CommandEngine, MessageIntake
from commandless.runtime.state import ConversationStore

BOT_ID = "mod-bot"

MODERATION_COMMANDS = [
    {
        "name": "warn",
        "description": "Warn a member of the server",
        "options": [
            {"name": "user", "type": 6, "required": True},
            {"name": "reason", "type": 3, "required": False},
        ],
    },
    {
        "name": "ban",
        "description": "Ban a member from the server",
        "options": [
            {"name": "user", "type": 6, "required": True},
            {"name": "reason", "type": 3, "required": False},
        ],
    },
    {
        "name": "purge",
        "description": "Delete a number of messages",
        "options": [
            {"name": "amount", "type": 4, "required": True},
        ],
    },
    {
        "name": "ping",
        "description": "Check the bot latency",
        "options": [],
    },
    {
        "name": "say",
        "description": "Make the bot say something",
        "options": [
            {"name": "message", "type": 3, "required": True},
        ],
    },
]


@pytest.fixture
def definitions():
    """Raw command definitions as returned by discovery"""
    return [dict(d, options=[dict(o) for o in d["options"]]) for d in MODERATION_COMMANDS]


@pytest.fixture
def config():
    """Default configuration (AI analysis off)"""
    return CommandlessConfig()


@pytest.fixture
def metrics():
    return EngineMetrics()


@pytest.fixture
def engine(config, metrics, definitions):
    """Engine with the moderation catalog loaded"""
    engine = CommandEngine(
        config=config,
        conversations=ConversationStore(),
        metrics=metrics,
    )
    engine.rebuild_catalog(BOT_ID, definitions)
    return engine


def intake(text, mentions=(), **kwargs):
    """Build a MessageIntake from author 7 in channel general."""
    kwargs.setdefault("author_id", "7")
    kwargs.setdefault("channel_id", "general")
    return MessageIntake(text=text, mentioned_user_ids=list(mentions), **kwargs)
