"""Shared fixtures."""

from __future__ import annotations

import logging

import pytest
import structlog

from release_notifier.config import NotifierConfig


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any setup_logging() a test performs."""
    root_handlers = logging.root.handlers[:]
    root_level = logging.root.level
    yield
    structlog.reset_defaults()
    logging.root.handlers[:] = root_handlers
    logging.root.setLevel(root_level)


@pytest.fixture
def release_data() -> dict:
    """A release object as GitHub sends it."""
    return {
        "tag_name": "v1.0.0",
        "name": "1.0.0",
        "body": "## Notes\n\nFixed bug\n",
        "html_url": "https://x/releases/v1.0.0",
        "draft": False,
    }


@pytest.fixture
def release_event(release_data: dict) -> dict:
    return {"action": "published", "release": release_data}


@pytest.fixture
def config() -> NotifierConfig:
    return NotifierConfig(
        webhook_url="https://chat.example/api/webhooks/1/abc",
        color="2105893",
        username="Release Bot",
        avatar_url="https://chat.example/bot.png",
        repository="myorg/api",
    )
