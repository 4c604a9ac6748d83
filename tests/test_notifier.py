"""Tests for the pipeline orchestrator and the CLI entry point."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
import structlog

from release_notifier import notifier as notifier_module
from release_notifier.context.github import MockGitHubClient
from release_notifier.errors import ConfigurationError, ReleaseLookupError
from release_notifier.logging_config import setup_logging
from release_notifier.notifier import ReleaseNotifier, load_event, main


class RecordingWebhook:
    """httpx handler that records requests and answers like Discord."""

    def __init__(self, fail: bool = False) -> None:
        self.requests: list[httpx.Request] = []
        self.fail = fail

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"id": "42"})

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def webhook() -> RecordingWebhook:
    return RecordingWebhook()


@pytest_asyncio.fixture
async def http_client(webhook):
    async with httpx.AsyncClient(transport=httpx.MockTransport(webhook)) as client:
        yield client


# ---------------------------------------------------------------------------
# ReleaseNotifier
# ---------------------------------------------------------------------------


class TestReleaseNotifier:
    @pytest.mark.asyncio
    async def test_event_release_end_to_end(
        self, config, release_event, webhook, http_client
    ) -> None:
        result = await ReleaseNotifier(config, http_client=http_client).run(release_event)

        assert result.version == "v1.0.0"
        assert result.delivered is True
        assert result.response == {"id": "42"}

        [body] = webhook.bodies
        [embed] = body["embeds"]
        assert embed["title"] == "Release v1.0.0"
        assert embed["description"] == "**Notes**\nFixed bug\n"
        assert embed["url"] == "https://x/releases/v1.0.0"
        assert embed["color"] == "2105893"
        assert body["username"] == "Release Bot"
        assert str(webhook.requests[0].url) == f"{config.webhook_url}?wait=true"

    @pytest.mark.asyncio
    async def test_manual_lookup(self, config, webhook, http_client) -> None:
        github = MockGitHubClient(releases={
            "myorg/api": {
                "v0.9.0": {
                    "tag_name": "v0.9.0",
                    "body": "### Fixed\n\n- crash\n",
                    "html_url": "https://github.com/myorg/api/releases/tag/v0.9.0",
                }
            }
        })
        config = config.model_copy(
            update={"release_tag_name": "v0.9.0", "github_token": "ghp_x"}
        )

        result = await ReleaseNotifier(
            config, github_client=github, http_client=http_client
        ).run()

        assert github.calls == [("myorg", "api", "v0.9.0")]
        assert result.version == "v0.9.0"
        assert webhook.bodies[0]["embeds"][0]["description"] == "**__Fixed__**\n- crash\n"

    @pytest.mark.asyncio
    async def test_missing_webhook_url_fails_first(self, config, webhook, http_client) -> None:
        config = config.model_copy(
            update={"webhook_url": None, "release_tag_name": "v1.0.0"}
        )
        with pytest.raises(ConfigurationError, match="webhook_url not set"):
            await ReleaseNotifier(config, http_client=http_client).run()
        assert webhook.requests == []

    @pytest.mark.asyncio
    async def test_tag_without_token_fails_before_network(
        self, config, webhook, http_client
    ) -> None:
        github = MockGitHubClient()
        config = config.model_copy(update={"release_tag_name": "v1.0.0"})
        with pytest.raises(ConfigurationError, match="github_token not provided"):
            await ReleaseNotifier(config, github_client=github, http_client=http_client).run()
        assert github.calls == []
        assert webhook.requests == []

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_the_run(self, config, webhook, http_client) -> None:
        config = config.model_copy(
            update={"release_tag_name": "v1.0.0", "github_token": "ghp_x"}
        )
        with pytest.raises(ReleaseLookupError):
            await ReleaseNotifier(
                config, github_client=MockGitHubClient(), http_client=http_client
            ).run()
        assert webhook.requests == []

    @pytest.mark.asyncio
    async def test_webhook_failure_does_not_fail_the_run(self, config, release_event) -> None:
        failing = RecordingWebhook(fail=True)
        async with httpx.AsyncClient(transport=httpx.MockTransport(failing)) as client:
            result = await ReleaseNotifier(config, http_client=client).run(release_event)

        assert len(failing.requests) == 1
        assert result.delivered is False
        assert result.response is None

    @pytest.mark.asyncio
    async def test_dry_run_skips_send(self, config, release_event, webhook, http_client) -> None:
        result = await ReleaseNotifier(config, http_client=http_client).run(
            release_event, dry_run=True
        )
        assert webhook.requests == []
        assert result.delivered is False
        assert result.payload.embeds[0].title == "Release v1.0.0"


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def action_env(monkeypatch):
    """A clean GitHub Actions-like environment."""
    monkeypatch.setattr(notifier_module, "setup_logging", lambda: None)
    for name in (
        "INPUT_WEBHOOK_URL",
        "INPUT_COLOR",
        "INPUT_USERNAME",
        "INPUT_AVATAR_URL",
        "INPUT_RELEASE_TAG_NAME",
        "INPUT_GITHUB_TOKEN",
        "GITHUB_EVENT_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GITHUB_REPOSITORY", "myorg/api")
    return monkeypatch


@pytest.fixture
def event_file(tmp_path, release_event) -> str:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(release_event))
    return str(path)


class TestCLI:
    def test_missing_webhook_url(self, action_env, event_file, capsys) -> None:
        assert main(["--event", event_file]) == 1
        assert "::error::webhook_url not set" in capsys.readouterr().out

    def test_tag_without_token(self, action_env, event_file, capsys) -> None:
        action_env.setenv("INPUT_WEBHOOK_URL", "https://chat.example/hook")
        assert main(["--event", event_file, "--tag", "v1.0.0"]) == 1
        assert "github_token not provided" in capsys.readouterr().out

    def test_sends_event_release(self, action_env, event_file) -> None:
        action_env.setenv("INPUT_WEBHOOK_URL", "https://chat.example/hook")
        with patch.object(
            notifier_module.WebhookDispatcher,
            "dispatch",
            new=AsyncMock(return_value={"id": "42"}),
        ) as dispatch:
            assert main(["--event", event_file]) == 0

        [payload] = dispatch.await_args.args
        assert payload.embeds[0].title == "Release v1.0.0"

    def test_webhook_failure_still_exits_zero(self, action_env, event_file) -> None:
        action_env.setenv("INPUT_WEBHOOK_URL", "https://chat.example/hook")
        with patch.object(
            notifier_module.WebhookDispatcher, "dispatch", new=AsyncMock(return_value=None)
        ):
            assert main(["--event", event_file]) == 0

    def test_dry_run_prints_payload(self, action_env, event_file, capsys) -> None:
        action_env.setenv("INPUT_WEBHOOK_URL", "https://chat.example/hook")
        action_env.setenv("INPUT_USERNAME", "Release Bot")
        with patch.object(notifier_module.WebhookDispatcher, "dispatch") as dispatch:
            assert main(["--event", event_file, "--dry-run"]) == 0
        dispatch.assert_not_called()

        out = capsys.readouterr().out
        assert '"title": "Release v1.0.0"' in out
        assert '"username": "Release Bot"' in out

    def test_dry_run_stdout_is_only_the_payload(self, action_env, event_file, capsys) -> None:
        def real_logging() -> None:
            setup_logging(environment="development", log_level="INFO")
            structlog.configure(cache_logger_on_first_use=False)

        action_env.setattr(notifier_module, "setup_logging", real_logging)
        action_env.setenv("INPUT_WEBHOOK_URL", "https://chat.example/hook")

        assert main(["--event", event_file, "--dry-run"]) == 0

        captured = capsys.readouterr()
        payload = json.loads(captured.out)
        assert payload["embeds"][0]["title"] == "Release v1.0.0"
        assert payload["embeds"][0]["description"] == "**Notes**\nFixed bug\n"
        assert "dry_run_skipping_send" in captured.err


def test_load_event(event_file, release_event) -> None:
    assert load_event(event_file) == release_event
    assert load_event(None) is None
    assert load_event("/nonexistent/event.json") is None
