"""Pipeline orchestrator and CLI entry point.

The notifier runs one pass per invocation:
1. Validate the configuration
2. Resolve the release (event or GitHub lookup)
3. Restyle the release notes
4. Build and send the webhook payload

Configuration and lookup errors fail the run. Webhook failures are
logged by the dispatcher and the run still succeeds.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Mapping
from typing import Any

import httpx

from release_notifier.config import NotifierConfig
from release_notifier.context.github import GitHubClientProtocol
from release_notifier.dispatcher import WebhookDispatcher, build_payload
from release_notifier.errors import ConfigurationError, ReleaseLookupError
from release_notifier.formatter import format_description
from release_notifier.logging_config import get_logger, setup_logging
from release_notifier.resolver import resolve_context, select_source
from release_notifier.schemas import NotificationResult

logger = get_logger(__name__)


class ReleaseNotifier:
    """Runs the release notification pipeline.

    Stateless between runs; each call to run() is independent.

    Usage:
        notifier = ReleaseNotifier(NotifierConfig.from_env())
        result = await notifier.run(event)
    """

    def __init__(
        self,
        config: NotifierConfig,
        github_client: GitHubClientProtocol | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the notifier with its dependencies.

        Args:
            config: Run configuration
            github_client: Client for manual lookups. Defaults to a
                           GitHubClient built from the configured token.
            http_client: httpx client for the webhook send
        """
        self.config = config
        self.github_client = github_client
        self.http_client = http_client

    async def run(
        self,
        event: Mapping[str, Any] | None = None,
        dry_run: bool = False,
    ) -> NotificationResult:
        """Announce one release.

        Args:
            event: Triggering event payload (ignored in manual lookup mode)
            dry_run: Build the payload but don't send it

        Returns:
            A NotificationResult describing the outcome

        Raises:
            ConfigurationError: If required inputs are missing
            ReleaseLookupError: If a manual lookup fails
        """
        self.config.validate_inputs()
        source = select_source(self.config, event)

        context = await resolve_context(source, self.github_client)
        description = format_description(context.body)
        payload = build_payload(context, description, self.config)

        if dry_run:
            logger.info("dry_run_skipping_send", version=context.version)
            return NotificationResult(
                version=context.version, delivered=False, payload=payload
            )

        dispatcher = WebhookDispatcher(self.config.webhook_url, client=self.http_client)
        response = await dispatcher.dispatch(payload)

        logger.info(
            "action_completed",
            version=context.version,
            delivered=response is not None,
        )
        return NotificationResult(
            version=context.version,
            delivered=response is not None,
            response=response,
            payload=payload,
        )


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------


def load_event(path: str | None) -> dict[str, Any] | None:
    """Read the triggering event JSON, if there is one."""
    if not path or not os.path.exists(path):
        return None
    with open(path) as f:
        return json.load(f)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point, meant to run as a GitHub Actions step.

    Usage:
        release-notifier
        release-notifier --tag v1.2.0 --dry-run

    Inputs come from INPUT_* environment variables. Exits 1 with a
    `::error::` annotation on configuration or lookup errors.
    """
    parser = argparse.ArgumentParser(description="Post a release notification to a chat webhook")
    parser.add_argument(
        "--event", "-e",
        type=str,
        default=os.environ.get("GITHUB_EVENT_PATH"),
        help="Path to the triggering event JSON (default: $GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--tag", "-t",
        type=str,
        help="Release tag to fetch instead of using the event's release",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload instead of sending it",
    )
    args = parser.parse_args(argv)

    setup_logging()

    config = NotifierConfig.from_env()
    if args.tag:
        config = config.model_copy(update={"release_tag_name": args.tag})

    try:
        event = load_event(args.event)
        result = asyncio.run(ReleaseNotifier(config).run(event, dry_run=args.dry_run))
    except (ConfigurationError, ReleaseLookupError) as e:
        logger.error("action_failed", error=str(e))
        print(f"::error::{e}")
        return 1

    if args.dry_run and result.payload is not None:
        print(json.dumps(result.payload.to_request_body(), indent=2))
    logger.info("action_completed_successfully", version=result.version)
    return 0


if __name__ == "__main__":
    sys.exit(main())
