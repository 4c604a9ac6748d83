"""Build the webhook payload and send it.

The send is awaited only so its outcome can be logged. A failure to
deliver is never propagated: a chat outage must not fail the release
workflow that triggered the notification.
"""

from __future__ import annotations

from typing import Any

import httpx

from release_notifier.config import NotifierConfig
from release_notifier.errors import DispatchError
from release_notifier.logging_config import get_logger
from release_notifier.schemas import (
    NotificationEmbed,
    NotificationPayload,
    ReleaseContext,
)

logger = get_logger(__name__)


def build_embed(
    context: ReleaseContext,
    description: str,
    color: str | None = None,
) -> NotificationEmbed:
    return NotificationEmbed(
        title=f"Release {context.version}",
        url=context.url,
        color=color,
        description=description,
    )


def build_payload(
    context: ReleaseContext,
    description: str,
    config: NotifierConfig,
) -> NotificationPayload:
    """Assemble the webhook body from a resolved release.

    Args:
        context: The release being announced
        description: The formatted release notes
        config: Supplies color, username and avatar_url
    """
    return NotificationPayload(
        username=config.username,
        avatar_url=config.avatar_url,
        embeds=[build_embed(context, description, config.color)],
    )


class WebhookDispatcher:
    """Posts notification payloads to one chat webhook.

    Usage:
        dispatcher = WebhookDispatcher("https://discord.com/api/webhooks/...")
        response = await dispatcher.dispatch(payload)
    """

    def __init__(
        self,
        webhook_url: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            webhook_url: Webhook endpoint, without query string
            client: Optional shared httpx client; a short-lived one is
                    created per send otherwise
        """
        self.url = f"{webhook_url}?wait=true"
        self._client = client

    async def send(self, payload: NotificationPayload) -> Any:
        """POST the payload and return the decoded JSON response.

        Raises:
            DispatchError: On transport errors, non-2xx responses, or a
                           response body that isn't JSON
        """
        body = payload.to_request_body()
        headers = {"Content-Type": "application/json"}
        try:
            if self._client is not None:
                resp = await self._client.post(self.url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(self.url, json=body, headers=headers)
        except httpx.HTTPError as e:
            # str(e) of some httpx errors includes the URL
            raise DispatchError(f"Webhook request failed: {type(e).__name__}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise DispatchError(
                f"Webhook response is not JSON (HTTP {resp.status_code})",
                status_code=resp.status_code,
                response=resp.text,
            ) from e

        if resp.is_error:
            raise DispatchError(
                f"Webhook returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                response=data,
            )
        return data

    async def dispatch(self, payload: NotificationPayload) -> Any | None:
        """Send the payload, logging the outcome instead of raising.

        Returns:
            The decoded webhook response, or None if the send failed
        """
        try:
            data = await self.send(payload)
        except DispatchError as e:
            logger.warning(
                "webhook_dispatch_failed",
                error=str(e),
                status_code=e.status_code,
                response=e.response,
            )
            return None
        logger.info("webhook_response", response=data)
        return data
