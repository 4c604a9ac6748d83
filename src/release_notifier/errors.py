"""Exception hierarchy for the release notifier.

Only configuration and lookup errors fail a run. Dispatch errors are
caught by the dispatcher and logged, so a chat outage never marks the
release workflow as failed.
"""

from __future__ import annotations

from typing import Any


class NotifierError(Exception):
    """Base class for all release notifier errors."""


class ConfigurationError(NotifierError):
    """Required inputs are missing or inconsistent.

    Raised before any network activity.
    """


class ReleaseLookupError(NotifierError, LookupError):
    """Fetching a release from the GitHub API failed."""


class DispatchError(NotifierError):
    """Sending the webhook or parsing its response failed.

    The message never contains the webhook URL, which embeds the
    webhook's secret token. `status_code` and `response` carry what the
    endpoint answered, when it answered at all.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response
