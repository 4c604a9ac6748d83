"""Run configuration.

A NotifierConfig is built once at process entry and handed to the
pipeline; nothing downstream reads the environment.

As a GitHub Actions step, inputs arrive as INPUT_<NAME> environment
variables (the runner upper-cases the input name), and the repository
the workflow runs in as GITHUB_REPOSITORY ("owner/repo").
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from release_notifier.errors import ConfigurationError

INPUT_NAMES = (
    "webhook_url",
    "color",
    "username",
    "avatar_url",
    "release_tag_name",
    "github_token",
)


class NotifierConfig(BaseModel):
    """Inputs for one notification run.

    Attributes:
        webhook_url: Chat webhook endpoint (required)
        color: Embed accent color, passed through as given
        username: Display name override for the webhook message
        avatar_url: Avatar override for the webhook message
        release_tag_name: When set, fetch this release instead of using
                          the one in the triggering event
        github_token: Token for the GitHub API; required with
                      release_tag_name
        repository: "owner/repo" the release belongs to
    """

    model_config = ConfigDict(frozen=True)

    webhook_url: str | None = None
    color: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    release_tag_name: str | None = None
    github_token: str | None = None
    repository: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> NotifierConfig:
        """Read action inputs from the environment.

        Input names are matched case-insensitively, so both INPUT_WEBHOOK_URL
        and INPUT_webhook_url are accepted.
        """
        env = os.environ if environ is None else environ
        upper = {key.upper(): value for key, value in env.items()}
        values = {name: upper.get(f"INPUT_{name.upper()}") for name in INPUT_NAMES}
        values["repository"] = upper.get("GITHUB_REPOSITORY")
        return cls(**values)

    def validate_inputs(self) -> None:
        """Check the inputs every run needs.

        Raises:
            ConfigurationError: If the webhook URL is missing
        """
        if not self.webhook_url:
            raise ConfigurationError("webhook_url not set. Please set it.")

    def owner_and_repo(self) -> tuple[str, str]:
        """Split `repository` into (owner, repo).

        Raises:
            ConfigurationError: If the repository is missing or malformed
        """
        owner, _, repo = (self.repository or "").partition("/")
        if not owner or not repo:
            raise ConfigurationError(
                "repository not set. GITHUB_REPOSITORY must be 'owner/repo' "
                "to fetch releases manually"
            )
        return owner, repo
