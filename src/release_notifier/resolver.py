"""Resolve the release a run announces.

A run either announces the release embedded in its triggering event, or
looks one up by tag. The choice is made once, in `select_source`, and
resolved into a single ReleaseContext by `resolve_context`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from release_notifier.config import NotifierConfig
from release_notifier.context.github import GitHubClient, GitHubClientProtocol
from release_notifier.errors import ConfigurationError
from release_notifier.logging_config import get_logger
from release_notifier.schemas import ReleaseContext, ReleaseRecord

logger = get_logger(__name__)

MAX_BODY_LENGTH = 1500


class FromEvent(BaseModel):
    """Use the release carried by the triggering event."""

    model_config = ConfigDict(frozen=True)

    release: ReleaseRecord


class FromLookup(BaseModel):
    """Fetch the release for `tag` from the GitHub API."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    tag: str
    token: str


ReleaseSource = Union[FromEvent, FromLookup]


def truncate_body(body: str, url: str) -> str:
    """Cap release notes at MAX_BODY_LENGTH characters.

    Longer bodies are cut and get a markdown link back to the full release.
    """
    if len(body) < MAX_BODY_LENGTH:
        return body
    return body[:MAX_BODY_LENGTH] + f" ([...]({url}))"


def build_context(release: ReleaseRecord) -> ReleaseContext:
    return ReleaseContext(
        body=truncate_body(release.body, release.html_url),
        version=release.tag_name,
        url=release.html_url,
    )


def select_source(
    config: NotifierConfig,
    event: Mapping[str, Any] | None,
) -> ReleaseSource:
    """Pick where the release comes from.

    Args:
        config: Run configuration
        event: Triggering event payload, if any

    Raises:
        ConfigurationError: If a tag is configured without a token or
                            repository, or no tag is configured and the
                            event carries no release
    """
    if config.release_tag_name:
        if not config.github_token:
            raise ConfigurationError(
                "tag_name manually specified but github_token not provided. "
                "Token is required to fetch releases manually"
            )
        owner, repo = config.owner_and_repo()
        return FromLookup(
            owner=owner,
            repo=repo,
            tag=config.release_tag_name,
            token=config.github_token,
        )

    release = (event or {}).get("release")
    if not release:
        raise ConfigurationError(
            "Triggering event has no release. Run on a release event or "
            "set release_tag_name."
        )
    try:
        return FromEvent(release=ReleaseRecord.model_validate(release))
    except ValidationError as e:
        raise ConfigurationError(f"Release in triggering event is invalid: {e}") from e


async def resolve_context(
    source: ReleaseSource,
    github_client: GitHubClientProtocol | None = None,
) -> ReleaseContext:
    """Turn a ReleaseSource into a ReleaseContext.

    Args:
        source: Where the release comes from
        github_client: Client for lookups; a GitHubClient with the
                       source's token is created when omitted

    Raises:
        ReleaseLookupError: If a lookup fails
    """
    if isinstance(source, FromEvent):
        return build_context(source.release)

    logger.info(
        "manual_release_lookup",
        owner=source.owner,
        repo=source.repo,
        tag=source.tag,
    )
    client = github_client or GitHubClient(token=source.token)
    release = await client.get_release_by_tag(source.owner, source.repo, source.tag)
    logger.info("release_fetched", tag=release.tag_name, url=release.html_url)
    return build_context(release)
