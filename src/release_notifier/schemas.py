"""Pydantic models for the data that flows through one notification run.

Inbound:
- ReleaseRecord: a GitHub release object, as embedded in a `release`
  webhook event or returned by the releases API
- ReleaseEvent: the webhook delivery wrapping a ReleaseRecord

Pipeline:
- ReleaseContext: the resolved release (truncated body, version, link)

Outbound:
- NotificationEmbed / NotificationPayload: the chat webhook body
- NotificationResult: what a run reports back to its caller

Everything past the inbound models is frozen; a run builds each object
once and never mutates it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class ReleaseRecord(BaseModel):
    """A GitHub release.

    Attributes:
        tag_name: Git tag of the release (e.g., "v1.2.0")
        body: Release notes in markdown
        html_url: Canonical link to the release page
        name: Display name of the release, if any
    """

    model_config = ConfigDict(extra="ignore")

    tag_name: str = Field(..., min_length=1, description="Release tag")
    body: str = Field("", description="Release notes (markdown)")
    html_url: str = Field(..., description="Link to the release page")
    name: str | None = Field(None, description="Release display name")

    @field_validator("body", mode="before")
    @classmethod
    def null_body_is_empty(cls, value: Any) -> Any:
        # GitHub sends "body": null for releases without notes
        return "" if value is None else value


class ReleaseEvent(BaseModel):
    """A `release` webhook delivery from GitHub."""

    model_config = ConfigDict(extra="ignore")

    action: str | None = Field(None, description="e.g. published, edited")
    release: ReleaseRecord


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ReleaseContext(BaseModel):
    """The release a notification is built from.

    Attributes:
        body: Release notes, truncated with a link-back marker when long
        version: Tag label shown in the embed title
        url: Canonical link to the full release
    """

    model_config = ConfigDict(frozen=True)

    body: str
    version: str
    url: str


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


class NotificationEmbed(BaseModel):
    """A single rich embed block."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    color: str | None = None
    description: str


class NotificationPayload(BaseModel):
    """Body of the chat webhook request.

    Serialize with `to_request_body()` so unset display options are left
    out and the channel's own defaults apply.
    """

    model_config = ConfigDict(frozen=True)

    username: str | None = None
    avatar_url: str | None = None
    embeds: list[NotificationEmbed] = Field(..., min_length=1, max_length=1)

    def to_request_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class NotificationResult(BaseModel):
    """Outcome of one run, for logging and callers.

    `delivered` is False when the send failed or was skipped; the run
    itself still counts as successful.
    """

    version: str
    delivered: bool
    response: Any = None
    payload: NotificationPayload | None = None
