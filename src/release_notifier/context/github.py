"""GitHub API client for fetching a release by tag.

Used in manual lookup mode, when a run is told which release to announce
instead of taking the one from the triggering event.

Design notes:
- Uses httpx for async HTTP requests
- Uses a Protocol so the resolver doesn't depend on the concrete
  implementation (makes testing with mocks easy)

GitHub API docs: https://docs.github.com/en/rest/releases/releases
"""

from __future__ import annotations

from typing import Protocol

import httpx

from release_notifier.errors import ReleaseLookupError
from release_notifier.schemas import ReleaseRecord

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class GitHubClientProtocol(Protocol):
    """Interface for fetching releases."""

    async def get_release_by_tag(
        self, owner: str, repo: str, tag: str
    ) -> ReleaseRecord:
        """Fetch the release published for `tag`.

        Raises:
            ReleaseLookupError: If the release cannot be fetched
        """
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubClient:
    """Real GitHub API client using httpx.

    Usage:
        client = GitHubClient(token="ghp_...")
        release = await client.get_release_by_tag("myorg", "api", "v1.2.0")
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub token, used as-is for the Authorization header
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._transport = transport
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "Authorization": f"Bearer {token}",
        }

    async def get_release_by_tag(
        self, owner: str, repo: str, tag: str
    ) -> ReleaseRecord:
        """GET /repos/{owner}/{repo}/releases/tags/{tag}.

        Raises:
            ReleaseLookupError: On any transport error, non-2xx status, or
                                a response that isn't a release object
        """
        path = f"/repos/{owner}/{repo}/releases/tags/{tag}"
        async with httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=self._headers,
            timeout=30.0,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.get(path)
                resp.raise_for_status()
                data = resp.json()
            except httpx.HTTPError as e:
                raise ReleaseLookupError(
                    f"Failed to fetch release {tag} of {owner}/{repo}: {e}"
                ) from e
            except ValueError as e:
                raise ReleaseLookupError(
                    f"GitHub returned invalid JSON for release {tag}: {e}"
                ) from e

        try:
            return ReleaseRecord.model_validate(data)
        except ValueError as e:
            raise ReleaseLookupError(
                f"Unexpected release payload for {tag} of {owner}/{repo}: {e}"
            ) from e


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockGitHubClient:
    """Mock GitHub client that returns predefined releases.

    Usage:
        client = MockGitHubClient(releases={"myorg/api": {"v1.0.0": data}})
        release = await client.get_release_by_tag("myorg", "api", "v1.0.0")
    """

    def __init__(self, releases: dict | None = None) -> None:
        """Initialize with optional predefined data.

        Args:
            releases: Nested dict of "owner/repo" -> tag -> release data
        """
        self._releases = releases or {}
        self.calls: list[tuple[str, str, str]] = []

    async def get_release_by_tag(
        self, owner: str, repo: str, tag: str
    ) -> ReleaseRecord:
        self.calls.append((owner, repo, tag))
        try:
            data = self._releases[f"{owner}/{repo}"][tag]
        except KeyError:
            raise ReleaseLookupError(
                f"No release {tag} in {owner}/{repo}"
            ) from None
        return ReleaseRecord.model_validate(data)
