"""Artifact listing, in-process or on a build agent."""

from pathlib import Path
from typing import Any, Protocol

import httpx

from appaloosa_publisher.config import settings
from appaloosa_publisher.core.exceptions import ArtifactAccessError, ArtifactDiscoveryError
from appaloosa_publisher.core.file_finder import FileFinder
from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_PATH = "/v1/agent/artifacts/search"


class ArtifactLister(Protocol):
    """Lists files under an artifact root matching an ANT pattern."""

    def list_files(self, root: str | Path, pattern: str) -> list[str]: ...

    def close(self) -> None: ...


class LocalArtifactLister:
    """Runs the file finder in this process."""

    def list_files(self, root: str | Path, pattern: str) -> list[str]:
        return FileFinder(pattern).find(root)

    def close(self) -> None:
        pass


class RemoteArtifactLister:
    """Runs the file finder on the build agent holding the artifacts.

    The call blocks until the agent returns the full match list.
    """

    def __init__(
        self,
        agent_url: str,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.agent_url = agent_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout or settings.appaloosa_timeout_seconds
        )

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RemoteArtifactLister":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def list_files(self, root: str | Path, pattern: str) -> list[str]:
        root = str(root)
        logger.info(
            "artifacts.remote_search",
            agent=self.agent_url,
            root=root,
            pattern=pattern,
        )
        try:
            response = self._client.post(
                f"{self.agent_url}{SEARCH_PATH}",
                json={"root": root, "pattern": pattern},
            )
            response.raise_for_status()
            files = response.json()["files"]
        except httpx.HTTPError as e:
            raise ArtifactDiscoveryError(str(e), root, pattern) from e
        except (KeyError, ValueError) as e:
            raise ArtifactDiscoveryError(
                f"Invalid response from agent: {e}", root, pattern
            ) from e
        return [str(f) for f in files]


def get_artifact_lister() -> ArtifactLister:
    """Remote lister when a build agent is configured, local otherwise."""
    if settings.agent_url:
        return RemoteArtifactLister(settings.agent_url)
    return LocalArtifactLister()


def resolve_agent_root(root: str | Path, allowed_root: str | Path | None = None) -> Path:
    """Resolve a requested search root, refusing anything outside the served directory.

    Raises:
        ArtifactAccessError: if ``root`` resolves outside ``allowed_root``
    """
    base = Path(allowed_root or settings.agent_artifacts_root).resolve()
    resolved = (base / root).resolve()
    if resolved != base and not resolved.is_relative_to(base):
        raise ArtifactAccessError(str(root), str(base))
    return resolved
