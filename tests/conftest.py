"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from appaloosa_publisher.api.deps import get_client_factory, get_lister
from appaloosa_publisher.core import artifacts
from appaloosa_publisher.core.artifacts import LocalArtifactLister
from appaloosa_publisher.core.exceptions import DeployError
from appaloosa_publisher.core.projects import get_project_manager
from appaloosa_publisher.main import app
from appaloosa_publisher.utils.build_log import BuildListener


class FakeUploadClient:
    """Upload client recording every deployed file."""

    def __init__(self, token: str, failing: set[str] | None = None):
        self.token = token
        self.failing = failing or set()
        self.deployed: list[str] = []
        self.sink = None
        self.closed = False

    def use_logger(self, sink) -> None:
        self.sink = sink

    def deploy_file(self, file_path: str) -> None:
        self.deployed.append(file_path)
        if Path(file_path).name in self.failing:
            raise DeployError(f"Upload rejected for {Path(file_path).name}", file_path)

    def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Creates fake clients and keeps them for assertions."""

    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.clients: list[FakeUploadClient] = []

    def __call__(self, token: str) -> FakeUploadClient:
        client = FakeUploadClient(token, self.failing)
        self.clients.append(client)
        return client

    @property
    def deployed(self) -> list[str]:
        return [path for client in self.clients for path in client.deployed]


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Archived artifacts of a mobile build."""
    root = tmp_path / "archive"
    files = [
        "android/build/outputs/app-release.apk",
        "android/build/outputs/app-debug.apk",
        "ios/build/MyApp.ipa",
        "ios/build/MyApp.app.dSYM.zip",
        "mapping.txt",
        ".git/config",
    ]
    for name in files:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"binary:" + name.encode())
    return root


@pytest.fixture
def listener() -> BuildListener:
    return BuildListener(build_number=1)


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
async def client(
    client_factory: FakeClientFactory, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> AsyncClient:
    """Async test client with fake uploads and a fresh project store.

    The agent serves artifacts under the test's temporary directory.
    """
    monkeypatch.setattr(artifacts.settings, "agent_artifacts_root", str(tmp_path))
    manager = get_project_manager()
    manager._projects.clear()
    app.dependency_overrides[get_lister] = LocalArtifactLister
    app.dependency_overrides[get_client_factory] = lambda: client_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    manager._projects.clear()
