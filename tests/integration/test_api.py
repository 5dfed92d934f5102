"""Integration tests for API endpoints."""

from pathlib import Path

import pytest
import structlog
from httpx import AsyncClient


async def create_configured_project(
    client: AsyncClient, name: str = "mobile-app", pattern: str = "**/*.apk"
) -> None:
    response = await client.post("/v1/projects", json={"name": name})
    assert response.status_code == 201
    response = await client.put(
        f"/v1/projects/{name}/publisher",
        json={"token": "org-token-5678", "filePattern": pattern},
    )
    assert response.status_code == 200


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "environment" in data


class TestProjectsEndpoints:
    """Tests for project and publisher configuration endpoints."""

    @pytest.mark.asyncio
    async def test_create_and_get_project(self, client: AsyncClient):
        response = await client.post("/v1/projects", json={"name": "mobile-app"})
        assert response.status_code == 201

        response = await client.get("/v1/projects/mobile-app")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "mobile-app"
        assert data["publisher_configured"] is False
        assert data["build_count"] == 0

    @pytest.mark.asyncio
    async def test_create_project_invalid_name(self, client: AsyncClient):
        response = await client.post("/v1/projects", json={"name": "My App"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_missing_project(self, client: AsyncClient):
        response = await client.get("/v1/projects/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_projects(self, client: AsyncClient):
        for name in ("b-app", "a-app"):
            await client.post("/v1/projects", json={"name": name})

        response = await client.get("/v1/projects")

        data = response.json()
        assert data["total"] == 2
        assert [p["name"] for p in data["projects"]] == ["a-app", "b-app"]

    @pytest.mark.asyncio
    async def test_configure_publisher_masks_token(self, client: AsyncClient):
        await create_configured_project(client)

        response = await client.get("/v1/projects/mobile-app/publisher")

        assert response.status_code == 200
        data = response.json()
        assert data["filePattern"] == "**/*.apk"
        assert data["token"].endswith("5678")
        assert "org-token" not in data["token"]

    @pytest.mark.asyncio
    async def test_publisher_not_configured(self, client: AsyncClient):
        await client.post("/v1/projects", json={"name": "mobile-app"})

        response = await client.get("/v1/projects/mobile-app/publisher")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFIGURATIONERROR"


class TestBuildsEndpoints:
    """Tests for publishing builds through the API."""

    @pytest.mark.asyncio
    async def test_publish_build(self, client: AsyncClient, artifacts_dir: Path, client_factory):
        await create_configured_project(client)

        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={"result": "success", "artifacts_dir": str(artifacts_dir)},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["build_number"] == 1
        assert data["status"] == "completed"
        assert data["success"] is True
        assert len(data["files"]) == 2
        assert len(client_factory.deployed) == 2
        assert client_factory.clients[0].token == "org-token-5678"
        assert data["log"][0].startswith("Found files:")

    @pytest.mark.asyncio
    async def test_failed_build_is_not_performed(
        self, client: AsyncClient, artifacts_dir: Path, client_factory
    ):
        await create_configured_project(client)

        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={"result": "failure", "artifacts_dir": str(artifacts_dir)},
        )

        data = response.json()
        assert data["status"] == "skipped"
        assert data["performed"] is False
        assert data["log"] == []
        assert client_factory.clients == []

    @pytest.mark.asyncio
    async def test_blank_token_fails(self, client: AsyncClient, artifacts_dir: Path, client_factory):
        await client.post("/v1/projects", json={"name": "mobile-app"})
        await client.put(
            "/v1/projects/mobile-app/publisher",
            json={"token": " ", "filePattern": "**/*.apk"},
        )

        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={"artifacts_dir": str(artifacts_dir)},
        )

        data = response.json()
        assert data["status"] == "invalid_config"
        assert data["success"] is False
        assert data["log"][0].startswith("ERROR: ")
        assert client_factory.clients == []

    @pytest.mark.asyncio
    async def test_promotion_publishes_original_build(
        self, client: AsyncClient, artifacts_dir: Path, tmp_path: Path, client_factory
    ):
        await create_configured_project(client, pattern="**/*.ipa")
        await client.post(
            "/v1/projects/mobile-app/builds",
            json={"artifacts_dir": str(tmp_path / "empty")},
        )
        client_factory.clients.clear()

        # build 1 has no matching files; promote build 2 instead
        await client.post(
            "/v1/projects/mobile-app/builds",
            json={"artifacts_dir": str(artifacts_dir)},
        )
        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={
                "number": 1,
                "artifacts_dir": str(tmp_path / "promotion"),
                "promotion_of": 2,
            },
        )

        data = response.json()
        assert data["target_build_number"] == 2
        assert data["files"] == ["ios/build/MyApp.ipa"]
        assert data["success"] is True

    @pytest.mark.asyncio
    async def test_promotion_of_missing_build(self, client: AsyncClient, artifacts_dir: Path):
        await create_configured_project(client)

        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={"artifacts_dir": str(artifacts_dir), "promotion_of": 9},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_build_without_publisher(self, client: AsyncClient, artifacts_dir: Path):
        await client.post("/v1/projects", json={"name": "mobile-app"})

        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={"artifacts_dir": str(artifacts_dir)},
        )

        assert response.status_code == 409


class TestHistoryEndpoint:
    """Tests for the deployment history panel."""

    @pytest.mark.asyncio
    async def test_history_shows_latest_successful_deployment(
        self, client: AsyncClient, artifacts_dir: Path, client_factory
    ):
        await create_configured_project(client)
        for result in ("success", "success", "failure"):
            await client.post(
                "/v1/projects/mobile-app/builds",
                json={"result": result, "artifacts_dir": str(artifacts_dir)},
            )

        response = await client.get("/v1/projects/mobile-app/appaloosa")

        assert response.status_code == 200
        data = response.json()
        assert data["display_name"] == "Appaloosa"
        assert [a["build_number"] for a in data["actions"]] == [2]
        assert data["actions"][0]["deployed_count"] == 2

    @pytest.mark.asyncio
    async def test_history_records_failed_uploads(
        self, client: AsyncClient, artifacts_dir: Path, client_factory
    ):
        await create_configured_project(client)
        client_factory.failing = {"app-debug.apk"}

        await client.post(
            "/v1/projects/mobile-app/builds",
            json={"artifacts_dir": str(artifacts_dir)},
        )
        response = await client.get("/v1/projects/mobile-app/appaloosa")

        action = response.json()["actions"][0]
        assert action["success"] is False
        assert action["failed_count"] == 1
        assert action["deployed_count"] == 1

    @pytest.mark.asyncio
    async def test_history_empty(self, client: AsyncClient):
        await create_configured_project(client)

        response = await client.get("/v1/projects/mobile-app/appaloosa")

        assert response.json()["actions"] == []


class TestAgentEndpoint:
    """Tests for remote artifact search."""

    @pytest.mark.asyncio
    async def test_search_artifacts(self, client: AsyncClient, artifacts_dir: Path):
        response = await client.post(
            "/v1/agent/artifacts/search",
            json={"root": str(artifacts_dir), "pattern": "**/*.apk,**/*.ipa"},
        )

        assert response.status_code == 200
        assert response.json()["files"] == [
            "android/build/outputs/app-debug.apk",
            "android/build/outputs/app-release.apk",
            "ios/build/MyApp.ipa",
        ]

    @pytest.mark.asyncio
    async def test_search_missing_root(self, client: AsyncClient, tmp_path: Path):
        response = await client.post(
            "/v1/agent/artifacts/search",
            json={"root": str(tmp_path / "missing"), "pattern": "**"},
        )

        assert response.json()["files"] == []

    @pytest.mark.asyncio
    async def test_search_outside_served_directory(self, client: AsyncClient):
        response = await client.post(
            "/v1/agent/artifacts/search",
            json={"root": "/etc", "pattern": "**/*"},
        )

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "ARTIFACTACCESSERROR"
        assert error["details"]["root"] == "/etc"

    @pytest.mark.asyncio
    async def test_search_escaping_with_parent_segments(self, client: AsyncClient):
        response = await client.post(
            "/v1/agent/artifacts/search",
            json={"root": "archive/../..", "pattern": "**/*"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_search_relative_root(self, client: AsyncClient, artifacts_dir: Path):
        response = await client.post(
            "/v1/agent/artifacts/search",
            json={"root": "archive", "pattern": "**/*.ipa"},
        )

        assert response.status_code == 200
        assert response.json()["files"] == ["ios/build/MyApp.ipa"]


class TestRequestLogging:
    """Tests for request id propagation and log context."""

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient):
        response = await client.get("/v1/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client: AsyncClient):
        first = await client.get("/v1/health")
        second = await client.get("/v1/health")

        assert first.headers["X-Request-ID"]
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_log_context_bound_for_project_requests(
        self, client: AsyncClient, monkeypatch
    ):
        from appaloosa_publisher.api.v1 import projects

        contexts = []

        class ContextRecorder:
            def info(self, event, **kwargs):
                contexts.append((event, structlog.contextvars.get_contextvars()))

        response = await client.post("/v1/projects", json={"name": "mobile-app"})
        assert response.status_code == 201
        monkeypatch.setattr(projects, "logger", ContextRecorder())

        await client.put(
            "/v1/projects/mobile-app/publisher",
            json={"token": "org-token", "filePattern": "**/*.apk"},
            headers={"X-Request-ID": "req-456"},
        )

        assert contexts == [
            (
                "project.publisher_configured",
                {"request_id": "req-456", "project": "mobile-app"},
            )
        ]
        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_publish_logs_tagged_with_build(
        self, client: AsyncClient, artifacts_dir: Path, monkeypatch
    ):
        from appaloosa_publisher.core import publisher

        contexts = {}

        class ContextRecorder:
            def info(self, event, **kwargs):
                contexts[event] = structlog.contextvars.get_contextvars()

            warning = info

        await create_configured_project(client)
        monkeypatch.setattr(publisher, "logger", ContextRecorder())

        response = await client.post(
            "/v1/projects/mobile-app/builds",
            json={"number": 9, "result": "success", "artifacts_dir": str(artifacts_dir)},
        )

        assert response.status_code == 201
        assert contexts["publisher.completed"]["project"] == "mobile-app"
        assert contexts["publisher.completed"]["build"] == 9
