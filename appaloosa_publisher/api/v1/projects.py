"""Project, publisher configuration and deployment history endpoints."""

from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, Query, status
import structlog
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from appaloosa_publisher.api.deps import (
    ClientFactoryDep,
    ListerDep,
    ProjectDep,
    ProjectsDep,
)
from appaloosa_publisher.core.exceptions import BuildNotFoundError, ConfigurationError
from appaloosa_publisher.core.publisher import AppaloosaPublisher
from appaloosa_publisher.models.build import Build, BuildResult, Project, Promotion
from appaloosa_publisher.models.history import DeploymentAction
from appaloosa_publisher.models.publisher import (
    DeploymentOutcome,
    PublisherConfig,
    PublishStatus,
)
from appaloosa_publisher.utils.build_log import BuildListener
from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ProjectCreate(BaseModel):
    """Request to create a project."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9._-]*$",
    )


class ProjectResponse(BaseModel):
    """Project summary."""

    name: str
    publisher_configured: bool
    build_count: int
    last_build: int | None = None
    created_at: datetime

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        builds = project.get_builds()
        return cls(
            name=project.name,
            publisher_configured=project.publisher is not None,
            build_count=len(builds),
            last_build=builds[0].number if builds else None,
            created_at=project.created_at,
        )


class ProjectListResponse(BaseModel):
    """Response for listing projects."""

    projects: list[ProjectResponse]
    total: int
    limit: int
    offset: int


class PublisherConfigResponse(BaseModel):
    """Stored publisher configuration, token masked."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    file_pattern: str = Field(alias="filePattern")

    @classmethod
    def from_config(cls, config: PublisherConfig) -> "PublisherConfigResponse":
        return cls(token=config.masked_token, file_pattern=config.file_pattern)


class BuildCreate(BaseModel):
    """A finished build reported by the host, or a promotion of one."""

    number: int | None = Field(default=None, ge=1)
    result: BuildResult = BuildResult.SUCCESS
    artifacts_dir: str = Field(..., min_length=1)
    promotion_of: int | None = Field(default=None, ge=1)


class BuildRunResponse(BaseModel):
    """Result of running the publisher on a build."""

    build_number: int
    target_build_number: int
    status: PublishStatus
    performed: bool
    success: bool
    files: list[str]
    outcomes: list[DeploymentOutcome]
    log: list[str]


class DeploymentActionResponse(BaseModel):
    """One deployment shown in the history panel."""

    build_number: int
    success: bool
    deployed_count: int
    failed_count: int
    outcomes: list[DeploymentOutcome]
    created_at: datetime

    @classmethod
    def from_action(cls, action: DeploymentAction) -> "DeploymentActionResponse":
        return cls(
            build_number=action.build_number,
            success=action.success,
            deployed_count=action.deployed_count,
            failed_count=action.failed_count,
            outcomes=list(action.outcomes),
            created_at=action.created_at,
        )


class HistoryPanelResponse(BaseModel):
    """Project page panel with the latest deployment."""

    project: str
    display_name: str = "Appaloosa"
    actions: list[DeploymentActionResponse]


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(data: ProjectCreate, projects: ProjectsDep) -> ProjectResponse:
    project = await projects.create_project(data.name)
    logger.info("project.created", project=project.name)
    return ProjectResponse.from_project(project)


@router.get("", response_model=ProjectListResponse, summary="List projects")
async def list_projects(
    projects: ProjectsDep,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ProjectListResponse:
    items, total = await projects.list_projects(limit=limit, offset=offset)
    return ProjectListResponse(
        projects=[ProjectResponse.from_project(p) for p in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{name}", response_model=ProjectResponse, summary="Get a project")
async def get_project(project: ProjectDep) -> ProjectResponse:
    return ProjectResponse.from_project(project)


@router.put(
    "/{name}/publisher",
    response_model=PublisherConfigResponse,
    response_model_by_alias=True,
    summary="Configure the Appaloosa publisher",
    description="Binds the configuration form (`token`, `filePattern`). Blank values are "
    "accepted and make the publisher fail when it runs.",
)
async def configure_publisher(
    project: ProjectDep,
    projects: ProjectsDep,
    form: dict[str, Any] = Body(...),
) -> PublisherConfigResponse:
    step = AppaloosaPublisher.from_form(form)
    await projects.configure_publisher(project.name, step.config)
    logger.info("project.publisher_configured", project=project.name)
    return PublisherConfigResponse.from_config(step.config)


@router.get(
    "/{name}/publisher",
    response_model=PublisherConfigResponse,
    response_model_by_alias=True,
    summary="Get the publisher configuration",
)
async def get_publisher(project: ProjectDep) -> PublisherConfigResponse:
    if project.publisher is None:
        raise ConfigurationError("publisher", f"Publisher not configured for {project.name}")
    return PublisherConfigResponse.from_config(project.publisher)


@router.post(
    "/{name}/builds",
    response_model=BuildRunResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a build and publish its artifacts",
)
async def run_build(
    data: BuildCreate,
    project: ProjectDep,
    projects: ProjectsDep,
    lister: ListerDep,
    client_factory: ClientFactoryDep,
) -> BuildRunResponse:
    if project.publisher is None:
        raise ConfigurationError("publisher", f"Publisher not configured for {project.name}")

    number = data.number or project.next_build_number
    structlog.contextvars.bind_contextvars(build=number)
    if data.promotion_of is not None:
        target = project.get_build(data.promotion_of)
        if target is None:
            raise BuildNotFoundError(project.name, data.promotion_of)
        context: Build | Promotion = Promotion(
            number=number,
            result=data.result,
            artifacts_dir=Path(data.artifacts_dir),
            target=target,
        )
    else:
        context = await projects.record_build(
            project.name,
            Build(number=number, result=data.result, artifacts_dir=Path(data.artifacts_dir)),
        )

    step = AppaloosaPublisher.from_config(
        project.publisher, lister=lister, client_factory=client_factory
    )
    listener = BuildListener(number)
    report = await run_in_threadpool(step.run, context, listener)

    target_number = context.target.number if isinstance(context, Promotion) else context.number
    return BuildRunResponse(
        build_number=number,
        target_build_number=target_number,
        status=report.status,
        performed=report.performed,
        success=report.success,
        files=report.files,
        outcomes=report.outcomes,
        log=listener.lines,
    )


@router.get(
    "/{name}/appaloosa",
    response_model=HistoryPanelResponse,
    summary="Latest Appaloosa deployment",
)
async def get_history(project: ProjectDep) -> HistoryPanelResponse:
    if project.publisher is not None:
        step = AppaloosaPublisher.from_config(project.publisher)
        actions = step.get_project_actions(project)
    else:
        actions = []
    return HistoryPanelResponse(
        project=project.name,
        actions=[DeploymentActionResponse.from_action(a) for a in actions],
    )
