"""Dependency injection for API endpoints."""

from collections.abc import AsyncIterator, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status

from appaloosa_publisher.core.artifacts import (
    ArtifactLister,
    LocalArtifactLister,
    get_artifact_lister,
)
from appaloosa_publisher.core.projects import ProjectManager, get_project_manager
from appaloosa_publisher.core.publisher import UploadClient, default_client_factory
from appaloosa_publisher.models.build import Project


async def get_projects() -> ProjectManager:
    """Get the project manager."""
    return get_project_manager()


async def get_project_by_name(
    name: str,
    projects: Annotated[ProjectManager, Depends(get_projects)],
) -> Project:
    """Get a project by name or raise 404."""
    project = await projects.get_project(name)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project not found: {name}",
        )
    return project


async def get_lister() -> AsyncIterator[ArtifactLister]:
    """Artifact lister used by publish runs, closed after the request."""
    lister = get_artifact_lister()
    try:
        yield lister
    finally:
        lister.close()


async def get_agent_lister() -> ArtifactLister:
    """Lister answering remote searches; always scans this host."""
    return LocalArtifactLister()


async def get_client_factory() -> Callable[[str], UploadClient]:
    """Factory for Appaloosa upload clients."""
    return default_client_factory


# Type aliases for cleaner signatures
ProjectsDep = Annotated[ProjectManager, Depends(get_projects)]
ProjectDep = Annotated[Project, Depends(get_project_by_name)]
ListerDep = Annotated[ArtifactLister, Depends(get_lister)]
AgentListerDep = Annotated[ArtifactLister, Depends(get_agent_lister)]
ClientFactoryDep = Annotated[Callable[[str], UploadClient], Depends(get_client_factory)]
