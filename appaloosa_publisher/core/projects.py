"""In-memory project storage."""

from functools import lru_cache

from appaloosa_publisher.core.exceptions import ProjectNotFoundError
from appaloosa_publisher.models.build import Build, Project
from appaloosa_publisher.models.publisher import PublisherConfig


class ProjectManager:
    """Keeps projects, their publisher configuration and their builds.

    Note: state lives in memory and is lost on restart.
    """

    def __init__(self):
        self._projects: dict[str, Project] = {}

    async def create_project(self, name: str) -> Project:
        """Create a project, or return the existing one with that name."""
        project = self._projects.get(name)
        if project is None:
            project = Project(name=name)
            self._projects[name] = project
        return project

    async def get_project(self, name: str) -> Project | None:
        """Get a project by name."""
        return self._projects.get(name)

    async def require_project(self, name: str) -> Project:
        """Get a project by name or raise."""
        project = self._projects.get(name)
        if project is None:
            raise ProjectNotFoundError(name)
        return project

    async def configure_publisher(self, name: str, config: PublisherConfig) -> Project:
        """Store the publisher configuration submitted for a project."""
        project = await self.require_project(name)
        project.publisher = config
        return project

    async def record_build(self, name: str, build: Build) -> Build:
        """Add a build to a project's history."""
        project = await self.require_project(name)
        project.builds = [b for b in project.builds if b.number != build.number]
        project.builds.append(build)
        return build

    async def delete_project(self, name: str) -> bool:
        """Delete a project."""
        if name in self._projects:
            del self._projects[name]
            return True
        return False

    async def list_projects(self, limit: int = 10, offset: int = 0) -> tuple[list[Project], int]:
        """List projects sorted by name."""
        projects = sorted(self._projects.values(), key=lambda p: p.name)
        total = len(projects)
        return projects[offset : offset + limit], total


@lru_cache
def get_project_manager() -> ProjectManager:
    """Get the project manager singleton."""
    return ProjectManager()
