"""Build, promotion and project data models."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from appaloosa_publisher.models.history import DeploymentAction
from appaloosa_publisher.models.publisher import PublisherConfig


class BuildResult(str, Enum):
    """Build result, ordered from best to worst."""

    SUCCESS = "success"
    UNSTABLE = "unstable"
    FAILURE = "failure"
    NOT_BUILT = "not_built"
    ABORTED = "aborted"

    @property
    def ordinal(self) -> int:
        return _RESULT_ORDER.index(self)

    def is_worse_than(self, other: "BuildResult") -> bool:
        return self.ordinal > other.ordinal

    def is_worse_or_equal_to(self, other: "BuildResult") -> bool:
        return self.ordinal >= other.ordinal

    def is_better_than(self, other: "BuildResult") -> bool:
        return self.ordinal < other.ordinal

    def is_better_or_equal_to(self, other: "BuildResult") -> bool:
        return self.ordinal <= other.ordinal


_RESULT_ORDER = list(BuildResult)


class Build(BaseModel):
    """A completed or running build of a project."""

    number: int = Field(..., ge=1)
    result: BuildResult = BuildResult.SUCCESS
    artifacts_dir: Path
    actions: list[DeploymentAction] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    def add_action(self, action: DeploymentAction) -> None:
        self.actions.append(action)

    def get_actions(self) -> list[DeploymentAction]:
        return list(self.actions)


class Promotion(BaseModel):
    """Promotion of an already completed build.

    It has its own number, result and workspace, but artifact and result
    queries are meant for the promoted build held in ``target``.
    """

    number: int = Field(..., ge=1)
    result: BuildResult = BuildResult.SUCCESS
    artifacts_dir: Path
    target: Build


class BuildContext(Protocol):
    """What a publisher step needs from the build it runs in."""

    number: int
    result: BuildResult
    artifacts_dir: Path


@runtime_checkable
class WrapsBuild(Protocol):
    """Execution context wrapping an original build."""

    target: Build


def resolve_target(context: BuildContext) -> BuildContext:
    """Return the original build when the context wraps one."""
    if isinstance(context, WrapsBuild):
        return context.target
    return context


class Project(BaseModel):
    """A project with its publisher configuration and build history."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9._-]*$",
    )
    publisher: PublisherConfig | None = None
    builds: list[Build] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def get_builds(self) -> list[Build]:
        """Builds ordered newest first."""
        return sorted(self.builds, key=lambda build: build.number, reverse=True)

    def get_build(self, number: int) -> Build | None:
        for build in self.builds:
            if build.number == number:
                return build
        return None

    @property
    def next_build_number(self) -> int:
        return max((build.number for build in self.builds), default=0) + 1
