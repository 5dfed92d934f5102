"""Data models for the Appaloosa publisher."""

from appaloosa_publisher.models.build import (
    Build,
    BuildContext,
    BuildResult,
    Project,
    Promotion,
    WrapsBuild,
    resolve_target,
)
from appaloosa_publisher.models.history import DeploymentAction
from appaloosa_publisher.models.publisher import (
    DeploymentOutcome,
    PublisherConfig,
    PublishReport,
    PublishStatus,
)

__all__ = [
    # Build models
    "Build",
    "BuildContext",
    "BuildResult",
    "Project",
    "Promotion",
    "WrapsBuild",
    "resolve_target",
    # History models
    "DeploymentAction",
    # Publisher models
    "DeploymentOutcome",
    "PublisherConfig",
    "PublishReport",
    "PublishStatus",
]
