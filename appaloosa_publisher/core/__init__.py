"""Core functionality for the Appaloosa publisher."""

from appaloosa_publisher.core.exceptions import (
    AppaloosaPublisherError,
    ArtifactAccessError,
    ArtifactDiscoveryError,
    BuildNotFoundError,
    ConfigurationError,
    DeployError,
    ProjectNotFoundError,
)
from appaloosa_publisher.core.file_finder import FileFinder
from appaloosa_publisher.core.history import latest_deployment_actions
from appaloosa_publisher.core.projects import ProjectManager, get_project_manager
from appaloosa_publisher.core.publisher import AppaloosaPublisher, publish
from appaloosa_publisher.core.steps import BaseStep, StepRegistry, get_step_registry

__all__ = [
    "AppaloosaPublisherError",
    "ArtifactAccessError",
    "ArtifactDiscoveryError",
    "BuildNotFoundError",
    "ConfigurationError",
    "DeployError",
    "ProjectNotFoundError",
    "FileFinder",
    "latest_deployment_actions",
    "ProjectManager",
    "get_project_manager",
    "AppaloosaPublisher",
    "publish",
    "BaseStep",
    "StepRegistry",
    "get_step_registry",
]
