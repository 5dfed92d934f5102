"""Custom exceptions for the Appaloosa publisher."""

from typing import Any


class AppaloosaPublisherError(Exception):
    """Base exception for the Appaloosa publisher."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(AppaloosaPublisherError):
    """Publisher configuration is incomplete."""

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field


class DeployError(AppaloosaPublisherError):
    """Uploading a file to Appaloosa failed."""

    def __init__(self, message: str, file_path: str | None = None):
        details = {}
        if file_path is not None:
            details["file_path"] = file_path
        super().__init__(message, details)
        self.file_path = file_path


class ArtifactDiscoveryError(AppaloosaPublisherError):
    """Listing artifacts on a build agent failed."""

    def __init__(self, message: str, root: str, pattern: str):
        super().__init__(
            f"Artifact discovery failed: {message}",
            {"root": root, "pattern": pattern},
        )


class ProjectNotFoundError(AppaloosaPublisherError):
    """Project not found."""

    def __init__(self, name: str):
        super().__init__(f"Project not found: {name}", {"project": name})


class BuildNotFoundError(AppaloosaPublisherError):
    """Build not found in a project."""

    def __init__(self, project: str, number: int):
        super().__init__(
            f"Build #{number} not found in project {project}",
            {"project": project, "build": number},
        )


class ArtifactAccessError(AppaloosaPublisherError):
    """Requested artifact root is outside the directory this agent serves."""

    def __init__(self, root: str, allowed_root: str):
        super().__init__(
            f"Artifact root {root} is outside {allowed_root}",
            {"root": root, "allowed_root": allowed_root},
        )
