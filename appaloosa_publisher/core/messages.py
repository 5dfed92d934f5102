"""User-facing build log messages."""

from collections.abc import Iterable

TEMPLATES = {
    "no_token": "No Appaloosa token is configured for this project",
    "no_file_pattern": "No file pattern is configured for this project",
    "found_files": "Found files: {files}",
    "no_artifacts_found": "No artifacts found matching pattern '{pattern}'",
    "deployed": "File deployed to Appaloosa",
    "deployment_failed": "Deployment to Appaloosa failed: {error}",
}


def no_token() -> str:
    return TEMPLATES["no_token"]


def no_file_pattern() -> str:
    return TEMPLATES["no_file_pattern"]


def found_files(files: Iterable[str]) -> str:
    return TEMPLATES["found_files"].format(files="[" + ", ".join(files) + "]")


def no_artifacts_found(pattern: str) -> str:
    return TEMPLATES["no_artifacts_found"].format(pattern=pattern)


def deployed() -> str:
    return TEMPLATES["deployed"]


def deployment_failed(error: str) -> str:
    return TEMPLATES["deployment_failed"].format(error=error)
