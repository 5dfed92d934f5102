"""Project-level deployment history."""

from collections.abc import Iterable

from appaloosa_publisher.models.build import Build, BuildResult
from appaloosa_publisher.models.history import DeploymentAction


def latest_deployment_actions(builds: Iterable[Build]) -> list[DeploymentAction]:
    """Deployment actions of the newest successful build that has any.

    ``builds`` must be ordered newest first. Older builds are never merged
    in, even when they carry deployment actions too.
    """
    for build in builds:
        if not build.result.is_better_or_equal_to(BuildResult.SUCCESS):
            continue
        actions = build.get_actions()
        if actions:
            return [action.copy_for_project() for action in actions]
    return []
