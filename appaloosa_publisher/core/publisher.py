"""Publishing of build artifacts to Appaloosa."""

from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from appaloosa_publisher.core import messages
from appaloosa_publisher.core.artifacts import ArtifactLister, get_artifact_lister
from appaloosa_publisher.core.exceptions import DeployError
from appaloosa_publisher.core.history import latest_deployment_actions
from appaloosa_publisher.core.steps import BaseStep
from appaloosa_publisher.models.build import (
    BuildContext,
    BuildResult,
    Project,
    resolve_target,
)
from appaloosa_publisher.models.history import DeploymentAction
from appaloosa_publisher.models.publisher import (
    DeploymentOutcome,
    PublisherConfig,
    PublishReport,
    PublishStatus,
)
from appaloosa_publisher.utils.build_log import BuildListener
from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)


class UploadClient(Protocol):
    """Uploads one file to the store, raising ``DeployError`` on failure."""

    def use_logger(self, sink: Any) -> None: ...

    def deploy_file(self, file_path: str) -> Any: ...

    def close(self) -> None: ...


def default_client_factory(token: str) -> UploadClient:
    from appaloosa_publisher.client.appaloosa import AppaloosaClient

    return AppaloosaClient(token)


def publish(
    build_result: BuildResult,
    artifacts_dir: str | Path,
    config: PublisherConfig,
    lister: ArtifactLister,
    client_factory: Callable[[str], UploadClient],
    listener: BuildListener,
) -> PublishReport:
    """Upload the artifacts of a build matching the configured pattern.

    Runs are skipped for builds that already failed. Blank configuration
    and an empty match list fail the run before any upload. Every matched
    file is attempted even when earlier uploads fail.
    """
    if build_result.is_worse_or_equal_to(BuildResult.FAILURE):
        logger.info("publisher.skipped", result=build_result.value)
        return PublishReport(status=PublishStatus.SKIPPED)

    if not config.token.strip():
        listener.error(messages.no_token())
        return PublishReport(status=PublishStatus.INVALID_CONFIG)

    if not config.file_pattern.strip():
        listener.error(messages.no_file_pattern())
        return PublishReport(status=PublishStatus.INVALID_CONFIG)

    artifacts_dir = Path(artifacts_dir)
    files = lister.list_files(artifacts_dir, config.file_pattern)
    listener.println(messages.found_files(files))

    if not files:
        listener.error(messages.no_artifacts_found(config.file_pattern))
        return PublishReport(status=PublishStatus.NO_ARTIFACTS)

    client = client_factory(config.token)
    client.use_logger(listener)

    outcomes = []
    try:
        for filename in files:
            absolute_path = (artifacts_dir / filename).absolute()
            try:
                client.deploy_file(str(absolute_path))
            except DeployError as e:
                listener.println(messages.deployment_failed(e.message))
                logger.warning("publisher.file_failed", file=filename, error=e.message)
                outcomes.append(DeploymentOutcome(file=filename, success=False, error=e.message))
                continue
            listener.println(messages.deployed())
            outcomes.append(DeploymentOutcome(file=filename, success=True))
    finally:
        client.close()

    report = PublishReport(status=PublishStatus.COMPLETED, files=files, outcomes=outcomes)
    logger.info(
        "publisher.completed",
        files=len(files),
        failed=sum(1 for o in outcomes if not o.success),
        success=report.success,
    )
    return report


class AppaloosaPublisher(BaseStep):
    """Post-build step uploading archived artifacts to Appaloosa.

    It has to run after artifacts are archived, so hosts should schedule it
    with the notifiers at the end of the build.
    """

    NAME = "appaloosa"
    DISPLAY_NAME = "Upload to Appaloosa"

    def __init__(
        self,
        token: str,
        file_pattern: str,
        lister: ArtifactLister | None = None,
        client_factory: Callable[[str], UploadClient] | None = None,
    ):
        super().__init__()
        self.config = PublisherConfig(token=token, file_pattern=file_pattern)
        self._lister = lister
        self._client_factory = client_factory or default_client_factory

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def display_name(self) -> str:
        return self.DISPLAY_NAME

    @property
    def token(self) -> str:
        return self.config.token

    @property
    def file_pattern(self) -> str:
        return self.config.file_pattern

    @classmethod
    def from_form(cls, form: dict[str, Any]) -> "AppaloosaPublisher":
        config = PublisherConfig.model_validate(form)
        return cls(config.token, config.file_pattern)

    @classmethod
    def from_config(cls, config: PublisherConfig, **kwargs: Any) -> "AppaloosaPublisher":
        return cls(config.token, config.file_pattern, **kwargs)

    def run(self, build: BuildContext, listener: BuildListener) -> PublishReport:
        """Publish and record the outcome on the target build."""
        target = resolve_target(build)
        if target is not build:
            self.logger.info(
                "publisher.promotion_target",
                promotion=build.number,
                target=target.number,
            )

        lister = self._lister or get_artifact_lister()
        try:
            report = publish(
                target.result,
                target.artifacts_dir,
                self.config,
                lister,
                self._client_factory,
                listener,
            )
        finally:
            if self._lister is None:
                lister.close()

        if report.status == PublishStatus.COMPLETED and hasattr(target, "add_action"):
            target.add_action(
                DeploymentAction(build_number=target.number, outcomes=tuple(report.outcomes))
            )
        return report

    def perform(self, build: BuildContext, listener: BuildListener) -> bool:
        return self.run(build, listener).success

    def get_project_actions(self, project: Project) -> list[DeploymentAction]:
        return latest_deployment_actions(project.get_builds())
