"""Build steps and the registry the host discovers them from."""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from appaloosa_publisher.models.build import BuildContext, Project
from appaloosa_publisher.models.history import DeploymentAction
from appaloosa_publisher.utils.build_log import BuildListener
from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)


class BaseStep(ABC):
    """Base class for post-build steps.

    Steps must implement:
    - name: registry identifier
    - display_name: label used on the configuration screen
    - from_form(): build the step from submitted form data
    - perform(): run against a build, returning the step result
    """

    def __init__(self):
        self.logger = get_logger(f"step.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Step name/identifier."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name used in the configuration screen."""
        pass

    @classmethod
    @abstractmethod
    def from_form(cls, form: dict[str, Any]) -> "BaseStep":
        """Create the step from configuration form data."""
        pass

    def is_applicable(self, project_type: str) -> bool:
        """Whether the step can be added to this kind of project."""
        return True

    @abstractmethod
    def perform(self, build: BuildContext, listener: BuildListener) -> bool:
        """Run the step on a build.

        Returns:
            False when the step failed or was not performed
        """
        pass

    def get_project_actions(self, project: Project) -> list[DeploymentAction]:
        """Actions shown on the project page."""
        return []


class StepRegistry:
    """Registry of available build steps."""

    def __init__(self):
        self._steps: dict[str, type[BaseStep]] = {}
        self._display_names: dict[str, str] = {}

    def register(self, step_class: type[BaseStep], name: str, display_name: str) -> None:
        """Register a step class."""
        if name in self._steps:
            logger.warning(f"Overwriting existing step: {name}")

        self._steps[name] = step_class
        self._display_names[name] = display_name
        logger.info(f"Registered step: {name}")

    def get(self, name: str) -> type[BaseStep] | None:
        """Get a step class by name."""
        return self._steps.get(name)

    def create(self, name: str, form: dict[str, Any]) -> BaseStep | None:
        """Create a step instance by name from form data."""
        step_class = self.get(name)
        if step_class:
            return step_class.from_form(form)
        return None

    def display_name(self, name: str) -> str | None:
        return self._display_names.get(name)

    def list_steps(self) -> list[str]:
        """List all registered step names."""
        return list(self._steps.keys())


@lru_cache
def get_step_registry() -> StepRegistry:
    """Get the step registry singleton."""
    from appaloosa_publisher.core.publisher import AppaloosaPublisher

    registry = StepRegistry()
    registry.register(AppaloosaPublisher, AppaloosaPublisher.NAME, AppaloosaPublisher.DISPLAY_NAME)
    return registry
