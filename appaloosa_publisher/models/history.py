"""Deployment history data models."""

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from appaloosa_publisher.models.publisher import DeploymentOutcome


class DeploymentAction(BaseModel):
    """Outcome of one Appaloosa upload run, attached to its build.

    Immutable once recorded; a later run produces a new action on its own
    build instead of updating this one.
    """

    model_config = ConfigDict(frozen=True)

    display_name: ClassVar[str] = "Appaloosa"
    url_name: ClassVar[str] = "appaloosa"
    icon_file_name: ClassVar[str] = "appaloosa.png"

    build_number: int
    outcomes: tuple[DeploymentOutcome, ...] = ()
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def success(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    @property
    def deployed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    def copy_for_project(self) -> "DeploymentAction":
        """Copy shown on the project page."""
        return self.model_copy()
