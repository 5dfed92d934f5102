"""Publisher configuration and result models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PublisherConfig(BaseModel):
    """Per-project publisher configuration bound from the settings form.

    Blank values are accepted here and rejected when the step runs.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token: str = ""
    file_pattern: str = Field(default="", alias="filePattern")

    @property
    def masked_token(self) -> str:
        if len(self.token) <= 4:
            return "*" * len(self.token)
        return "*" * (len(self.token) - 4) + self.token[-4:]


class DeploymentOutcome(BaseModel):
    """Result of uploading a single file."""

    model_config = ConfigDict(frozen=True)

    file: str
    success: bool
    error: str | None = None


class PublishStatus(str, Enum):
    """How far a publish run got."""

    SKIPPED = "skipped"
    INVALID_CONFIG = "invalid_config"
    NO_ARTIFACTS = "no_artifacts"
    COMPLETED = "completed"


class PublishReport(BaseModel):
    """Outcome of one publish run."""

    status: PublishStatus
    files: list[str] = Field(default_factory=list)
    outcomes: list[DeploymentOutcome] = Field(default_factory=list)

    @property
    def performed(self) -> bool:
        """False when the build result gate skipped the run."""
        return self.status != PublishStatus.SKIPPED

    @property
    def success(self) -> bool:
        return self.status == PublishStatus.COMPLETED and all(
            outcome.success for outcome in self.outcomes
        )
