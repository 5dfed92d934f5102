"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file without clobbering the build environment
load_dotenv(override=False)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Appaloosa store
    appaloosa_base_url: str = "https://www.appaloosa-store.com"
    appaloosa_timeout_seconds: float = Field(default=60.0, gt=0)
    appaloosa_poll_interval_seconds: float = Field(default=1.0, ge=0)
    appaloosa_max_poll_attempts: int = Field(default=300, ge=1)

    # Build agent used for remote artifact discovery (local when unset)
    agent_url: str | None = None
    # Directory a build agent may search when asked by a controller
    agent_artifacts_root: str = "artifacts"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    log_directory: str = "logs"
    log_file_name: str = "appaloosa-publisher.log"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
