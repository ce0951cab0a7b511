"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    All settings are validated when first accessed. Invalid values fail
    fast with clear error messages.
    """

    # Backend Settings
    api_base_url: str = Field(
        default="http://localhost:5006/api",
        description="Base URL of the document-processing/chat backend",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout for a single backend request in seconds",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for a backend call",
    )
    retry_backoff: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay for exponential backoff between attempts",
    )

    # Persistence Settings
    state_dir: Path = Field(
        default=Path("./data/state"),
        description="Directory holding persisted workspace snapshots",
    )
    snapshot_key: str = Field(
        default="docchat-state",
        min_length=1,
        description="Key under which the workspace snapshot is stored",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_prefix="DOCCHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Ensure the base URL is absolute and has no trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"api_base_url must start with http:// or https://, got '{v}'"
            )
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"log_level must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @field_validator("state_dir", mode="before")
    @classmethod
    def validate_state_dir(cls, v) -> Path:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings: The client settings

    Raises:
        ValueError: If settings validation fails
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# Convenience function to reload settings (useful for testing)
def reload_settings() -> Settings:
    """Reload settings from environment.

    Returns:
        Settings: The reloaded client settings
    """
    global _settings
    _settings = Settings()
    return _settings
