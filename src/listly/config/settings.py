"""Configuration settings for Listly."""
from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root: src/listly/config/settings.py -> repository root
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

# Default log directory
DEFAULT_LOG_DIR = PROJECT_ROOT / "logs"
DEFAULT_LOG_FILE = DEFAULT_LOG_DIR / "listly.log"

VALID_COLLABORATOR_ROLES = ("VIEWER", "EDITOR", "ADMIN")


class ListlySettings(BaseSettings):
    """Application settings with environment variable support."""

    # Database
    DB_URL: str = "sqlite:///listly.db"
    DB_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[Path] = DEFAULT_LOG_FILE
    LOG_FORMAT: str = "detailed"  # simple, detailed
    LOG_RETENTION_DAYS: int = 7
    LOG_ROTATION_SIZE_MB: int = 1

    # List Settings
    MAX_LISTS_PER_USER: int = 100
    MAX_LIST_NAME_LENGTH: int = 100
    COPY_NAME_SUFFIX: str = " (Copy)"
    # Deleting a list cascades to its items unless this guard is switched on
    REQUIRE_EMPTY_LIST_ON_DELETE: bool = False

    # Item Settings
    MAX_ITEMS_PER_LIST: int = 500
    MAX_ITEM_NAME_LENGTH: int = 200

    # Collaboration Settings
    MAX_COLLABORATORS_PER_LIST: int = 10
    DEFAULT_COLLABORATOR_ROLE: str = "EDITOR"

    model_config = SettingsConfigDict(
        env_prefix="LISTLY_",
        case_sensitive=False,
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Convert relative DB path to absolute path from project root
        if self.DB_URL.startswith("sqlite:///") and ":memory:" not in self.DB_URL:
            relative_path = self.DB_URL.replace("sqlite:///", "")
            if not Path(relative_path).is_absolute():
                self.DB_URL = f"sqlite:///{PROJECT_ROOT / relative_path}"

        # Ensure log file path is absolute and parent directory exists
        if self.LOG_FILE:
            if not self.LOG_FILE.is_absolute():
                self.LOG_FILE = PROJECT_ROOT / self.LOG_FILE
            self.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        valid_formats = ["simple", "detailed"]
        v = v.lower()
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of: {', '.join(valid_formats)}")
        return v

    @field_validator("DEFAULT_COLLABORATOR_ROLE")
    @classmethod
    def validate_default_role(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_COLLABORATOR_ROLES:
            raise ValueError(
                f"Default collaborator role must be one of: {', '.join(VALID_COLLABORATOR_ROLES)}"
            )
        return v

    @field_validator("MAX_ITEMS_PER_LIST", "MAX_ITEM_NAME_LENGTH", "MAX_LIST_NAME_LENGTH")
    @classmethod
    def validate_positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Limits must be positive")
        return v


@lru_cache()
def get_settings() -> ListlySettings:
    """Get cached settings instance."""
    return ListlySettings()


def clear_settings_cache() -> None:
    """Clear the settings cache to force reload from environment."""
    get_settings.cache_clear()
