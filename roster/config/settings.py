"""
Configuration Settings
======================

Centralized configuration using Pydantic V2 Settings.
"""

from typing import Optional

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from roster.core.constants import DeletePolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_env: str = Field(default="development")
    app_debug: bool = Field(default=False)
    database_url: str = Field(default="sqlite:///./data/roster.db")
    log_level: str = Field(default="INFO")
    default_actor: Optional[str] = Field(default=None)
    delete_policy: DeletePolicy = Field(default=DeletePolicy.ERROR)
    default_page_size: int = Field(default=20, gt=0)
    max_page_size: int = Field(default=2000, gt=0)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper()

    @field_validator("max_page_size")
    @classmethod
    def validate_page_sizes(cls, v: int, info: ValidationInfo) -> int:
        """Ensure the page size cap is not below the default page size."""
        default_size = info.data.get("default_page_size")
        if default_size is not None and v < default_size:
            raise ValueError(f"max_page_size ({v}) must be >= default_page_size ({default_size})")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
