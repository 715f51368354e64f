"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DisplaySettings(BaseSettings):
    """Display-related settings."""

    model_config = SettingsConfigDict(env_prefix="RUNFORGE_DISPLAY_", extra="ignore")

    # Simulator window
    window_width: int = 900
    window_height: int = 720
    fullscreen: bool = False
    title: str = "RUNFORGE"

    # Rendering
    fps: int = 60
    canvas_scale: float = Field(default=1.0, gt=0.0, le=4.0)


class AISettings(BaseSettings):
    """Theme generator settings."""

    model_config = SettingsConfigDict(
        env_prefix="RUNFORGE_AI_",
        extra="ignore",
        populate_by_name=True,
    )

    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "RUNFORGE_AI_GEMINI_API_KEY"),
    )

    # Model names
    theme_model: str = "gemini-3-flash-preview"

    # Timeouts
    timeout: float = 60.0

    # Retry settings
    max_retries: int = 3
    retry_delay: float = 1.0

    temperature: float = 0.9
    max_output_tokens: int = 2048


class StorageSettings(BaseSettings):
    """Durable state locations."""

    model_config = SettingsConfigDict(env_prefix="RUNFORGE_STORAGE_", extra="ignore")

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".runforge")
    high_score_file: str = "highscore.json"
    ai_log_dir: Path | None = None

    @property
    def high_score_path(self) -> Path:
        return self.data_dir / self.high_score_file

    @property
    def ai_log_path(self) -> Path:
        return self.ai_log_dir or (self.data_dir / "ai_logs")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="RUNFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False
    log_file: Path | None = None

    # Default prompt shown in the menu
    default_prompt: str = "Cyberpunk cat escape from robot dogs"

    # Nested settings
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    ai: AISettings = Field(default_factory=AISettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
