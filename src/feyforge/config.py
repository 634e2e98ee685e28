"""Configuration management for feyforge using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TempHPPolicy = Literal["replace", "keep_higher"]


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="FEYFORGE_",
        extra="ignore",
    )

    # Rules Settings
    temp_hp_policy: TempHPPolicy = Field(
        default="replace",
        description="How new temporary hit points combine with an existing pool "
        "(replace, or keep_higher as a house rule)",
    )
    monster_data_dir: Path | None = Field(
        default=None,
        description="Directory of monster template YAML files (None uses the bundled SRD sample)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console", description="Log format (console or json)"
    )

    @property
    def bundled_data_dir(self) -> Path:
        """Get the package data directory path."""
        return Path(__file__).parent / "data"

    @property
    def monsters_dir(self) -> Path:
        """Get the monster template directory path."""
        return self.monster_data_dir or self.bundled_data_dir / "monsters"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
