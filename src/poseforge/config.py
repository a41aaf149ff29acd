"""Application configuration with pydantic-settings + TOML."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


def _default_config_dir() -> Path:
    return Path.home() / ".poseforge"


class TimelineSettings(BaseSettings):
    """Clip duration policy and frame rate."""

    default_duration_ms: float = Field(default=5000.0, gt=0)
    extend_step_ms: float = Field(default=1000.0, gt=0)
    fps: int = Field(default=60, gt=0)


class CanvasSettings(BaseSettings):
    """Size of the posing area the skeleton is laid out in."""

    width: int = Field(default=800, gt=0)
    posing_area_height: int = Field(default=600, gt=0)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.posing_area_height)


class TrailSettings(BaseSettings):
    """Onion skin and motion trail preview parameters."""

    resolution: int = Field(default=1, ge=1)
    colour: tuple[int, int, int] = (200, 225, 255)
    onion_before: int = Field(default=5, ge=0)
    onion_after: int = Field(default=5, ge=0)


class AppConfig(BaseSettings):
    """Root application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POSEFORGE_",
        env_nested_delimiter="__",
    )

    config_dir: Path = Field(default_factory=_default_config_dir)
    timeline: TimelineSettings = Field(default_factory=TimelineSettings)
    canvas: CanvasSettings = Field(default_factory=CanvasSettings)
    trail: TrailSettings = Field(default_factory=TrailSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Explicit arguments and env vars win over the user's config.toml.
        user_file = _default_config_dir() / "config.toml"
        toml = (
            (TomlConfigSettingsSource(settings_cls, toml_file=user_file),)
            if user_file.is_file()
            else ()
        )
        return (init_settings, env_settings, *toml, dotenv_settings, file_secret_settings)

    def ensure_dirs(self) -> None:
        """Create the config directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)


def load_config() -> AppConfig:
    """Load application config, creating defaults if needed."""
    config = AppConfig()
    config.ensure_dirs()
    return config
