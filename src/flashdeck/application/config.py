from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from flashdeck.application.shuffle import SmartShuffleConfig
from flashdeck.domain.constants import DEFAULT_SHUFFLE_MODE, SHARE_PATH

CONFIG_FILES = (
    ".config/flashdeck/config.toml",
    ".flashdeck.toml",
)


class AppConfig(BaseSettings):
    """
    Configuration model for flashdeck.
    Supports loading from:
    1. Environment variables (FLASHDECK_*)
    2. Config file (~/.config/flashdeck/config.toml or ~/.flashdeck.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".config/flashdeck/data")

    # Practice
    enable_smart_shuffle: bool = True
    shuffle_mode: Literal["balanced", "mastery-focused", "challenge-first"] = (
        DEFAULT_SHUFFLE_MODE
    )

    # Sharing
    share_base_url: str = "http://localhost:5173"
    share_path: str = SHARE_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; CLI overrides beat env, env beats the file
        toml_file = next(
            (Path.home() / f for f in CONFIG_FILES if (Path.home() / f).exists()),
            None,
        )

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    def shuffle_config(self) -> SmartShuffleConfig:
        return SmartShuffleConfig(
            enable_smart_shuffle=self.enable_smart_shuffle,
            shuffle_mode=self.shuffle_mode,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/flashdeck/config.toml (if exists)
    3. Environment variables (FLASHDECK_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
