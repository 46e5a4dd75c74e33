"""
settings.py

This module provides application configuration management for splice.

Features:
- Centralized configuration using Pydantic settings
- Environment overrides with the SPLICE_ prefix
- Optional JSON config file in the user config directory
- Conversion of settings into a PlaceholderConfig for the engine

Usage:
Import appsettings for application configuration values.

Precedence (highest first): constructor arguments, SPLICE_* environment
variables, the JSON config file, field defaults.
"""

from pathlib import Path
from typing import Final, Optional
from appdirs import user_config_dir
from pydantic import PositiveInt
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from splice.models.dataModel import PlaceholderConfig

CONFIG_DIR: Final[Path] = Path(user_config_dir("splice", ""))
CONFIG_FILE: Final[Path] = CONFIG_DIR / "config.json"


class App(BaseSettings):
    """
    Application settings model.

    Settings can be overridden through environment variables with SPLICE_
    prefix, or through the JSON file at CONFIG_FILE.

    Attributes:
        beQuiet: Suppress detailed logging output
        placeholderStart: Literal text opening a placeholder
        placeholderEnd: Literal text closing a placeholder
        maxFilenameLength: Longest filename captured inside a placeholder
        encoding: Codec for text input, delimiters and filenames
        chunkSize: Read size for input files and file-like replacements
        baseDir: Directory included files are resolved against
        missingOk: Treat missing include files as empty
    """

    beQuiet: bool = False
    placeholderStart: str = "<!-- include "
    placeholderEnd: str = " -->"
    maxFilenameLength: PositiveInt = 512
    encoding: str = "utf-8"
    chunkSize: PositiveInt = 65536
    baseDir: Optional[Path] = None
    missingOk: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SPLICE_",  # Environment variables with this prefix override settings
        case_sensitive=False,  # Allow case-insensitive environment variables
        extra="ignore",
        json_file=CONFIG_FILE,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            JsonConfigSettingsSource(settings_cls),
        )

    def placeholder_config(self) -> PlaceholderConfig:
        """
        Build the engine configuration from these settings.

        Returns:
            PlaceholderConfig: validated engine configuration
        """
        return PlaceholderConfig(
            placeholder_start=self.placeholderStart,
            placeholder_end=self.placeholderEnd,
            max_filename_length=self.maxFilenameLength,
            encoding=self.encoding,
            chunk_size=self.chunkSize,
        )


# Create the application settings instance
appsettings: Final[App] = App()
