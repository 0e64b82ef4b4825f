"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fetchpool.exceptions import ConfigurationError
from fetchpool.models.config import FetchConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> FetchConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing config file is not an error: every setting has a default.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated FetchConfig object.

        Raises:
            ConfigurationError: If the config file is invalid or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
                if self._migrate_if_needed():
                    log.info(
                        "[yellow]Configuration file was updated with new default "
                        "values.[/yellow]"
                    )
                config_from_file = self._get_config_as_dict()
            except (configparser.Error, ValueError) as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
        else:
            log.debug(
                f"No configuration file at '{self.config_file_path}'; using defaults."
            )

        # Override with CLI options
        if cli_options:
            config_from_file.update(
                {k: v for k, v in cli_options.items() if v is not None}
            )

        try:
            config_dir = self.config_file_path.parent
            return FetchConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save; missing keys get defaults.
        """
        settings = settings or {}
        try:
            validated = FetchConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        config = configparser.ConfigParser()
        config["DEFAULT"] = {
            key: str(getattr(validated, key))
            for key in sorted(FetchConfig.get_ini_keys())
        }

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        defaults = FetchConfig()
        section = self._parser["DEFAULT"]
        return {
            "max_workers": section.getint("max_workers", defaults.max_workers),
            "poll_interval": section.getfloat("poll_interval", defaults.poll_interval),
            "download_dir": section.get("download_dir", defaults.download_dir),
            "connect_timeout": section.getfloat(
                "connect_timeout", defaults.connect_timeout
            ),
            "total_timeout": section.getfloat("total_timeout", defaults.total_timeout),
            "fallback_extension": section.get(
                "fallback_extension", defaults.fallback_extension
            ),
            "chunk_size": section.getint("chunk_size", defaults.chunk_size),
            "host": section.get("host", defaults.host),
            "port": section.getint("port", defaults.port),
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = FetchConfig()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(FetchConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = str(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving

    def get_config_as_dict(self) -> dict[str, Any]:
        """Returns the file's settings, or the defaults when no file exists."""
        if self.config_file_path.is_file():
            self._parser.read(self.config_file_path, encoding="utf-8")
            return self._get_config_as_dict()
        return FetchConfig().model_dump(exclude={"config_path"})
