"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mirror_sync.exceptions import ConfigurationError
from mirror_sync.models.config import SyncConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> SyncConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated SyncConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'mirror-sync init' first."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        try:
            config_from_file = self.get_config_as_dict()
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return SyncConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save.
        """
        try:
            validated = SyncConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}
        for key in sorted(SyncConfig.get_ini_keys()):
            config["DEFAULT"][key] = str(getattr(validated, key))

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        defaults = SyncConfig.model_fields
        return {
            "manifest_source": section.get("manifest_source", ""),
            "destination_path": section.get(
                "destination_path", defaults["destination_path"].default
            ),
            "interval_seconds": section.getint(
                "interval_seconds", defaults["interval_seconds"].default
            ),
            "max_concurrent_downloads": section.getint(
                "max_concurrent_downloads",
                defaults["max_concurrent_downloads"].default,
            ),
            "download_timeout": section.getfloat(
                "download_timeout", defaults["download_timeout"].default
            ),
            "manifest_timeout": section.getfloat(
                "manifest_timeout", defaults["manifest_timeout"].default
            ),
            "json_log_dir": section.get("json_log_dir", ""),
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(SyncConfig.get_ini_keys()):
            field = SyncConfig.model_fields[key]
            if key in config_section or field.is_required():
                continue
            config_section[key] = str(field.default)
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
