"""
Manages loading and saving of the INI configuration file, layered with
environment variables.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from ym_bot.exceptions import ConfigurationError
from ym_bot.models.config import BotConfig

log = logging.getLogger(__name__)

# Environment variable -> config key
ENV_KEYS = {
    "YANDEX_TOKEN": "token",
    "LOG_LEVEL": "log_level",
    "YM_BOT_REQUEST_TIMEOUT": "request_timeout",
}


class ConfigManager:
    """Handles all operations related to the application's configuration."""

    def __init__(
        self,
        config_file_path: Path,
        environ: Optional[Mapping[str, str]] = None,
        use_dotenv: bool = True,
    ):
        """
        Args:
            config_file_path: Location of the INI file; it may not exist yet.
            environ: Environment to read overrides from, ``os.environ`` by default.
            use_dotenv: Load a ``.env`` file from the working directory first.
        """
        self.config_file_path = config_file_path
        self._environ = environ
        self._use_dotenv = use_dotenv
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> BotConfig:
        """
        Loads configuration from the INI file, the environment and CLI overrides,
        in that order of increasing priority, and validates it.

        Raises:
            ConfigurationError: If the config file is invalid or validation fails.
        """
        settings: dict[str, Any] = {}

        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
            settings.update(self._get_config_as_dict())
        else:
            log.debug(f"No configuration file at '{self.config_file_path}'")

        settings.update(self._get_env_overrides())

        if cli_options:
            settings.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return BotConfig(**settings, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save; missing keys get defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = BotConfig.model_construct()
        for key in sorted(BotConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            if value is not None:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the known keys of the 'DEFAULT' section into a dictionary."""
        section = self._parser["DEFAULT"]
        return {key: section[key] for key in BotConfig.get_ini_keys() if key in section}

    def _get_env_overrides(self) -> dict[str, Any]:
        """Collects non-empty configuration values from the environment."""
        if self._use_dotenv and self._environ is None:
            load_dotenv()
        environ = os.environ if self._environ is None else self._environ

        overrides = {}
        for env_key, config_key in ENV_KEYS.items():
            value = environ.get(env_key, "").strip()
            if value:
                overrides[config_key] = value
        return overrides
