"""
Settings management for task-sh.

This module provides functions to manage application settings,
including loading, saving, and accessing configuration values.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from task_sh.utils import platform_info

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


class Settings:
    """
    Settings manager for task-sh.

    This class handles loading, saving, and accessing application settings.
    Values from the settings file are merged over ``DEFAULT_SETTINGS``;
    command-line flags are applied on top by the CLI.
    """

    DEFAULT_SETTINGS = {
        "generation": {
            "model": "gpt-4.1-mini-2025-04-14",
            "temperature": 0.2,
            "timeout": 30,
            "default_shell": "",
            "system_prompt": "",
        },
        "ui": {
            "verbose": False,
            "spinner": True,
        },
        "advanced": {
            "debug_mode": False,
            "log_level": "WARNING",
            "log_file": "",
        },
    }

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize the settings manager.

        Args:
            config_file (Optional[Union[str, Path]]): Explicit settings file.
                Defaults to ``settings.json`` in the platform config directory.
        """
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.config_dir = self._get_config_dir()
        self.config_file = (
            Path(config_file).expanduser()
            if config_file
            else self.config_dir / SETTINGS_FILE_NAME
        )

        if self.config_file.exists():
            self.load()

    def _get_config_dir(self) -> Path:
        """
        Get the configuration directory for the application.

        Returns:
            Path: Path to the configuration directory.
        """
        if platform_info.is_windows():
            return Path(os.environ.get("APPDATA", "")) / "task-sh"

        if platform_info.is_macos():
            return Path.home() / "Library" / "Application Support" / "task-sh"

        xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config_home:
            return Path(xdg_config_home) / "task-sh"
        return Path.home() / ".config" / "task-sh"

    def load(self) -> bool:
        """
        Load settings from the configuration file.

        Returns:
            bool: True if successful, False otherwise.
        """
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                loaded_settings = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.config_file}: {e}")
            return False

        if not isinstance(loaded_settings, dict):
            logger.warning(
                f"Ignoring settings file {self.config_file}: top level is not an object"
            )
            return False

        self._update_nested_dict(self.settings, loaded_settings)
        logger.debug(f"Loaded settings from {self.config_file}")
        return True

    def _update_nested_dict(self, target: Dict, source: Dict) -> None:
        """
        Update a nested dictionary with values from another dictionary.

        Args:
            target (Dict): Target dictionary to update.
            source (Dict): Source dictionary with new values.
        """
        for key, value in source.items():
            if (
                key in target
                and isinstance(target[key], dict)
                and isinstance(value, dict)
            ):
                self._update_nested_dict(target[key], value)
            else:
                target[key] = value

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            section (str): Settings section.
            key (str): Setting key.
            default (Any): Default value if not found.

        Returns:
            Any: Setting value or default.
        """
        try:
            return self.settings[section][key]
        except (KeyError, TypeError):
            return default

    def set(self, section: str, key: str, value: Any) -> None:
        """
        Set a setting value.

        Args:
            section (str): Settings section.
            key (str): Setting key.
            value (Any): Setting value.
        """
        self.settings.setdefault(section, {})[key] = value

    def get_log_file_path(self) -> Optional[Path]:
        """
        Get the path to the log file.

        Returns:
            Optional[Path]: Path to the log file, or None if not set.
        """
        log_file = self.get("advanced", "log_file", "")

        if log_file:
            return Path(log_file)
        if self.get("advanced", "debug_mode", False):
            return self.config_dir / "task-sh.log"
        return None
