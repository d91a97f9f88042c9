"""Configuration management with JSON file persistence."""

import json
import os
from dataclasses import asdict, fields
from typing import Optional, Dict, Any, Callable, List

from .models.config import SystemConfig
from .config.defaults import DEFAULT_PATHS, CLASSIFIER_BACKENDS, LOG_LEVELS
from .utils import ensure_directory_exists
from .logging_config import get_logger

logger = get_logger("config_manager")


class ConfigManager:
    """Manages system configuration with file persistence and change callbacks."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[SystemConfig] = None
        self._config_change_callbacks: List[Callable[[SystemConfig], None]] = []

        self.load_config()

    def load_config(self) -> SystemConfig:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                self._config = SystemConfig(**self._known_fields(config_dict))
            except (json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.error(f"Error loading config: {e}. Using defaults.")
                self._config = SystemConfig()
        else:
            self._config = SystemConfig()
            self.save_config()

        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        directory = os.path.dirname(self.config_path)
        if directory:
            ensure_directory_exists(directory)

        with open(self.config_path, 'w') as f:
            json.dump(self.export_config(), f, indent=2)

    def get_config(self) -> SystemConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values; unknown keys are ignored."""
        if self._config is None:
            self.load_config()

        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {key}")

        self.save_config()
        self._notify_callbacks()

    def validate_config(self) -> bool:
        """Validate current configuration."""
        if self._config is None:
            return False

        for config_field in fields(SystemConfig):
            value = getattr(self._config, config_field.name)
            expected = (int, float) if config_field.type is float else config_field.type
            if isinstance(value, bool) or not isinstance(value, expected):
                logger.warning(f"Config field {config_field.name} has wrong type: {value!r}")
                return False

        if not self._config.database_path:
            return False

        if self._config.classifier_backend not in CLASSIFIER_BACKENDS:
            return False

        if self._config.classifier_backend == "remote" and not self._config.classifier_endpoint:
            return False

        if self._config.classifier_timeout_seconds <= 0:
            return False

        if str(self._config.log_level).upper() not in LOG_LEVELS:
            return False

        if not 1 <= self._config.web_port <= 65535:
            return False

        return True

    def register_change_callback(self, callback: Callable[[SystemConfig], None]) -> None:
        """Register a callback to be called when config changes."""
        if callback not in self._config_change_callbacks:
            self._config_change_callbacks.append(callback)

    def unregister_change_callback(self, callback: Callable[[SystemConfig], None]) -> None:
        """Unregister a config change callback."""
        if callback in self._config_change_callbacks:
            self._config_change_callbacks.remove(callback)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = SystemConfig()
        self.save_config()
        self._notify_callbacks()

    def export_config(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        if not self._config:
            return {}
        return asdict(self._config)

    def import_config(self, config_dict: Dict[str, Any]) -> bool:
        """
        Import configuration from a dictionary.

        Args:
            config_dict: Dictionary containing configuration values

        Returns:
            True if import was successful, False otherwise
        """
        try:
            temp_config = SystemConfig(**config_dict)
        except (TypeError, ValueError) as e:
            logger.error(f"Error importing config: {e}")
            return False

        old_config = self._config
        self._config = temp_config

        if not self.validate_config():
            self._config = old_config
            return False

        self.save_config()
        self._notify_callbacks()
        return True

    def _notify_callbacks(self) -> None:
        for callback in list(self._config_change_callbacks):
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    @staticmethod
    def _known_fields(config_dict: Dict[str, Any]) -> Dict[str, Any]:
        known = {f.name for f in fields(SystemConfig)}
        unknown = set(config_dict) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return {key: value for key, value in config_dict.items() if key in known}
