"""Configuration service for the Pomodoro CLI.

``ConfigService`` is the single source of truth for configuration. It handles:

- Loading and saving config.json (created with defaults on first run)
- Reading and writing dotted keys such as ``timer.daily_target``
- Storing the API token issued by the server's sign-in flow
"""

from __future__ import annotations

import json
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir
from pydantic import BaseModel, ValidationError

from pomodoro_cli.models.config_models import AppConfig

_APP_NAME = "pomodoro_cli"


class ConfigService:
    """Service for loading, saving and editing the application configuration."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir(_APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.credentials_path = self.config_dir / "credentials.json"

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
        except ValidationError as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def get(self, key: str) -> Any:
        """Return the value at a dotted key, or None when the key does not exist."""
        node: Any = self.config
        for part in key.split("."):
            if isinstance(node, BaseModel) and part in type(node).model_fields:
                node = getattr(node, part)
            else:
                return None
        if isinstance(node, BaseModel):
            return node.model_dump()
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key, re-validating the whole configuration before saving.

        Raises:
            KeyError: If the key does not name a configuration field
            ValueError: If the new value fails validation
        """
        parts = key.split(".")
        data = self.config.model_dump()
        node = data
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                raise KeyError(f"Configuration key '{key}' not found")
            node = node[part]
        if parts[-1] not in node or isinstance(node[parts[-1]], dict):
            raise KeyError(f"Configuration key '{key}' not found")

        node[parts[-1]] = value
        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid value for '{key}': {e.errors()[0]['msg']}") from e
        self.save_config()

    def reset(self, key: str | None = None) -> None:
        """Reset one dotted key, or the whole configuration, to defaults."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return

        default_value = ConfigService._default_for(key)
        if default_value is None:
            raise KeyError(f"Configuration key '{key}' not found")
        self.set(key, default_value)

    @staticmethod
    def _default_for(key: str) -> Any:
        node: Any = AppConfig().model_dump()
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def load_credentials(self) -> dict | None:
        """Load stored credentials.

        Returns:
            dict with 'token', or None if not found
        """
        if not self.credentials_path.exists():
            return None

        try:
            with open(self.credentials_path, encoding="utf-8") as f:
                return json.load(f)
        except JSONDecodeError:
            return None

    def save_credentials(self, token: str) -> None:
        """Save the API token with owner-only permissions."""
        with open(self.credentials_path, "w", encoding="utf-8") as f:
            json.dump({"token": token}, f, indent=2)
        self.credentials_path.chmod(0o600)

    def clear_credentials(self) -> None:
        """Remove the stored API token."""
        if self.credentials_path.exists():
            self.credentials_path.unlink()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
