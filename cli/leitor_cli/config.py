"""
Configuration management for the Leitor CLI.

Multi-environment support:
  The CLI stores a separate API key, default version and reading
  preferences per API URL, so a local dev server and production can be
  used side by side.

  Config structure:
  {
    "environments": {
      "http://localhost:8000": {
        "api_key": "eyJ...",
        "default_version": "nvi",
        "preferences": {"verse_by_verse": false, "width": "normal"}
      }
    },
    "default_url": "http://localhost:8000"
  }

Environment resolution order:
  1. LEITOR_API_URL environment variable
  2. --api-url command line flag
  3. default_url from config file
  4. Fallback: http://localhost:8000

LEITOR_API_KEY, when set, takes precedence over the stored key.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from reader.kernel.presentation import ReadingPreferences

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_VERSION = "nvi"


class Config:
    """Config manager for the Leitor CLI with multi-environment support."""

    def __init__(self, api_url_override: str | None = None, config_dir: Path | None = None):
        """
        Args:
            api_url_override: Optional --api-url flag value
            config_dir: Where config.json lives (default ~/.leitor)
        """
        self.config_dir = config_dir or Path.home() / ".leitor"
        self.config_file = self.config_dir / "config.json"
        self._data: dict[str, Any] = {}
        self._api_url_override = api_url_override
        self._load()

    def _load(self):
        """Load config from disk. A corrupt file is ignored."""
        if self.config_file.exists():
            try:
                with open(self.config_file) as f:
                    self._data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("config: ignoring unreadable %s: %s", self.config_file, e)
                self._data = {}

        if not isinstance(self._data.get("environments"), dict):
            self._data["environments"] = {}

    def _save(self):
        """Save config to disk, owner-only."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._data, f, indent=2)
        self.config_file.chmod(0o600)

    @property
    def api_url(self) -> str:
        env_url = os.environ.get("LEITOR_API_URL")
        if env_url:
            return env_url.rstrip("/")
        if self._api_url_override:
            return self._api_url_override.rstrip("/")
        return self._data.get("default_url", DEFAULT_API_URL).rstrip("/")

    @property
    def default_url(self) -> str:
        return self._data.get("default_url", DEFAULT_API_URL)

    @default_url.setter
    def default_url(self, value: str):
        self._data["default_url"] = value.rstrip("/")
        self._save()

    def _get_env(self) -> dict:
        return self._data["environments"].get(self.api_url, {})

    def _set_env(self, key: str, value):
        self._data["environments"].setdefault(self.api_url, {})[key] = value
        self._save()

    @property
    def api_key(self) -> str | None:
        return os.environ.get("LEITOR_API_KEY") or self._get_env().get("api_key")

    @api_key.setter
    def api_key(self, value: str):
        self._set_env("api_key", value)

    @property
    def default_version(self) -> str:
        return self._get_env().get("default_version") or DEFAULT_VERSION

    @default_version.setter
    def default_version(self, value: str):
        self._set_env("default_version", value)

    @property
    def preferences(self) -> ReadingPreferences:
        return ReadingPreferences.from_dict(self._get_env().get("preferences"))

    @preferences.setter
    def preferences(self, value: ReadingPreferences):
        self._set_env("preferences", value.to_dict())

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api_key)

    def clear_environment(self, url: str | None = None):
        """Forget the key and settings stored for `url` (default: current)."""
        target_url = (url or self.api_url).rstrip("/")
        if target_url in self._data["environments"]:
            del self._data["environments"][target_url]
            self._save()

    def clear_all(self):
        """Clear every environment and delete the config file."""
        self._data = {"environments": {}}
        if self.config_file.exists():
            self.config_file.unlink()

    def list_environments(self) -> list[dict]:
        """Environments with a stored key, as dicts with url and is_current."""
        current = self.api_url
        return [
            {"url": url, "is_current": url == current}
            for url, env in self._data.get("environments", {}).items()
            if env.get("api_key")
        ]
