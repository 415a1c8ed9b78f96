"""Dashboard configuration.

Loads settings from dashboard_config.json on disk and environment variables.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_SERVER = "http://192.168.112.118:5050"
_DEFAULT_API_PREFIX = "/api"
_REQUEST_TIMEOUT = 30.0  # seconds
_BATCHES_PER_PAGE = 5
_HISTORY_LENGTH = 5  # on/off events kept in the control panel
_DEMO_PORT = 5050

_CONFIG_FILENAME = "dashboard_config.json"


def _config_dir() -> Path:
    """Return the directory that stores persistent dashboard configuration."""
    if sys.platform == "win32":
        base = Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData"))
    else:
        base = Path.home() / ".config"
    d = base / "SolarCleaner"
    d.mkdir(parents=True, exist_ok=True)
    return d


@dataclass
class DashboardConfig:
    """Runtime configuration for the solar cleaner dashboard."""

    server_url: str = _DEFAULT_SERVER
    api_prefix: str = _DEFAULT_API_PREFIX
    request_timeout: float = _REQUEST_TIMEOUT
    batches_per_page: int = _BATCHES_PER_PAGE
    history_length: int = _HISTORY_LENGTH
    demo_port: int = _DEMO_PORT

    @property
    def api_base(self) -> str:
        return f"{self.server_url.rstrip('/')}{self.api_prefix}"

    # -- Persistence ----------------------------------------------------------

    @classmethod
    def load(cls) -> DashboardConfig:
        """Load config from disk, falling back to defaults + env vars."""
        cfg = cls()
        path = _config_dir() / _CONFIG_FILENAME

        if path.exists():
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            for key, val in data.items():
                if hasattr(cfg, key):
                    setattr(cfg, key, val)

        # Environment overrides
        if env := os.environ.get("SOLAR_DASHBOARD_SERVER_URL"):
            cfg.server_url = env
        if env := os.environ.get("SOLAR_DASHBOARD_TIMEOUT"):
            cfg.request_timeout = float(env)

        return cfg

    def save(self) -> None:
        """Persist current config to disk."""
        path = _config_dir() / _CONFIG_FILENAME
        data = {
            "server_url": self.server_url,
            "api_prefix": self.api_prefix,
            "request_timeout": self.request_timeout,
            "batches_per_page": self.batches_per_page,
            "history_length": self.history_length,
            "demo_port": self.demo_port,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
