"""Shared fixtures for the solar dashboard test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from solar_dashboard.communication import RestClient
from solar_dashboard.config import DashboardConfig


@pytest.fixture()
def tmp_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Override the config directory so tests never touch the real filesystem."""
    monkeypatch.setattr("solar_dashboard.config._config_dir", lambda: tmp_path)
    return tmp_path


@pytest.fixture()
def config(tmp_config_dir: Path) -> DashboardConfig:
    """Return a fresh DashboardConfig with default values."""
    return DashboardConfig()


@pytest.fixture()
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], RestClient]:
    """Build a RestClient whose HTTP traffic goes to *handler*."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> RestClient:
        cfg = DashboardConfig(server_url="http://testserver")
        client = RestClient(cfg)
        # Inject mock transport
        client._client = httpx.AsyncClient(
            base_url=cfg.api_base,
            transport=httpx.MockTransport(handler),
        )
        return client

    return _make


@pytest.fixture()
def api() -> AsyncMock:
    """A RestClient stand-in whose endpoint coroutines can be scripted."""
    return AsyncMock(spec=RestClient)
