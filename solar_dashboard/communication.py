"""REST communication with the solar cleaner backend.

Uses httpx for async REST calls.  Every response body is parsed into the
pydantic models from :mod:`.models`; HTTP and validation errors are logged
here and propagated to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import DashboardConfig
from .models import (
    ActiveResult,
    BatchPage,
    DashboardStatus,
    ScheduleAddResult,
    ScheduleDeleteResult,
    ScheduleEntry,
    ScheduleUpdateResult,
    ToggleResult,
    Weekday,
)

log = logging.getLogger(__name__)


class RestClient:
    """Async HTTP client for the cleaner's dashboard API.

    All paths are relative to *config.api_base*.
    """

    def __init__(self, config: DashboardConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None

    # -- lifecycle -----------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.api_base,
                timeout=httpx.Timeout(self._config.request_timeout, connect=10.0),
            )
        return self._client

    async def close(self) -> None:
        """Shut down the underlying HTTP client gracefully."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, what: str, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body."""
        client = await self._ensure_client()
        log.debug("%s: %s %s %s", what, method, path, kwargs or "")
        try:
            resp = await client.request(method, path, **kwargs)
            resp.raise_for_status()
            try:
                data = resp.json()
            except ValueError as exc:
                log.error(
                    "%s returned a non-JSON body (HTTP %s): %r",
                    what,
                    resp.status_code,
                    resp.text[:200],
                )
                raise httpx.DecodingError(
                    f"{what}: response body is not JSON", request=resp.request,
                ) from exc
            log.debug("%s response: %s", what, data)
            return data
        except httpx.HTTPStatusError as exc:
            log.error(
                "%s failed with HTTP %s: %s",
                what,
                exc.response.status_code,
                exc.response.text,
            )
            raise
        except httpx.HTTPError as exc:
            log.error("%s request error: %s", what, exc)
            raise

    # -- device control ------------------------------------------------------

    async def fetch_dashboard(self) -> DashboardStatus:
        """GET /dashboard

        Returns
        -------
        DashboardStatus
            Power and armed flags, recent on/off events, the last cleaning
            time and the number of captured images.
        """
        data = await self._request("Fetch dashboard", "GET", "/dashboard")
        return DashboardStatus.model_validate(data)

    async def toggle_cleaner(self, state: bool) -> ToggleResult:
        """POST /cleaner/toggle

        Parameters
        ----------
        state:
            The requested power state.
        """
        data = await self._request(
            "Toggle cleaner", "POST", "/cleaner/toggle", json={"state": state},
        )
        return ToggleResult.model_validate(data)

    async def set_active(self, active: bool) -> ActiveResult:
        """POST /cleaner/active

        Parameters
        ----------
        active:
            The requested armed state.
        """
        data = await self._request(
            "Set active", "POST", "/cleaner/active", json={"active": active},
        )
        return ActiveResult.model_validate(data)

    # -- ML output batches ---------------------------------------------------

    async def fetch_batches(self, page: int = 1, search: str = "") -> BatchPage:
        """GET /batches?page=&search=

        Parameters
        ----------
        page:
            1-based page number.
        search:
            Free-text filter, passed through unchanged (may be empty).
        """
        data = await self._request(
            "Fetch batches",
            "GET",
            "/batches",
            params={"page": page, "search": search},
        )
        return BatchPage.model_validate(data)

    # -- schedule ------------------------------------------------------------

    async def fetch_schedule(self) -> list[ScheduleEntry]:
        """GET /schedule

        A body that is not a JSON list is treated as an empty schedule.
        """
        data = await self._request("Fetch schedule", "GET", "/schedule")
        if not isinstance(data, list):
            log.warning("Schedule response is not a list: %r", data)
            return []
        return [ScheduleEntry.model_validate(item) for item in data]

    async def replace_schedule(
        self, entries: list[ScheduleEntry],
    ) -> ScheduleUpdateResult:
        """PUT /schedule with the complete list of entries."""
        payload = [entry.to_wire() for entry in entries]
        data = await self._request("Replace schedule", "PUT", "/schedule", json=payload)
        return ScheduleUpdateResult.model_validate(data)

    async def delete_schedule_item(self, index: int) -> ScheduleDeleteResult:
        """DELETE /schedule/{index}"""
        data = await self._request(
            "Delete schedule item", "DELETE", f"/schedule/{index}",
        )
        return ScheduleDeleteResult.model_validate(data)

    async def add_schedule_item(
        self, day: Weekday | str, time: str,
    ) -> ScheduleAddResult:
        """POST /schedule

        Parameters
        ----------
        day:
            Day of week, e.g. ``"Monday"``.
        time:
            Time of day as ``HH:MM``.
        """
        payload = ScheduleEntry(day=day, time=time).to_wire()
        data = await self._request("Add schedule item", "POST", "/schedule", json=payload)
        return ScheduleAddResult.model_validate(data)
