"""Device control panel: power state, armed state and on/off history."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import httpx
from pydantic import ValidationError

from .communication import RestClient
from .config import DashboardConfig
from .models import DashboardStatus, HistoryEvent

log = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load dashboard data. Please try again later."
ACTION_ERROR = "Could not reach the cleaner. Please try again later."


def _now() -> datetime:
    return datetime.now().astimezone()


def placeholder_status() -> DashboardStatus:
    """Snapshot shown until the first successful fetch.

    Five alternating off/on events one hour apart, ending now.
    """
    now = _now()
    history = [
        HistoryEvent(state=bool(i % 2), time=now - timedelta(hours=4 - i))
        for i in range(5)
    ]
    return DashboardStatus(
        is_cleaner_on=False,
        is_active=False,
        on_off_history=history,
        last_cleaning_time="2 hours ago",
        images_captured=0,
    )


def format_event_time(event: HistoryEvent) -> str:
    """Render an event timestamp as local ``HH:MM``."""
    return event.time.astimezone().strftime("%H:%M")


class ControlPanel:
    """State holder for the cleaner control region.

    Local state only changes after the backend confirms a mutation with
    ``success: true``.
    """

    def __init__(self, client: RestClient, config: DashboardConfig) -> None:
        self._client = client
        self._history_length = config.history_length
        self.status: DashboardStatus = placeholder_status()
        self.is_loading: bool = True
        self.error: str | None = None

    # -- labels --------------------------------------------------------------

    @property
    def power_label(self) -> str:
        return "ON" if self.status.is_cleaner_on else "OFF"

    @property
    def power_action_label(self) -> str:
        return "Turn Off" if self.status.is_cleaner_on else "Turn On"

    @property
    def active_label(self) -> str:
        return "Active" if self.status.is_active else "Inactive"

    @property
    def active_action_label(self) -> str:
        return "Deactivate" if self.status.is_active else "Activate"

    # -- operations ----------------------------------------------------------

    async def load(self) -> None:
        """Fetch the current device snapshot."""
        self.is_loading = True
        self.error = None
        try:
            self.status = await self._client.fetch_dashboard()
        except (httpx.HTTPError, ValidationError):
            log.exception("Error fetching dashboard data")
            self.error = LOAD_ERROR
        finally:
            self.is_loading = False

    async def toggle_cleaner(self) -> None:
        """Request the opposite power state and record it in the history."""
        requested = not self.status.is_cleaner_on
        try:
            result = await self._client.toggle_cleaner(requested)
        except (httpx.HTTPError, ValidationError):
            log.exception("Error toggling cleaner")
            self.error = ACTION_ERROR
            return

        if not result.success:
            log.warning("Backend refused cleaner toggle to %s", requested)
            return

        self.error = None
        keep = max(self._history_length - 1, 0)
        previous = self.status.on_off_history[-keep:] if keep else []
        self.status = self.status.model_copy(
            update={
                "is_cleaner_on": result.new_state,
                "on_off_history": [
                    *previous,
                    HistoryEvent(state=requested, time=_now()),
                ],
            },
        )
        log.info("Cleaner switched %s", self.power_label)

    async def toggle_active(self) -> None:
        """Arm or disarm the cleaner."""
        requested = not self.status.is_active
        try:
            result = await self._client.set_active(requested)
        except (httpx.HTTPError, ValidationError):
            log.exception("Error toggling active status")
            self.error = ACTION_ERROR
            return

        if not result.success:
            log.warning("Backend refused active state %s", requested)
            return

        self.error = None
        self.status = self.status.model_copy(
            update={"is_active": result.new_active_state},
        )
        log.info("Cleaner is now %s", self.active_label)
