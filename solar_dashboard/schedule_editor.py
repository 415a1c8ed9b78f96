"""Cleaning schedule editor: list, edit, delete and add weekly slots."""

from __future__ import annotations

import logging
import re

import httpx
from pydantic import ValidationError

from .communication import RestClient
from .models import DAYS_OF_WEEK, ScheduleEntry, Weekday

log = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load schedule. Please try again later."
ACTION_ERROR = "Could not reach the cleaner. Please try again later."
TIME_ERROR = "Please enter a time as HH:MM."
DAY_ERROR = "Please choose a day of the week."
EMPTY_MESSAGE = "No schedule data available."

_TIME_RE = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")
_DEFAULT_DAY = Weekday.MONDAY.value


def is_valid_time(value: str) -> bool:
    """True for a 24-hour ``HH:MM`` string."""
    return _TIME_RE.fullmatch(value) is not None


def _entry_problem(day: str, time: str) -> str | None:
    if day not in DAYS_OF_WEEK:
        return DAY_ERROR
    if not is_valid_time(time):
        return TIME_ERROR
    return None


class ScheduleEditor:
    """State holder for the schedule dialog.

    At most one row is in edit mode at a time (``editing_index``).  The
    "add" form is independent of it.
    """

    days_of_week = DAYS_OF_WEEK

    def __init__(self, client: RestClient) -> None:
        self._client = client
        self.entries: list[ScheduleEntry] = []
        self.editing_index: int | None = None
        self.edit_day: str = ""
        self.edit_time: str = ""
        self._seeded_time: str = ""
        self.new_day: str = _DEFAULT_DAY
        self.new_time: str = ""
        self.is_loading: bool = True
        self.error: str | None = None

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.entries):
            raise IndexError(f"schedule index {index} out of range")

    # -- loading -------------------------------------------------------------

    async def load(self) -> None:
        self.is_loading = True
        self.error = None
        try:
            self.entries = await self._client.fetch_schedule()
        except (httpx.HTTPError, ValidationError):
            log.exception("Error fetching schedule")
            self.error = LOAD_ERROR
        finally:
            self.is_loading = False

    # -- editing -------------------------------------------------------------

    def start_editing(self, index: int) -> None:
        """Put row *index* into edit mode, seeded with its current values."""
        self._check_index(index)
        entry = self.entries[index]
        self.editing_index = index
        self.edit_day = entry.day.value
        self.edit_time = entry.time
        self._seeded_time = entry.time

    def cancel_editing(self) -> None:
        self.editing_index = None

    async def save_edit(self) -> bool:
        """Send the whole schedule with the edited row replaced.

        Returns True when the backend accepted the change.
        """
        index = self.editing_index
        if index is None:
            return False
        self._check_index(index)
        problem = _entry_problem(self.edit_day, self.edit_time)
        # A time left as the backend sent it is passed through unchanged.
        if problem == TIME_ERROR and self.edit_time == self._seeded_time:
            problem = None
        if problem:
            self.error = problem
            return False

        updated = list(self.entries)
        updated[index] = ScheduleEntry(day=self.edit_day, time=self.edit_time)
        try:
            result = await self._client.replace_schedule(updated)
        except (httpx.HTTPError, ValidationError):
            log.exception("Error saving schedule edit")
            self.error = ACTION_ERROR
            return False

        if not result.success:
            log.warning("Backend rejected schedule edit at index %d", index)
            return False

        self.error = None
        self.entries = result.updated_schedule
        self.editing_index = None
        log.info("Schedule entry %d set to %s %s", index, self.edit_day, self.edit_time)
        return True

    async def delete(self, index: int) -> bool:
        """Remove row *index* once the backend confirms."""
        self._check_index(index)
        try:
            result = await self._client.delete_schedule_item(index)
        except (httpx.HTTPError, ValidationError):
            log.exception("Error deleting schedule item")
            self.error = ACTION_ERROR
            return False

        if not result.success:
            log.warning("Backend refused to delete schedule item %d", index)
            return False

        self.error = None
        self.entries = [e for i, e in enumerate(self.entries) if i != index]
        if self.editing_index is not None:
            if self.editing_index == index:
                self.editing_index = None
            elif self.editing_index > index:
                self.editing_index -= 1
        log.info("Schedule entry %d deleted", index)
        return True

    async def add(self) -> bool:
        """Create a slot from the add form (``new_day`` / ``new_time``)."""
        if not (self.new_day and self.new_time):
            return False
        if problem := _entry_problem(self.new_day, self.new_time):
            self.error = problem
            return False

        try:
            result = await self._client.add_schedule_item(self.new_day, self.new_time)
        except (httpx.HTTPError, ValidationError):
            log.exception("Error adding new schedule item")
            self.error = ACTION_ERROR
            return False

        if not result.success or result.new_schedule_item is None:
            log.warning("Backend did not add schedule item %s %s", self.new_day, self.new_time)
            return False

        self.error = None
        self.entries = [*self.entries, result.new_schedule_item]
        self.new_day = _DEFAULT_DAY
        self.new_time = ""
        return True
