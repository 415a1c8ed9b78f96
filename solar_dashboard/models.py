"""Wire models for the solar cleaner backend.

The backend speaks camelCase JSON; attributes here are snake_case and
accept/emit the camelCase aliases.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Dump to the JSON-ready camelCase dict the backend expects."""
        return self.model_dump(mode="json", by_alias=True)


class Weekday(str, enum.Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


DAYS_OF_WEEK: list[str] = [day.value for day in Weekday]


# ---------------------------------------------------------------------------
# Device status
# ---------------------------------------------------------------------------


class HistoryEvent(_WireModel):
    state: bool
    time: datetime


class DashboardStatus(_WireModel):
    is_cleaner_on: bool = False
    is_active: bool = False
    on_off_history: list[HistoryEvent] = []
    last_cleaning_time: str = ""
    images_captured: int = 0


class ToggleResult(_WireModel):
    success: bool
    new_state: bool = False


class ActiveResult(_WireModel):
    success: bool
    new_active_state: bool = False


# ---------------------------------------------------------------------------
# ML output batches
# ---------------------------------------------------------------------------


class BatchImage(_WireModel):
    id: str
    url: str
    damage_count: int = 0


class Batch(_WireModel):
    id: str
    name: str
    date: str
    damage_count: int = 0
    images: list[BatchImage] = []


class BatchPage(_WireModel):
    batches: list[Batch] = []
    total_count: int = 0


# ---------------------------------------------------------------------------
# Cleaning schedule
# ---------------------------------------------------------------------------


class ScheduleEntry(_WireModel):
    day: Weekday
    time: str  # "HH:MM"


class ScheduleUpdateResult(_WireModel):
    success: bool
    updated_schedule: list[ScheduleEntry] = []


class ScheduleDeleteResult(_WireModel):
    success: bool


class ScheduleAddResult(_WireModel):
    success: bool
    new_schedule_item: ScheduleEntry | None = None
