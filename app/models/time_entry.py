"""Time entry model definitions."""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.engine.duration import clamp_break_minutes, recompute
from app.engine.periods import ensure_utc


class EntryStatus(str, Enum):
    """Review status of a time entry."""

    PENDING = "pending"
    APPROVED = "approved"


class TimeEntryBase(BaseModel):
    """Base time entry fields."""

    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_minutes: int = 0
    project_tag: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("clock_in", "clock_out")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return ensure_utc(value)

    @field_validator("break_minutes", mode="before")
    @classmethod
    def _clamp_break(cls, value: Any) -> int:
        return clamp_break_minutes(value)


class TimeEntryCreate(TimeEntryBase):
    """Manual time entry creation model (backfill)."""

    pass


class TimeEntryUpdate(BaseModel):
    """
    Time entry update model - all fields optional.

    Only fields explicitly present in the payload are applied. Sending
    ``clock_out: null`` reopens the entry.
    """

    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_minutes: Optional[int] = None
    project_tag: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("clock_in", "clock_out")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return ensure_utc(value)

    @field_validator("break_minutes", mode="before")
    @classmethod
    def _clamp_break(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return clamp_break_minutes(value)


class ClockInRequest(BaseModel):
    """Request model for clocking in."""

    project_tag: Optional[str] = None
    at: Optional[datetime] = None


class ClockOutRequest(BaseModel):
    """Request model for clocking out."""

    at: Optional[datetime] = None
    break_minutes: Optional[int] = None

    @field_validator("break_minutes", mode="before")
    @classmethod
    def _clamp_break(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return clamp_break_minutes(value)


class TimeEntry(TimeEntryBase):
    """Full time entry model with database fields.

    ``total_hours`` is derived from the timing fields every time an entry is
    built; whatever value the caller supplies is replaced.
    """

    id: str = Field(alias="_id", serialization_alias="id")
    employee_id: str
    total_hours: Optional[float] = None
    status: EntryStatus = EntryStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _derive_total_hours(self) -> "TimeEntry":
        self.total_hours = recompute(self.clock_in, self.clock_out, self.break_minutes)
        return self

    @property
    def is_active(self) -> bool:
        """True while the employee is still clocked in on this entry."""
        return self.clock_out is None
