"""Timesheet projection models: conflicts, daily and period aggregates."""
import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from app.engine.pay import period_pay
from app.models.time_entry import TimeEntry


class Conflict(BaseModel):
    """Two entries of the same employee whose intervals overlap on a day."""

    day: datetime.date
    entry_a_id: str
    entry_b_id: str


class ValidationNote(BaseModel):
    """A stored row that was excluded from aggregation, and why."""

    entry_id: Optional[str] = None
    message: str


class DayAggregate(BaseModel):
    """Totals for one calendar day of a period."""

    date: datetime.date
    entries: list[TimeEntry] = Field(default_factory=list)
    daily_hours: float = 0.0
    daily_pay: float = 0.0
    break_minutes: int = 0
    has_active_entry: bool = False


class PeriodAggregate(BaseModel):
    """Day-by-day totals for a reporting period with running sums."""

    period_start: datetime.date
    period_end: datetime.date
    hourly_rate: float
    days: list[DayAggregate] = Field(default_factory=list)
    running_hours: list[float] = Field(default_factory=list)
    running_pay: list[float] = Field(default_factory=list)

    @computed_field
    @property
    def total_hours(self) -> float:
        return self.running_hours[-1] if self.running_hours else 0.0

    @computed_field
    @property
    def total_pay(self) -> float:
        return period_pay(self.running_hours, self.hourly_rate)

    @computed_field
    @property
    def total_break_minutes(self) -> int:
        return sum(day.break_minutes for day in self.days)

    @computed_field
    @property
    def worked_days(self) -> int:
        return sum(1 for day in self.days if day.entries)


class TimesheetReport(BaseModel):
    """Everything a caller needs to render one employee's period."""

    employee_id: str
    aggregate: PeriodAggregate
    conflicts: list[Conflict] = Field(default_factory=list)
    conflicting_entry_ids: list[str] = Field(default_factory=list)
    validation_notes: list[ValidationNote] = Field(default_factory=list)


class EmployeeWeekSummary(BaseModel):
    """One row of the team-wide weekly overview."""

    employee_id: str
    week_start: datetime.date
    week_end: datetime.date
    total_hours: float
    hourly_rate: float
    total_pay: float
    entry_count: int
    has_active_entry: bool = False


class HourlyRate(BaseModel):
    """Hourly rate in effect for an employee."""

    employee_id: str
    hourly_rate: float
    is_default: bool = False


class HourlyRateUpdate(BaseModel):
    """Request model for changing an employee's hourly rate."""

    hourly_rate: float = Field(ge=0)
