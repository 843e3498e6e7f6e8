"""Timesheet service - time entry storage and timesheet recomputation."""
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from app.config import Settings, settings
from app.engine.aggregator import aggregate
from app.engine.conflicts import conflicting_entry_ids, find_conflicts
from app.engine.duration import recompute
from app.engine.edits import apply_edit, entry_state
from app.engine.pay import is_valid_rate, resolve_hourly_rate
from app.engine.periods import ensure_utc, period_window, utc_now, week_bounds
from app.engine.records import coerce_entries, coerce_entry
from app.models.time_entry import (
    EntryStatus,
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
)
from app.models.timesheet import EmployeeWeekSummary, HourlyRate, TimesheetReport
from app.services.errors import ClockStateError, EntryLockedError, EntryNotFoundError
from app.utils.logging import get_logger

log = get_logger(__name__)


class TimesheetService:
    """Service for time entries and the timesheets derived from them.

    Derived data (totals, conflicts, aggregates) is never stored or patched
    in place: every report is recomputed from entries fetched fresh from the
    store.
    """

    def __init__(self, db, config: Optional[Settings] = None):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.employees = db["employees"]
        self.settings = config or settings

    @property
    def tz(self):
        return self.settings.tzinfo

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """
        Convert database document to TimeEntry model.
        """
        return coerce_entry(doc)

    def _object_id(self, entry_id: str) -> ObjectId:
        try:
            return ObjectId(entry_id)
        except (InvalidId, TypeError):
            raise EntryNotFoundError("Invalid entry ID format")

    async def _fetch_rows(self, query: dict) -> list[dict]:
        cursor = self.time_entries.find(query).sort("clock_in", 1)
        return await cursor.to_list(length=None)

    async def _fetch_period(
        self,
        week_of: date,
        employee_id: Optional[str] = None,
    ) -> tuple[date, date, list[dict]]:
        week_start, week_end = week_bounds(week_of)
        start, end = period_window(week_start, week_end, self.tz)

        query: dict[str, Any] = {"clock_in": {"$gte": start, "$lt": end}}
        if employee_id is not None:
            query["employee_id"] = employee_id

        rows = await self._fetch_rows(query)
        return week_start, week_end, rows

    async def list_entries(
        self,
        employee_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        List an employee's time entries, oldest first.

        Args:
            employee_id: Employee ID
            start: Optional lower bound on clock-in (inclusive)
            end: Optional upper bound on clock-in (inclusive)

        Returns:
            Valid entries; malformed rows are logged and skipped
        """
        query: dict[str, Any] = {"employee_id": employee_id}

        if start or end:
            query["clock_in"] = {}
            if start:
                query["clock_in"]["$gte"] = ensure_utc(start)
            if end:
                query["clock_in"]["$lte"] = ensure_utc(end)

        entries, _ = coerce_entries(await self._fetch_rows(query))
        return entries

    async def get_entry(self, entry_id: str) -> TimeEntry:
        """
        Get a single time entry.

        Raises:
            EntryNotFoundError: If entry not found
        """
        doc = await self.time_entries.find_one({"_id": self._object_id(entry_id)})
        if not doc:
            raise EntryNotFoundError("Time entry not found")
        return self._doc_to_entry(doc)

    async def create_entry(
        self,
        employee_id: str,
        entry_create: TimeEntryCreate,
    ) -> TimeEntry:
        """
        Create a manual time entry.

        Args:
            employee_id: Employee ID
            entry_create: Time entry creation data

        Returns:
            Created time entry with its derived total
        """
        now = utc_now()
        entry_doc = {
            "employee_id": employee_id,
            "clock_in": entry_create.clock_in,
            "clock_out": entry_create.clock_out,
            "break_minutes": entry_create.break_minutes,
            "total_hours": recompute(
                entry_create.clock_in,
                entry_create.clock_out,
                entry_create.break_minutes,
            ),
            "project_tag": entry_create.project_tag,
            "notes": entry_create.notes,
            "status": EntryStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.time_entries.insert_one(entry_doc)
        entry_doc["_id"] = result.inserted_id

        log.info("entry_created", entry_id=str(result.inserted_id), employee_id=employee_id)
        return self._doc_to_entry(entry_doc)

    async def clock_in(
        self,
        employee_id: str,
        project_tag: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Open a new entry for an employee.

        Raises:
            ClockStateError: If the employee is already clocked in
        """
        active = await self.time_entries.find_one({
            "employee_id": employee_id,
            "clock_out": None,
        })

        if active:
            raise ClockStateError("Already clocked in")

        entry_create = TimeEntryCreate(
            clock_in=at or utc_now(),
            project_tag=project_tag,
        )
        return await self.create_entry(employee_id, entry_create)

    async def clock_out(
        self,
        employee_id: str,
        at: Optional[datetime] = None,
        break_minutes: Optional[int] = None,
    ) -> TimeEntry:
        """
        Close the employee's most recent active entry.

        Raises:
            ClockStateError: If the employee is not clocked in
        """
        active = await self.time_entries.find_one(
            {"employee_id": employee_id, "clock_out": None},
            sort=[("clock_in", -1)],
        )

        if not active:
            raise ClockStateError("Not clocked in")

        changes: dict[str, Any] = {"clock_out": at or utc_now()}
        if break_minutes is not None:
            changes["break_minutes"] = break_minutes

        return await self.update_entry(str(active["_id"]), TimeEntryUpdate(**changes))

    async def update_entry(
        self,
        entry_id: str,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Edit a time entry and store its recomputed total.

        Args:
            entry_id: Time entry ID
            entry_update: Update data; only fields present are applied

        Returns:
            The entry as stored after the write

        Raises:
            EntryNotFoundError: If entry not found
            EntryLockedError: If the entry has been approved
        """
        object_id = self._object_id(entry_id)

        existing = await self.time_entries.find_one({"_id": object_id})
        if not existing:
            raise EntryNotFoundError("Time entry not found")

        if existing.get("status") == EntryStatus.APPROVED.value:
            raise EntryLockedError("Time entry is approved and cannot be edited")

        edited = apply_edit(self._doc_to_entry(existing), entry_update)

        update_doc = {
            "clock_in": edited.clock_in,
            "clock_out": edited.clock_out,
            "break_minutes": edited.break_minutes,
            "total_hours": edited.total_hours,
            "project_tag": edited.project_tag,
            "notes": edited.notes,
            "updated_at": utc_now(),
        }

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": object_id, "status": {"$ne": EntryStatus.APPROVED.value}},
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )

        if not updated_doc:
            # Approved or deleted since it was read
            if await self.time_entries.find_one({"_id": object_id}):
                raise EntryLockedError("Time entry is approved and cannot be edited")
            raise EntryNotFoundError("Time entry not found")

        log.info(
            "entry_updated",
            entry_id=entry_id,
            state=entry_state(edited).value,
            total_hours=edited.total_hours,
        )
        return self._doc_to_entry(updated_doc)

    async def delete_entry(self, entry_id: str) -> dict:
        """
        Delete a time entry.

        Returns:
            Dictionary with deleted_count

        Raises:
            EntryNotFoundError: If entry not found
        """
        object_id = self._object_id(entry_id)

        existing = await self.time_entries.find_one({"_id": object_id})
        if not existing:
            raise EntryNotFoundError("Time entry not found")

        result = await self.time_entries.delete_one({"_id": object_id})

        log.info("entry_deleted", entry_id=entry_id)
        return {"deleted_count": result.deleted_count}

    async def get_hourly_rate(self, employee_id: str) -> HourlyRate:
        """Hourly rate for an employee, falling back to the configured default."""
        doc = await self.employees.find_one({"employee_id": employee_id})
        raw_rate = doc.get("hourly_rate") if doc else None

        return HourlyRate(
            employee_id=employee_id,
            hourly_rate=resolve_hourly_rate(raw_rate, self.settings.default_hourly_rate),
            is_default=not is_valid_rate(raw_rate),
        )

    async def set_hourly_rate(self, employee_id: str, hourly_rate: float) -> HourlyRate:
        """
        Store an employee's hourly rate.

        Raises:
            ValueError: If the rate is negative or not a number
        """
        if not is_valid_rate(hourly_rate):
            raise ValueError("Hourly rate must be a non-negative number")

        await self.employees.update_one(
            {"employee_id": employee_id},
            {"$set": {"hourly_rate": float(hourly_rate), "updated_at": utc_now()}},
            upsert=True,
        )

        log.info("hourly_rate_saved", employee_id=employee_id, hourly_rate=hourly_rate)
        return HourlyRate(employee_id=employee_id, hourly_rate=float(hourly_rate))

    async def get_timesheet(
        self,
        employee_id: str,
        week_of: date,
        now: Optional[datetime] = None,
    ) -> TimesheetReport:
        """
        Recompute an employee's weekly timesheet from stored entries.

        Args:
            employee_id: Employee ID
            week_of: Any day in the Monday-Sunday week to report on
            now: Instant treated as the end of active entries when checking
                for conflicts (defaults to the current time)

        Returns:
            Aggregate, conflicts and notes for rows that were excluded
        """
        week_start, week_end, rows = await self._fetch_period(week_of, employee_id)
        entries, notes = coerce_entries(rows)
        rate = await self.get_hourly_rate(employee_id)

        period = aggregate(entries, week_start, week_end, rate.hourly_rate, tz=self.tz)
        conflicts = find_conflicts(entries, now=now, tz=self.tz)

        return TimesheetReport(
            employee_id=employee_id,
            aggregate=period,
            conflicts=conflicts,
            conflicting_entry_ids=sorted(conflicting_entry_ids(conflicts)),
            validation_notes=notes,
        )

    async def approve_timesheet(self, employee_id: str, week_of: date) -> dict:
        """
        Mark every entry of an employee's week as approved.

        Returns:
            Dictionary with approved_count
        """
        week_start, week_end = week_bounds(week_of)
        start, end = period_window(week_start, week_end, self.tz)

        result = await self.time_entries.update_many(
            {
                "employee_id": employee_id,
                "clock_in": {"$gte": start, "$lt": end},
                "status": {"$ne": EntryStatus.APPROVED.value},
            },
            {"$set": {"status": EntryStatus.APPROVED.value, "updated_at": utc_now()}},
        )

        log.info(
            "timesheet_approved",
            employee_id=employee_id,
            week_start=week_start.isoformat(),
            approved_count=result.modified_count,
        )
        return {"approved_count": result.modified_count}

    async def weekly_summary(self, week_of: date) -> list[EmployeeWeekSummary]:
        """
        Hours and pay per employee for a week.

        Employees without any worked hours in the week are left out.
        """
        week_start, week_end, rows = await self._fetch_period(week_of)

        rows_by_employee: dict[str, list[dict]] = defaultdict(list)
        for row in rows:
            if row.get("employee_id"):
                rows_by_employee[row["employee_id"]].append(row)

        if not rows_by_employee:
            return []

        cursor = self.employees.find({"employee_id": {"$in": sorted(rows_by_employee)}})
        rates = {
            doc["employee_id"]: doc.get("hourly_rate")
            for doc in await cursor.to_list(length=None)
        }

        summaries = []
        for employee_id in sorted(rows_by_employee):
            entries, _ = coerce_entries(rows_by_employee[employee_id])
            rate = resolve_hourly_rate(
                rates.get(employee_id), self.settings.default_hourly_rate
            )
            period = aggregate(entries, week_start, week_end, rate, tz=self.tz)
            if period.total_hours <= 0:
                continue

            summaries.append(
                EmployeeWeekSummary(
                    employee_id=employee_id,
                    week_start=week_start,
                    week_end=week_end,
                    total_hours=period.total_hours,
                    hourly_rate=rate,
                    total_pay=period.total_pay,
                    entry_count=len(entries),
                    has_active_entry=any(day.has_active_entry for day in period.days),
                )
            )

        return summaries
