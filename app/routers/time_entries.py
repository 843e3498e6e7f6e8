"""Time entry endpoints - clocking and entry maintenance."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.models.time_entry import (
    ClockInRequest,
    ClockOutRequest,
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
)
from app.services.errors import EntryLockedError, EntryNotFoundError
from app.services.timesheet_service import TimesheetService


router = APIRouter(tags=["time-entries"])


@router.post(
    "/employees/{employee_id}/entries",
    response_model=TimeEntry,
    status_code=status.HTTP_201_CREATED,
)
async def create_entry(
    employee_id: str,
    entry_create: TimeEntryCreate,
    db=Depends(get_database),
):
    """
    Create a manual time entry (backfill).

    - Total hours are derived from clock-in, clock-out and break
    - Omit clock_out to create an active entry
    """
    service = TimesheetService(db)
    return await service.create_entry(
        employee_id=employee_id,
        entry_create=entry_create,
    )


@router.get("/employees/{employee_id}/entries", response_model=list[TimeEntry])
async def list_entries(
    employee_id: str,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    db=Depends(get_database),
):
    """
    List an employee's time entries.

    - Optional filters: start, end (applied to clock-in)
    - Results sorted by clock-in ascending
    """
    service = TimesheetService(db)
    return await service.list_entries(
        employee_id=employee_id,
        start=start,
        end=end,
    )


@router.post("/employees/{employee_id}/clock-in", response_model=TimeEntry)
async def clock_in(
    employee_id: str,
    request: ClockInRequest,
    db=Depends(get_database),
):
    """
    Clock an employee in.

    - Fails if the employee already has an active entry
    """
    service = TimesheetService(db)
    try:
        return await service.clock_in(
            employee_id=employee_id,
            project_tag=request.project_tag,
            at=request.at,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/employees/{employee_id}/clock-out", response_model=TimeEntry)
async def clock_out(
    employee_id: str,
    request: ClockOutRequest,
    db=Depends(get_database),
):
    """
    Clock an employee out of their latest active entry.

    - Fails if the employee is not clocked in
    """
    service = TimesheetService(db)
    try:
        return await service.clock_out(
            employee_id=employee_id,
            at=request.at,
            break_minutes=request.break_minutes,
        )
    except EntryLockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/entries/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    db=Depends(get_database),
):
    """Get a specific time entry by ID."""
    service = TimesheetService(db)
    try:
        return await service.get_entry(entry_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/entries/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: str,
    entry_update: TimeEntryUpdate,
    db=Depends(get_database),
):
    """
    Update a time entry.

    - Only fields present in the body are changed
    - Total hours are recomputed whenever clock-in, clock-out or break change
    - Approved entries cannot be edited (409)
    """
    service = TimesheetService(db)
    try:
        return await service.update_entry(
            entry_id=entry_id,
            entry_update=entry_update,
        )
    except EntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except EntryLockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: str,
    db=Depends(get_database),
):
    """Delete a time entry."""
    service = TimesheetService(db)
    try:
        return await service.delete_entry(entry_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
