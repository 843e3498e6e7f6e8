"""Timesheet endpoints - weekly reports, approval and pay rates."""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.database import get_database
from app.engine.periods import local_today
from app.models.timesheet import (
    EmployeeWeekSummary,
    HourlyRate,
    HourlyRateUpdate,
    TimesheetReport,
)
from app.services.timesheet_service import TimesheetService


router = APIRouter(tags=["timesheets"])


@router.get("/employees/{employee_id}/timesheet", response_model=TimesheetReport)
async def get_timesheet(
    employee_id: str,
    week_of: Optional[date] = Query(None, description="Any day in the week; defaults to today"),
    db=Depends(get_database),
):
    """
    Get an employee's Monday-Sunday timesheet.

    - Daily totals, running weekly hours and pay
    - Overlapping entries are reported as conflicts; they do not block edits
    - Rows that could not be read are listed under validation_notes
    """
    service = TimesheetService(db)
    return await service.get_timesheet(employee_id=employee_id, week_of=week_of or local_today(settings.tzinfo))


@router.post("/employees/{employee_id}/timesheet/approve")
async def approve_timesheet(
    employee_id: str,
    week_of: Optional[date] = Query(None, description="Any day in the week; defaults to today"),
    db=Depends(get_database),
):
    """
    Approve every entry of an employee's week.

    - Approved entries can no longer be edited
    """
    service = TimesheetService(db)
    return await service.approve_timesheet(employee_id=employee_id, week_of=week_of or local_today(settings.tzinfo))


@router.get("/employees/{employee_id}/rate", response_model=HourlyRate)
async def get_hourly_rate(
    employee_id: str,
    db=Depends(get_database),
):
    """Get the hourly rate used for an employee's pay."""
    service = TimesheetService(db)
    return await service.get_hourly_rate(employee_id)


@router.put("/employees/{employee_id}/rate", response_model=HourlyRate)
async def set_hourly_rate(
    employee_id: str,
    rate_update: HourlyRateUpdate,
    db=Depends(get_database),
):
    """Set an employee's hourly rate."""
    service = TimesheetService(db)
    try:
        return await service.set_hourly_rate(employee_id, rate_update.hourly_rate)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/timesheets/weekly", response_model=list[EmployeeWeekSummary])
async def weekly_summary(
    week_of: Optional[date] = Query(None, description="Any day in the week; defaults to today"),
    db=Depends(get_database),
):
    """
    Hours and pay for every employee who worked during a week.

    - Sorted by employee ID
    """
    service = TimesheetService(db)
    return await service.weekly_summary(week_of=week_of or local_today(settings.tzinfo))
