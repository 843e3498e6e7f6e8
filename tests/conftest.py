"""Pytest configuration and fixtures."""
from datetime import datetime, timezone
from itertools import count
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.database import get_database
from app.main import app


@pytest.fixture
def make_entry():
    """
    Factory for TimeEntry models.

    Times are given as (hour, minute) on a day of March 2025, where
    2025-03-03 is a Monday.
    """
    from app.models.time_entry import TimeEntry

    ids = count(1)

    def _make(
        day: int,
        start: tuple[int, int],
        end: Optional[tuple[int, int]] = None,
        break_minutes: int = 0,
        entry_id: Optional[str] = None,
        employee_id: str = "emp-1",
        end_day: Optional[int] = None,
    ) -> TimeEntry:
        clock_in = datetime(2025, 3, day, *start, tzinfo=timezone.utc)
        clock_out = None
        if end is not None:
            clock_out = datetime(2025, 3, end_day or day, *end, tzinfo=timezone.utc)
        return TimeEntry(
            id=entry_id or f"entry-{next(ids)}",
            employee_id=employee_id,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
        )

    return _make


@pytest.fixture
def mock_db():
    """
    MagicMock database whose collections are AsyncMocks.

    ``find`` is synchronous in Motor, so tests replace it with a MagicMock
    returning a cursor when they need it.
    """
    db = MagicMock()
    collections = {
        "time_entries": AsyncMock(),
        "employees": AsyncMock(),
    }
    db.__getitem__.side_effect = lambda key: collections[key]
    return db


@pytest_asyncio.fixture
async def app_client(mock_db):
    """
    Create a test client backed by the mocked database.

    This fixture:
    - Overrides the database dependency with ``mock_db``
    - Yields an async HTTP client for testing
    - Removes the override afterwards
    """
    app.dependency_overrides[get_database] = lambda: mock_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
