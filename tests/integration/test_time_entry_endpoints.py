"""Integration tests for time entry endpoints."""
import pytest
from datetime import datetime
from unittest.mock import MagicMock
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError


def _stored(**overrides):
    doc = {
        "_id": ObjectId(),
        "employee_id": "emp-1",
        "clock_in": datetime(2025, 3, 3, 9),
        "clock_out": datetime(2025, 3, 3, 17),
        "break_minutes": 30,
        "total_hours": 7.5,
        "project_tag": None,
        "status": "pending",
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
class TestHealth:
    """Tests for the health endpoints."""

    async def test_health(self, app_client):
        """Test the health check."""
        response = await app_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
class TestCreateEntry:
    """Tests for creating entries."""

    async def test_create_entry_success(self, app_client, mock_db):
        """Test creating a manual entry returns its derived total."""
        mock_db["time_entries"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        response = await app_client.post(
            "/employees/emp-1/entries",
            json={
                "clock_in": "2025-03-03T09:00:00Z",
                "clock_out": "2025-03-03T17:00:00Z",
                "break_minutes": 30,
                "project_tag": "roof-repair",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert "id" in data
        assert data["employee_id"] == "emp-1"
        assert data["total_hours"] == 7.5
        assert data["status"] == "pending"

    async def test_create_entry_requires_clock_in(self, app_client):
        """Test that clock_in is required."""
        response = await app_client.post(
            "/employees/emp-1/entries",
            json={"break_minutes": 30},
        )

        assert response.status_code == 422


@pytest.mark.asyncio
class TestClocking:
    """Tests for clock-in and clock-out."""

    async def test_clock_in_when_already_in(self, app_client, mock_db):
        """Test clocking in twice returns 400."""
        mock_db["time_entries"].find_one.return_value = _stored(clock_out=None)

        response = await app_client.post("/employees/emp-1/clock-in", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Already clocked in"

    async def test_clock_out_when_not_in(self, app_client, mock_db):
        """Test clocking out without an active entry returns 400."""
        mock_db["time_entries"].find_one.return_value = None

        response = await app_client.post("/employees/emp-1/clock-out", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Not clocked in"


@pytest.mark.asyncio
class TestUpdateEntry:
    """Tests for editing entries."""

    async def test_update_break(self, app_client, mock_db):
        """Test that a break edit comes back with the new total."""
        existing = _stored()
        mock_db["time_entries"].find_one.return_value = existing
        mock_db["time_entries"].find_one_and_update.return_value = dict(
            existing, break_minutes=60, total_hours=7.0
        )

        response = await app_client.patch(
            f"/entries/{existing['_id']}",
            json={"break_minutes": 60},
        )

        assert response.status_code == 200
        assert response.json()["total_hours"] == 7.0

    async def test_update_oversized_break_is_clamped(self, app_client, mock_db):
        """Test that a break too large for a float is clamped, not a 500."""
        existing = _stored()
        mock_db["time_entries"].find_one.return_value = existing
        mock_db["time_entries"].find_one_and_update.return_value = dict(
            existing, break_minutes=0, total_hours=8.0
        )

        response = await app_client.patch(
            f"/entries/{existing['_id']}",
            content='{"break_minutes": 1' + "0" * 400 + "}",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        update = mock_db["time_entries"].find_one_and_update.call_args[0][1]["$set"]
        assert update["break_minutes"] == 0
        assert update["total_hours"] == 8.0

    async def test_update_invalid_id(self, app_client):
        """Test that a malformed id returns 404."""
        response = await app_client.patch("/entries/not-an-id", json={"notes": "x"})

        assert response.status_code == 404

    async def test_update_approved_entry(self, app_client, mock_db):
        """Test that approved entries return 409."""
        existing = _stored(status="approved")
        mock_db["time_entries"].find_one.return_value = existing

        response = await app_client.patch(
            f"/entries/{existing['_id']}",
            json={"break_minutes": 0},
        )

        assert response.status_code == 409


@pytest.mark.asyncio
class TestStoreFailures:
    """Tests for store outages."""

    async def test_store_unavailable_is_retryable(self, app_client, mock_db):
        """Test that database errors become 503 with Retry-After."""
        mock_db["time_entries"].find_one.side_effect = ServerSelectionTimeoutError("down")

        response = await app_client.get(f"/entries/{ObjectId()}")

        assert response.status_code == 503
        assert "Retry-After" in response.headers
