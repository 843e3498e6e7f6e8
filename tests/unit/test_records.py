"""Tests for store row validation."""
from datetime import datetime

from bson import ObjectId


def _row(**overrides):
    row = {
        "_id": ObjectId(),
        "employee_id": "emp-1",
        "clock_in": datetime(2025, 3, 3, 9),
        "clock_out": datetime(2025, 3, 3, 17),
        "break_minutes": 30,
        "total_hours": 7.5,
        "project_tag": None,
    }
    row.update(overrides)
    return row


class TestCoerceEntries:
    """Tests for coerce_entries."""

    def test_valid_rows(self):
        """Test that store rows become entries with string ids."""
        from app.engine.records import coerce_entries

        row = _row()

        entries, notes = coerce_entries([row])

        assert notes == []
        assert entries[0].id == str(row["_id"])
        assert entries[0].total_hours == 7.5
        assert entries[0].clock_in.tzinfo is not None

    def test_stale_total_is_replaced(self):
        """Test that a stored total is recomputed, not trusted."""
        from app.engine.records import coerce_entries

        entries, _ = coerce_entries([_row(total_hours=99.0)])

        assert entries[0].total_hours == 7.5

    def test_malformed_row_is_reported_not_raised(self):
        """Test that a bad timestamp excludes only that row."""
        from app.engine.records import coerce_entries

        bad = _row(clock_in="not-a-date")
        good = _row()

        entries, notes = coerce_entries([bad, good])

        assert [e.id for e in entries] == [str(good["_id"])]
        assert len(notes) == 1
        assert notes[0].entry_id == str(bad["_id"])
        assert "clock_in" in notes[0].message

    def test_missing_clock_in_is_reported(self):
        """Test that a row without clock-in is excluded."""
        from app.engine.records import coerce_entries

        row = _row()
        del row["clock_in"]

        entries, notes = coerce_entries([row])

        assert entries == []
        assert "clock_in" in notes[0].message

    def test_negative_break_is_clamped(self):
        """Test that a negative break is repaired rather than rejected."""
        from app.engine.records import coerce_entries

        entries, notes = coerce_entries([_row(break_minutes=-30)])

        assert notes == []
        assert entries[0].break_minutes == 0
        assert entries[0].total_hours == 8.0

    def test_iso_strings_are_parsed(self):
        """Test ISO-8601 timestamps from JSON sources."""
        from app.engine.records import coerce_entries

        entries, _ = coerce_entries([
            _row(
                _id="abc",
                clock_in="2025-03-03T09:00:00+00:00",
                clock_out="2025-03-03T12:00:00Z",
                break_minutes=0,
            )
        ])

        assert entries[0].id == "abc"
        assert entries[0].total_hours == 3.0

    def test_oversized_break_does_not_block_other_rows(self):
        """Test that a break too large for a float is clamped per row."""
        from app.engine.records import coerce_entries

        good = _row()
        huge = _row(break_minutes=10**400)

        entries, notes = coerce_entries([good, huge])

        assert notes == []
        assert [e.id for e in entries] == [str(good["_id"]), str(huge["_id"])]
        assert entries[1].break_minutes == 0
        assert entries[1].total_hours == 8.0
