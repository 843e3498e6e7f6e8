"""Validation of raw time entry rows at the store boundary."""
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from app.models.time_entry import TimeEntry
from app.models.timesheet import ValidationNote
from app.utils.logging import get_logger

log = get_logger(__name__)


def _row_id(row: Mapping[str, Any]) -> Optional[str]:
    raw = row.get("_id", row.get("id"))
    return None if raw is None else str(raw)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "entry"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def coerce_entry(row: Mapping[str, Any]) -> TimeEntry:
    """
    Build a TimeEntry from a store row.

    Raises:
        ValidationError: If the row cannot be turned into an entry
    """
    doc = dict(row)
    entry_id = _row_id(doc)
    doc.pop("id", None)
    doc["_id"] = entry_id
    return TimeEntry.model_validate(doc)


def coerce_entries(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[TimeEntry], list[ValidationNote]]:
    """
    Build entries from store rows, setting aside the ones that are malformed.

    A bad row never stops the others from being used; it is reported as a
    ValidationNote instead.

    Returns:
        Tuple of (valid entries, notes for excluded rows)
    """
    entries: list[TimeEntry] = []
    notes: list[ValidationNote] = []

    for row in rows:
        try:
            entries.append(coerce_entry(row))
        except ValidationError as exc:
            note = ValidationNote(entry_id=_row_id(row), message=_describe(exc))
            log.warning("entry_excluded", entry_id=note.entry_id, reason=note.message)
            notes.append(note)

    return entries, notes
