"""Rewrite stale total_hours values in the time entry store.

Every stored entry has its total recomputed from clock-in, clock-out and
break minutes; documents whose stored value disagrees are updated.

Usage:
    python scripts/recompute_totals.py \\
        --mongodb-url mongodb://localhost:27017 \\
        [--db-name timesheets] [--employee-id <id>] [--dry-run]
"""
import argparse
import asyncio
import math
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import ValidationError

from app.engine.periods import utc_now
from app.engine.records import coerce_entry
from app.utils.logging import configure_logging, get_logger

log = get_logger(__name__)


def is_stale(stored: Optional[float], computed: Optional[float]) -> bool:
    """True when a stored total does not match the recomputed one."""
    if stored is None or computed is None:
        return stored is not computed
    return not math.isclose(stored, computed, abs_tol=1e-9)


async def recompute_totals(
    mongodb_url: str,
    db_name: str,
    employee_id: Optional[str] = None,
    dry_run: bool = False,
) -> dict:
    """Recompute totals for every entry, or one employee's entries."""
    client = AsyncIOMotorClient(mongodb_url)
    collection = client[db_name]["time_entries"]
    stats = {"checked": 0, "stale": 0, "invalid": 0}

    query = {"employee_id": employee_id} if employee_id else {}

    try:
        async for doc in collection.find(query):
            stats["checked"] += 1
            try:
                entry = coerce_entry(doc)
            except ValidationError as exc:
                stats["invalid"] += 1
                log.warning("entry_invalid", entry_id=str(doc["_id"]), errors=exc.error_count())
                continue

            if not is_stale(doc.get("total_hours"), entry.total_hours):
                continue

            stats["stale"] += 1
            log.info(
                "entry_stale",
                entry_id=entry.id,
                stored=doc.get("total_hours"),
                computed=entry.total_hours,
            )
            if not dry_run:
                await collection.update_one(
                    {"_id": doc["_id"]},
                    {"$set": {"total_hours": entry.total_hours, "updated_at": utc_now()}},
                )
    finally:
        client.close()

    return stats


def main() -> None:
    parser = argparse.ArgumentParser(description="Recompute stored time entry totals")
    parser.add_argument("--mongodb-url", required=True, help="MongoDB connection URL")
    parser.add_argument("--db-name", default="timesheets", help="Database name")
    parser.add_argument("--employee-id", default=None, help="Only this employee's entries")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    configure_logging()
    stats = asyncio.run(
        recompute_totals(args.mongodb_url, args.db_name, args.employee_id, args.dry_run)
    )
    log.info("recompute_finished", dry_run=args.dry_run, **stats)


if __name__ == "__main__":
    main()
