# backend/bookbar/services/day_locks.py
"""
Per-day admission lock.

Writers that must see a consistent view of one calendar day (booking
admission, time-off creation) upsert a `booking_day_locks` row per day at the
start of their transaction. The upsert is a write, so:

- SQLite: the first write takes the database write lock until commit.
- PostgreSQL: ON CONFLICT DO UPDATE locks the day row until commit.

Either way a second writer for the same day blocks until the first commits,
and then re-reads the day with the first writer's booking visible.
"""

from datetime import datetime
from typing import Iterable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..models import BookingDayLocks


def lock_days(db: Session, days: Iterable[str], now: datetime | None = None) -> None:
    """Take the admission lock for every day in `days` inside db's transaction."""
    now = now or datetime.now()
    dialect = db.get_bind().dialect.name

    # Sorted to keep lock order stable across writers spanning several days
    for day in sorted(set(days)):
        if dialect == "postgresql":
            stmt = postgresql.insert(BookingDayLocks).values(day=day, touched_at=now)
        else:
            stmt = sqlite.insert(BookingDayLocks).values(day=day, touched_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[BookingDayLocks.day],
            set_={"touched_at": now},
        )
        db.execute(stmt)
