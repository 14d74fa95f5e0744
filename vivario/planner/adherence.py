"""
Check-in adherence.

Reads the last 14 calendar days of check-ins (today included). Unreadable
records are skipped, never raised.
"""

import collections.abc
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .models import Adherence, CheckIn

logger = logging.getLogger(__name__)

WINDOW_DAYS = 14
NO_HISTORY_ADHERENCE = 0.5


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _parse_record(key: Any, record: Any) -> Optional[CheckIn]:
    if isinstance(record, CheckIn):
        return record
    if not isinstance(record, Mapping):
        return None
    day = _parse_date(record.get("date", key))
    if day is None:
        return None
    done = record.get("done", False)
    if not isinstance(done, bool):
        return None
    note = record.get("note") or ""
    return CheckIn(date=day, done=done, note=str(note))


def normalize_checkins(
    checkins: Union[Mapping[Any, Any], Iterable[Any], None],
) -> Dict[date, CheckIn]:
    """
    Accept {date: {done, note}} or a list of records; one record per day.

    The later record wins when a day appears twice.
    """
    out: Dict[date, CheckIn] = {}
    if not checkins:
        return out

    if isinstance(checkins, Mapping):
        items = checkins.items()
    elif isinstance(checkins, (str, bytes)) or not isinstance(checkins, collections.abc.Iterable):
        logger.warning(f"Ignored check-ins of type {type(checkins).__name__}")
        return out
    else:
        items = ((None, record) for record in checkins)

    skipped = 0
    for key, record in items:
        parsed = _parse_record(key, record)
        if parsed is None:
            skipped += 1
            continue
        out[parsed.date] = parsed

    if skipped:
        logger.warning(f"Ignored {skipped} malformed check-in record(s)")
    return out


def compute_adherence(
    checkins: Union[Mapping[Any, Any], Iterable[Any], None],
    today: Optional[date] = None,
) -> Adherence:
    """
    Adherence over the last 14 days.

    adherence = done / recorded days; 0.5 when nothing is recorded.
    streak counts done days backward from today, or from yesterday when
    today has no record yet.
    """
    today = today or date.today()
    window_start = today - timedelta(days=WINDOW_DAYS - 1)

    records = {
        day: c for day, c in normalize_checkins(checkins).items()
        if window_start <= day <= today
    }
    if not records:
        return Adherence(adherence=NO_HISTORY_ADHERENCE, streak=0, last=None, recorded=0)

    done = sum(1 for c in records.values() if c.done)
    adherence = done / len(records)

    cursor = today if today in records else today - timedelta(days=1)
    streak = 0
    while cursor >= window_start:
        record = records.get(cursor)
        if record is None or not record.done:
            break
        streak += 1
        cursor -= timedelta(days=1)

    return Adherence(
        adherence=adherence,
        streak=streak,
        last=max(records),
        recorded=len(records),
    )


def plan_intensity(energy: Any, adherence: float) -> int:
    """1 on low energy or adherence < 0.35, 2 below 0.7, else 3."""
    level = energy.value if hasattr(energy, "value") else energy
    if level == "low":
        return 1
    if adherence < 0.35:
        return 1
    if adherence < 0.7:
        return 2
    return 3
