# rupeebook/utils.py
from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo


def _zone(tz) -> tzinfo:
    if tz is None or tz == "UTC":
        return timezone.utc
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def parse_timestamp(value, tz=None) -> datetime | None:
    """
    Turn a transaction date into a naive datetime, or None when it can't be read.

    Aware values are converted into *tz* (UTC when omitted) before the
    offset is dropped, so every parsed timestamp compares against every other.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(_zone(tz)).replace(tzinfo=None)
    return parsed


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def day_key(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def amount_text(amount) -> str:
    """Render an amount the way the search box sees it: 100.0 -> '100', 12.5 -> '12.5'."""
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    return repr(value)
