# rupeebook/core/analysis.py
from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from rupeebook.core.balance import chronological
from rupeebook.core.models import CASH_IN, CASH_OUT, UNCATEGORIZED, Summary, Transaction
from rupeebook.utils import day_key

TIME_RANGES = ("last_7_days", "last_30_days", "this_month", "last_month", "all_time")
TOP_CATEGORIES = 15
TOP_ENTRIES = 5


def _month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    last_day = monthrange(year, month)[1]
    return (
        datetime.combine(date(year, month, 1), time.min),
        datetime.combine(date(year, month, last_day), time.max),
    )


def time_range_bounds(time_range: str, today: Optional[date] = None) -> Optional[Tuple[datetime, datetime]]:
    """Inclusive (start, end) for a dashboard preset; None for ``all_time``."""
    today = today or date.today()
    end_of_today = datetime.combine(today, time.max)
    if time_range == "last_7_days":
        return datetime.combine(today - timedelta(days=6), time.min), end_of_today
    if time_range == "last_30_days":
        return datetime.combine(today - timedelta(days=29), time.min), end_of_today
    if time_range == "this_month":
        return _month_bounds(today.year, today.month)
    if time_range == "last_month":
        previous = today.replace(day=1) - timedelta(days=1)
        return _month_bounds(previous.year, previous.month)
    if time_range == "all_time":
        return None
    raise ValueError(f"Unsupported time range '{time_range}'.")


def _sum_by(pairs, key) -> Dict[str, Dict[str, float]]:
    grouped: Dict[str, Dict[str, float]] = {}
    for moment, tx in pairs:
        totals = grouped.setdefault(key(moment, tx), {"cash_in": 0.0, "cash_out": 0.0})
        totals["cash_in" if tx.type == CASH_IN else "cash_out"] += tx.amount
    return grouped


def analyze(
    transactions: Iterable[Transaction],
    time_range: str = "all_time",
    today: Optional[date] = None,
    config: Optional[dict] = None,
) -> Dict[str, object]:
    """
    Totals, category breakdown, daily trend and largest entries for a time range.

    Categories are ranked by cash in plus cash out and cut to the top 15; the
    top entries lists hold the five largest cash-in and cash-out amounts.
    """
    config = config or {}
    uncategorized = config.get("uncategorized_label") or UNCATEGORIZED
    bounds = time_range_bounds(time_range, today)

    dated, skipped = chronological(transactions, config.get("timezone"))
    if bounds is not None:
        start, end = bounds
        dated = [(moment, tx) for moment, tx in dated if start <= moment <= end]
    selected = [tx for _, tx in dated]
    summary = Summary.of(selected)

    by_category = _sum_by(dated, lambda _moment, tx: tx.category or uncategorized)
    categories = sorted(
        ({"name": name, **totals} for name, totals in by_category.items()),
        key=lambda row: row["cash_in"] + row["cash_out"],
        reverse=True,
    )[:TOP_CATEGORIES]

    by_day = _sum_by(dated, lambda moment, _tx: day_key(moment))
    trend = [{"date": key, **by_day[key]} for key in sorted(by_day)]

    def largest(kind) -> List[Transaction]:
        return sorted((tx for tx in selected if tx.type == kind), key=lambda tx: tx.amount, reverse=True)[:TOP_ENTRIES]

    return {
        "time_range": time_range,
        "total_in": summary.total_cash_in,
        "total_out": summary.total_cash_out,
        "net_balance": summary.net_balance,
        "categories": categories,
        "trend": trend,
        "top_in": largest(CASH_IN),
        "top_out": largest(CASH_OUT),
        "skipped": skipped,
    }
