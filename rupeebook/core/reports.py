# rupeebook/core/reports.py
"""Report generation over a book's entries.

Two call sites share this module. :func:`generate_report` builds the exported
reports: it filters first, then balances the filtered entries on their own,
so an all-entries report's balance column shows the cumulative effect of the
selected entries only. :func:`ledger_view` builds the on-screen ledger: it
balances the whole book from its opening balance and only then filters, so
each row shows the book's true balance at that entry.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from rupeebook.core.balance import chronological, running_balances
from rupeebook.core.filters import filter_transactions
from rupeebook.core.members import MemberResolver
from rupeebook.core.models import (
    CASH_IN,
    UNCATEGORIZED,
    FilterSpec,
    Ledger,
    Member,
    ReportResult,
    Summary,
    Transaction,
)
from rupeebook.core.permissions import can_view_balances, require_reports, visible_transactions
from rupeebook.errors import UnknownReportType
from rupeebook.utils import day_key, parse_timestamp

logger = logging.getLogger(__name__)

ALL_ENTRIES = "all-entries"
DAY_WISE = "day-wise"
CATEGORY_WISE = "category-wise"
REPORT_TYPES = (ALL_ENTRIES, DAY_WISE, CATEGORY_WISE)

FILTER_DATE_FMT = "%d %b %Y"
ENTRY_TYPE_LABELS = {"in": "Cash In", "out": "Cash Out"}


class Aggregate(NamedTuple):
    data: List[Dict[str, Any]]
    summary: Summary
    skipped: List[str]


@dataclass
class LedgerView:
    rows: List[Dict[str, Any]]
    summary: Optional[Summary]
    show_balances: bool = True
    skipped: List[str] = field(default_factory=list)


def check_report_type(report_type: str) -> str:
    if report_type not in REPORT_TYPES:
        raise UnknownReportType(report_type)
    return report_type


def report_title(report_type: str) -> str:
    return check_report_type(report_type).replace("-", " ").title() + " Report"


def entry_row(tx: Transaction, moment, balance: float, resolver: MemberResolver) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "date": moment,
        "type": tx.type,
        "amount": tx.amount,
        "category": tx.category,
        "subcategory": tx.subcategory,
        "remark": tx.remark,
        "member_id": tx.member_id,
        "member_name": resolver.name_for(tx.member_id),
        "balance": balance,
    }


def _newest_first(dated):
    # reverse=True keeps entries with equal timestamps in input order
    return sorted(dated, key=lambda pair: pair[0], reverse=True)


def _all_entries(dated, opening_balance, resolver, tz):
    balances = running_balances([tx for _, tx in dated], opening_balance, tz).balances
    return [entry_row(tx, moment, balances[tx.id], resolver) for moment, tx in _newest_first(dated)]


def _day_wise(dated, opening_balance):
    days: Dict[str, Dict[str, float]] = {}
    for moment, tx in dated:
        totals = days.setdefault(day_key(moment), {"cash_in": 0.0, "cash_out": 0.0})
        if tx.type == CASH_IN:
            totals["cash_in"] += tx.amount
        else:
            totals["cash_out"] += tx.amount

    balance = float(opening_balance or 0.0)
    rows = []
    for key in sorted(days):
        totals = days[key]
        balance += totals["cash_in"] - totals["cash_out"]
        rows.append({"date": key, "cash_in": totals["cash_in"], "cash_out": totals["cash_out"], "balance": balance})
    return rows


def _category_wise(transactions, uncategorized):
    categories: Dict[str, Dict[str, float]] = {}
    for tx in transactions:
        totals = categories.setdefault(tx.category or uncategorized, {"cash_in": 0.0, "cash_out": 0.0})
        if tx.type == CASH_IN:
            totals["cash_in"] += tx.amount
        else:
            totals["cash_out"] += tx.amount
    return [
        {
            "category": name,
            "cash_in": totals["cash_in"],
            "cash_out": totals["cash_out"],
            "balance": totals["cash_in"] - totals["cash_out"],
        }
        for name, totals in categories.items()
    ]


def aggregate(
    transactions: Iterable[Transaction],
    report_type: str,
    opening_balance: float = 0.0,
    resolver: Optional[MemberResolver] = None,
    uncategorized: str = UNCATEGORIZED,
    tz=None,
) -> Aggregate:
    """
    Group entries into one of the report shapes and total them.

    Entries whose date can't be parsed are left out of every shape, and of
    the summary, and their ids are returned in ``skipped``.
    """
    check_report_type(report_type)
    transactions = list(transactions)
    resolver = resolver or MemberResolver()

    dated, skipped = chronological(transactions, tz)
    if skipped:
        logger.warning(
            "Left %d transaction(s) with unreadable dates out of the %s report: %s",
            len(skipped), report_type, ", ".join(skipped),
        )
    kept = {id(tx) for _, tx in dated}
    valid = [tx for tx in transactions if id(tx) in kept]
    summary = Summary.of(valid)

    if report_type == ALL_ENTRIES:
        data = _all_entries(dated, opening_balance, resolver, tz)
    elif report_type == DAY_WISE:
        data = _day_wise(dated, opening_balance)
    else:
        data = _category_wise(valid, uncategorized)
    return Aggregate(data, summary, skipped)


def describe_filters(spec: FilterSpec, resolver: MemberResolver, tz=None) -> List[Tuple[str, str]]:
    """Label/value pairs for the filters in effect, date range first."""
    applied = []
    date_from = parse_timestamp(spec.date_from, tz) if spec.date_from else None
    date_to = parse_timestamp(spec.date_to, tz) if spec.date_to else None
    if date_from and date_to:
        applied.append(
            ("Date Range", f"{date_from.strftime(FILTER_DATE_FMT)} to {date_to.strftime(FILTER_DATE_FMT)}")
        )
    elif date_from:
        applied.append(("Date", date_from.strftime(FILTER_DATE_FMT)))
    elif date_to:
        applied.append(("End Date", date_to.strftime(FILTER_DATE_FMT)))

    if spec.type != "all":
        applied.append(("Entry Type", ENTRY_TYPE_LABELS[spec.type]))
    if spec.category:
        applied.append(("Categories", ", ".join(spec.category)))
    if spec.subcategory:
        applied.append(("Subcategories", ", ".join(spec.subcategory)))
    if spec.search_term:
        applied.append(("Search Term", spec.search_term))
    if spec.members:
        applied.append(("Members", ", ".join(resolver.label_for(m) for m in spec.members)))
    return applied


def _options(config: Optional[dict]):
    config = config or {}
    return config.get("timezone"), config.get("uncategorized_label") or UNCATEGORIZED


def generate_report(
    transactions: Iterable[Transaction],
    members: Iterable[Member],
    spec: FilterSpec,
    report_type: str,
    book_name: str = "",
    opening_balance: float = 0.0,
    config: Optional[dict] = None,
    viewer: Optional[Member] = None,
    settings=None,
) -> ReportResult:
    """Filter a book's entries and aggregate them into an exportable report.

    Parameters
    ----------
    transactions:
        Snapshot of the book's entries, in any order.
    members:
        Members used to resolve "Entry By" names.
    spec:
        Filter selection. An empty spec reports on every entry.
    report_type:
        One of ``all-entries``, ``day-wise`` or ``category-wise``.
    opening_balance:
        Balance the all-entries and day-wise running balances start from.
    viewer, settings:
        When given, data-operator visibility rules apply before filtering.
    """
    check_report_type(report_type)
    tz, uncategorized = _options(config)
    resolver = MemberResolver.from_config(members, config)
    transactions = list(transactions)

    if viewer is not None:
        require_reports(viewer, settings)
        transactions = visible_transactions(transactions, viewer, settings)

    filtered = filter_transactions(transactions, spec, tz)
    result = aggregate(filtered, report_type, opening_balance, resolver, uncategorized, tz)
    logger.info(
        "Built %s for %r: %d of %d entries matched",
        report_title(report_type), book_name, len(filtered) - len(result.skipped), len(transactions),
    )
    return ReportResult(
        report_type=report_type,
        report_title=report_title(report_type),
        generated_for=book_name,
        filters_applied=describe_filters(spec, resolver, tz),
        data=result.data,
        summary=result.summary,
        skipped=result.skipped,
    )


def ledger_view(
    ledger: Ledger,
    spec: Optional[FilterSpec] = None,
    viewer: Optional[Member] = None,
    config: Optional[dict] = None,
) -> LedgerView:
    """Rows for the on-screen ledger, newest first, with the book's running balance."""
    spec = spec or FilterSpec()
    tz, _ = _options(config)
    resolver = MemberResolver.from_config(ledger.members, config)
    settings = ledger.data_operator_settings

    balances, skipped = running_balances(ledger.transactions, ledger.balance_before, tz)
    visible = visible_transactions(ledger.transactions, viewer, settings)
    dated = [(tx.parsed_date(tz), tx) for tx in filter_transactions(visible, spec, tz)]
    dated = [(moment, tx) for moment, tx in dated if moment is not None]
    filtered = [tx for _, tx in dated]
    rows = [entry_row(tx, moment, balances[tx.id], resolver) for moment, tx in _newest_first(dated)]

    if not can_view_balances(viewer, settings):
        for row in rows:
            del row["balance"]
        return LedgerView(rows, None, show_balances=False, skipped=skipped)
    return LedgerView(rows, Summary.of(filtered), skipped=skipped)
