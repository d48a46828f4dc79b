# rupeebook/outputs/formatter.py
"""Turn a :class:`ReportResult` into plain rows for the export writers.

The header strings and column order here are what spreadsheet users see, so
they stay fixed: ``Date, Remark, Category, Subcategory, Entry By, Cash In,
Cash Out, Balance`` for the all-entries report.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from rupeebook.core.models import ALL_ENTRY_COLUMNS, CASH_IN, CASH_OUT, ReportResult, ReportSettings
from rupeebook.core.reports import ALL_ENTRIES, CATEGORY_WISE, DAY_WISE

ENTRY_HEADERS = {
    "date": "Date",
    "remark": "Remark",
    "category": "Category",
    "subcategory": "Subcategory",
    "entry_by": "Entry By",
    "cash_in": "Cash In",
    "cash_out": "Cash Out",
    "balance": "Balance",
}
DAY_WISE_HEADERS = ["Date", "Cash In", "Cash Out", "Balance"]
CATEGORY_WISE_HEADERS = ["Category", "Cash In", "Cash Out", "Balance"]

ENTRY_DATE_FMT = "%d-%m-%Y %H:%M"
DAY_DATE_FMT = "%d-%m-%Y"
GENERATED_FMT = "%d %b %Y, %I:%M %p"

SUMMARY_LABELS = (
    ("Total Cash In:", "total_cash_in"),
    ("Total Cash Out:", "total_cash_out"),
    ("Net Balance:", "net_balance"),
)


def entry_cell(row, column: str, blank: Any = ""):
    if column == "date":
        return row["date"].strftime(ENTRY_DATE_FMT)
    if column == "remark":
        return row["remark"] or row["category"]
    if column == "category":
        return row["category"]
    if column == "subcategory":
        return row["subcategory"] or "-"
    if column == "entry_by":
        return row["member_name"]
    if column == "cash_in":
        return row["amount"] if row["type"] == CASH_IN else blank
    if column == "cash_out":
        return row["amount"] if row["type"] == CASH_OUT else blank
    if column == "balance":
        return row["balance"]
    raise ValueError(f"Unknown report column '{column}'")


def table(report: ReportResult, settings: Optional[ReportSettings] = None) -> Tuple[List[str], List[list]]:
    """Header row and body rows for the report's data."""
    settings = settings or ReportSettings()
    if report.report_type == ALL_ENTRIES:
        columns = [c for c in settings.columns if c in ALL_ENTRY_COLUMNS]
        headers = [ENTRY_HEADERS[c] for c in columns]
        rows = [[entry_cell(row, c) for c in columns] for row in report.data]
    elif report.report_type == DAY_WISE:
        headers = list(DAY_WISE_HEADERS)
        rows = [
            [datetime.strptime(row["date"], "%Y-%m-%d").strftime(DAY_DATE_FMT), row["cash_in"], row["cash_out"], row["balance"]]
            for row in report.data
        ]
    elif report.report_type == CATEGORY_WISE:
        headers = list(CATEGORY_WISE_HEADERS)
        rows = [[row["category"], row["cash_in"], row["cash_out"], row["balance"]] for row in report.data]
    else:
        raise ValueError(f"Unknown report type: {report.report_type!r}")
    return headers, rows


def sheet_rows(
    report: ReportResult,
    settings: Optional[ReportSettings] = None,
    generated_by: str = "",
    now: Optional[datetime] = None,
) -> List[list]:
    """Every row of a one-sheet export: heading, filters, table, then totals."""
    settings = settings or ReportSettings()
    now = now or datetime.now()
    rows: List[list] = []

    if settings.show_name_and_number and generated_by:
        rows.append([generated_by])
    rows.append([f"{report.report_title} for {report.generated_for}"])
    rows.append([f"Generated on: {now.strftime(GENERATED_FMT)}"])
    rows.append([])

    if settings.show_filters and report.filters_applied:
        rows.append(["Filters Applied:"])
        rows.extend([name, value] for name, value in report.filters_applied)
        rows.append([])

    headers, body = table(report, settings)
    rows.append(headers)
    rows.extend(body)
    rows.append([])

    totals = report.summary.as_dict()
    for label, key in SUMMARY_LABELS:
        rows.append(["", "", "", label, totals[key]])
    return rows


def report_filename(report: ReportResult, ext: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    safe_book = re.sub(r"[^a-z0-9]", "_", report.generated_for, flags=re.I).lower()
    safe_title = report.report_title.replace(" ", "_")
    return f"{safe_book}_{safe_title}_{today.strftime('%Y-%m-%d')}.{ext}"


def format_inr(value) -> str:
    """Group digits the Indian way: 1234567.5 -> '12,34,567.5'."""
    value = round(float(value), 2)
    sign = "-" if value < 0 else ""
    whole, _, frac = f"{abs(value):.2f}".partition(".")
    frac = frac.rstrip("0")
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    text = ",".join(groups + [tail])
    return sign + text + (f".{frac}" if frac else "")
