# rupeebook/loaders/entries_sheet.py
import logging
import re
import uuid
from datetime import datetime

import pandas as pd

from rupeebook.core.models import CASH_IN, CASH_OUT, UNCATEGORIZED, Transaction
from rupeebook.errors import LoaderError
from rupeebook.loaders.base import BaseLoader
from rupeebook.utils import parse_timestamp

logger = logging.getLogger(__name__)

_CLEAN_AMOUNT = re.compile(r"[^\d\-\.]")
_TIME_RX = re.compile(r"(\d+):(\d+)(?::(\d+))?\s*(am|pm)?", re.I)

DATE_FORMATS = (
    "%d-%m-%Y", "%m-%d-%Y", "%Y-%m-%d",
    "%d/%m/%Y", "%m/%d/%Y", "%Y/%m/%d",
    "%d %b %Y", "%b %d, %Y",
)

# header fragments tried, in order, for each field
COLUMN_HINTS = {
    "date": ("date",),
    "time": ("time",),
    "type": ("type",),
    "amount": ("amount",),
    "cash_in": ("cash in", "cash_in", "cashin", "credit"),
    "cash_out": ("cash out", "cash_out", "cashout", "debit"),
    "category": ("category",),
    "subcategory": ("subcategory", "sub category", "sub_category"),
    "remark": ("remark", "description", "note"),
    "member_id": ("member", "entry by"),
}

_TYPE_WORDS = {
    "in": CASH_IN, "cash in": CASH_IN, "credit": CASH_IN, "cr": CASH_IN,
    "out": CASH_OUT, "cash out": CASH_OUT, "debit": CASH_OUT, "dr": CASH_OUT,
}


def parse_entry_date(value, time_value=None):
    """Read a sheet's date cell (and optional time cell); None when no format fits."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, datetime):
        moment = value.to_pydatetime() if hasattr(value, "to_pydatetime") else value
    else:
        text = str(value or "").strip()
        if not text:
            return None
        moment = None
        for fmt in DATE_FORMATS:
            try:
                moment = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if moment is None:
            moment = parse_timestamp(text)
        if moment is None:
            return None

    if time_value:
        match = _TIME_RX.search(str(time_value))
        if match:
            hours, minutes, seconds, ampm = match.groups()
            h = int(hours)
            if ampm and ampm.lower() == "pm" and h < 12:
                h += 12
            if ampm and ampm.lower() == "am" and h == 12:
                h = 0
            moment = moment.replace(hour=h, minute=int(minutes), second=int(seconds or 0))
    return moment


def _amount(raw):
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    cleaned = _CLEAN_AMOUNT.sub("", str(raw))
    if cleaned in ("", "-", "."):
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        raise LoaderError(f"Could not parse amount '{raw}'")


def _text(raw):
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return ""
    return str(raw).strip()


class EntriesSheetLoader(BaseLoader):
    """
    Read cash-book entries from a CSV or Excel sheet.

    A sheet carries either ``type`` and ``amount`` columns, or separate
    ``cash in`` and ``cash out`` columns. A negative cash-in amount becomes a
    cash-out entry and a row with both sides filled yields two entries. Rows
    whose date can't be read, or whose amounts are zero, are skipped and
    counted in ``skipped_rows``.
    """

    def __init__(self, config=None):
        super().__init__(config)
        self.skipped_rows = 0

    def _read(self, file_path):
        if str(file_path).lower().endswith((".xlsx", ".xls")):
            return pd.read_excel(file_path, dtype=object)
        return pd.read_csv(file_path, dtype=str, keep_default_na=False)

    def _columns(self, df, overrides):
        cols = {str(c).strip().lower(): c for c in df.columns}

        def find(field):
            if field in overrides:
                header = overrides[field]
                if header not in df.columns:
                    raise LoaderError(f"Column '{header}' mapped to '{field}' is not in the sheet")
                return header
            for frag in COLUMN_HINTS[field]:
                if frag in cols:
                    return cols[frag]
            for frag in COLUMN_HINTS[field]:
                match = next((orig for low, orig in cols.items() if frag in low), None)
                if match is not None:
                    return match
            return None

        mapping = {}
        for field in COLUMN_HINTS:
            mapping[field] = find(field)
        # "subcategory" headers also contain "category"
        if mapping["category"] is not None and mapping["category"] == mapping["subcategory"]:
            mapping["category"] = next(
                (orig for low, orig in cols.items() if "category" in low and "sub" not in low), None
            )
        return mapping

    def load(self, file_path, columns=None):
        self.skipped_rows = 0
        df = self._read(file_path)
        cols = self._columns(df, columns or {})
        if cols["date"] is None:
            raise LoaderError(f"Missing a date column in {file_path}")
        by_type = cols["type"] is not None and cols["amount"] is not None
        by_side = cols["cash_in"] is not None or cols["cash_out"] is not None
        if not (by_type or by_side):
            raise LoaderError(
                f"{file_path} needs either 'type' and 'amount' columns or 'cash in'/'cash out' columns"
            )

        uncategorized = self.config.get("uncategorized_label") or UNCATEGORIZED

        def cell(row, field):
            col = cols[field]
            return row[col] if col is not None else None

        txs = []
        for _, row in df.iterrows():
            moment = parse_entry_date(cell(row, "date"), cell(row, "time"))
            if moment is None:
                self.skipped_rows += 1
                continue

            sides = []
            if by_type:
                kind = _TYPE_WORDS.get(_text(cell(row, "type")).lower())
                amount = _amount(cell(row, "amount"))
                if kind is None:
                    raise LoaderError(f"Unknown entry type '{cell(row, 'type')}' in {file_path}")
                if amount:
                    sides.append((kind, abs(amount)))
            else:
                cash_in = _amount(cell(row, "cash_in"))
                cash_out = _amount(cell(row, "cash_out"))
                if cash_in > 0:
                    sides.append((CASH_IN, cash_in))
                elif cash_in < 0:
                    sides.append((CASH_OUT, abs(cash_in)))
                if cash_out:
                    sides.append((CASH_OUT, abs(cash_out)))

            if not sides:
                self.skipped_rows += 1
                continue

            for kind, amount in sides:
                txs.append(
                    Transaction(
                        id=uuid.uuid4().hex,
                        date=moment,
                        type=kind,
                        amount=amount,
                        category=_text(cell(row, "category")) or uncategorized,
                        subcategory=_text(cell(row, "subcategory")) or None,
                        remark=_text(cell(row, "remark")),
                        member_id=_text(cell(row, "member_id")) or None,
                    )
                )

        if self.skipped_rows:
            logger.warning("Skipped %d row(s) without a usable date or amount in %s", self.skipped_rows, file_path)
        logger.info("Read %d entries from %s", len(txs), file_path)
        return txs
