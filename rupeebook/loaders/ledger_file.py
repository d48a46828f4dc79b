# rupeebook/loaders/ledger_file.py
"""Load a book snapshot exported by the data-access layer.

Three layouts are accepted, in YAML or JSON (JSON is read as YAML):

* ``{"book": {...}, "members": [...], "transactions": [...]}``
* a single book mapping that carries its own ``transactions`` list
* a full backup, ``{"members": [...], "rupeebooks": [...],
  "dataOperatorSettings": {...}}``, from which one book is picked by id or name

Keys may be camelCase, as the hosted backend returns them.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import yaml

from rupeebook.core.models import (
    UNCATEGORIZED,
    DataOperatorSettings,
    Ledger,
    Member,
    Transaction,
)
from rupeebook.errors import InvalidTransaction, LoaderError
from rupeebook.loaders.base import BaseLoader

logger = logging.getLogger(__name__)

_CAMEL_RX = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_keys(record: Dict[str, Any]) -> Dict[str, Any]:
    return {_CAMEL_RX.sub("_", str(k)).lower(): v for k, v in record.items()}


def _member(record) -> Member:
    rec = _snake_keys(record)
    if not rec.get("id"):
        raise LoaderError(f"Member without an id: {record}")
    return Member(id=str(rec["id"]), name=str(rec.get("name") or ""), role=rec.get("role") or "owner")


def _settings(record) -> DataOperatorSettings:
    if not record:
        return DataOperatorSettings()
    rec = _snake_keys(record)
    defaults = DataOperatorSettings()
    return DataOperatorSettings(
        allow_backdated_entries=rec.get("allow_backdated_entries") or defaults.allow_backdated_entries,
        hide_net_balance_and_reports=bool(rec.get("hide_net_balance_and_reports", False)),
        hide_entries_by_other_members=bool(rec.get("hide_entries_by_other_members", False)),
        allow_entry_editing=bool(rec.get("allow_entry_editing", False)),
    )


def _transaction(record, fallback_id: str, uncategorized: str) -> Transaction:
    rec = _snake_keys(record)
    raw_amount = rec.get("amount")
    try:
        amount = float(raw_amount)
    except (TypeError, ValueError):
        raise LoaderError(f"Could not parse amount {raw_amount!r} of entry {rec.get('id') or fallback_id}")
    try:
        return Transaction(
            id=str(rec.get("id") or fallback_id),
            date=rec.get("date"),
            type=rec.get("type"),
            amount=amount,
            category=rec.get("category") or uncategorized,
            subcategory=rec.get("subcategory") or None,
            remark=rec.get("remark") or "",
            attachment_url=rec.get("attachment_url") or None,
            member_id=str(rec["member_id"]) if rec.get("member_id") else None,
            created_at=rec.get("created_at"),
            updated_at=rec.get("updated_at"),
        )
    except InvalidTransaction as exc:
        raise LoaderError(str(exc)) from exc


class LedgerFileLoader(BaseLoader):

    def load(self, file_path, book: Optional[str] = None) -> Ledger:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise LoaderError(f"{file_path} does not hold a book snapshot")

        members = [_member(m) for m in data.get("members") or []]
        settings_record = data.get("dataOperatorSettings") or data.get("data_operator_settings")

        if "rupeebooks" in data:
            book_record = self._pick_book(data["rupeebooks"], book, file_path)
            transactions = book_record.get("transactions") or []
        elif "book" in data:
            book_record = data["book"] or {}
            transactions = data.get("transactions") or book_record.get("transactions") or []
        else:
            book_record = data
            transactions = data.get("transactions") or []

        ledger = self._ledger(book_record, transactions, members, settings_record)
        logger.info("Loaded book %r with %d entries from %s", ledger.name, len(ledger.transactions), file_path)
        return ledger

    def _pick_book(self, books: List[Dict[str, Any]], wanted: Optional[str], file_path) -> Dict[str, Any]:
        if wanted is None:
            if len(books) == 1:
                return books[0]
            raise LoaderError(f"{file_path} holds {len(books)} books; choose one by id or name")
        for record in books:
            if wanted in (str(record.get("id")), record.get("name")):
                return record
        raise LoaderError(f"No book {wanted!r} in {file_path}")

    def _ledger(self, book_record, transactions, members, settings_record) -> Ledger:
        rec = _snake_keys(book_record)
        book_id = str(rec.get("id") or "book")
        uncategorized = self.config.get("uncategorized_label") or UNCATEGORIZED
        entries = [
            _transaction(t, f"{book_id}-{idx}", uncategorized)
            for idx, t in enumerate(transactions, start=1)
        ]

        return Ledger(
            id=book_id,
            name=str(rec.get("name") or book_id),
            transactions=entries,
            balance_before=float(rec.get("balance_before") or 0.0),
            categories=list(rec.get("categories") or []),
            subcategories=list(rec.get("subcategories") or []),
            members=members,
            data_operator_settings=_settings(settings_record or rec.get("data_operator_settings")),
        )
