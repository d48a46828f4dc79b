# rupeebook/core/permissions.py
"""Rules for what a book member may see and change.

Owners and admins have full access. Viewers read everything but change
nothing. Data operators add entries, and the book owner's
:class:`DataOperatorSettings` decide whether they may backdate entries, edit
them, see other members' entries, or see balances and reports.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Optional

from rupeebook.core.models import DataOperatorSettings, Member, Transaction
from rupeebook.errors import PermissionDenied

DATA_OPERATOR = "data-operator"


def _is_data_operator(viewer: Optional[Member]) -> bool:
    return viewer is not None and viewer.role == DATA_OPERATOR


def visible_transactions(
    transactions: Iterable[Transaction],
    viewer: Optional[Member],
    settings: Optional[DataOperatorSettings],
) -> List[Transaction]:
    settings = settings or DataOperatorSettings()
    if _is_data_operator(viewer) and settings.hide_entries_by_other_members:
        return [tx for tx in transactions if tx.member_id == viewer.id]
    return list(transactions)


def can_view_balances(viewer: Optional[Member], settings: Optional[DataOperatorSettings]) -> bool:
    settings = settings or DataOperatorSettings()
    return not (_is_data_operator(viewer) and settings.hide_net_balance_and_reports)


def require_reports(viewer: Optional[Member], settings: Optional[DataOperatorSettings]) -> None:
    if not can_view_balances(viewer, settings):
        raise PermissionDenied(f"Reports are hidden from data operator {viewer.name!r}")


def can_edit_entries(viewer: Optional[Member], settings: Optional[DataOperatorSettings]) -> bool:
    if viewer is None:
        return False
    if viewer.role in ("owner", "admin"):
        return True
    if viewer.role == DATA_OPERATOR:
        return bool((settings or DataOperatorSettings()).allow_entry_editing)
    return False


def earliest_entry_date(
    viewer: Optional[Member],
    settings: Optional[DataOperatorSettings],
    today: Optional[date] = None,
) -> Optional[date]:
    """First date a new entry may carry, or None when any date is allowed."""
    if not _is_data_operator(viewer):
        return None
    today = today or date.today()
    policy = (settings or DataOperatorSettings()).allow_backdated_entries
    if policy == "never":
        return today
    if policy == "one-day-before":
        return today - timedelta(days=1)
    if policy == "always":
        return None
    raise ValueError(f"Unsupported backdating policy '{policy}'.")
