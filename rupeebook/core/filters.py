# rupeebook/core/filters.py
from __future__ import annotations

from typing import Iterable, List

from rupeebook.core.models import FilterSpec, Transaction
from rupeebook.utils import amount_text, end_of_day, parse_timestamp, start_of_day


def _date_bounds(spec: FilterSpec, tz=None):
    lower = upper = None
    if spec.date_from:
        lower = start_of_day(parse_timestamp(spec.date_from, tz))
    if spec.date_to:
        upper = end_of_day(parse_timestamp(spec.date_to, tz))
    return lower, upper


def matches_search(tx: Transaction, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return needle in (tx.remark or "").lower() or term in amount_text(tx.amount)


def filter_transactions(
    transactions: Iterable[Transaction],
    spec: FilterSpec,
    tz=None,
) -> List[Transaction]:
    """
    Return the transactions that satisfy every constraint in *spec*, in input order.

    Entries whose date can't be parsed fail any set date bound but otherwise
    pass through untouched.
    """
    spec.validate()
    lower, upper = _date_bounds(spec, tz)
    categories = set(spec.category)
    subcategories = set(spec.subcategory)
    members = set(spec.members)

    result = []
    for tx in transactions:
        if spec.type != "all" and tx.type != spec.type:
            continue
        if categories and tx.category not in categories:
            continue
        if subcategories and not (tx.subcategory and tx.subcategory in subcategories):
            continue
        if members and not (tx.member_id and tx.member_id in members):
            continue
        if lower is not None or upper is not None:
            moment = tx.parsed_date(tz)
            if moment is None:
                continue
            if lower is not None and moment < lower:
                continue
            if upper is not None and moment > upper:
                continue
        if not matches_search(tx, spec.search_term):
            continue
        result.append(tx)
    return result
