# rupeebook/core/balance.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, NamedTuple

from rupeebook.core.models import CASH_IN, Transaction

logger = logging.getLogger(__name__)


class RunningBalances(NamedTuple):
    balances: Dict[str, float]
    skipped: List[str]


def chronological(transactions: Iterable[Transaction], tz=None):
    """
    Split transactions into (timestamp, tx) pairs sorted oldest first and the
    ids of entries whose date could not be parsed.

    The sort is stable, so entries sharing a timestamp keep their input order.
    """
    dated = []
    skipped = []
    for tx in transactions:
        moment = tx.parsed_date(tz)
        if moment is None:
            skipped.append(tx.id)
            continue
        dated.append((moment, tx))
    dated.sort(key=lambda pair: pair[0])
    return dated, skipped


def running_balances(
    transactions: Iterable[Transaction],
    opening_balance: float = 0.0,
    tz=None,
) -> RunningBalances:
    """Balance after each entry, keyed by transaction id, walking oldest first."""
    dated, skipped = chronological(transactions, tz)
    if skipped:
        logger.warning(
            "Skipped %d transaction(s) with unreadable dates: %s",
            len(skipped), ", ".join(skipped),
        )

    balance = float(opening_balance or 0.0)
    balances = {}
    for _, tx in dated:
        if tx.type == CASH_IN:
            balance += tx.amount
        else:
            balance -= tx.amount
        balances[tx.id] = balance
    return RunningBalances(balances, skipped)


def closing_balance(transactions: Iterable[Transaction], opening_balance: float = 0.0) -> float:
    """Book balance over every entry; dates play no part."""
    return float(opening_balance or 0.0) + sum(tx.signed_amount for tx in transactions)
