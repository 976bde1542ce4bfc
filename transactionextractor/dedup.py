from __future__ import annotations

from typing import Iterable, List

from .models import ParsedTransaction

AMOUNT_EPSILON = 0.01
PREFIX_LENGTH = 20


def same_transaction(a: ParsedTransaction, b: ParsedTransaction) -> bool:
    """Same date, amounts within a cent, same 20-character description prefix."""
    return (
        a.date == b.date
        and abs(a.amount - b.amount) < AMOUNT_EPSILON
        and a.description[:PREFIX_LENGTH] == b.description[:PREFIX_LENGTH]
    )


def deduplicate(transactions: Iterable[ParsedTransaction]) -> List[ParsedTransaction]:
    """Keep the first of each group of equivalent transactions, in input order."""
    kept: List[ParsedTransaction] = []
    for txn in transactions:
        if not any(same_transaction(txn, seen) for seen in kept):
            kept.append(txn)
    return kept
