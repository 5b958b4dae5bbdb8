import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from dispute_resolver import DisputeResolver, DisputeResolution
from models import ZERO, DisputeState, Position, ProcessingStats, Transaction, money_context

logger = logging.getLogger(__name__)


def apply_amount(balance: Decimal, delta: Decimal) -> Decimal:
    """Overdraft-safety rule: drop the delta if it would take the balance below zero."""
    candidate = balance + delta
    if candidate < 0:
        logger.debug(f"Rejected {delta} against balance {balance}: would overdraw")
        return balance
    return candidate


def fold_amounts(amounts: Iterable[Decimal]) -> Decimal:
    balance = ZERO
    for amount in amounts:
        balance = apply_amount(balance, amount)
    return balance


def to_position(
    client_id: int,
    transactions: Iterable[Transaction],
    stats: Optional[ProcessingStats] = None,
) -> Position:
    """
    Compute the final position of one account from its ordered transactions.

    available = undisputed fold + resolved fold
    held      = fold over amounts still under open dispute
    """
    transactions = list(transactions)
    resolver = DisputeResolver(transactions)
    resolution = resolver.resolve()
    if stats is not None:
        stats.record_ignored(len(resolution.ignored))
    return aggregate(client_id, transactions, resolver.reference_targets(), resolution)


def aggregate(
    client_id: int,
    transactions: List[Transaction],
    reference_targets: List[Transaction],
    resolution: DisputeResolution,
) -> Position:
    with money_context():
        undisputed = fold_amounts(
            t.directed_amount for t in transactions if t.transaction_type.is_monetary
        )
        resolved = fold_amounts(
            t.raw_amount for t in reference_targets
            if resolution.state_of(t.transaction_id) == DisputeState.RESOLVED
        )
        held = fold_amounts(
            t.raw_amount for t in reference_targets
            if resolution.state_of(t.transaction_id) == DisputeState.OPEN_DISPUTED
        )
        available = undisputed + resolved

    return Position(
        client_id=client_id,
        available=available,
        held=held,
        locked=resolution.locked,
    )
