import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from models import DisputeState, Transaction, TransactionType

logger = logging.getLogger(__name__)


@dataclass
class DisputeResolution:
    """Outcome of resolving one account's lifecycle events."""

    states: Dict[int, DisputeState] = field(default_factory=dict)
    locked: bool = False
    ignored: List[Transaction] = field(default_factory=list)

    def state_of(self, transaction_id: int) -> DisputeState:
        return self.states.get(transaction_id, DisputeState.NORMAL)


class DisputeResolver:
    """
    Folds one account's dispute, resolve and chargeback events, in order,
    into a state per referenced transaction.
    Resolved and charged-back transactions are never reopened by a later dispute.
    """

    def __init__(self, transactions: Iterable[Transaction]):
        self._transactions: List[Transaction] = list(transactions)
        # Deposits/withdrawals seen so far while walking the stream in resolve().
        self._seen: Dict[int, Transaction] = {}

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve the prior deposit/withdrawal a lifecycle event refers to, if any."""
        return self._seen.get(transaction_id)

    def reference_targets(self) -> List[Transaction]:
        """Monetary transactions that lifecycle events can refer to, in input order."""
        targets: Dict[int, Transaction] = {}
        for transaction in self._transactions:
            if transaction.transaction_type.is_monetary:
                targets.setdefault(transaction.transaction_id, transaction)
        return list(targets.values())

    def resolve(self) -> DisputeResolution:
        resolution = DisputeResolution()
        self._seen = {}

        for transaction in self._transactions:
            if transaction.transaction_type.is_monetary:
                # First occurrence of a transaction_id is the reference target.
                self._seen.setdefault(transaction.transaction_id, transaction)
                continue

            if self.get_transaction(transaction.transaction_id) is None:
                logger.warning(
                    f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: "
                    f"no prior deposit or withdrawal with that id for client {transaction.client_id}, ignoring"
                )
                resolution.ignored.append(transaction)
                continue

            match transaction.transaction_type:
                case TransactionType.DISPUTE:
                    self._handle_dispute(resolution, transaction)
                case TransactionType.RESOLVE:
                    self._handle_resolve(resolution, transaction)
                case TransactionType.CHARGEBACK:
                    self._handle_chargeback(resolution, transaction)

        return resolution

    def _handle_dispute(self, resolution: DisputeResolution, transaction: Transaction) -> None:
        current = resolution.state_of(transaction.transaction_id)
        if current != DisputeState.NORMAL:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: already {current.value}, no change")
            return
        self._transition(resolution, transaction, DisputeState.OPEN_DISPUTED)

    def _handle_resolve(self, resolution: DisputeResolution, transaction: Transaction) -> None:
        self._transition(resolution, transaction, DisputeState.RESOLVED)

    def _handle_chargeback(self, resolution: DisputeResolution, transaction: Transaction) -> None:
        resolution.locked = True
        # A resolved transaction stays resolved for balance purposes; the chargeback still locks.
        if resolution.state_of(transaction.transaction_id) == DisputeState.RESOLVED:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: already resolved, locking only")
            return
        self._transition(resolution, transaction, DisputeState.CHARGED_BACK)

    def _transition(self, resolution: DisputeResolution, transaction: Transaction, new_state: DisputeState) -> None:
        logger.debug(
            f"Client {transaction.client_id} tx {transaction.transaction_id}: "
            f"{resolution.state_of(transaction.transaction_id).value} -> {new_state.value}"
        )
        resolution.states[transaction.transaction_id] = new_state


def resolve_disputes(transactions: Iterable[Transaction]) -> DisputeResolution:
    """Resolve dispute states for one account's ordered transactions."""
    return DisputeResolver(transactions).resolve()
