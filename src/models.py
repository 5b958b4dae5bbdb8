from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_EVEN, localcontext
from enum import Enum

ZERO = Decimal("0")

# Amounts are capped below 10**15; 60 digits leaves room for batch sums plus fractions.
MONEY_PRECISION = 60


def money_context():
    """Decimal context for balance arithmetic and output rounding."""
    return localcontext(Context(prec=MONEY_PRECISION, rounding=ROUND_HALF_EVEN))


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_monetary(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NORMAL = "normal"
    OPEN_DISPUTED = "open_disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


@dataclass(frozen=True)
class Transaction:
    """
    A classified event. For deposits and withdrawals transaction_id is the id
    of this event; for lifecycle events it references a prior deposit/withdrawal.
    """

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    raw_amount: Decimal = ZERO
    directed_amount: Decimal = ZERO

    def __post_init__(self):
        if self.raw_amount < 0:
            raise ValueError(f"raw_amount must be non-negative, got {self.raw_amount}")
        if self.directed_amount != self._expected_directed_amount():
            raise ValueError(
                f"directed_amount {self.directed_amount} inconsistent with "
                f"{self.transaction_type.value} of {self.raw_amount}"
            )

    def _expected_directed_amount(self) -> Decimal:
        if self.transaction_type == TransactionType.DEPOSIT:
            return self.raw_amount
        if self.transaction_type == TransactionType.WITHDRAWAL:
            return -self.raw_amount
        return ZERO

    @classmethod
    def deposit(cls, client_id: int, transaction_id: int, amount: Decimal) -> "Transaction":
        return cls(TransactionType.DEPOSIT, client_id, transaction_id, amount, amount)

    @classmethod
    def withdrawal(cls, client_id: int, transaction_id: int, amount: Decimal) -> "Transaction":
        return cls(TransactionType.WITHDRAWAL, client_id, transaction_id, amount, -amount)

    @classmethod
    def dispute(cls, client_id: int, transaction_id: int) -> "Transaction":
        return cls(TransactionType.DISPUTE, client_id, transaction_id)

    @classmethod
    def resolve(cls, client_id: int, transaction_id: int) -> "Transaction":
        return cls(TransactionType.RESOLVE, client_id, transaction_id)

    @classmethod
    def chargeback(cls, client_id: int, transaction_id: int) -> "Transaction":
        return cls(TransactionType.CHARGEBACK, client_id, transaction_id)

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.raw_amount})"


@dataclass(frozen=True)
class Position:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        with money_context():
            return self.available + self.held


class ProcessingStats:
    """Counters for the processing report logged after a run."""

    def __init__(self):
        self.rows_read = 0
        self.accounts = 0
        self.ignored = 0

    def record_rows(self, count: int):
        self.rows_read += count

    def record_accounts(self, count: int):
        self.accounts += count

    def record_ignored(self, count: int = 1):
        self.ignored += count
