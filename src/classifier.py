import re
from decimal import Decimal
from typing import Dict, Optional

from errors import MalformedRowError, MissingAmountError, UnknownTransactionTypeError
from models import Transaction, TransactionType

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Decimal notation with an optional short exponent, such as 1.5 or 2e3.
AMOUNT_PATTERN = re.compile(r"-?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d{1,4})?", re.ASCII)
MAX_AMOUNT = Decimal("1E15")


def classify_row(row: Dict[str, Optional[str]]) -> Transaction:
    """
    Convert a raw CSV row into a typed Transaction.

    Raises:
        MissingAmountError: deposit/withdrawal without an amount
        UnknownTransactionTypeError: type is not one of the five known kinds
        MalformedRowError: any other schema violation
    """
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    transaction_type = _parse_type(_require(normalized, "type"))
    client_id = _parse_id(_require(normalized, "client"), "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(_require(normalized, "tx"), "tx", MAX_TRANSACTION_ID)

    match transaction_type:
        case TransactionType.DEPOSIT:
            return Transaction.deposit(client_id, transaction_id, _parse_amount(normalized, transaction_type))
        case TransactionType.WITHDRAWAL:
            return Transaction.withdrawal(client_id, transaction_id, _parse_amount(normalized, transaction_type))
        case TransactionType.DISPUTE:
            return Transaction.dispute(client_id, transaction_id)
        case TransactionType.RESOLVE:
            return Transaction.resolve(client_id, transaction_id)
        case TransactionType.CHARGEBACK:
            return Transaction.chargeback(client_id, transaction_id)


def _require(normalized: Dict[str, str], field: str) -> str:
    value = normalized.get(field, "")
    if not value:
        raise MalformedRowError(f"missing required field '{field}'")
    return value


def _parse_type(value: str) -> TransactionType:
    try:
        return TransactionType(value.lower())
    except ValueError:
        raise UnknownTransactionTypeError(f"unknown transaction type '{value}'") from None


def _parse_id(value: str, field: str, upper: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise MalformedRowError(f"field '{field}' is not an unsigned integer: '{value}'")
    parsed = int(value)
    if parsed > upper:
        raise MalformedRowError(f"field '{field}' out of range [0, {upper}]: {parsed}")
    return parsed


def _parse_amount(normalized: Dict[str, str], transaction_type: TransactionType) -> Decimal:
    amount_str = normalized.get("amount", "")
    if not amount_str:
        raise MissingAmountError(f"{transaction_type.value} requires an amount")

    if not AMOUNT_PATTERN.fullmatch(amount_str):
        raise MalformedRowError(f"amount is not a decimal: '{amount_str}'")

    amount = Decimal(amount_str)
    if amount < 0:
        raise MalformedRowError(f"amount must be non-negative: '{amount_str}'")
    if amount >= MAX_AMOUNT:
        raise MalformedRowError(f"amount must be below {MAX_AMOUNT:f}: '{amount_str}'")
    return amount
