from typing import Dict, Iterable, List

from models import Transaction


def partition_by_client(transactions: Iterable[Transaction]) -> Dict[int, List[Transaction]]:
    """
    Group transactions by client_id.
    Groups appear in first-seen order and each keeps the input's relative order.
    """
    groups: Dict[int, List[Transaction]] = {}
    for transaction in transactions:
        groups.setdefault(transaction.client_id, []).append(transaction)
    return groups
