import csv
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from aggregator import to_position
from classifier import classify_row
from errors import InputAccessError, MalformedRowError
from models import Position, ProcessingStats, Transaction
from partitioner import partition_by_client

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")

Row = Dict[str, Optional[str]]


class PaymentsEngine:
    """
    Computes one final position per client from a closed batch of transactions.
    The whole input is read before anything is computed; any error aborts the run.
    """

    def __init__(self):
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, Position]:
        """Process CSV file and return final positions keyed by client, in client order."""
        logger.info(f"Reading transactions from {filepath}")
        rows = self.read_rows(filepath)
        self._stats.record_rows(len(rows))

        transactions = [self._classify(line, row) for line, row in rows]
        return self.process_transactions(transactions)

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, Position]:
        """Partition by client, resolve disputes and fold balances for each account."""
        groups = partition_by_client(transactions)
        logger.info(f"Computing positions for {len(groups)} clients")

        positions = {
            client_id: to_position(client_id, client_transactions, self._stats)
            for client_id, client_transactions in groups.items()
        }
        self._stats.record_accounts(len(positions))

        logger.info(
            f"Rows read: {self._stats.rows_read}, "
            f"Accounts: {self._stats.accounts}, "
            f"Ignored lifecycle events: {self._stats.ignored}"
        )
        return {client_id: positions[client_id] for client_id in sorted(positions)}

    def read_rows(self, filepath: str) -> List[Tuple[int, Row]]:
        """Read the whole CSV file into (line number, row) pairs."""
        try:
            with open(filepath, "r", newline="", encoding="utf-8") as f:
                reader = csv.DictReader(f)
                self._check_header(reader)
                return [(reader.line_num, row) for row in reader]
        except OSError as e:
            raise InputAccessError(str(e)) from e
        except UnicodeDecodeError as e:
            raise InputAccessError(f"not a readable text file: {e}") from e
        except csv.Error as e:
            raise MalformedRowError(str(e)) from e

    def _check_header(self, reader: csv.DictReader) -> None:
        if reader.fieldnames is None:
            raise MalformedRowError("input has no header row")
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
        missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
        if missing:
            raise MalformedRowError(f"header is missing required columns: {', '.join(missing)}", line=1)

    def _classify(self, line: int, row: Row) -> Transaction:
        try:
            return classify_row(row)
        except MalformedRowError as e:
            e.at_line(line)
            raise
