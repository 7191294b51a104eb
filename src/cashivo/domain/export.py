"""CSV export of transactions."""

import csv
from typing import Iterable, TextIO

from cashivo.domain.entities import Transaction

CSV_COLUMNS = [
    "ID",
    "Date",
    "Type",
    "Category",
    "Amount",
    "Description",
    "Notes",
    "Recurring ID",
]


def write_transactions_csv(transactions: Iterable[Transaction], stream: TextIO) -> int:
    """Write transactions as CSV with a header row.

    Amounts are positive magnitudes with two decimals; the Type column says
    whether each row is income or an expense.

    Args:
        transactions: Transactions to write, in the order given
        stream: Text stream to write to

    Returns:
        Number of transaction rows written
    """
    writer = csv.writer(stream)
    writer.writerow(CSV_COLUMNS)
    count = 0
    for txn in transactions:
        writer.writerow(
            [
                txn.id,
                txn.date.isoformat(),
                txn.direction.value,
                txn.category,
                f"{txn.amount:.2f}",
                txn.description or "",
                txn.notes or "",
                txn.source_definition_id if txn.source_definition_id is not None else "",
            ]
        )
        count += 1
    return count
