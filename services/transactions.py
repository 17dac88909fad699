"""Transaction service: the ledger, keyed by transaction id."""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from errors import PersistenceError, ValidationError
from interchange.transactions import validate_transaction
from logger import get_logger
from models.category import Kind
from models.transaction import Transaction

logger = get_logger("services.transactions")


@dataclass
class DailyLedger:
    """Transactions of one day with that day's totals."""

    date: date
    transactions: List[Transaction] = field(default_factory=list)
    total_income: int = 0
    total_expense: int = 0


class TransactionService:
    """Service for managing the ledger.

    Args:
        repository: Snapshot repository providing load/save/delete.
    """

    def __init__(self, repository):
        self.repository = repository
        self._transactions: List[Transaction] = []
        self.load()

    def load(self) -> None:
        """Replace the in-memory ledger with the stored snapshot.

        Stored entries that cannot be read (e.g. an unparsable date) are
        skipped with a warning.
        """
        try:
            records = self.repository.load()
        except PersistenceError as e:
            logger.error(f"Failed to load transactions: {e}")
            self._transactions = []
            return

        transactions = []
        for record in records:
            try:
                transactions.append(Transaction.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping stored transaction {record!r}: {e}")
        self._transactions = _unique_by_id(transactions)
        if len(self._transactions) < len(transactions):
            logger.warning("Skipped stored transactions with duplicate ids")

    def find_all(self) -> List[Transaction]:
        """Get all transactions in insertion order."""
        return list(self._transactions)

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Get a single transaction by id.

        Args:
            transaction_id: The transaction id to find.

        Returns:
            Transaction object if found, None otherwise.
        """
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def create(
        self,
        date,
        kind,
        level1: str,
        level2: str,
        level3: str,
        amount,
        memo: Optional[str] = None,
    ) -> Transaction:
        """Build a transaction from raw input, assign it an id and add it.

        Raises:
            ValidationError: If any field is invalid. Nothing is stored.
        """
        transaction = Transaction.create(
            date=date,
            kind=kind,
            level1=level1,
            level2=level2,
            level3=level3,
            amount=amount,
            memo=memo,
        )
        return self.add(transaction)

    def add(self, transaction: Transaction) -> Transaction:
        """Append a transaction and persist the ledger.

        Returns:
            The stored (normalized) transaction.

        Raises:
            ValidationError: If any field is invalid or the id is already
                stored. Nothing is stored.
            PersistenceError: If the write-through fails. The transaction stays
                added in memory.
        """
        transaction = validate_transaction(transaction)
        if self.find(transaction.id) is not None:
            raise ValidationError(f"Transaction id already exists: {transaction.id}")
        self._transactions.append(transaction)
        logger.info(
            f"Added transaction {transaction.id} ({transaction.kind.value} {transaction.amount})"
        )
        self._persist()
        return transaction

    def update(self, transaction: Transaction) -> bool:
        """Replace the transaction with the same id.

        Returns:
            True if a transaction was replaced, False if the id is unknown.
        """
        transaction = validate_transaction(transaction)
        for index, existing in enumerate(self._transactions):
            if existing.id == transaction.id:
                self._transactions[index] = transaction
                logger.info(f"Updated transaction {transaction.id}")
                self._persist()
                return True

        logger.warning(f"Transaction to update not found: {transaction.id}")
        return False

    def delete(self, transaction: Transaction) -> bool:
        """Remove the transaction with the same id.

        Returns:
            True if a transaction was removed, False if the id is unknown.
        """
        remaining = [t for t in self._transactions if t.id != transaction.id]
        if len(remaining) == len(self._transactions):
            logger.warning(f"Transaction to delete not found: {transaction.id}")
            return False

        self._transactions = remaining
        logger.info(f"Deleted transaction {transaction.id}")
        self._persist()
        return True

    def replace_all(self, transactions: List[Transaction]) -> int:
        """Replace the whole ledger, e.g. after an import.

        Ids are unique in the ledger: of several transactions sharing an id,
        the first is kept and the rest are dropped with a warning.

        Returns:
            Number of transactions stored.

        Raises:
            ValidationError: If any transaction is invalid. The ledger is left
                unchanged.
        """
        validated = _unique_by_id(validate_transaction(t) for t in transactions)
        skipped = len(transactions) - len(validated)
        if skipped:
            logger.warning(f"Dropped {skipped} transactions with duplicate ids")

        self._transactions = validated
        logger.info(f"Replaced ledger with {len(validated)} transactions")
        self._persist()
        return len(validated)

    def reset(self) -> None:
        """Empty the ledger and delete the stored snapshot."""
        self._transactions = []
        try:
            self.repository.delete()
        except PersistenceError as e:
            logger.error(f"Failed to delete transaction snapshot: {e}")
            raise
        logger.info("Transaction snapshot deleted")

    def group_by_date(self) -> List[DailyLedger]:
        """Group the ledger by day, newest day first, with daily totals."""
        days = {}
        for transaction in self._transactions:
            day = days.get(transaction.date)
            if day is None:
                day = days[transaction.date] = DailyLedger(date=transaction.date)
            day.transactions.append(transaction)
            if transaction.kind == Kind.INCOME:
                day.total_income += transaction.amount
            else:
                day.total_expense += transaction.amount

        return sorted(days.values(), key=lambda d: d.date, reverse=True)

    def _persist(self) -> None:
        try:
            self.repository.save([t.to_dict() for t in self._transactions])
        except PersistenceError as e:
            logger.error(f"Failed to save transactions: {e}")
            raise


def _unique_by_id(transactions: Iterable[Transaction]) -> List[Transaction]:
    seen = set()
    unique = []
    for transaction in transactions:
        if transaction.id not in seen:
            seen.add(transaction.id)
            unique.append(transaction)
    return unique
