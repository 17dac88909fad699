import csv
import io
import json
import logging
from typing import List

from errors import ImportFormatError, ValidationError
from interchange.fields import clean_label, parse_amount, parse_date
from models.category import Kind
from models.transaction import Transaction

logger = logging.getLogger(__name__)

HEADER = ["날짜", "유형", "관", "항", "목", "금액", "메모"]
REQUIRED_COLUMNS = HEADER[:-1]


def encode(transactions: List[Transaction]) -> str:
    """
    Serialize transactions to CSV text.

    Format:
    - Header row (line 1): 날짜,유형,관,항,목,금액,메모
    - Transaction rows (line 2+): ISO date, kind label, labels, plain integer
      amount, memo (empty when absent)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    for t in transactions:
        writer.writerow(
            [
                t.date.isoformat(),
                t.kind.value,
                t.level1,
                t.level2,
                t.level3,
                str(t.amount),
                t.memo or "",
            ]
        )
    return buffer.getvalue()


def validate_transaction(transaction: Transaction) -> Transaction:
    """Check a transaction's fields and return it normalized.

    Category labels are only checked for presence; whether a matching category
    exists is not checked.

    Raises:
        ValidationError: If the date, kind, a label or the amount is invalid.
    """
    try:
        kind = Kind.parse(transaction.kind)
    except ValueError as exc:
        raise ValidationError('유형 must be "수입" or "지출"') from exc

    memo = transaction.memo.strip() if transaction.memo else None
    return Transaction(
        id=transaction.id,
        date=parse_date(transaction.date),
        kind=kind,
        level1=clean_label(transaction.level1, "관"),
        level2=clean_label(transaction.level2, "항"),
        level3=clean_label(transaction.level3, "목"),
        amount=parse_amount(transaction.amount),
        memo=memo or None,
    )


def row_to_transaction(row: List[str], columns: dict) -> Transaction:
    """Convert one CSV row to a Transaction with a new id.

    Args:
        row: Field values of the row.
        columns: Mapping of header name to column index.

    Raises:
        ValidationError: If a required field is blank, the kind is unknown, the
            date is unparsable or the amount is not a positive integer.
    """
    values = {
        name: (row[index].strip() if index < len(row) else "")
        for name, index in columns.items()
    }

    try:
        kind = Kind.parse(values["유형"])
    except ValueError as exc:
        raise ValidationError('유형 must be "수입" or "지출"') from exc

    return Transaction.create(
        date=parse_date(values["날짜"]),
        kind=kind,
        level1=clean_label(values["관"], "관"),
        level2=clean_label(values["항"], "항"),
        level3=clean_label(values["목"], "목"),
        amount=parse_amount(values["금액"]),
        memo=values.get("메모") or None,
    )


def decode(text: str) -> List[Transaction]:
    """
    Parse transaction CSV text.

    Invalid rows are dropped with a warning; the rest are returned with freshly
    generated ids, in file order.

    Raises:
        ImportFormatError: If the header lacks a required column or no row is valid.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))

    try:
        header = [name.strip() for name in next(reader)]
    except StopIteration:
        raise ImportFormatError("Empty CSV file")

    missing = [name for name in REQUIRED_COLUMNS if name not in header]
    if missing:
        logger.error(f"Invalid transaction header: {header}")
        raise ImportFormatError(
            f"Invalid transaction CSV header (missing columns: {','.join(missing)})"
        )
    columns = {name: header.index(name) for name in HEADER if name in header}

    transactions = []
    line_num = 1
    for row in reader:
        line_num += 1

        if not any(field.strip() for field in row):
            continue

        try:
            transactions.append(row_to_transaction(row, columns))
        except ValidationError as e:
            logger.warning(f"Skipping transaction line {line_num}: {row} - {e}")

    if not transactions:
        raise ImportFormatError("No valid transactions found in CSV")

    logger.info(f"Parsed {len(transactions)} transactions")
    return transactions


def encode_json(transactions: List[Transaction]) -> str:
    """Serialize transactions to a JSON array, ids included."""
    return json.dumps(
        [t.to_dict() for t in transactions], ensure_ascii=False, indent=2
    )


def decode_json(text: str) -> List[Transaction]:
    """
    Parse a JSON array of transactions.

    Unlike CSV import, ids present in the document are kept. Invalid entries
    and entries repeating an earlier id are dropped with a warning.

    Raises:
        ImportFormatError: If the document is not a JSON array or no entry is valid.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"Invalid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise ImportFormatError("Expected a JSON array of transactions")

    transactions = []
    seen_ids = set()
    for index, entry in enumerate(payload):
        try:
            transaction = validate_transaction(Transaction.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping JSON entry {index}: {e}")
            continue

        if transaction.id in seen_ids:
            logger.warning(f"Skipping JSON entry {index}: duplicate id {transaction.id}")
            continue
        seen_ids.add(transaction.id)
        transactions.append(transaction)

    if payload and not transactions:
        raise ImportFormatError("No valid transactions found in JSON")

    return transactions
