import csv
import io
import logging
from typing import List

from errors import ImportFormatError, ValidationError
from interchange.fields import clean_label
from models.category import Category, Kind

logger = logging.getLogger(__name__)

HEADER = ["유형", "관", "항", "목"]


def encode(categories: List[Category]) -> str:
    """
    Serialize categories to CSV text.

    Format:
    - Header row (line 1): 유형,관,항,목
    - One row per category, fields quoted only when they contain a comma,
      a quote or a line break.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    for category in categories:
        writer.writerow(
            [category.kind.value, category.level1, category.level2, category.level3]
        )
    return buffer.getvalue()


def row_to_category(row: List[str], columns: dict) -> Category:
    """Convert one CSV row to a Category.

    Args:
        row: Field values of the row.
        columns: Mapping of header name to column index.

    Raises:
        ValidationError: If a field is blank or the kind is invalid.
    """
    values = {
        name: (row[index] if index < len(row) else "") for name, index in columns.items()
    }
    try:
        kind = Kind.parse(values["유형"])
    except ValueError as exc:
        raise ValidationError(
            '유형 must be "수입" or "지출"'
        ) from exc

    return Category(
        kind=kind,
        level1=clean_label(values["관"], "관"),
        level2=clean_label(values["항"], "항"),
        level3=clean_label(values["목"], "목"),
    )


def decode(text: str) -> List[Category]:
    """
    Parse category CSV text.

    Rows with a blank field or an unknown 유형 are dropped with a warning.

    Raises:
        ImportFormatError: If the header lacks 유형,관,항,목 or no row is valid.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))

    try:
        header = [name.strip() for name in next(reader)]
    except StopIteration:
        raise ImportFormatError("Empty CSV file")

    missing = [name for name in HEADER if name not in header]
    if missing:
        logger.error(f"Invalid category header: {header}")
        raise ImportFormatError(
            "Invalid category CSV header (expected columns 유형,관,항,목)"
        )
    columns = {name: header.index(name) for name in HEADER}

    categories = []
    line_num = 1
    for row in reader:
        line_num += 1

        if not any(field.strip() for field in row):
            continue

        try:
            categories.append(row_to_category(row, columns))
        except ValidationError as e:
            logger.warning(f"Skipping category line {line_num}: {row} - {e}")

    if not categories:
        raise ImportFormatError("No valid categories found in CSV")

    logger.info(f"Parsed {len(categories)} categories")
    return categories
