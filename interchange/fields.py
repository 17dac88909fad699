"""Field-level parsing and formatting shared by the codecs and the stores."""

import re
from datetime import date, datetime

from errors import ValidationError

_DATE_SEPARATORS = re.compile(r"[./]")


def clean_label(value, field: str) -> str:
    """Return a trimmed, non-empty label.

    Raises:
        ValidationError: If the value is missing or blank.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def parse_date(value) -> date:
    """Parse a calendar date written as YYYY-MM-DD, YYYY.MM.DD or YYYY/MM/DD.

    Raises:
        ValidationError: If the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("날짜 is required")

    normalized = _DATE_SEPARATORS.sub("-", value.strip()).rstrip("-")
    try:
        return datetime.strptime(normalized, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def parse_amount(value) -> int:
    """Parse a positive integer amount, tolerating thousands separators.

    Raises:
        ValidationError: If the amount is not an integer or is not positive.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, int):
        amount = value
    else:
        text = str(value).strip().replace(",", "").replace(" ", "")
        if not text:
            raise ValidationError("금액 is required")
        try:
            amount = int(text)
        except ValueError as exc:
            raise ValidationError(f"Invalid amount: {value!r}") from exc

    if amount <= 0:
        raise ValidationError("금액 must be greater than zero")
    return amount


def format_amount(amount: int) -> str:
    """Format an amount with thousands separators, e.g. 12000 -> "12,000"."""
    return f"{amount:,}"
