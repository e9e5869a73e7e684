"""
Utility functions for the application.
"""
import re
from typing import Any, Dict, Optional
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from app.core.exceptions import InvalidYearMonthError

YEAR_MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
_YEAR_MONTH_RE = re.compile(YEAR_MONTH_PATTERN)

CENT = Decimal("0.01")


def validate_year_month(value: Any) -> str:
    """Return the year-month string unchanged, or raise InvalidYearMonthError."""
    if not isinstance(value, str) or not _YEAR_MONTH_RE.fullmatch(value):
        raise InvalidYearMonthError(value)
    return value


def month_start(year_month: str) -> date:
    """First calendar day of a YYYY-MM month."""
    validate_year_month(year_month)
    year, month = year_month.split("-")
    return date(int(year), int(month), 1)


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric column value to Decimal (None counts as zero)."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(amount: Decimal) -> Decimal:
    """Round a money amount to two decimal places."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_error(message: str, code: Optional[str] = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"detail": message}
    if code:
        response["error"] = code
    return response


def utcnow() -> datetime:
    """Naive UTC timestamp matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
