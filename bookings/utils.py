"""
Utility functions for GigPro.
Date and money helpers shared by models, services and serializers.
"""

from calendar import monthrange
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Tuple, Union

from dateutil import parser as date_parser
from django.utils import timezone

CENT = Decimal("0.01")


def today_utc() -> date:
    """The UTC calendar date used for every overdue comparison."""
    return timezone.now().astimezone(dt_timezone.utc).date()


class DateHelper:
    """Date utilities for gig and invoice operations."""

    @staticmethod
    def parse_iso_date(value: Any) -> date:
        """
        Accept a date, a datetime or an ISO 8601 string (date or datetime).

        Aware datetimes are converted to UTC before the calendar date is taken,
        so "2025-08-15T23:30:00-05:00" lands on August 16th.
        """
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            return value
        elif isinstance(value, str):
            parsed = date_parser.isoparse(value.strip())
        else:
            raise ValueError(f"Unsupported date value: {value!r}")

        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(dt_timezone.utc)
        return parsed.date()

    @staticmethod
    def month_bounds(year: int, month: int) -> Tuple[date, date]:
        """First and last day of a 1-indexed month."""
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")
        last_day = monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)

    @staticmethod
    def long_format(value: date) -> str:
        """August 15, 2025"""
        return f"{value:%B} {value.day}, {value.year}"


class CurrencyHelper:
    """Decimal money arithmetic, always quantized to cents."""

    @staticmethod
    def to_money(amount: Union[Decimal, float, int, str]) -> Decimal:
        try:
            return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
        except (InvalidOperation, ValueError, TypeError):
            raise ValueError(f"Invalid amount: {amount!r}")

    @staticmethod
    def validate_amount(amount: Any) -> Optional[Decimal]:
        """Validate and convert to Decimal, None if not a number."""
        try:
            return CurrencyHelper.to_money(amount)
        except ValueError:
            return None

    @staticmethod
    def format_amount(amount: Union[Decimal, float, int]) -> str:
        return f"{CurrencyHelper.to_money(amount):.2f}"
