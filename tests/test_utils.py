from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from bookings.utils import CurrencyHelper, DateHelper


class TestDateHelper:
    def test_parse_plain_date_string(self):
        assert DateHelper.parse_iso_date("2025-08-15") == date(2025, 8, 15)

    def test_parse_utc_datetime_string(self):
        assert DateHelper.parse_iso_date("2025-08-15T00:00:00.000Z") == date(2025, 8, 15)

    def test_offset_datetime_is_converted_to_utc_first(self):
        assert DateHelper.parse_iso_date("2025-08-15T23:30:00-05:00") == date(2025, 8, 16)

    def test_date_passes_through(self):
        assert DateHelper.parse_iso_date(date(2025, 1, 2)) == date(2025, 1, 2)

    def test_aware_datetime(self):
        value = datetime(2025, 12, 31, 23, 0, tzinfo=timezone.utc)
        assert DateHelper.parse_iso_date(value) == date(2025, 12, 31)

    def test_garbage_is_rejected(self):
        with pytest.raises(ValueError):
            DateHelper.parse_iso_date("next friday")

    def test_month_bounds(self):
        assert DateHelper.month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert DateHelper.month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range(self, month):
        with pytest.raises(ValueError):
            DateHelper.month_bounds(2025, month)

    def test_long_format(self):
        assert DateHelper.long_format(date(2025, 8, 5)) == "August 5, 2025"


class TestCurrencyHelper:
    def test_to_money_rounds_half_up(self):
        assert CurrencyHelper.to_money("2.005") == Decimal("2.01")
        assert CurrencyHelper.to_money(350) == Decimal("350.00")

    def test_validate_amount_rejects_text(self):
        assert CurrencyHelper.validate_amount("abc") is None

    def test_format_amount(self):
        assert CurrencyHelper.format_amount(Decimal("800")) == "800.00"
