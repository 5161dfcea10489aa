"""Tests for IDs, timestamps and display formatting."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from khata.utils.dates import (
    entry_timestamp,
    from_millis,
    now_millis,
    start_of_day,
    start_of_month,
    to_millis,
)
from khata.utils.formatting import format_currency, format_date, format_time
from khata.utils.ids import generate_id, to_base36


class TestIds:
    """Tests for record ID generation."""

    def test_to_base36(self):
        """Test base-36 encoding."""
        assert to_base36(0) == "0"
        assert to_base36(35) == "z"
        assert to_base36(36) == "10"
        assert to_base36(36 ** 3) == "1000"

    def test_to_base36_rejects_negative(self):
        """Test that negative numbers are rejected."""
        with pytest.raises(ValueError):
            to_base36(-1)

    def test_generated_ids_are_unique(self):
        """Test that IDs minted back to back do not collide."""
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_generated_id_alphabet(self):
        """Test that IDs are lowercase alphanumerics."""
        record_id = generate_id()
        assert record_id.isalnum()
        assert record_id == record_id.lower()


class TestDates:
    """Tests for epoch-millisecond helpers."""

    def test_millis_round_trip(self, now):
        """Test conversion to and from epoch milliseconds."""
        assert from_millis(to_millis(now)) == now

    def test_millis_exact_for_aware_datetimes(self):
        """Test that aware datetimes convert without float error."""
        moment = datetime(2025, 1, 15, 9, 0, 0, 123000, tzinfo=timezone.utc)
        assert to_millis(moment) == 1736931600123
        assert to_millis(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0

    def test_millis_floor_sub_millisecond(self, now):
        """Test that microseconds are floored, never rounded up or lost."""
        base = to_millis(now)
        assert to_millis(now.replace(microsecond=999999)) == base + 999
        assert to_millis(now.replace(microsecond=1000)) == base + 1

    def test_now_millis_uses_given_now(self, now):
        """Test that an injected now is honoured."""
        assert now_millis(now) == to_millis(now)

    def test_start_of_day(self, now):
        """Test local midnight."""
        assert start_of_day(now) == to_millis(datetime(2025, 1, 15, 0, 0))

    def test_start_of_month(self, now):
        """Test the first of the month."""
        assert start_of_month(now) == to_millis(datetime(2025, 1, 1, 0, 0))

    def test_entry_timestamp_today_uses_now(self, now):
        """Test that today's entries keep the wall-clock time."""
        assert entry_timestamp(date(2025, 1, 15), now) == to_millis(now)
        assert entry_timestamp(None, now) == to_millis(now)

    def test_entry_timestamp_other_day_is_midnight(self, now):
        """Test that back-dated entries are stamped at midnight."""
        assert entry_timestamp(date(2025, 1, 10), now) == to_millis(datetime(2025, 1, 10))


class TestFormatting:
    """Tests for amount and date display."""

    def test_indian_grouping(self):
        """Test lakh/crore grouping."""
        assert format_currency(Decimal("999")) == "₹999"
        assert format_currency(Decimal("1500")) == "₹1,500"
        assert format_currency(Decimal("100000")) == "₹1,00,000"
        assert format_currency(Decimal("12345678")) == "₹1,23,45,678"

    def test_western_grouping(self):
        """Test thousands grouping for non-Indian locales."""
        assert format_currency(Decimal("1234567"), "USD", "en-US") == "$1,234,567"

    def test_whole_units_round_half_up(self):
        """Test that amounts are shown without paise."""
        assert format_currency(Decimal("249.5")) == "₹250"
        assert format_currency(Decimal("249.49")) == "₹249"

    def test_negative_amount(self):
        """Test the minus sign goes before the symbol."""
        assert format_currency(Decimal("-500")) == "-₹500"

    def test_unknown_currency_uses_code(self):
        """Test that an unknown currency falls back to its code."""
        assert format_currency(5, "XYZ") == "XYZ 5"

    def test_format_date(self):
        """Test the day-month-year display."""
        assert format_date(to_millis(datetime(2025, 1, 5, 9, 5))) == "5 Jan 2025"

    def test_format_time(self):
        """Test the 12-hour clock display."""
        assert format_time(to_millis(datetime(2025, 1, 5, 9, 5))) == "09:05 AM"
        assert format_time(to_millis(datetime(2025, 1, 5, 21, 30))) == "09:30 PM"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
