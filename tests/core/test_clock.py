"""Tests for the injectable clock and invoice numbering."""

from datetime import UTC, date, datetime

import pytest

from facturation.core.clock import DeterministicClock, SystemClock, get_clock, set_clock
from facturation.core.services.invoice_numbering import format_invoice_number


class TestDeterministicClock:
    def test_fixed_until_advanced(self):
        clock = DeterministicClock(datetime(2024, 3, 15, 23, 59, 59, tzinfo=UTC))

        assert clock.now() == clock.now()
        assert clock.today() == date(2024, 3, 15)

        clock.advance(1)
        assert clock.today() == date(2024, 3, 16)

    def test_tick_and_set_time(self):
        clock = DeterministicClock()
        start = clock.now()

        assert (clock.tick() - start).total_seconds() == 1

        clock.set_time(datetime(2025, 1, 1, tzinfo=UTC))
        assert clock.now() == datetime(2025, 1, 1, tzinfo=UTC)


class TestGlobalClock:
    def test_set_and_reset(self):
        fixed = DeterministicClock()
        set_clock(fixed)
        try:
            assert get_clock() is fixed
        finally:
            set_clock(None)

        assert isinstance(get_clock(), SystemClock)

    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo is UTC


class TestInvoiceNumbering:
    def test_format(self):
        assert format_invoice_number("INV", date(2024, 3, 1), 1) == "INV-202403-00001"
        assert format_invoice_number("FAC", date(2024, 12, 31), 123) == "FAC-202412-00123"

    def test_sequence_wider_than_padding(self):
        assert format_invoice_number("INV", date(2024, 1, 1), 123456) == "INV-202401-123456"

    def test_sequence_must_be_positive(self):
        with pytest.raises(ValueError):
            format_invoice_number("INV", date(2024, 1, 1), 0)
