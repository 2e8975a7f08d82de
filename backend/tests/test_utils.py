"""Unit tests for money rounding and report date parsing."""

from datetime import datetime
from decimal import Decimal

import pytest

from abasta.middleware.exceptions import BadRequestError
from abasta.utils.dates import parse_report_date, resolve_window
from abasta.utils.money import line_subtotal, percentage, round2


@pytest.mark.unit
class TestMoney:
    def test_round_half_up(self):
        assert round2("2.345") == Decimal("2.35")
        assert round2("2.344") == Decimal("2.34")
        assert round2(Decimal("-1.005")) == Decimal("-1.01")

    def test_line_subtotal(self):
        assert line_subtotal(Decimal("2.5"), Decimal("3.99")) == Decimal("9.98")
        assert line_subtotal(3, Decimal("12.50")) == Decimal("37.50")

    def test_percentage_of_zero_whole(self):
        assert percentage(Decimal("10"), Decimal("0")) == Decimal("0.00")


@pytest.mark.unit
class TestReportDates:
    def test_bare_date_start_and_end_of_day(self):
        assert parse_report_date("2025-12-07") == datetime(2025, 12, 7)
        assert parse_report_date("2025-12-07", end=True) == datetime(
            2025, 12, 7, 23, 59, 59, 999999
        )

    def test_space_separated_datetime(self):
        assert parse_report_date("2025-12-07 14:23:59") == datetime(2025, 12, 7, 14, 23, 59)

    def test_iso_datetime_with_offset_is_normalised_to_utc(self):
        assert parse_report_date("2025-12-07T14:00:00+01:00") == datetime(2025, 12, 7, 13)

    def test_iso_datetime_with_z_suffix(self):
        assert parse_report_date("2025-12-07T14:23:59Z") == datetime(2025, 12, 7, 14, 23, 59)

    def test_blank_is_none(self):
        assert parse_report_date("") is None
        assert parse_report_date(None) is None

    @pytest.mark.parametrize("value", ["07/12/2025", "2025-13-01", "yesterday", "2025-12-07Tnoon"])
    def test_invalid_formats(self, value):
        with pytest.raises(BadRequestError, match="Invalid date format"):
            parse_report_date(value)


@pytest.mark.unit
class TestResolveWindow:
    NOW = datetime(2025, 12, 7, 12)

    def test_defaults_to_trailing_days(self):
        start, end = resolve_window(None, None, 30, now=self.NOW)
        assert end == self.NOW
        assert start == datetime(2025, 11, 7, 12)

    def test_end_only_counts_back_from_end(self):
        start, end = resolve_window(None, "2025-12-01", 30, now=self.NOW)
        assert end == datetime(2025, 12, 1, 23, 59, 59, 999999)
        assert start == datetime(2025, 11, 1, 23, 59, 59, 999999)

    def test_start_only_runs_to_now(self):
        start, end = resolve_window("2025-12-01", None, 30, now=self.NOW)
        assert (start, end) == (datetime(2025, 12, 1), self.NOW)

    def test_reversed_window(self):
        with pytest.raises(BadRequestError):
            resolve_window("2025-12-07", "2025-12-01", 30, now=self.NOW)
