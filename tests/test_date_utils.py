"""Tests for date parsing and reporting periods."""

import pytest
from datetime import date, datetime, timedelta, timezone

from photo_studio.core.exceptions import ValidationError
from photo_studio.utils.date_utils import (
    month_range,
    parse_datetime,
    parse_month,
    parse_year,
    period_range,
    previous_month,
    previous_period,
)


class TestParseDatetime:
    """Test ISO-8601 parsing into naive UTC."""

    def test_trailing_z(self):
        assert parse_datetime("2025-06-15T14:30:00Z") == datetime(2025, 6, 15, 14, 30)

    def test_offset_converted_to_utc(self):
        assert parse_datetime("2025-06-15T14:30:00+01:00") == datetime(2025, 6, 15, 13, 30)

    def test_plain_date_string(self):
        assert parse_datetime("2025-06-15") == datetime(2025, 6, 15)

    def test_date_and_datetime_objects(self):
        aware = datetime(2025, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        assert parse_datetime(date(2025, 1, 1)) == datetime(2025, 1, 1)
        assert parse_datetime(aware) == datetime(2025, 1, 1, 10, 0)

    def test_empty_values(self):
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    def test_invalid_string(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            parse_datetime("next tuesday")


class TestPeriods:
    """Test month and year reporting periods."""

    def test_parse_month(self):
        assert parse_month("2025-06") == (2025, 6)
        assert parse_month("2025-6") == (2025, 6)

    @pytest.mark.parametrize("value", ["2025-13", "2025/06", "June 2025", "2025-00", "0000-05"])
    def test_parse_month_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_month(value)

    def test_parse_year(self):
        assert parse_year("2024") == 2024
        with pytest.raises(ValidationError):
            parse_year("24")
        with pytest.raises(ValidationError):
            period_range(year="0000")

    def test_month_range_inclusive_end(self):
        start, end = month_range(2024, 2)

        assert start == datetime(2024, 2, 1)
        assert end == datetime(2024, 2, 29, 23, 59, 59)

    def test_previous_month_wraps_year(self):
        assert previous_month(2025, 1) == (2024, 12)
        assert previous_month(2025, 7) == (2025, 6)

    def test_month_wins_over_year(self):
        start, end, label = period_range(month="2025-03", year="2024")

        assert start == datetime(2025, 3, 1)
        assert end == datetime(2025, 3, 31, 23, 59, 59)
        assert label == "2025-03"

    def test_year_period(self):
        start, end, label = period_range(year="2024")

        assert start == datetime(2024, 1, 1)
        assert end == datetime(2024, 12, 31, 23, 59, 59)
        assert label == "2024"

    def test_default_is_current_month(self):
        start, end, label = period_range(today=date(2025, 11, 20))

        assert start == datetime(2025, 11, 1)
        assert end == datetime(2025, 11, 30, 23, 59, 59)
        assert label == "Current Month"

    def test_previous_period(self):
        assert previous_period(datetime(2025, 1, 1), yearly=False) == month_range(2024, 12)
        assert previous_period(datetime(2025, 1, 1), yearly=True) == (
            datetime(2024, 1, 1),
            datetime(2024, 12, 31, 23, 59, 59),
        )

    def test_no_period_before_year_one(self):
        assert previous_period(datetime(1, 2, 1), yearly=False) == month_range(1, 1)
        with pytest.raises(ValidationError):
            previous_period(datetime(1, 1, 1), yearly=False)
        with pytest.raises(ValidationError):
            previous_period(datetime(1, 1, 1), yearly=True)
