"""Unit tests for albumaudit.core.date_rules."""

from datetime import date, datetime

import pytest

from albumaudit.core.date_rules import (
    calendar_dates_equal,
    day_gap,
    format_album_date,
    parse_album_name,
    replace_date_prefix,
    to_calendar_date,
)


class TestParseAlbumName:
    """Tests for parse_album_name."""

    def test_valid_name_with_label(self):
        result = parse_album_name("20240315 Paris")

        assert result.is_valid is True
        assert result.date == date(2024, 3, 15)
        assert result.raw_date_prefix == "20240315"

    def test_valid_name_without_label(self):
        result = parse_album_name("20240315")

        assert result.is_valid is True
        assert result.date == date(2024, 3, 15)

    def test_label_glued_to_prefix(self):
        """Any non-digit may follow the prefix."""
        result = parse_album_name("20240315-Paris")

        assert result.is_valid is True
        assert result.date == date(2024, 3, 15)

    def test_impossible_day_reports_raw_prefix(self):
        """20230231 looks like a date but February has no 31st."""
        result = parse_album_name("20230231 Bogus")

        assert result.is_valid is False
        assert result.date is None
        assert result.raw_date_prefix == "20230231"

    def test_nine_digits_rejected_without_prefix(self):
        result = parse_album_name("202403151 Oops")

        assert result.is_valid is False
        assert result.date is None
        assert result.raw_date_prefix is None

    def test_no_digits(self):
        result = parse_album_name("Holiday")

        assert result.is_valid is False
        assert result.date is None
        assert result.raw_date_prefix is None

    def test_empty_name(self):
        result = parse_album_name("")

        assert result.is_valid is False
        assert result.raw_date_prefix is None

    def test_seven_digits(self):
        assert parse_album_name("2024031 Short").is_valid is False

    def test_separated_date_not_accepted(self):
        assert parse_album_name("2024-03-15 Paris").is_valid is False

    def test_prefix_must_be_at_start(self):
        assert parse_album_name("Trip 20240315").is_valid is False

    @pytest.mark.parametrize("name", ["18991231 Old", "21010101 Future"])
    def test_year_out_of_range(self, name):
        result = parse_album_name(name)

        assert result.is_valid is False
        assert result.raw_date_prefix == name[:8]

    @pytest.mark.parametrize("name", ["19000101", "21001231"])
    def test_year_bounds_inclusive(self, name):
        assert parse_album_name(name).is_valid is True

    @pytest.mark.parametrize("name", ["20241301 Month13", "20240001 Month0", "20240100 Day0", "20240132 Day32"])
    def test_component_out_of_range(self, name):
        assert parse_album_name(name).is_valid is False

    def test_leap_day(self):
        assert parse_album_name("20240229 Leap").is_valid is True
        assert parse_album_name("20230229 NotLeap").is_valid is False

    def test_non_ascii_digits_rejected(self):
        """Full-width digits are not a date prefix."""
        result = parse_album_name("２０２４０３１５ Paris")

        assert result.is_valid is False
        assert result.raw_date_prefix is None


class TestCalendarComparisons:
    """Tests for calendar_dates_equal and day_gap."""

    def test_equal_ignores_time_of_day(self):
        assert calendar_dates_equal(datetime(2020, 6, 15, 0, 1), datetime(2020, 6, 15, 23, 59))

    def test_equal_date_and_datetime(self):
        assert calendar_dates_equal(date(2020, 6, 15), datetime(2020, 6, 15, 12, 0))

    def test_not_equal(self):
        assert not calendar_dates_equal(date(2020, 6, 15), date(2020, 6, 16))

    def test_none_is_never_equal(self):
        assert calendar_dates_equal(None, date(2020, 6, 15)) is False
        assert calendar_dates_equal(date(2020, 6, 15), None) is False
        assert calendar_dates_equal(None, None) is False

    def test_day_gap_sign(self):
        assert day_gap(date(2020, 6, 20), date(2020, 6, 15)) == 5
        assert day_gap(date(2020, 6, 15), date(2020, 6, 20)) == -5

    def test_day_gap_antisymmetric(self):
        a = datetime(2019, 12, 30, 8, 0)
        b = date(2020, 3, 1)

        assert day_gap(a, b) == -day_gap(b, a)

    def test_day_gap_ignores_time(self):
        """23:59 the day before is one day apart, not zero."""
        assert day_gap(datetime(2020, 6, 14, 23, 59), date(2020, 6, 15)) == -1

    def test_day_gap_same_day(self):
        assert day_gap(datetime(2020, 6, 15, 23, 59), datetime(2020, 6, 15, 0, 0)) == 0

    def test_to_calendar_date(self):
        assert to_calendar_date(datetime(2020, 6, 15, 10, 0)) == date(2020, 6, 15)
        assert to_calendar_date(date(2020, 6, 15)) == date(2020, 6, 15)


class TestAlbumNameFormatting:
    """Tests for format_album_date and replace_date_prefix."""

    def test_format_album_date(self):
        assert format_album_date(date(2020, 6, 5)) == "20200605"

    def test_replace_keeps_label(self):
        assert replace_date_prefix("20200615 Trip", date(2020, 6, 20)) == "20200620 Trip"

    def test_replace_keeps_label_verbatim(self):
        assert replace_date_prefix("20200615_Trip  to  Rome", date(2021, 1, 2)) == "20210102_Trip  to  Rome"

    def test_replace_invalid_prefix(self):
        """A syntactically present but invalid date is still replaced."""
        assert replace_date_prefix("20230231 Bogus", date(2023, 2, 28)) == "20230228 Bogus"

    def test_prepend_when_no_prefix(self):
        assert replace_date_prefix("Holiday", date(2020, 6, 15)) == "20200615 Holiday"

    def test_prepend_to_empty_name(self):
        assert replace_date_prefix("", date(2020, 6, 15)) == "20200615"

    def test_nine_digits_get_prefix_prepended(self):
        assert replace_date_prefix("202006151", date(2020, 6, 15)) == "20200615 202006151"
