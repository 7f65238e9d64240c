"""
Tests for input validation and date handling.
"""

from datetime import date, datetime

import pytest

from errors import InvalidFieldError, MissingFieldError
from validation import (
    format_date_for_display,
    normalize_date,
    parse_date_bound,
    parse_limit,
    validate_exercise_input,
    validate_username,
)

TODAY = date(2024, 6, 10)


class TestUsername:
    def test_returns_username(self):
        assert validate_username("alice") == "alice"

    @pytest.mark.parametrize("value", [None, "", "   ", 42])
    def test_missing_username(self, value):
        with pytest.raises(MissingFieldError, match="username is required"):
            validate_username(value)


class TestExerciseInput:
    def test_form_strings_are_coerced(self):
        assert validate_exercise_input("run", "30") == ("run", 30)

    def test_json_numbers_pass_through(self):
        assert validate_exercise_input("swim", 45) == ("swim", 45)
        assert validate_exercise_input("swim", 45.0) == ("swim", 45)

    @pytest.mark.parametrize("description,duration", [(None, "30"), ("", "30"), ("run", None), ("run", "")])
    def test_missing_fields(self, description, duration):
        with pytest.raises(MissingFieldError, match="description and duration are required"):
            validate_exercise_input(description, duration)

    @pytest.mark.parametrize("duration", ["abc", "12.5", 12.5, True, "1e3"])
    def test_non_integer_duration_rejected(self, duration):
        with pytest.raises(InvalidFieldError, match="duration must be an integer"):
            validate_exercise_input("run", duration)

    def test_missing_is_checked_before_invalid(self):
        with pytest.raises(MissingFieldError):
            validate_exercise_input(None, "abc")


class TestNormalizeDate:
    def test_exact_format_is_used(self):
        assert normalize_date("2023-05-01", today=TODAY) == date(2023, 5, 1)

    @pytest.mark.parametrize("raw", [None, "", "2023-5-1", "05/01/2023", "2023-05-01T10:00", " 2023-05-01"])
    def test_absent_or_malformed_falls_back_to_today(self, raw):
        assert normalize_date(raw, today=TODAY) == TODAY

    def test_impossible_calendar_date_falls_back_to_today(self):
        assert normalize_date("2024-02-30", today=TODAY) == TODAY

    def test_leap_day(self):
        assert normalize_date("2024-02-29", today=TODAY) == date(2024, 2, 29)

    def test_default_today_is_a_date(self):
        assert isinstance(normalize_date(None), date)


class TestDateBound:
    def test_plain_date(self):
        assert parse_date_bound("2023-01-01") == datetime(2023, 1, 1)

    def test_datetime_with_offset_becomes_naive_utc(self):
        assert parse_date_bound("2023-01-01T02:00:00+02:00") == datetime(2023, 1, 1)

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("2023", datetime(2023, 1, 1)),
            ("2023-01", datetime(2023, 1, 1)),
            ("2023-06", datetime(2023, 6, 1)),
            ("Jan 15 2023", datetime(2023, 1, 15)),
            ("2023/01/15", datetime(2023, 1, 15)),
            ("20230115", datetime(2023, 1, 15)),
        ],
    )
    def test_partial_and_free_form_dates(self, raw, expected):
        assert parse_date_bound(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "not a date", "2023-13-45"])
    def test_unparseable_means_no_bound(self, raw):
        assert parse_date_bound(raw) is None


class TestLimit:
    @pytest.mark.parametrize("raw,expected", [("2", 2), (3, 3), (" 5 ", 5)])
    def test_valid(self, raw, expected):
        assert parse_limit(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "0", "-1", "1.5"])
    def test_ignored(self, raw):
        assert parse_limit(raw) is None


def test_display_format():
    assert format_date_for_display(date(2024, 1, 1)) == "Mon Jan 01 2024"
    assert format_date_for_display(datetime(2023, 1, 15)) == "Sun Jan 15 2023"
