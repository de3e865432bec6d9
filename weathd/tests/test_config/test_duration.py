"""Tests for compact duration parsing and formatting."""

import logging
from datetime import timedelta

import pytest

from weathd.config.duration import (
    DurationNotFound,
    DurationParseError,
    InvalidNumber,
    format_duration,
    parse_duration,
    resolve_duration,
)


class TestParseDuration:
    def test_seconds(self):
        assert parse_duration("45s") == timedelta(seconds=45)

    def test_mixed_units(self):
        assert parse_duration("1h30m10s") == timedelta(hours=1, minutes=30, seconds=10)

    def test_units_in_any_order(self):
        assert parse_duration("10s2m") == timedelta(minutes=2, seconds=10)

    def test_repeated_units_sum(self):
        assert parse_duration("30m5m") == timedelta(minutes=35)

    def test_case_and_whitespace_ignored(self):
        assert parse_duration(" 10M 30S ") == timedelta(minutes=10, seconds=30)

    def test_trailing_text_without_unit_ignored(self):
        assert parse_duration("10m5") == timedelta(minutes=10)

    def test_zero(self):
        assert parse_duration("0s") == timedelta(0)

    def test_empty_is_not_found(self):
        with pytest.raises(DurationNotFound):
            parse_duration("")

    def test_no_units_is_not_found(self):
        with pytest.raises(DurationNotFound):
            parse_duration("abc")

    def test_bare_number_is_not_found(self):
        with pytest.raises(DurationNotFound):
            parse_duration("600")

    def test_non_numeric_segment(self):
        with pytest.raises(InvalidNumber):
            parse_duration("xm")

    def test_empty_segment(self):
        with pytest.raises(InvalidNumber):
            parse_duration("m")

    def test_negative_segment(self):
        with pytest.raises(InvalidNumber):
            parse_duration("-5m")

    def test_out_of_range_magnitude(self):
        with pytest.raises(InvalidNumber, match="out of range"):
            parse_duration("99999999999999h")

    def test_errors_are_value_errors(self):
        assert issubclass(DurationParseError, ValueError)
        assert issubclass(InvalidNumber, DurationParseError)
        assert issubclass(DurationNotFound, DurationParseError)


class TestFormatDuration:
    def test_minutes_and_seconds(self):
        assert format_duration(timedelta(minutes=10, seconds=30)) == "10m30s"

    def test_hours_folded_into_minutes(self):
        assert format_duration(parse_duration("2h")) == "120m0s"

    def test_zero(self):
        assert format_duration(timedelta(0)) == "0m0s"

    @pytest.mark.parametrize("text", ["90s", "1m", "59m61s", "3m3m3s", "0m7s"])
    def test_reparse_is_stable(self, text):
        parsed = parse_duration(text)
        assert parse_duration(format_duration(parsed)) == parsed


class TestResolveDuration:
    def test_valid_text(self):
        assert resolve_duration("5m", timedelta(minutes=10)) == timedelta(minutes=5)

    def test_none_uses_default(self):
        assert resolve_duration(None, timedelta(minutes=10)) == timedelta(minutes=10)

    def test_invalid_falls_back_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = resolve_duration("soon", timedelta(minutes=10))
        assert result == timedelta(minutes=10)
        assert "10m0s" in caplog.text

    def test_out_of_range_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = resolve_duration("99999999999999h", timedelta(minutes=10))
        assert result == timedelta(minutes=10)
        assert "99999999999999h" in caplog.text
