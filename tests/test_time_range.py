"""Tests for time range parsing and validation."""

import pytest

from pagesync.exceptions import TimeRangeError
from pagesync.models import DerivedTimestamp, ExtractionRange
from pagesync.time_range import (
    format_seconds_to_time,
    is_valid_time_string,
    parse_time_to_seconds,
    validate_derived_timestamps,
    validate_page_timestamps,
    validate_time_range,
)


class TestParseTimeToSeconds:

    @pytest.mark.parametrize("text,expected", [
        ("01:30", 90),
        ("5:00", 300),
        ("00:00", 0),
        ("120:00", 7200),
        ("01:30:45", 5445),
        ("100:00:00", 360000),
        (" 02:05 ", 125),
    ])
    def test_valid(self, text, expected):
        assert parse_time_to_seconds(text) == expected

    @pytest.mark.parametrize("text", [
        "90",
        "1:60",
        "01:60:00",
        "01:00:60",
        "1:2:3:4",
        "aa:bb",
        "-1:30",
        "1.5:00",
        "1:",
        "١٢:٣٠",
        "０１:３０",
        "01\n:30",
        "",
    ])
    def test_invalid(self, text):
        with pytest.raises(TimeRangeError, match="Invalid timestamp format"):
            parse_time_to_seconds(text)

    def test_message_names_expected_format(self):
        with pytest.raises(TimeRangeError, match="Expected MM:SS or HH:MM:SS format"):
            parse_time_to_seconds("1:2:3:4")

    def test_is_valid_time_string(self):
        assert is_valid_time_string("01:30")
        assert not is_valid_time_string("1:75")


class TestFormatSecondsToTime:

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00"),
        (90, "01:30"),
        (3599, "59:59"),
        (3600, "01:00:00"),
        (5445, "01:30:45"),
        (90.9, "01:30"),
    ])
    def test_format(self, seconds, expected):
        assert format_seconds_to_time(seconds) == expected

    @pytest.mark.parametrize("seconds", [0, 1, 59, 60, 90, 3599, 3600, 5445, 86399, 360000])
    def test_round_trip(self, seconds):
        assert parse_time_to_seconds(format_seconds_to_time(seconds)) == seconds

    def test_negative(self):
        with pytest.raises(ValueError):
            format_seconds_to_time(-1)


class TestValidateTimeRange:

    def test_valid_range(self):
        validate_time_range("01:30", "15:00", 1200)

    def test_start_after_end(self):
        with pytest.raises(TimeRangeError, match=r"startTime \(15:00\) must be before endTime \(01:30\)"):
            validate_time_range("15:00", "01:30", 1200)

    def test_zero_length(self):
        with pytest.raises(TimeRangeError, match="must be before"):
            validate_time_range("00:00", "00:00", 1200)

    def test_end_past_duration(self):
        with pytest.raises(TimeRangeError, match=r"exceeds video duration \(20:00\)") as exc_info:
            validate_time_range("00:00", "25:00", 1200)
        assert "1500 seconds" in str(exc_info.value)

    def test_one_second_tolerance(self):
        validate_time_range("00:00", "20:01", 1200)
        with pytest.raises(TimeRangeError):
            validate_time_range("00:00", "20:02", 1200)

    def test_parse_errors_name_the_field(self):
        with pytest.raises(TimeRangeError, match="Invalid startTime"):
            validate_time_range("1:75", "02:00", 1200)
        with pytest.raises(TimeRangeError, match="Invalid endTime"):
            validate_time_range("01:00", "two", 1200)

    def test_long_media(self):
        validate_time_range("00:59:00", "01:30:45", 5445)


class TestValidatePageTimestamps:

    def test_valid_pages(self):
        validate_page_timestamps("00:00", "00:45", 810, 1)
        validate_page_timestamps("05:00", "10:00", 810, 2)

    def test_page_past_trimmed_duration(self):
        with pytest.raises(TimeRangeError, match=r"^Page 3: endTime \(20:00\) exceeds trimmed audio duration \(13:30\)"):
            validate_page_timestamps("12:00", "20:00", 810, 3)

    def test_end_not_after_start(self):
        with pytest.raises(TimeRangeError, match="Page 2: endTime .* must be after startTime"):
            validate_page_timestamps("01:00", "01:00", 810, 2)

    def test_bad_format_prefixed_with_page(self):
        with pytest.raises(TimeRangeError, match="Page 5: Invalid startTime format"):
            validate_page_timestamps("x", "01:00", 810, 5)

    def test_numeric_seconds(self):
        validate_page_timestamps(9.4, 17.6, 20.0, 1)
        with pytest.raises(TimeRangeError, match="Page 1: startTime cannot be negative"):
            validate_page_timestamps(-0.5, 2.0, 20.0, 1)

    def test_derived_batch(self):
        timestamps = [
            DerivedTimestamp(1, 0.0, 2.0, 2.0),
            DerivedTimestamp(2, 2.0, 5.0, 3.0),
        ]
        validate_derived_timestamps(timestamps, 5.0)
        with pytest.raises(TimeRangeError, match="^Page 2"):
            validate_derived_timestamps(timestamps, 3.5)


class TestExtractionRange:

    def test_from_config(self):
        extraction_range = ExtractionRange.from_config({"path": "a.mp4", "start_time": "01:30", "end_time": "15:00"})
        assert extraction_range.start_time == "01:30"
        assert extraction_range.start_seconds == 90
        assert extraction_range.end_seconds == 900
        assert extraction_range.duration == 810

    def test_absent(self):
        assert ExtractionRange.from_config({"path": "a.mp4"}) is None
        assert ExtractionRange.from_config(None) is None

    def test_half_specified(self):
        with pytest.raises(ValueError, match="must be specified together"):
            ExtractionRange.from_config({"start_time": "01:30"})
