"""
Time range parsing and validation.

Extraction ranges and page bounds arrive as "MM:SS" or "HH:MM:SS" strings
(typically from the YAML config). These helpers convert them to seconds and
reject ranges that fall outside the media before any expensive audio work.
"""

import logging
import re
from typing import Iterable, Union

from .exceptions import TimeRangeError

logger = logging.getLogger(__name__)

# ASCII digits only; int() would also accept other Unicode decimal digits
_DIGITS_RE = re.compile(r"[0-9]+")

# Extra seconds allowed past the media end to absorb rounding in probed durations
END_TOLERANCE_SECONDS = 1

TimeValue = Union[str, int, float]


def parse_time_to_seconds(time_string: str) -> int:
    """
    Parses a timestamp string to whole seconds.

    Supported formats:
        MM:SS     ("01:30" -> 90, "5:00" -> 300, minutes unbounded)
        HH:MM:SS  ("01:30:45" -> 5445, hours unbounded)

    Raises:
        TimeRangeError: If the shape is wrong, a component is not a plain
                        non-negative integer, or minutes/seconds exceed 59.
    """
    parts = str(time_string).strip().split(":")

    if len(parts) == 2:
        if not all(_DIGITS_RE.fullmatch(p) for p in parts):
            raise TimeRangeError(
                f"Invalid timestamp format: {time_string}. Expected MM:SS format with valid seconds (0-59)."
            )
        minutes, seconds = (int(p) for p in parts)
        if seconds >= 60:
            raise TimeRangeError(
                f"Invalid timestamp format: {time_string}. Expected MM:SS format with valid seconds (0-59)."
            )
        return minutes * 60 + seconds

    if len(parts) == 3:
        if not all(_DIGITS_RE.fullmatch(p) for p in parts):
            raise TimeRangeError(
                f"Invalid timestamp format: {time_string}. "
                f"Expected HH:MM:SS format with valid minutes (0-59) and seconds (0-59)."
            )
        hours, minutes, seconds = (int(p) for p in parts)
        if minutes >= 60 or seconds >= 60:
            raise TimeRangeError(
                f"Invalid timestamp format: {time_string}. "
                f"Expected HH:MM:SS format with valid minutes (0-59) and seconds (0-59)."
            )
        return hours * 3600 + minutes * 60 + seconds

    raise TimeRangeError(f"Invalid timestamp format: {time_string}. Expected MM:SS or HH:MM:SS format.")


def is_valid_time_string(time_string: str) -> bool:
    """Returns True when parse_time_to_seconds would accept the value."""
    try:
        parse_time_to_seconds(time_string)
    except TimeRangeError:
        return False
    return True


def format_seconds_to_time(seconds: float) -> str:
    """
    Formats seconds as MM:SS, or HH:MM:SS when there is at least one hour.

    Fractions of a second are dropped.
    """
    if seconds < 0:
        raise ValueError(f"Cannot format a negative time: {seconds}")
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def validate_time_range(start_time: str, end_time: str, total_duration: float) -> None:
    """
    Validates an extraction range against the full media duration.

    Rules:
        1. both bounds parse
        2. start is not negative
        3. start is before end
        4. the range is at least one second long
        5. end does not exceed the duration (plus one second of tolerance)
        6. start does not exceed the duration

    Raises:
        TimeRangeError: With formatted times and the numeric bounds involved.
    """
    try:
        start_seconds = parse_time_to_seconds(start_time)
    except TimeRangeError as e:
        raise TimeRangeError(f"Invalid startTime: {e}") from e

    try:
        end_seconds = parse_time_to_seconds(end_time)
    except TimeRangeError as e:
        raise TimeRangeError(f"Invalid endTime: {e}") from e

    if start_seconds < 0:
        raise TimeRangeError(f"Invalid time range: startTime cannot be negative (got {start_time}).")

    if start_seconds >= end_seconds:
        raise TimeRangeError(
            f"Invalid time range: startTime ({start_time}) must be before endTime ({end_time}). "
            f"The start time is at {start_seconds} seconds and end time is at {end_seconds} seconds."
        )

    if end_seconds - start_seconds < 1:
        raise TimeRangeError(
            f"Invalid time range: extraction range must be at least 1 second long. "
            f"Got {end_seconds - start_seconds} seconds between {start_time} and {end_time}."
        )

    if end_seconds > total_duration + END_TOLERANCE_SECONDS:
        raise TimeRangeError(
            f"Invalid time range: endTime ({end_time}) exceeds video duration "
            f"({format_seconds_to_time(total_duration)}). "
            f"The video is {total_duration} seconds long, but you specified an end time of {end_seconds} seconds."
        )

    if start_seconds > total_duration:
        raise TimeRangeError(
            f"Invalid time range: startTime ({start_time}) exceeds video duration "
            f"({format_seconds_to_time(total_duration)}). "
            f"The video is only {total_duration} seconds long."
        )

    logger.debug(f"Time range {start_time}-{end_time} valid for duration {total_duration}s")


def _to_seconds(value: TimeValue) -> float:
    """Accepts a time string or a number of seconds."""
    if isinstance(value, str):
        return parse_time_to_seconds(value)
    return float(value)


def validate_page_timestamps(
    page_start_time: TimeValue,
    page_end_time: TimeValue,
    trimmed_duration: float,
    page_number: int
) -> None:
    """
    Validates one page's bounds against the trimmed audio duration.

    Page times are relative to the start of the trimmed audio (00:00 is the
    extraction range start, not the start of the original media). Bounds may be
    "MM:SS"/"HH:MM:SS" strings or seconds, so DerivedTimestamp values can be
    passed straight through.

    Raises:
        TimeRangeError: Prefixed with the page number.
    """
    try:
        start_seconds = _to_seconds(page_start_time)
    except TimeRangeError as e:
        raise TimeRangeError(f"Page {page_number}: Invalid startTime format. {e}") from e

    try:
        end_seconds = _to_seconds(page_end_time)
    except TimeRangeError as e:
        raise TimeRangeError(f"Page {page_number}: Invalid endTime format. {e}") from e

    if start_seconds < 0:
        raise TimeRangeError(f"Page {page_number}: startTime cannot be negative (got {page_start_time}).")

    if end_seconds <= start_seconds:
        raise TimeRangeError(
            f"Page {page_number}: endTime ({page_end_time}) must be after startTime ({page_start_time})."
        )

    if end_seconds > trimmed_duration + END_TOLERANCE_SECONDS:
        raise TimeRangeError(
            f"Page {page_number}: endTime ({page_end_time}) exceeds trimmed audio duration "
            f"({format_seconds_to_time(trimmed_duration)}). "
            f"The trimmed audio is {trimmed_duration} seconds long, "
            f"but page {page_number} ends at {end_seconds} seconds."
        )


def validate_derived_timestamps(timestamps: Iterable, trimmed_duration: float) -> None:
    """Runs validate_page_timestamps over a batch of DerivedTimestamp objects."""
    for ts in timestamps:
        validate_page_timestamps(ts.start_time, ts.end_time, trimmed_duration, ts.page_number)
