"""Derives page start/end times from matched transcript segments."""

import logging
from typing import List, Sequence

from .exceptions import TimestampDerivationError
from .models import DerivedTimestamp, MatchedSegment

logger = logging.getLogger(__name__)

DEFAULT_MIN_PAGE_DURATION = 3.0
DEFAULT_MAX_PAGE_DURATION = 120.0


class TimestampDeriver:
    """
    Turns MatchedSegment results into DerivedTimestamp values.

    start = first segment start, end = last segment end. Decimal precision of
    the ASR timestamps is kept. Durations outside [min_duration, max_duration]
    are reported as warnings and still returned.
    """

    def __init__(
        self,
        min_duration: float = DEFAULT_MIN_PAGE_DURATION,
        max_duration: float = DEFAULT_MAX_PAGE_DURATION
    ):
        self.min_duration = min_duration
        self.max_duration = max_duration
        self.warnings: List[str] = []

    def derive_timestamps(self, matched_segments: Sequence[MatchedSegment]) -> List[DerivedTimestamp]:
        """
        Derives timestamps for every page, in order.

        Raises:
            TimestampDerivationError: If a page has no segments or its end is not
                                      after its start. Both mean the matches were
                                      not produced by SegmentMatcher.
        """
        self.warnings = []
        result: List[DerivedTimestamp] = []

        for matched in matched_segments:
            if not matched.segments:
                raise TimestampDerivationError(
                    f"Page {matched.page_number} has no segments. "
                    f"Each page must have at least one matched segment."
                )

            start_time = matched.segments[0].start_time
            end_time = matched.segments[-1].end_time

            if end_time <= start_time:
                raise TimestampDerivationError(
                    f"Page {matched.page_number}: Invalid timestamps. "
                    f"endTime ({end_time}) must be greater than startTime ({start_time})"
                )

            duration = end_time - start_time

            if duration < self.min_duration:
                self._warn(
                    f"Page {matched.page_number} is very short ({duration:.1f}s). "
                    f"Consider combining with adjacent pages."
                )
            elif duration > self.max_duration:
                self._warn(
                    f"Page {matched.page_number} is very long ({duration:.1f}s). "
                    f"Consider splitting into multiple pages."
                )

            result.append(DerivedTimestamp(
                page_number=matched.page_number,
                start_time=start_time,
                end_time=end_time,
                duration=duration
            ))

        logger.info(f"Derived timestamps for {len(result)} pages.")
        return result

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def format_duration(seconds: float) -> str:
    """Formats a duration as M:SS (minutes not zero-padded), e.g. 75.4 -> '1:15'."""
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"
