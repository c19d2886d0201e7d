"""Matches edited page text back to time-stamped transcript segments."""

import logging
from typing import Dict, Sequence, Tuple

from .exceptions import PageMatchError
from .models import MatchedSegment, TranscriptSegment
from .text_utils import jaccard_similarity, normalize_text, normalize_whitespace, truncate, word_diff

logger = logging.getLogger(__name__)

MATCHING_THRESHOLDS: Dict[str, float] = {
    "strict": 1.0,
    "tolerant": 0.85,
    "fuzzy": 0.60,
}

DEFAULT_MATCHING_MODE = "tolerant"

# Window growth stops once the candidate is this many times longer than the page
MAX_CANDIDATE_LENGTH_RATIO = 2


class SegmentMatcher:
    """
    Sequentially binds pages to transcript segments.

    The matcher keeps a cursor into the segment list and only ever searches
    forward from it. Each accepted match moves the cursor past the segments it
    consumed, so a phrase repeated three times in the audio binds to its first,
    second and third occurrence in turn rather than to the same segment.

    One instance per document run. There is no reset: create a new matcher for
    every document and never share one between concurrent matching passes.
    """

    def __init__(self, segments: Sequence[TranscriptSegment], matching_mode: str = DEFAULT_MATCHING_MODE):
        """
        Args:
            segments: Transcript segments in chronological order.
            matching_mode: 'strict' (exact), 'tolerant' (>= 85%) or 'fuzzy' (>= 60%).

        Raises:
            ValueError: If the matching mode is unknown.
        """
        if matching_mode not in MATCHING_THRESHOLDS:
            raise ValueError(
                f"Invalid matching mode: {matching_mode}. Choose one of {', '.join(MATCHING_THRESHOLDS)}."
            )
        self._segments: Tuple[TranscriptSegment, ...] = tuple(segments)
        self._cursor = 0
        self.matching_mode = matching_mode
        self.threshold = MATCHING_THRESHOLDS[matching_mode]
        logger.debug(f"SegmentMatcher created over {len(self._segments)} segments ({matching_mode} mode)")

    @property
    def cursor(self) -> int:
        """Index of the first segment not yet consumed."""
        return self._cursor

    @property
    def remaining_segments(self) -> Tuple[TranscriptSegment, ...]:
        return self._segments[self._cursor:]

    def match_page_to_segments(self, page_text: str, page_number: int = 0) -> MatchedSegment:
        """
        Finds the shortest run of unconsumed segments matching the page text.

        Windows of 1, 2, 3... segments are taken from the cursor and scored by
        token-set similarity; the first one meeting the mode threshold wins and
        the cursor advances past it.

        Args:
            page_text: Page text as written by the user.
            page_number: Stamped onto the result and used in error messages.

        Returns:
            MatchedSegment with the consumed segments and the similarity score.

        Raises:
            PageMatchError: If every segment is already consumed, or no window
                            reaches the threshold.
        """
        normalized_page = normalize_text(page_text)
        remaining = self.remaining_segments

        if not remaining:
            raise PageMatchError(
                f"Page {page_number} text not found: All segments already matched. "
                f"Page text: \"{truncate(page_text, 50)}\"",
                page_number=page_number,
                mode=self.matching_mode,
                threshold=self.threshold,
                page_text=page_text
            )

        for window_size in range(1, len(remaining) + 1):
            window = remaining[:window_size]
            normalized_candidate = normalize_text(self._concatenate(window))
            similarity = jaccard_similarity(normalized_page, normalized_candidate)

            if similarity >= self.threshold:
                self._cursor += window_size
                if similarity < 1.0:
                    self._log_diff(page_number, similarity, normalized_page, normalized_candidate)
                logger.debug(
                    f"Page {page_number} matched {window_size} segment(s) "
                    f"({window[0].start_time}-{window[-1].end_time}s), cursor now {self._cursor}"
                )
                return MatchedSegment(page_number=page_number, segments=window, confidence=similarity)

            if len(normalized_candidate) > len(normalized_page) * MAX_CANDIDATE_LENGTH_RATIO:
                break

        raise self._no_match_error(page_text, normalized_page, remaining[0], page_number)

    @staticmethod
    def _concatenate(segments: Sequence[TranscriptSegment]) -> str:
        """Joins segment texts with single spaces."""
        return normalize_whitespace(" ".join(seg.text.strip() for seg in segments))

    def _no_match_error(
        self,
        page_text: str,
        normalized_page: str,
        best_candidate: TranscriptSegment,
        page_number: int
    ) -> PageMatchError:
        """Builds the failure report against the first remaining segment."""
        similarity = jaccard_similarity(normalized_page, normalize_text(best_candidate.text))
        message = (
            f"Page {page_number} text not found in transcript segments.\n\n"
            f"Similarity: {similarity * 100:.1f}% "
            f"(below {self.threshold * 100:g}% {self.matching_mode} threshold)\n\n"
            f"Transcript:\n  \"{best_candidate.text}\"\n\n"
            f"Your edited text:\n  \"{truncate(page_text, 100)}\"\n\n"
            f"Suggestion: {self._suggestion(similarity)}"
        )
        return PageMatchError(
            message,
            page_number=page_number,
            similarity=similarity,
            threshold=self.threshold,
            mode=self.matching_mode,
            candidate_text=best_candidate.text,
            page_text=page_text
        )

    @staticmethod
    def _suggestion(similarity: float) -> str:
        if similarity >= MATCHING_THRESHOLDS["tolerant"]:
            return "Try using matching_mode: 'tolerant' or revert minor edits"
        if similarity >= MATCHING_THRESHOLDS["fuzzy"]:
            return "Try using matching_mode: 'fuzzy' or revert text closer to the transcript"
        return "Text heavily edited. Revert text closer to the original transcript"

    def _log_diff(self, page_number: int, similarity: float, page_text: str, candidate_text: str) -> None:
        """Logs why an imperfect match was accepted. Does not affect the result."""
        added, removed = word_diff(page_text, candidate_text)
        logger.warning(
            f"Page {page_number} match confidence: {similarity * 100:.1f}% ({self.matching_mode} mode)"
        )
        logger.warning(f"  Transcript: \"{candidate_text}\"")
        logger.warning(f"  Edited:     \"{page_text}\"")
        if added:
            logger.warning(f"  Added words: {', '.join(added)}")
        if removed:
            logger.warning(f"  Removed words: {', '.join(removed)}")
