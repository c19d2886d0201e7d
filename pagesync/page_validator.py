"""Matches an edited transcript against cached segments and reports the page structure."""

import logging
from typing import List, Optional, Sequence

from tqdm import tqdm

from .models import PageDefinition, TranscriptSegment, ValidationReport
from .segment_matcher import SegmentMatcher, DEFAULT_MATCHING_MODE
from .timestamp_deriver import TimestampDeriver, format_duration
from .transcript_parser import TranscriptFileParser
from .time_range import validate_derived_timestamps

logger = logging.getLogger(__name__)

# Accepted matches below these confidences are flagged in the report
LOW_CONFIDENCE_LIMITS = {
    "tolerant": 0.9,
    "fuzzy": 0.8,
}


class TranscriptValidator:
    """
    Runs the full parse -> match -> derive -> range-check sequence.

    Every call builds its own SegmentMatcher, so one validator can be reused
    across documents.
    """

    def __init__(self, config: dict, show_progress: bool = False):
        self.matching_mode = config.get('matching_mode', DEFAULT_MATCHING_MODE)
        self.min_page_duration = config.get('min_page_duration', 3.0)
        self.max_page_duration = config.get('max_page_duration', 120.0)
        self.min_page_chars = config.get('min_page_chars', 10)
        self.show_progress = show_progress

    def validate(
        self,
        transcript_path: str,
        segments: Sequence[TranscriptSegment],
        trimmed_duration: Optional[float] = None
    ) -> ValidationReport:
        """
        Validates an edited transcript file against transcript segments.

        Args:
            transcript_path: Edited transcript with '---' page breaks.
            segments: Cached ASR segments for the same (trimmed) audio.
            trimmed_duration: Length of the transcribed audio; when given every
                              page must end within it.

        Raises:
            FileNotFoundError: If the transcript file does not exist.
            TranscriptFormatError: If the transcript format is invalid.
            PageMatchError: If a page cannot be matched.
            TimestampDerivationError: If derived bounds are inconsistent.
            TimeRangeError: If a page ends past the trimmed audio.
        """
        parser = TranscriptFileParser(transcript_path, min_page_chars=self.min_page_chars)
        pages = parser.parse()
        return self._run(pages, parser.warnings, segments, trimmed_duration)

    def validate_document(
        self,
        document: str,
        segments: Sequence[TranscriptSegment],
        trimmed_duration: Optional[float] = None
    ) -> ValidationReport:
        """Same as validate(), for a transcript already in memory."""
        parser = TranscriptFileParser(min_page_chars=self.min_page_chars)
        pages = parser.parse_text(document)
        return self._run(pages, parser.warnings, segments, trimmed_duration)

    def _run(
        self,
        pages: List[PageDefinition],
        parser_warnings: List[str],
        segments: Sequence[TranscriptSegment],
        trimmed_duration: Optional[float]
    ) -> ValidationReport:
        report = ValidationReport(matching_mode=self.matching_mode, pages=pages)
        report.warnings.extend(parser_warnings)

        logger.info(f"Matching {len(pages)} pages to {len(segments)} segments ({self.matching_mode} mode)...")
        matcher = SegmentMatcher(segments, self.matching_mode)
        # Strictly in page order: each match moves the cursor for the next one
        for page in tqdm(pages, desc="Matching pages", unit="page", disable=not self.show_progress):
            report.matches.append(matcher.match_page_to_segments(page.text, page_number=page.page_number))

        leftover = len(matcher.remaining_segments)
        if leftover:
            report.warnings.append(
                f"{leftover} transcript segment(s) after the last page were not matched to any page."
            )

        deriver = TimestampDeriver(self.min_page_duration, self.max_page_duration)
        report.timestamps = deriver.derive_timestamps(report.matches)
        report.warnings.extend(deriver.warnings)

        if trimmed_duration is not None:
            validate_derived_timestamps(report.timestamps, trimmed_duration)

        limit = LOW_CONFIDENCE_LIMITS.get(self.matching_mode)
        if limit is not None:
            for matched in report.matches:
                if matched.confidence < limit:
                    report.warnings.append(
                        f"Page {matched.page_number}: Low match confidence ({matched.confidence * 100:.1f}%)"
                    )

        for warning in report.warnings:
            logger.debug(f"Validation warning: {warning}")
        logger.info(f"Validated {len(pages)} pages, {len(report.warnings)} warning(s).")
        return report


def format_report(report: ValidationReport) -> str:
    """Renders a plain-text page structure preview."""
    lines = ["=== Validation Report ===", ""]

    if report.warnings:
        lines.extend(f"WARNING: {w}" for w in report.warnings)
        lines.append("")

    if report.all_exact:
        lines.append("All pages have 100% match (unedited transcript)")
        lines.append("")

    lines.append("Story Structure:")
    lines.append("")
    for page, matched, ts in zip(report.pages, report.matches, report.timestamps):
        status = "OK" if matched.confidence == 1.0 else "CHECK"
        lines.append(
            f"  Page {ts.page_number}: {page.title} ({ts.duration:.1f}s, "
            f"{ts.start_time:.2f}-{ts.end_time:.2f}) - {status} {matched.confidence * 100:.0f}% match"
        )

    total = report.total_duration
    lines.append("")
    lines.append(f"Total duration: {format_duration(total)} ({total:.1f} seconds)")
    return "\n".join(lines)
