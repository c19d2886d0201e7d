"""Data models for PageSync."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .time_range import parse_time_to_seconds


@dataclass(frozen=True)
class TranscriptSegment:
    """Represents a single timed chunk of ASR text."""
    start_time: float
    end_time: float
    text: str

    @classmethod
    def from_dict(cls, data: dict) -> "TranscriptSegment":
        """Builds a segment from the cached JSON shape ({startTime, endTime, text})."""
        return cls(
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
            text=str(data["text"])
        )

    def to_dict(self) -> dict:
        return {"startTime": self.start_time, "endTime": self.end_time, "text": self.text}


@dataclass
class TranscriptionResult:
    """Holds the structured output from the ASR process."""
    language: Optional[str]
    segments: List[TranscriptSegment] = field(default_factory=list)
    original_audio_path: Optional[str] = None


@dataclass(frozen=True)
class PageDefinition:
    """One page of the edited transcript, before matching."""
    page_number: int  # 1-based position in the document
    title: str
    text: str  # whitespace-normalized body


@dataclass(frozen=True)
class MatchedSegment:
    """A page bound to a contiguous run of transcript segments."""
    page_number: int
    segments: Tuple[TranscriptSegment, ...]
    confidence: float  # 1.0 means exact match after normalization


@dataclass(frozen=True)
class DerivedTimestamp:
    """Page-level time bounds, in seconds."""
    page_number: int
    start_time: float
    end_time: float
    duration: float

    def to_dict(self) -> dict:
        return {
            "pageNumber": self.page_number,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class ExtractionRange:
    """
    A user-specified sub-interval of a longer media asset.

    The original "MM:SS"/"HH:MM:SS" strings are kept for display and cache
    metadata; seconds are computed on demand.
    """
    start_time: str
    end_time: str

    @classmethod
    def from_config(cls, source: Optional[dict]) -> Optional["ExtractionRange"]:
        """
        Reads start_time/end_time from a config 'source' mapping.

        Returns:
            An ExtractionRange, or None when neither bound is set.

        Raises:
            ValueError: If only one of the two bounds is set.
        """
        if not source:
            return None
        start = source.get("start_time")
        end = source.get("end_time")
        if start is None and end is None:
            return None
        if start is None or end is None:
            raise ValueError(
                "Both source.start_time and source.end_time must be specified together. "
                "Cannot specify only one of them."
            )
        return cls(start_time=str(start), end_time=str(end))

    @property
    def start_seconds(self) -> int:
        return parse_time_to_seconds(self.start_time)

    @property
    def end_seconds(self) -> int:
        return parse_time_to_seconds(self.end_time)

    @property
    def duration(self) -> int:
        return self.end_seconds - self.start_seconds


@dataclass
class CacheMetadata:
    """Describes what is stored in a transcript cache directory."""
    source_path: str
    language: Optional[str]
    created_at: str  # ISO 8601
    duration: Optional[float] = None  # full source duration in seconds
    trimmed_duration: Optional[float] = None  # duration of the transcribed audio
    start_time: Optional[str] = None  # original range strings, display only
    end_time: Optional[str] = None
    segment_count: int = 0


@dataclass
class ValidationReport:
    """Result of matching an edited transcript against cached segments."""
    matching_mode: str
    pages: List[PageDefinition] = field(default_factory=list)
    matches: List[MatchedSegment] = field(default_factory=list)
    timestamps: List[DerivedTimestamp] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def total_duration(self) -> float:
        return sum(ts.duration for ts in self.timestamps)

    @property
    def all_exact(self) -> bool:
        return bool(self.matches) and all(m.confidence == 1.0 for m in self.matches)
