"""Reads and writes the per-source transcript cache."""

import dataclasses
import json
import logging
import os
from typing import Iterable, List, Optional

from .exceptions import TranscriptFormatError
from .models import CacheMetadata, DerivedTimestamp, TranscriptSegment
from .utils import ensure_dir_exists, read_json, write_json

logger = logging.getLogger(__name__)

SEGMENTS_FILE = "whisper-transcript.json"
METADATA_FILE = "cache-metadata.json"
REVIEW_TRANSCRIPT_FILE = "full-transcript.txt"
PAGE_TIMESTAMPS_FILE = "page-timestamps.json"


class TranscriptCache:
    """
    One cache directory per media source.

    Layout:
        <cache_root>/<source name>/whisper-transcript.json   ASR segments
        <cache_root>/<source name>/cache-metadata.json       CacheMetadata
        <cache_root>/<source name>/full-transcript.txt       text for human editing
        <cache_root>/<source name>/page-timestamps.json      derived page bounds
    """

    def __init__(self, cache_root: str, source_path: str):
        self.source_path = source_path
        source_name = os.path.splitext(os.path.basename(source_path))[0]
        self.cache_dir = os.path.join(cache_root, source_name)

    @property
    def segments_path(self) -> str:
        return os.path.join(self.cache_dir, SEGMENTS_FILE)

    @property
    def metadata_path(self) -> str:
        return os.path.join(self.cache_dir, METADATA_FILE)

    @property
    def review_transcript_path(self) -> str:
        return os.path.join(self.cache_dir, REVIEW_TRANSCRIPT_FILE)

    @property
    def page_timestamps_path(self) -> str:
        return os.path.join(self.cache_dir, PAGE_TIMESTAMPS_FILE)

    def is_cached(self) -> bool:
        return os.path.isfile(self.segments_path) and os.path.isfile(self.metadata_path)

    def save_segments(self, segments: Iterable[TranscriptSegment]) -> str:
        data = [seg.to_dict() for seg in segments]
        write_json(self.segments_path, data)
        logger.info(f"Saved {len(data)} segments to {self.segments_path}")
        return self.segments_path

    def load_segments(self) -> List[TranscriptSegment]:
        """
        Loads cached segments.

        Raises:
            FileNotFoundError: If no segment cache exists for this source.
            TranscriptFormatError: If the cache is not a list of valid segments.
        """
        try:
            data = read_json(self.segments_path)
        except json.JSONDecodeError as e:
            raise TranscriptFormatError(f"Segment cache {self.segments_path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise TranscriptFormatError(f"Segment cache {self.segments_path} must contain a JSON list.")

        segments = []
        for index, item in enumerate(data):
            try:
                segment = TranscriptSegment.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                raise TranscriptFormatError(f"Segment {index} in {self.segments_path} is malformed: {e}") from e
            if segment.end_time <= segment.start_time:
                raise TranscriptFormatError(
                    f"Segment {index} in {self.segments_path} ends ({segment.end_time}) "
                    f"before it starts ({segment.start_time})."
                )
            segments.append(segment)

        logger.info(f"Loaded {len(segments)} segments from {self.segments_path}")
        return segments

    def save_metadata(self, metadata: CacheMetadata) -> str:
        write_json(self.metadata_path, dataclasses.asdict(metadata))
        return self.metadata_path

    def load_metadata(self) -> Optional[CacheMetadata]:
        """Returns the cached metadata, or None when absent or unreadable."""
        if not os.path.isfile(self.metadata_path):
            return None
        try:
            data = read_json(self.metadata_path)
            return CacheMetadata(**data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Ignoring unreadable cache metadata {self.metadata_path}: {e}")
            return None

    def write_review_transcript(self, segments: Iterable[TranscriptSegment]) -> str:
        """
        Writes one segment per paragraph for the user to edit and mark page breaks in.
        """
        ensure_dir_exists(self.cache_dir)
        lines = [seg.text.strip() for seg in segments]
        with open(self.review_transcript_path, 'w', encoding='utf-8') as f:
            f.write("\n\n".join(lines) + "\n")
        logger.info(f"Review transcript written to {self.review_transcript_path}")
        return self.review_transcript_path

    def write_page_timestamps(self, timestamps: Iterable[DerivedTimestamp], output_path: Optional[str] = None) -> str:
        path = output_path or self.page_timestamps_path
        write_json(path, [ts.to_dict() for ts in timestamps])
        logger.info(f"Page timestamps written to {path}")
        return path
