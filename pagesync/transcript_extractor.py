"""Orchestrates audio extraction, transcription and caching for one media source."""

import datetime
import logging
import os
import time
from typing import Callable, Optional

from .audio_extractor import AudioExtractor
from .transcriber import Transcriber
from .transcript_cache import TranscriptCache
from .models import CacheMetadata, ExtractionRange
from .exceptions import ConfigurationError, FileSystemError, PageSyncError, TimeRangeError, TranscriptionError
from .time_range import format_seconds_to_time, validate_time_range
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

class TranscriptExtractor:
    """
    Produces the segment cache that page matching runs against.

    The transcriber is built through a factory so the Whisper model is only
    loaded when the cache actually has to be (re)built.
    """

    def __init__(
        self,
        config: dict,
        audio_extractor: AudioExtractor,
        transcriber_factory: Callable[[], Transcriber]
    ):
        """
        Args:
            config: A dictionary containing configuration settings.
            audio_extractor: An instance of AudioExtractor.
            transcriber_factory: Called once, on first use, to build the Transcriber.

        Raises:
            PageSyncError: If the temporary directory is missing or not writable.
        """
        self.config = config
        self.audio_extractor = audio_extractor
        self._transcriber_factory = transcriber_factory
        self._transcriber: Optional[Transcriber] = None
        self.cache_root = config.get('cache_dir', '.pagesync-cache')

        self.temp_dir = config.get('temp_dir')
        if not self.temp_dir:
            raise PageSyncError("Configuration missing 'temp_dir'.")
        try:
            ensure_dir_exists(self.temp_dir)
            test_file = os.path.join(self.temp_dir, f".pagesync_write_test_{int(time.time())}")
            with open(test_file, "w") as f:
                f.write("test")
            os.remove(test_file)
        except (FileSystemError, OSError, ValueError) as e:
            raise PageSyncError(f"Temporary directory '{self.temp_dir}' is invalid or not writable: {e}") from e

    @property
    def transcriber(self) -> Transcriber:
        if self._transcriber is None:
            self._transcriber = self._transcriber_factory()
        return self._transcriber

    def resolve_source_path(self, source_path: Optional[str] = None) -> str:
        """Returns the explicit path, or source.path from the config."""
        path = source_path or (self.config.get('source') or {}).get('path')
        if not path:
            raise ConfigurationError("No media source given. Set source.path in the config or pass --source.")
        return path

    def _cache_matches(self, cache: TranscriptCache, extraction_range: Optional[ExtractionRange]) -> bool:
        """True when the cache was built for the same extraction range."""
        if not cache.is_cached():
            return False
        metadata = cache.load_metadata()
        if metadata is None:
            return False
        wanted = (extraction_range.start_time, extraction_range.end_time) if extraction_range else (None, None)
        return (metadata.start_time, metadata.end_time) == wanted

    def _cleanup_temp_files(self, *file_paths: str) -> None:
        for file_path in file_paths:
            if file_path and os.path.exists(file_path):
                try:
                    os.remove(file_path)
                    logger.info(f"Cleaned up temporary file: {file_path}")
                except OSError as e:
                    logger.warning(f"Could not remove temporary file {file_path}: {e}")

    def extract(self, source_path: Optional[str] = None, force: bool = False) -> TranscriptCache:
        """
        Builds (or reuses) the transcript cache for a media source.

        Steps: probe duration, validate the extraction range, extract and trim
        audio, transcribe, then write segments, metadata and the review
        transcript.

        Args:
            source_path: Media file; defaults to source.path from the config.
            force: Rebuild even if a matching cache exists.

        Returns:
            The TranscriptCache holding the results.

        Raises:
            PageSyncError: For configuration, range, extraction or transcription errors.
            FileNotFoundError: If the media file does not exist.
        """
        start = time.time()
        source_path = self.resolve_source_path(source_path)
        if not os.path.isfile(source_path):
            raise FileNotFoundError(f"Input media file not found: {source_path}")

        try:
            extraction_range = ExtractionRange.from_config(self.config.get('source'))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        cache = TranscriptCache(self.cache_root, source_path)
        if not force and self._cache_matches(cache, extraction_range):
            logger.info(f"Using cached transcript in {cache.cache_dir}")
            return cache

        logger.info(f"--- Starting transcript extraction for: {source_path} ---")
        extracted_audio_path = None
        try:
            logger.info("Step 1: Probing media duration...")
            duration = self.audio_extractor.probe_duration(source_path)

            start_seconds = end_seconds = None
            trimmed_duration = duration
            if extraction_range:
                validate_time_range(extraction_range.start_time, extraction_range.end_time, duration)
                start_seconds = extraction_range.start_seconds
                end_seconds = min(extraction_range.end_seconds, duration)
                trimmed_duration = end_seconds - start_seconds
                if trimmed_duration < 1:
                    raise TimeRangeError(
                        f"Invalid time range: {extraction_range.start_time}-{extraction_range.end_time} "
                        f"leaves {max(trimmed_duration, 0):.1f}s of audio in a "
                        f"{format_seconds_to_time(duration)} media file. "
                        f"The extraction range must cover at least 1 second of the media."
                    )
                logger.info(
                    f"Extraction range {extraction_range.start_time}-{extraction_range.end_time} "
                    f"({trimmed_duration:.1f}s of {duration:.1f}s)"
                )

            logger.info("Step 2: Extracting audio...")
            base_name = os.path.splitext(os.path.basename(source_path))[0]
            extracted_audio_path = self.audio_extractor.extract_audio(
                source_path,
                self.temp_dir,
                f"{base_name}_{int(time.time())}",
                start_seconds=start_seconds,
                end_seconds=end_seconds
            )

            logger.info("Step 3: Transcribing audio...")
            result = self.transcriber.transcribe(extracted_audio_path)
            if not result.segments:
                raise TranscriptionError("Transcription produced no segments. Cannot proceed.")

            logger.info("Step 4: Writing transcript cache...")
            cache.save_segments(result.segments)
            cache.write_review_transcript(result.segments)
            cache.save_metadata(CacheMetadata(
                source_path=os.path.abspath(source_path),
                language=result.language,
                created_at=datetime.datetime.now().isoformat(timespec='seconds'),
                duration=duration,
                trimmed_duration=trimmed_duration,
                start_time=extraction_range.start_time if extraction_range else None,
                end_time=extraction_range.end_time if extraction_range else None,
                segment_count=len(result.segments)
            ))
            logger.info(f"--- Transcript extraction completed in {time.time() - start:.2f} seconds ---")
            return cache
        except (PageSyncError, FileNotFoundError) as e:
            logger.error(f"Transcript extraction failed: {e}")
            raise
        except Exception as e:
            logger.critical(f"An unexpected error occurred during transcript extraction: {e}", exc_info=True)
            raise PageSyncError(f"An unexpected error occurred: {e}") from e
        finally:
            self._cleanup_temp_files(extracted_audio_path)
