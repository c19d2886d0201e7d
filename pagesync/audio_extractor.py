"""Handles audio extraction and probing for media files using ffmpeg."""

import ffmpeg
import os
import logging
from .exceptions import AudioExtractionError, FileSystemError
from typing import Optional
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

class AudioExtractor:
    """Extracts (optionally trimmed) audio tracks from media files."""

    def __init__(self, ffmpeg_path: Optional[str] = None, ffprobe_path: Optional[str] = None):
        """
        Initializes the AudioExtractor.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
            ffprobe_path: Optional path to the ffprobe executable.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        self.ffprobe_cmd = ffprobe_path or 'ffprobe'
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}")

    def probe_duration(self, media_filepath: str) -> float:
        """
        Returns the duration of a media file in seconds.

        Raises:
            FileNotFoundError: If the media file does not exist.
            AudioExtractionError: If ffprobe fails or reports no duration.
        """
        if not os.path.exists(media_filepath):
            raise FileNotFoundError(f"Input media file not found: {media_filepath}")
        try:
            info = ffmpeg.probe(media_filepath, cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8') if e.stderr else "No stderr output"
            logger.error(f"ffprobe failed for {media_filepath}: {stderr_output}")
            raise AudioExtractionError(f"ffprobe failed: {stderr_output}") from e

        duration = info.get('format', {}).get('duration')
        if duration is None:
            raise AudioExtractionError(f"Could not determine duration of {media_filepath}")
        logger.info(f"Media duration for {media_filepath}: {float(duration):.2f}s")
        return float(duration)

    def extract_audio(
        self,
        media_filepath: str,
        output_audio_dir: str,
        output_filename: Optional[str] = None,
        start_seconds: Optional[float] = None,
        end_seconds: Optional[float] = None
    ) -> str:
        """
        Extracts the audio stream from a media file to a WAV file.

        When start_seconds/end_seconds are given only that range is written,
        so timestamps in the resulting audio start at 00:00 at the range start.

        Args:
            media_filepath: Path to the input media file.
            output_audio_dir: Directory to save the extracted audio file.
            output_filename: Optional base name for the output audio file (without extension).
                             If None, uses the media filename.
            start_seconds: Optional range start in the source.
            end_seconds: Optional range end in the source.

        Returns:
            The full path to the extracted audio file (WAV format).

        Raises:
            FileNotFoundError: If the input media file does not exist.
            AudioExtractionError: If ffmpeg fails to extract the audio.
            FileSystemError: If the output directory cannot be created/accessed.
        """
        logger.info(f"Starting audio extraction for: {media_filepath}")
        if not os.path.exists(media_filepath):
            raise FileNotFoundError(f"Input media file not found: {media_filepath}")

        ensure_dir_exists(output_audio_dir)

        if output_filename is None:
            base_name = os.path.splitext(os.path.basename(media_filepath))[0]
        else:
            base_name = os.path.splitext(output_filename)[0]

        output_audio_path = os.path.join(output_audio_dir, f"{base_name}.wav")
        logger.debug(f"Output audio path set to: {output_audio_path}")

        if os.path.exists(output_audio_path):
            logger.warning(f"Output audio file already exists, overwriting: {output_audio_path}")
            try:
                os.remove(output_audio_path)
            except OSError as e:
                raise FileSystemError(f"Could not remove existing audio file {output_audio_path}: {e}") from e

        input_options = {}
        if start_seconds is not None:
            input_options['ss'] = start_seconds
        if end_seconds is not None:
            input_options['to'] = end_seconds
        if input_options:
            logger.info(f"Trimming audio to range {start_seconds}s - {end_seconds}s")

        try:
            logger.info(f"Running ffmpeg to extract audio to {output_audio_path}...")
            # pcm_s16le 16 kHz mono, what Whisper expects
            (
                ffmpeg
                .input(media_filepath, **input_options)
                .output(output_audio_path, acodec='pcm_s16le', ar=16000, ac=1)
                .overwrite_output()
                .run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
            )
            logger.info(f"Successfully extracted audio to: {output_audio_path}")
            return output_audio_path
        except ffmpeg.Error as e:
            logger.error(f"ffmpeg error during audio extraction for {media_filepath}", exc_info=True)
            stderr_output = e.stderr.decode('utf-8') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg stderr: {stderr_output}")
            if os.path.exists(output_audio_path):
                try:
                    os.remove(output_audio_path)
                except OSError:
                    logger.warning(f"Could not clean up partially created audio file: {output_audio_path}")
            raise AudioExtractionError(f"ffmpeg failed: {stderr_output}") from e
