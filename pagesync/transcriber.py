"""Handles Speech-to-Text transcription using Whisper."""

import whisper
import logging
import torch
from abc import ABC, abstractmethod
from typing import Optional
import os

from .models import TranscriptionResult, TranscriptSegment
from .exceptions import TranscriptionError

logger = logging.getLogger(__name__)

class Transcriber(ABC):
    """Abstract base class for transcription services."""

    @abstractmethod
    def transcribe(self, audio_path: str) -> TranscriptionResult:
        """
        Transcribes the given audio file.

        Args:
            audio_path: Path to the audio file.

        Returns:
            A TranscriptionResult whose segments are in chronological order.

        Raises:
            TranscriptionError: If transcription fails.
            FileNotFoundError: If the audio file doesn't exist.
        """
        pass

class WhisperTranscriber(Transcriber):
    """Implements transcription using OpenAI's Whisper model."""

    def __init__(
        self,
        model_name: str = "small",
        device: str = "cuda",
        fp16: bool = True,
        language: Optional[str] = None
    ):
        """
        Initializes the WhisperTranscriber.

        Args:
            model_name: The name of the Whisper model to use (e.g., "base", "small").
            device: The device to run the model on ("cuda" or "cpu").
            fp16: Whether to use float16 precision (faster on compatible GPUs).
            language: Spoken language code (e.g. "fr", "vi"). None lets Whisper detect it.

        Raises:
            ValueError: If the specified device is invalid.
            TranscriptionError: If the model fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.fp16 = fp16
        self.language = language

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
            raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Initializing WhisperTranscriber with model '{self.model_name}' on device '{self.device}' (FP16: {self.fp16})")
        try:
            self.model = whisper.load_model(self.model_name, device=self.device)
            logger.info(f"Whisper model '{self.model_name}' loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{self.model_name}': {e}", exc_info=True)
            raise TranscriptionError(f"Failed to load Whisper model '{self.model_name}': {e}") from e

    def transcribe(self, audio_path: str) -> TranscriptionResult:
        """
        Transcribes the audio file using the loaded Whisper model.

        Segments that are incomplete or have no positive duration are skipped,
        since downstream matching relies on end_time > start_time.

        Raises:
            FileNotFoundError: If the audio file doesn't exist.
            TranscriptionError: If transcription fails during processing.
        """
        logger.info(f"Starting transcription for: {audio_path}")
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        try:
            result = self.model.transcribe(
                audio_path,
                language=self.language,
                fp16=self.fp16 if self.device == "cuda" else False, # FP16 only works on CUDA
                verbose=None
            )
        except Exception as e:
            logger.error(f"Error during Whisper transcription process for {audio_path}: {e}", exc_info=True)
            raise TranscriptionError(f"Whisper transcription failed for {audio_path}: {e}") from e

        logger.info(f"Transcription completed. Detected language: {result.get('language', 'N/A')}")

        segments = []
        for seg_data in result.get('segments', []):
            if not all(key in seg_data for key in ('start', 'end', 'text')):
                logger.warning(f"Skipping incomplete segment data: {seg_data}")
                continue
            start_time = float(seg_data['start'])
            end_time = float(seg_data['end'])
            text = seg_data['text'].strip()
            if end_time <= start_time or not text:
                logger.warning(f"Skipping empty or zero-length segment at {start_time}s: '{text}'")
                continue
            segments.append(TranscriptSegment(start_time=start_time, end_time=end_time, text=text))

        if not segments:
            logger.warning("Transcription result did not contain any usable segments.")

        logger.info(f"Processed {len(segments)} segments from transcription.")
        return TranscriptionResult(
            language=result.get('language'),
            segments=segments,
            original_audio_path=audio_path
        )
