"""Tests for the extraction workflow, with ffmpeg and Whisper replaced by fakes."""

import os

import pytest

from pagesync.exceptions import TimeRangeError, TranscriptionError
from pagesync.models import TranscriptionResult, TranscriptSegment
from pagesync.transcriber import Transcriber
from pagesync.transcript_extractor import TranscriptExtractor


class FakeAudioExtractor:

    def __init__(self, duration=1200.0):
        self.duration = duration
        self.calls = []

    def probe_duration(self, media_filepath):
        return self.duration

    def extract_audio(self, media_filepath, output_dir, output_filename=None, start_seconds=None, end_seconds=None):
        self.calls.append((start_seconds, end_seconds))
        path = os.path.join(output_dir, f"{output_filename}.wav")
        with open(path, "wb") as f:
            f.write(b"RIFF")
        self.last_path = path
        return path


class FakeTranscriber(Transcriber):

    def __init__(self, segments):
        self.segments = segments
        self.calls = 0

    def transcribe(self, audio_path):
        self.calls += 1
        return TranscriptionResult(language="fr", segments=list(self.segments), original_audio_path=audio_path)


@pytest.fixture
def media_file(tmp_path):
    path = tmp_path / "story.mp4"
    path.write_bytes(b"\x00")
    return str(path)


@pytest.fixture
def config(tmp_path, media_file):
    return {
        "temp_dir": str(tmp_path / "temp"),
        "cache_dir": str(tmp_path / "cache"),
        "source": {"path": media_file, "start_time": "01:30", "end_time": "15:00"},
    }


@pytest.fixture
def segments():
    return [
        TranscriptSegment(0.0, 2.0, "Bonjour je m'appelle Liam"),
        TranscriptSegment(2.0, 5.0, "Je me reveille sans reveil"),
    ]


def _extractor(config, audio, transcriber, built=None):
    def factory():
        if built is not None:
            built.append(transcriber)
        return transcriber
    return TranscriptExtractor(config, audio, factory)


class TestTranscriptExtractor:

    def test_extracts_trimmed_range_and_writes_cache(self, config, segments):
        audio = FakeAudioExtractor()
        transcriber = FakeTranscriber(segments)

        cache = _extractor(config, audio, transcriber).extract()

        assert audio.calls == [(90, 900)]
        assert cache.load_segments() == segments
        metadata = cache.load_metadata()
        assert metadata.duration == 1200.0
        assert metadata.trimmed_duration == 810
        assert (metadata.start_time, metadata.end_time) == ("01:30", "15:00")
        assert metadata.language == "fr"
        assert metadata.segment_count == 2
        with open(cache.review_transcript_path, encoding="utf-8") as f:
            assert f.read().startswith("Bonjour je m'appelle Liam\n\n")
        assert not os.path.exists(audio.last_path)

    def test_whole_file_without_range(self, config, segments):
        del config["source"]["start_time"], config["source"]["end_time"]
        audio = FakeAudioExtractor(duration=42.5)

        cache = _extractor(config, audio, FakeTranscriber(segments)).extract()

        assert audio.calls == [(None, None)]
        assert cache.load_metadata().trimmed_duration == 42.5

    def test_cache_reused_until_forced(self, config, segments):
        audio = FakeAudioExtractor()
        transcriber = FakeTranscriber(segments)
        built = []
        extractor = _extractor(config, audio, transcriber, built)

        extractor.extract()
        extractor.extract()
        assert transcriber.calls == 1

        extractor.extract(force=True)
        assert transcriber.calls == 2
        assert len(built) == 1

    def test_changed_range_invalidates_cache(self, config, segments):
        transcriber = FakeTranscriber(segments)
        _extractor(config, FakeAudioExtractor(), transcriber).extract()

        config["source"]["end_time"] = "10:00"
        _extractor(config, FakeAudioExtractor(), transcriber).extract()

        assert transcriber.calls == 2

    def test_range_past_media_end(self, config, segments):
        audio = FakeAudioExtractor(duration=600.0)
        transcriber = FakeTranscriber(segments)

        with pytest.raises(TimeRangeError, match="exceeds video duration"):
            _extractor(config, audio, transcriber).extract()
        assert audio.calls == []
        assert transcriber.calls == 0

    @pytest.mark.parametrize("duration", [100.0, 100.5])
    def test_range_starting_at_media_end(self, config, segments, duration):
        # Passes the range check (end within the 1s tolerance) but leaves no audio
        config["source"].update(start_time="01:40", end_time="01:41")
        audio = FakeAudioExtractor(duration=duration)
        transcriber = FakeTranscriber(segments)

        with pytest.raises(TimeRangeError, match="at least 1 second"):
            _extractor(config, audio, transcriber).extract()
        assert audio.calls == []
        assert transcriber.calls == 0

    def test_no_segments(self, config):
        audio = FakeAudioExtractor()
        with pytest.raises(TranscriptionError, match="no segments"):
            _extractor(config, audio, FakeTranscriber([])).extract()
        assert not os.path.exists(audio.last_path)

    def test_missing_media(self, config, segments, tmp_path):
        with pytest.raises(FileNotFoundError):
            _extractor(config, FakeAudioExtractor(), FakeTranscriber(segments)).extract(str(tmp_path / "gone.mp4"))
