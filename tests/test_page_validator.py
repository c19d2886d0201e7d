"""Tests for the parse -> match -> derive validation workflow."""

import pytest

from pagesync.config_loader import DEFAULT_CONFIG
from pagesync.exceptions import PageMatchError, TimeRangeError
from pagesync.page_validator import TranscriptValidator, format_report


def _config(**overrides):
    config = dict(DEFAULT_CONFIG)
    config.update(overrides)
    return config


class TestTranscriptValidator:

    def test_unedited_story(self, story_segments, story_document):
        report = TranscriptValidator(_config()).validate_document(story_document, story_segments, trimmed_duration=5.0)

        assert [p.title for p in report.pages] == ["Intro", "Morning"]
        assert [ts.to_dict() for ts in report.timestamps] == [
            {"pageNumber": 1, "startTime": 0.0, "endTime": 2.0, "duration": 2.0},
            {"pageNumber": 2, "startTime": 2.0, "endTime": 5.0, "duration": 3.0},
        ]
        assert report.all_exact
        assert report.total_duration == 5.0
        # Page 1 lasts 2.0s, under the 3s minimum
        assert report.warnings == [
            "Page 1 is very short (2.0s). Consider combining with adjacent pages."
        ]

    def test_validate_reads_file(self, tmp_path, story_segments, story_document):
        path = tmp_path / "edited.txt"
        path.write_text(story_document, encoding="utf-8")
        report = TranscriptValidator(_config()).validate(str(path), story_segments)
        assert len(report.timestamps) == 2

    def test_low_confidence_warning_in_fuzzy_mode(self, make_segments):
        segments = make_segments((0.0, 4.0, "un deux trois quatre cinq"))
        document = "un deux trois quatre cinq six sept\n---\n"

        report = TranscriptValidator(_config(matching_mode="fuzzy")).validate_document(document, segments)

        # 5 shared tokens out of 7
        assert report.matches[0].confidence == pytest.approx(5 / 7)
        assert "Page 1: Low match confidence (71.4%)" in report.warnings
        assert not report.all_exact

    def test_leftover_segments_warn(self, make_segments):
        segments = make_segments((0.0, 4.0, "premiere page du livre"), (4.0, 8.0, "un epilogue oublie"))
        document = "# Page 1\npremiere page du livre\n---\n"

        report = TranscriptValidator(_config()).validate_document(document, segments)

        assert len(report.matches) == 1
        assert "1 transcript segment(s) after the last page were not matched to any page." in report.warnings

    def test_page_past_trimmed_duration(self, story_segments, story_document):
        with pytest.raises(TimeRangeError, match="^Page 2"):
            TranscriptValidator(_config()).validate_document(story_document, story_segments, trimmed_duration=3.0)

    def test_match_failure_propagates(self, story_segments):
        document = "# Page 1: Intro\nBonjour je m'appelle Liam\n---\n# Page 2\nUne histoire toute differente\n"
        with pytest.raises(PageMatchError) as exc_info:
            TranscriptValidator(_config()).validate_document(document, story_segments)
        assert exc_info.value.page_number == 2

    def test_validator_is_reusable(self, story_segments, story_document):
        validator = TranscriptValidator(_config())
        first = validator.validate_document(story_document, story_segments)
        second = validator.validate_document(story_document, story_segments)
        assert first.timestamps == second.timestamps


def test_format_report(story_segments, story_document):
    report = TranscriptValidator(_config()).validate_document(story_document, story_segments)

    text = format_report(report)

    assert text.startswith("=== Validation Report ===")
    assert "WARNING: Page 1 is very short (2.0s)" in text
    assert "All pages have 100% match (unedited transcript)" in text
    assert "  Page 1: Intro (2.0s, 0.00-2.00) - OK 100% match" in text
    assert "  Page 2: Morning (3.0s, 2.00-5.00) - OK 100% match" in text
    assert text.endswith("Total duration: 0:05 (5.0 seconds)")
