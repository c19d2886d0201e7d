"""Shared fixtures for PageSync tests."""

import pytest

from pagesync.models import TranscriptSegment


@pytest.fixture
def make_segments():
    """Builds TranscriptSegment tuples from (start, end, text) triples."""
    def _make(*triples):
        return [TranscriptSegment(start_time=s, end_time=e, text=t) for s, e, t in triples]
    return _make


@pytest.fixture
def story_segments(make_segments):
    """Two-page French story as transcribed by the ASR step."""
    return make_segments(
        (0.0, 2.0, "Bonjour je m'appelle Liam"),
        (2.0, 5.0, "Je me reveille sans reveil"),
    )


@pytest.fixture
def story_document():
    return (
        "# Page 1: Intro\n"
        "Bonjour je m'appelle Liam\n"
        "---\n"
        "# Page 2: Morning\n"
        "Je me reveille sans reveil"
    )
