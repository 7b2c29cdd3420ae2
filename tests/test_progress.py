"""Tests for refresh progress event framing."""

import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prvelocity.errors import DecodeError
from prvelocity.progress import (
    ProgressEvent,
    complete_event,
    decode_event,
    error_event,
    iter_events,
    progress_event,
)


def test_progress_event_is_a_data_line_followed_by_blank_line():
    """Verify event framing matches the stream format."""
    assert progress_event("api") == 'data: {"type": "progress", "repo": "api"}\n\n'


def test_decode_event_reads_complete_payload():
    """Verify a complete event carries the CSV content."""
    event = decode_event(complete_event("Author\nrow").rstrip("\n"))

    assert event == ProgressEvent(type="complete", csv="Author\nrow")


def test_decode_event_rejects_malformed_payload():
    """Verify malformed JSON raises DecodeError."""
    with pytest.raises(DecodeError):
        decode_event("data: {not json")


def test_iter_events_handles_split_chunks_and_skips_malformed_lines():
    """Verify chunked streams decode in order and bad payloads are skipped."""
    stream = progress_event("one") + "data: {broken\n\n" + progress_event("two") + error_event("boom")
    chunks = [stream[index:index + 7] for index in range(0, len(stream), 7)]

    events = list(iter_events(chunks))

    assert [event.type for event in events] == ["progress", "progress", "error"]
    assert [event.repo for event in events[:2]] == ["one", "two"]
    assert events[2].message == "boom"
