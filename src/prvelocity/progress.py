"""Progress event payloads streamed to a browser during a refresh.

Each event is one ``data: <json>`` line followed by a blank line. Only the
payload framing lives here; the transport belongs to the serving layer.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .errors import DecodeError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "

EVENT_PROGRESS = "progress"
EVENT_COMPLETE = "complete"
EVENT_ERROR = "error"


@dataclass(slots=True)
class ProgressEvent:
    """One refresh event: a repository started, the final CSV, or a failure."""

    type: str
    repo: Optional[str] = None
    csv: Optional[str] = None
    message: Optional[str] = None


def encode_event(event: ProgressEvent) -> str:
    """Frame an event as a ``data:`` line terminated by a blank line."""
    payload = {"type": event.type}
    if event.type == EVENT_PROGRESS:
        payload["repo"] = event.repo or ""
    elif event.type == EVENT_COMPLETE:
        payload["csv"] = event.csv or ""
    elif event.type == EVENT_ERROR:
        payload["message"] = event.message or "Unknown error"
    return f"{DATA_PREFIX}{json.dumps(payload)}\n\n"


def progress_event(repo_name: str) -> str:
    return encode_event(ProgressEvent(type=EVENT_PROGRESS, repo=repo_name))


def complete_event(csv_content: str) -> str:
    return encode_event(ProgressEvent(type=EVENT_COMPLETE, csv=csv_content))


def error_event(message: str) -> str:
    return encode_event(ProgressEvent(type=EVENT_ERROR, message=message))


def decode_event(line: str) -> ProgressEvent:
    """Parse one ``data:`` line.

    Raises:
        DecodeError: If the line is not a ``data:`` line or its payload is not
            a JSON object with a ``type``.
    """
    if not line.startswith(DATA_PREFIX):
        raise DecodeError("Not a data line.")

    try:
        payload = json.loads(line[len(DATA_PREFIX):])
    except ValueError as exc:
        raise DecodeError("Malformed progress payload.") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
        raise DecodeError("Progress payload has no event type.")

    return ProgressEvent(
        type=payload["type"],
        repo=payload.get("repo"),
        csv=payload.get("csv"),
        message=payload.get("message"),
    )


def iter_events(chunks: Iterable[str]) -> Iterator[ProgressEvent]:
    """Decode events from a stream of text chunks.

    Chunks may split lines anywhere; incomplete trailing text is held until the
    next chunk. Lines that are not ``data:`` lines are ignored and malformed
    payloads are skipped.
    """
    buffer = ""
    for chunk in chunks:
        buffer += chunk
        *lines, buffer = buffer.split("\n")
        for line in lines:
            event = _decode_or_skip(line)
            if event is not None:
                yield event

    if buffer:
        event = _decode_or_skip(buffer)
        if event is not None:
            yield event


def _decode_or_skip(line: str) -> Optional[ProgressEvent]:
    if not line.startswith(DATA_PREFIX):
        return None
    try:
        return decode_event(line)
    except DecodeError as exc:
        logger.debug("Skipping malformed progress payload", extra={"error": str(exc)})
        return None
