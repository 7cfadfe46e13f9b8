"""Decoding of machine reporter lines into events."""

import json
import logging
from dataclasses import dataclass
from typing import TypeAlias

from pydantic import ValidationError

from dart_test_junit.models.events import (
    EVENT_TYPES,
    Envelope,
    Event,
    event_adapter,
    heartbeat_adapter,
)

log = logging.getLogger(__name__)


class ProtocolError(Exception):
    """Raised when a line with a known event type has an invalid payload."""

    def __init__(self, line: str, cause: ValidationError) -> None:
        super().__init__(f"Malformed machine event: {line}\n{cause}")
        self.line = line
        self.cause = cause


@dataclass(frozen=True, kw_only=True)
class TextLine:
    """A line that is not a protocol event and is echoed as-is."""

    text: str


DecodedLine: TypeAlias = Event | TextLine | None


@dataclass(frozen=True, kw_only=True)
class EventDecoder:
    """Turns raw lines into events, pass-through text or nothing.

    Returns ``None`` for blank lines and heartbeat batches, ``TextLine`` for
    console noise and unknown event types, and an event model otherwise.
    """

    strict: bool = True

    def decode(self, line: str) -> DecodedLine:
        content = line.strip()
        if not content:
            return None

        try:
            raw = json.loads(content)
        except json.JSONDecodeError:
            return TextLine(text=content)

        if isinstance(raw, list):
            return self._decode_batch(raw, content)

        try:
            envelope = Envelope.model_validate(raw)
        except ValidationError:
            return TextLine(text=content)

        if envelope.type not in EVENT_TYPES:
            log.debug("Ignoring unknown event type %r", envelope.type)
            return TextLine(text=content)

        try:
            return event_adapter.validate_python(raw)
        except ValidationError as e:
            if self.strict:
                raise ProtocolError(content, e) from e
            log.warning("Passing through malformed %s event: %s", envelope.type, e)
            return TextLine(text=content)

    def _decode_batch(self, raw: list[object], content: str) -> DecodedLine:
        try:
            heartbeat_adapter.validate_python(raw)
        except ValidationError:
            return TextLine(text=content)
        return None
