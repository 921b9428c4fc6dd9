# tonconnect/bridge/sse.py
"""
Incremental Server-Sent-Events parser for the bridge stream.

The bridge interleaves frames with keep-alives:

    \\r\\n
    body: heartbeat\\r\\n
    \\r\\n
    id: 1\\r\\n
    event: message\\r\\n
    data: {"from": "...", "message": "..."}\\r\\n
    \\r\\n

The blank line right after a heartbeat (and the very first blank line of the
stream) does not terminate a frame. The parser tracks that with an explicit
state instead of a loose flag.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from tonconnect.common.errors import UnexpectedStreamEnd

logger = logging.getLogger(__name__)

HEARTBEAT = "body: heartbeat"


@dataclass
class Event:
    id: Optional[str] = None
    kind: Optional[str] = None
    data: str = ""
    malformed: bool = False

    def is_empty(self) -> bool:
        return self.id is None and self.kind is None and not self.data and not self.malformed


class ParserState(Enum):
    ARMED_FOR_HEARTBEAT_BLANK = "armed_for_heartbeat_blank"
    NORMAL = "normal"


def split_field(line: str):
    """'key: value' -> ('key', 'value'); a line without ':' is a bare key."""
    key, sep, value = line.partition(":")
    if not sep:
        return line, ""
    if value.startswith(" "):
        value = value[1:]
    return key, value


class SSEParser:
    def __init__(self):
        self.state = ParserState.ARMED_FOR_HEARTBEAT_BLANK
        self._pending = Event()
        self._has_data = False
        self._buffer = b""

    @property
    def frame_open(self) -> bool:
        return not self._pending.is_empty() or self._has_data

    def feed(self, chunk: bytes) -> List[Event]:
        """Consume raw bytes, return the frames they complete (possibly none)."""
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split(b"\n")
        events = []
        for raw in lines:
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError:
                # the line is dropped and its frame is delivered as malformed
                logger.warning("invalid UTF-8 on the stream")
                self._pending.malformed = True
                self.state = ParserState.NORMAL
                continue
            event = self.feed_line(line)
            if event is not None:
                events.append(event)
        return events

    def feed_line(self, line: str) -> Optional[Event]:
        line = line.rstrip("\r\n")

        if line == HEARTBEAT:
            logger.debug("heartbeat")
            self.state = ParserState.ARMED_FOR_HEARTBEAT_BLANK
            return None

        if self.state is ParserState.ARMED_FOR_HEARTBEAT_BLANK:
            self.state = ParserState.NORMAL
            if not line:
                return None

        if not line:
            return self._dispatch()

        key, value = split_field(line)
        if key == "id":
            self._pending.id = value
        elif key == "event":
            self._pending.kind = value
        elif key == "data":
            # last data line wins; a heartbeat inside a frame swallows its terminator
            self._pending.data = value
            self._has_data = True
        # other fields (retry, comments) are ignored
        return None

    def _dispatch(self) -> Optional[Event]:
        if not self.frame_open:
            return None
        event = self._pending
        self._pending = Event()
        self._has_data = False
        return event

    def finish(self) -> None:
        """Call at end of input. An unterminated frame is an error, never a final event."""
        if self._buffer or self.frame_open:
            raise UnexpectedStreamEnd("stream ended inside a frame")
