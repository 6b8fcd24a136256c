import codecs
import json
from typing import Any, Callable, Optional, Union

from v20.config.logging import logger
from v20.core.exceptions import MissingCallbackError, StreamDecodeError

HEARTBEAT = "HEARTBEAT"


class StreamParser:
    """
    Incremental parser for newline-delimited JSON streams.

    Chunks may split a record (or a multi-byte character) anywhere; the
    incomplete tail is buffered until the next chunk. Every complete record
    is decoded and handed to `on_record` in arrival order: heartbeats via
    `heartbeat`, everything else via `decode`.
    """

    def __init__(self, decode: Callable[[Any], Any], on_record: Callable[[Any], None],
                 heartbeat: Optional[Callable[[Any], Any]] = None, strict: bool = False):
        if on_record is None or not callable(on_record):
            raise MissingCallbackError("A stream needs an on_record callback")

        self.decode = decode
        self.on_record = on_record
        self.heartbeat = heartbeat or decode
        self.strict = strict

        self.delivered = 0
        self.skipped = 0

        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: Union[bytes, str]) -> int:
        """Consume one chunk; returns how many records it completed."""
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))

        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")

        count = 0
        for line in lines:
            if self._handle(line):
                count += 1
        return count

    def close(self) -> int:
        """Flush whatever is left once the stream has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        return 1 if self._handle(tail) else 0

    def _handle(self, line: str) -> bool:
        line = line.strip("\r")
        if not line.strip():
            return False

        try:
            record = json.loads(line)
        except ValueError as e:
            return self._malformed(line, f"invalid JSON ({e})")

        if not isinstance(record, dict):
            return self._malformed(line, "record is not a JSON object")

        if record.get("type") == HEARTBEAT:
            entity = self.heartbeat(record)
        else:
            entity = self.decode(record)

        self.delivered += 1
        self.on_record(entity)
        return True

    def _malformed(self, line: str, reason: str) -> bool:
        if self.strict:
            raise StreamDecodeError(f"Malformed stream record: {reason}", line)

        self.skipped += 1
        logger.warning(f"Skipping malformed stream record: {reason}: {line[:200]!r}")
        return False
