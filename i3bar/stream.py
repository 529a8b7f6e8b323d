"""i3bar protocol stream.

The stream writes the header, opens an infinite JSON array and then appends
one status line per ``send_line`` call. ``close`` terminates the array.

Construction is single-threaded; afterwards ``send_line`` and ``close`` may
be called from any thread. All writes after construction are serialized by
one lock, so each status line reaches the sink as one uninterrupted value.
"""

from __future__ import annotations

import io
import json
import threading
from types import TracebackType
from typing import IO, Any, Literal, Protocol

from .contracts import Header, ProtocolError, StatusLine, encode_status_line
from .logging import get_logger

Phase = Literal["header", "open", "line", "close"]

_PHASE_MESSAGES: dict[str, str] = {
    "header": "failed to send header",
    "open": "failed to start infinite array",
    "line": "failed to encode status line",
    "close": "failed to close infinite array",
}


class StreamError(ProtocolError):
    """Base class for stream failures."""


class StreamWriteError(StreamError):
    """Raised when encoding or writing to the sink fails.

    ``phase`` names the protocol step that failed so callers can tell a
    broken handshake from a dropped tick.
    """

    def __init__(self, phase: Phase, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"{_PHASE_MESSAGES[phase]}: {cause}")


class StreamClosedError(StreamError):
    """Raised when writing to a stream whose array was already closed."""


class Sink(Protocol):
    def write(self, data: Any, /) -> Any: ...


def _is_binary(sink: Sink) -> bool:
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        return True
    mode = getattr(sink, "mode", "")
    return isinstance(mode, str) and "b" in mode


class Stream:
    """Writer for one i3bar protocol session.

    Args:
        sink: Destination of the protocol (usually stdout); text or binary
        source: Origin of click events (kept for future use, never read)
        pretty: Indent JSON for humans; the host does not care
        header: Protocol header sent before the array
        comma_separated: Prefix every element after the first with a comma,
            making the closed array strict JSON
        binary: Write UTF-8 bytes instead of text. Detected from the sink
            when not given.

    Raises:
        StreamWriteError: If the header or the opening bracket cannot be written
    """

    def __init__(
        self,
        sink: Sink,
        source: IO[Any] | None = None,
        pretty: bool = False,
        header: Header | None = None,
        *,
        comma_separated: bool = False,
        binary: bool | None = None,
    ) -> None:
        self._sink = sink
        self._binary = _is_binary(sink) if binary is None else binary
        self._lock = threading.Lock()
        self._closed = False
        self._lines_sent = 0
        self._comma_separated = comma_separated
        self._log = get_logger("i3bar.stream")

        if pretty:
            self._dump_kwargs: dict[str, Any] = {"indent": 4}
        else:
            self._dump_kwargs = {"separators": (",", ":")}

        self._header = header if header is not None else Header(version=1)

        try:
            self._write(self._encode(self._header.to_dict()))
        except (OSError, TypeError, ValueError) as exc:
            raise StreamWriteError("header", exc) from exc

        try:
            self._write("[")
        except (OSError, TypeError, ValueError) as exc:
            raise StreamWriteError("open", exc) from exc

        # TODO: drive a click event reader from _source once the event model exists.
        self._source = source
        self._decoder = json.JSONDecoder()

        self._log.debug(
            "stream.open",
            version=self._header.version,
            click_events=self._header.click_events,
            pretty=pretty,
            comma_separated=comma_separated,
            binary=self._binary,
        )

    @property
    def header(self) -> Header:
        return self._header

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines_sent(self) -> int:
        return self._lines_sent

    def send_line(self, line: StatusLine) -> None:
        """Append one status line to the infinite array. Thread safe.

        Raises:
            StreamClosedError: If ``close`` already succeeded
            StreamWriteError: If encoding or the sink write fails
        """
        with self._lock:
            if self._closed:
                raise StreamClosedError("cannot send status line: stream is closed")
            try:
                payload = self._encode(encode_status_line(line))
                if self._comma_separated and self._lines_sent:
                    payload = "," + payload
                self._write(payload)
            except (OSError, TypeError, ValueError) as exc:
                raise StreamWriteError("line", exc) from exc
            self._lines_sent += 1

    def close(self) -> None:
        """Close the infinite array with a single ``]``. Thread safe.

        The sink itself stays open; it belongs to the caller.

        Raises:
            StreamClosedError: If the array was already closed
            StreamWriteError: If the sink write fails
        """
        with self._lock:
            if self._closed:
                raise StreamClosedError("stream is already closed")
            self._close_locked()
        self._log.debug("stream.close", lines_sent=self._lines_sent)

    def __enter__(self) -> Stream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        with self._lock:
            if self._closed:
                return
            try:
                self._close_locked()
            except StreamWriteError as err:
                if exc_type is None:
                    raise
                # the body's exception wins
                self._log.warning(
                    "stream.close_failed",
                    error=str(err.cause),
                    pending=exc_type.__name__,
                )
                return
        self._log.debug("stream.close", lines_sent=self._lines_sent)

    def _close_locked(self) -> None:
        try:
            self._write("]")
        except (OSError, TypeError, ValueError) as exc:
            raise StreamWriteError("close", exc) from exc
        self._closed = True

    def _encode(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, **self._dump_kwargs) + "\n"

    def _write(self, data: str) -> None:
        if self._binary:
            self._sink.write(data.encode("utf-8"))
        else:
            self._sink.write(data)
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()
