from __future__ import annotations

import json
import threading
import time
from typing import Any


class RecordingSink:
    """Text sink that keeps every write call separately."""

    def __init__(self) -> None:
        self.writes: list[str] = []
        self.flushes = 0

    def write(self, data: str) -> int:
        self.writes.append(data)
        return len(data)

    def flush(self) -> None:
        self.flushes += 1

    def getvalue(self) -> str:
        return "".join(self.writes)


class FailingSink(RecordingSink):
    """Sink whose ``fail_on``-th write call (0-based) raises ``OSError``."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.calls = 0

    def write(self, data: str) -> int:
        call = self.calls
        self.calls += 1
        if call == self.fail_on:
            raise OSError("broken pipe")
        return super().write(data)


class TricklingSink:
    """Sink that stores one character at a time and yields between them.

    Concurrent unsynchronized writers would interleave their characters.
    """

    def __init__(self) -> None:
        self._chars: list[str] = []
        self._guard = threading.Lock()

    def write(self, data: str) -> int:
        for ch in data:
            with self._guard:
                self._chars.append(ch)
            time.sleep(0)
        return len(data)

    def getvalue(self) -> str:
        with self._guard:
            return "".join(self._chars)


def parse_stream(text: str) -> tuple[dict[str, Any], list[Any], bool]:
    """Split protocol output into header, elements and whether ``]`` was seen.

    Elements may be separated by whitespace or commas.
    """

    decoder = json.JSONDecoder()
    header, pos = decoder.raw_decode(text)
    pos = _skip_ws(text, pos)
    if text[pos : pos + 1] != "[":
        raise ValueError(f"expected '[' at {pos}, got {text[pos:pos + 10]!r}")
    pos += 1

    elements: list[Any] = []
    while True:
        pos = _skip_ws(text, pos)
        if pos >= len(text):
            return header, elements, False
        if text[pos] == "]":
            if text[pos + 1 :].strip():
                raise ValueError("content after closing bracket")
            return header, elements, True
        if text[pos] == ",":
            pos = _skip_ws(text, pos + 1)
        value, pos = decoder.raw_decode(text, pos)
        elements.append(value)


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t\r\n":
        pos += 1
    return pos
