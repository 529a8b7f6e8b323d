"""Wire contracts for the i3bar protocol.

Defines the header sent once at the start of a stream, the blocks that make
up a status line, and the text codecs for the enumerated block fields.
Encoded objects omit every optional field at its zero value; ``full_text``
is always present.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any


class ProtocolError(Exception):
    """Base class for i3bar protocol errors."""


class UnknownAlignmentError(ProtocolError, ValueError):
    """Raised when an alignment text or value is outside the known set."""


class UnknownMarkupError(ProtocolError, ValueError):
    """Raised when a markup text or value is outside the known set."""


class Alignment(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2

    @classmethod
    def parse(cls, text: str) -> Alignment:
        return parse_alignment(text)

    @property
    def text(self) -> str:
        return format_alignment(self)


class Markup(IntEnum):
    NONE = 0
    PANGO = 1

    @classmethod
    def parse(cls, text: str) -> Markup:
        return parse_markup(text)

    @property
    def text(self) -> str:
        return format_markup(self)


_ALIGNMENT_BY_TEXT: dict[str, Alignment] = {
    "left": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
}
_TEXT_BY_ALIGNMENT: dict[int, str] = {v: k for k, v in _ALIGNMENT_BY_TEXT.items()}

_MARKUP_BY_TEXT: dict[str, Markup] = {
    "none": Markup.NONE,
    "pango": Markup.PANGO,
}
_TEXT_BY_MARKUP: dict[int, str] = {v: k for k, v in _MARKUP_BY_TEXT.items()}


def parse_alignment(text: str) -> Alignment:
    """Decode alignment text (any letter case) into an ``Alignment``."""

    try:
        return _ALIGNMENT_BY_TEXT[text.lower()]
    except (KeyError, AttributeError):
        raise UnknownAlignmentError(f"unknown alignment: {text}") from None


def format_alignment(value: int) -> str:
    """Encode an ``Alignment`` into its lowercase wire text."""

    try:
        return _TEXT_BY_ALIGNMENT[int(value)]
    except (KeyError, TypeError, ValueError):
        raise UnknownAlignmentError(f"unknown alignment: {value!r}") from None


def parse_markup(text: str) -> Markup:
    """Decode markup text (any letter case) into a ``Markup``."""

    try:
        return _MARKUP_BY_TEXT[text.lower()]
    except (KeyError, AttributeError):
        raise UnknownMarkupError(f"unknown markup: {text}") from None


def format_markup(value: int) -> str:
    """Encode a ``Markup`` into its lowercase wire text."""

    try:
        return _TEXT_BY_MARKUP[int(value)]
    except (KeyError, TypeError, ValueError):
        raise UnknownMarkupError(f"unknown markup: {value!r}") from None


@dataclass(frozen=True)
class Header:
    """Protocol header sent once, before the infinite array.

    Attributes:
        version: Protocol version
        stop_signal: Signal the host sends to pause us (0 keeps host default)
        cont_signal: Signal the host sends to resume us (0 keeps host default)
        click_events: Ask the host to send click events on our input
    """

    version: int
    stop_signal: int = 0
    cont_signal: int = 0
    click_events: bool = False

    def __post_init__(self) -> None:
        if self.stop_signal < 0 or self.cont_signal < 0:
            raise ValueError(
                f"signals must be >= 0 (got stop={self.stop_signal}, cont={self.cont_signal})"
            )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"version": self.version}
        if self.stop_signal:
            data["stop_signal"] = self.stop_signal
        if self.cont_signal:
            data["cont_signal"] = self.cont_signal
        if self.click_events:
            data["click_events"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Header:
        """Build a header from a decoded wire object.

        Raises:
            ProtocolError: If ``version`` is missing or ``click_events`` is not a bool
        """
        if "version" not in data:
            raise ProtocolError("header is missing version")
        click_events = data.get("click_events", False)
        if not isinstance(click_events, bool):
            raise ProtocolError(f"click_events must be a bool, got {click_events!r}")
        return cls(
            version=data["version"],
            stop_signal=data.get("stop_signal", 0),
            cont_signal=data.get("cont_signal", 0),
            click_events=click_events,
        )


@dataclass(slots=True)
class Block:
    """A single segment of a status line.

    ``name`` and ``instance`` identify the block in click events and are not
    rendered. ``min_width`` is either a pixel count or a sample text whose
    rendered width is used. Colors are ``#rrggbb`` strings and are passed
    through unchecked.
    """

    full_text: str = ""
    name: str = ""
    instance: str = ""
    short_text: str = ""
    color: str = ""
    background: str = ""
    border: str = ""
    min_width: str | int = ""
    align: Alignment = Alignment.LEFT
    urgent: bool = False
    separator: bool = False
    separator_block_width: int = 0
    markup: Markup = Markup.NONE

    def __post_init__(self) -> None:
        if isinstance(self.align, str):
            self.align = parse_alignment(self.align)
        if isinstance(self.markup, str):
            self.markup = parse_markup(self.markup)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire object, dropping zero-valued optional fields."""

        data: dict[str, Any] = {}
        for key in _WIRE_ORDER:
            value = getattr(self, key)
            if key == "full_text":
                data[key] = value
            elif key == "align":
                if value != Alignment.LEFT:
                    data[key] = format_alignment(value)
            elif key == "markup":
                if value != Markup.NONE:
                    data[key] = format_markup(value)
            elif value:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Block:
        """Build a block from a decoded wire object. Unknown keys are ignored."""

        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        return cls(**kwargs)


# Key order of an encoded block.
_WIRE_ORDER: tuple[str, ...] = (
    "name",
    "instance",
    "full_text",
    "short_text",
    "color",
    "background",
    "border",
    "min_width",
    "align",
    "urgent",
    "separator",
    "separator_block_width",
    "markup",
)

StatusLine = list[Block]


def encode_status_line(line: StatusLine) -> list[dict[str, Any]]:
    """Return the JSON-ready form of a status line, blocks in order.

    Raises:
        TypeError: If an element is not a ``Block``
    """

    encoded = []
    for block in line:
        if not isinstance(block, Block):
            raise TypeError(f"status line element must be a Block, got {type(block).__name__}")
        encoded.append(block.to_dict())
    return encoded
