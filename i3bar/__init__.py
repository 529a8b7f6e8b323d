"""Writer for the i3bar status line protocol."""

from .config import Config, load_config, open_stream
from .contracts import (
    Alignment,
    Block,
    Header,
    Markup,
    ProtocolError,
    StatusLine,
    UnknownAlignmentError,
    UnknownMarkupError,
    encode_status_line,
    format_alignment,
    format_markup,
    parse_alignment,
    parse_markup,
)
from .stream import Stream, StreamClosedError, StreamError, StreamWriteError

__all__ = [
    "Alignment",
    "Block",
    "Config",
    "Header",
    "Markup",
    "ProtocolError",
    "StatusLine",
    "Stream",
    "StreamClosedError",
    "StreamError",
    "StreamWriteError",
    "UnknownAlignmentError",
    "UnknownMarkupError",
    "encode_status_line",
    "format_alignment",
    "format_markup",
    "load_config",
    "open_stream",
    "parse_alignment",
    "parse_markup",
]
