"""Splitting of ffmpeg console output into progress lines."""

from __future__ import annotations

import re

_SEPARATOR = re.compile(rb"[\r\n]")
_CHUNK_SIZE = 4096


def ffmpeg_lines(stream):
    """Yield the lines of a binary stream, ending a line at either CR or LF.

    ffmpeg rewrites its progress line with a bare carriage return, so both
    characters end a line. Trailing data without a terminator is yielded last.
    """
    read = getattr(stream, "read1", None) or stream.read
    pending = b""
    while chunk := read(_CHUNK_SIZE):
        pending += chunk
        *lines, pending = _SEPARATOR.split(pending)
        yield from lines
    if pending:
        yield pending