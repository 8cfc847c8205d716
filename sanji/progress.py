"""Extraction of conversion progress from ffmpeg's status line."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

# A status line looks like:
# frame=   26 fps= 13 q=22.0 size=       1KiB time=00:00:01.04 bitrate=   5.3kbits/s speed=0.518x

_SPACE = r"[\t\n\f\r ]"
_FPS = re.compile(rf"fps=(?:{_SPACE}+|)[0-9]+")
_FRAME = re.compile(rf"frame=(?:{_SPACE}+|)[0-9]+")
_BITRATE = re.compile(rf"bitrate=(?:{_SPACE}+|)(?:[^\t\n\f\r ]+|[0-9]+)")
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class Progress:
    """Progress of one conversion."""

    bit_rate: str
    ratio: float
    fps: int
    q: int = 0


def _value(text, pattern):
    match = pattern.search(text)
    parts = (match.group(0) if match else "").replace(" ", "").split("=")
    return parts[1] if len(parts) > 1 else ""


def _atoi(text):
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _ratio(frame, total):
    if total == 0:
        return math.nan if frame == 0 else math.copysign(math.inf, frame)
    return frame / total


def parse_progress(log_entry, total_frames):
    """Read frame count, frame rate and bit rate from an ffmpeg status line."""
    fps = _atoi(_value(log_entry, _FPS))
    frame = _atoi(_value(log_entry, _FRAME))
    return Progress(
        bit_rate=_value(log_entry, _BITRATE),
        ratio=_ratio(frame, total_frames),
        fps=fps,
        q=0,
    )