"""Records describing conversions."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from .processor import VideoProcessor


@dataclass
class Job:
    """A prepared conversion: its processor, the file being received and a stop flag."""

    processor: VideoProcessor
    output_file: str
    file: BinaryIO
    stopped: threading.Event = field(default_factory=threading.Event)


@dataclass(frozen=True)
class ConversionJob:
    """A request to convert one input file."""

    input_file: str