"""Models of ffprobe's JSON output and helpers to read it."""

from __future__ import annotations

import json
import os
import re
import subprocess
from dataclasses import MISSING, dataclass, field, fields
from datetime import timedelta

_INTEGER = re.compile(r"[+-]?[0-9]+")
_CLOCK = re.compile(r"([0-9]{1,2}):([0-9]{2}):([0-9]{2})(?:[.,]([0-9]+))?")


def _atoi(text):
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _trunc_div(num, den):
    quotient = abs(num) // abs(den)
    return quotient if (num < 0) == (den < 0) else -quotient


def _key(json_key, default=""):
    return field(default=default, metadata={"json": json_key})


def _decode(cls, data):
    if not isinstance(data, dict):
        raise ValueError(f"{cls.__name__}: expected a JSON object, got {type(data).__name__}")
    values = {}
    for f in fields(cls):
        raw = data.get(f.metadata.get("json", f.name))
        if raw is None:
            continue
        if f.default_factory is not MISSING:
            values[f.name] = _decode(f.default_factory, raw)
            continue
        expected = type(f.default)
        if expected is int:
            valid = isinstance(raw, int) and not isinstance(raw, bool)
        else:
            valid = isinstance(raw, str)
        if not valid:
            raise ValueError(
                f"{cls.__name__}.{f.name}: expected {expected.__name__}, got {type(raw).__name__}"
            )
        values[f.name] = raw
    return cls(**values)


@dataclass
class Tags:
    """Stream tags, including the statistics matroska muxers write."""

    language: str = ""
    title: str = ""
    bps: str = _key("BPS")
    duration: str = _key("DURATION")
    number_of_frames: str = _key("NUMBER_OF_FRAMES")
    number_of_bytes: str = _key("NUMBER_OF_BYTES")
    statistics_writing_app: str = _key("_STATISTICS_WRITING_APP")
    statistics_writing_date_utc: str = _key("_STATISTICS_WRITING_DATE_UTC")
    statistics_tags: str = _key("_STATISTICS_TAGS")


@dataclass
class Stream:
    """A video, audio or subtitle stream, told apart by ``codec_type``."""

    index: int = 0
    codec_name: str = ""
    codec_long_name: str = ""
    profile: str = ""
    codec_type: str = ""
    codec_tag_string: str = ""
    codec_tag: str = ""
    width: int = 0
    height: int = 0
    coded_width: int = 0
    coded_height: int = 0
    closed_captions: int = 0
    film_grain: int = 0
    has_b_frames: int = 0
    sample_aspect_ratio: str = ""
    display_aspect_ratio: str = ""
    pix_fmt: str = ""
    level: int = 0
    color_range: str = ""
    color_space: str = ""
    color_transfer: str = ""
    color_primaries: str = ""
    chroma_location: str = ""
    refs: int = 0
    r_frame_rate: str = ""
    avg_frame_rate: str = ""
    time_base: str = ""
    start_pts: int = 0
    start_time: str = ""
    extradata_size: int = 0
    tags: Tags = field(default_factory=Tags)
    sample_fmt: str = ""
    sample_rate: str = ""
    channels: int = 0
    channel_layout: str = ""
    bits_per_sample: int = 0
    initial_padding: int = 0
    bits_per_raw_sample: str = ""
    duration_ts: int = 0
    duration: str = ""

    def is_audio(self):
        return self.codec_type == "audio"

    def is_video(self):
        return self.codec_type == "video"

    def is_subtitle(self):
        return self.codec_type == "subtitle"

    def parse_fps(self):
        """Return the average frame rate as a whole number of frames per second."""
        values = self.avg_frame_rate.split("/")
        if len(values) == 1:
            return _atoi(self.avg_frame_rate)
        return _trunc_div(_atoi(values[0]), _atoi(values[1]))

    def parse_duration(self):
        """Parse the ``DURATION`` tag, an ``H:MM:SS[.fraction]`` clock value."""
        match = _CLOCK.fullmatch(self.tags.duration)
        if not match:
            raise ValueError(f"invalid duration: {self.tags.duration!r}")
        hours, minutes, seconds = (int(match.group(i)) for i in (1, 2, 3))
        if hours > 23 or minutes > 59 or seconds > 59:
            raise ValueError(f"duration out of range: {self.tags.duration!r}")
        fraction = (match.group(4) or "")[:9].ljust(9, "0")
        nanoseconds = int(fraction)
        return timedelta(
            hours=hours, minutes=minutes, seconds=seconds, microseconds=nanoseconds // 1000
        )

    def total_frames(self):
        """Estimate the number of frames from frame rate and duration."""
        fps = self.parse_fps()
        try:
            duration = self.parse_duration()
        except ValueError:
            duration = timedelta(milliseconds=self.duration_ts)
        return fps * int(duration.total_seconds())


@dataclass
class Format:
    """Container-level information."""

    filename: str = ""
    nb_streams: int = 0
    nb_programs: int = 0
    nb_stream_groups: int = 0
    format_name: str = ""
    format_long_name: str = ""
    start_time: str = ""
    duration: str = ""
    size: str = ""
    bit_rate: str = ""
    probe_score: int = 0

    def parse_duration(self):
        """Return the container duration, given in seconds."""
        return timedelta(seconds=float(self.duration))


@dataclass
class FFprobeOutput:
    """The streams and format ffprobe reports for a file."""

    streams: list[Stream] = field(default_factory=list)
    format: Format = field(default_factory=Format)

    def video_stream(self):
        """Return the first video stream, or the first stream if there is none."""
        return next((s for s in self.streams if s.is_video()), None) or self.streams[0]

    def subtitle_stream(self):
        """Return the first subtitle stream, or the first stream if there is none."""
        return next((s for s in self.streams if s.is_subtitle()), None) or self.streams[0]


def parse_output(data):
    """Decode ffprobe's JSON output (text or bytes)."""
    document = json.loads(data)
    if not isinstance(document, dict):
        raise ValueError("ffprobe output must be a JSON object")
    raw_streams = document.get("streams")
    if raw_streams is None:
        raw_streams = []
    if not isinstance(raw_streams, list):
        raise ValueError("ffprobe streams must be a JSON array")
    raw_format = document.get("format")
    return FFprobeOutput(
        streams=[_decode(Stream, s) for s in raw_streams],
        format=Format() if raw_format is None else _decode(Format, raw_format),
    )


def total_frames(streams):
    """Estimate the frame count of a file from its streams.

    The frame rate comes from the video stream; a subtitle stream with a
    known length overrides the duration.
    """
    fps = 0
    duration = timedelta(0)
    for stream in streams:
        if stream.is_video():
            fps = stream.parse_fps()
            try:
                duration = stream.parse_duration()
            except ValueError:
                duration = timedelta(0)
        if stream.is_subtitle() and stream.duration_ts != 0:
            duration = timedelta(milliseconds=stream.duration_ts)
    return fps * int(duration.total_seconds())


def parse_file(path):
    """Run ffprobe on *path* and decode what it reports."""
    result = subprocess.run(
        [
            "ffprobe",
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            os.fspath(path),
        ],
        stdout=subprocess.PIPE,
        check=False,
    )
    return parse_output(result.stdout)