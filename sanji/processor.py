"""Video processors that drive ffmpeg with a given encoder and quality preset."""

from __future__ import annotations

import abc
import enum
import logging
import os
import queue
import subprocess
import threading
import uuid
from dataclasses import dataclass

from . import config
from .splitting import ffmpeg_lines

log = logging.getLogger(__name__)

_DONE = object()


@dataclass
class QualityPreset:
    """Encoder quality settings: ``-q`` quality, CRF and speed preset."""

    quality: int = 0
    crf: int = 0
    preset: int = 0


class Encoder(enum.IntEnum):
    """The encoders a conversion can use."""

    SVT_AV1 = 0
    RAV1E_AV1 = 1
    HEVC_QSV = 2
    HEVC_VIDEOTOOLBOX = 3


def _extension(path):
    name = os.path.basename(os.fspath(path))
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _plain_lines(stream):
    for line in stream:
        line = line.rstrip(b"\n")
        if line.endswith(b"\r"):
            line = line[:-1]
        yield line


def _pump(lines, output):
    try:
        for line in lines:
            output.put(line)
    except (OSError, ValueError) as exc:
        log.debug("stopped reading ffmpeg output: %s", exc)
    finally:
        output.put(_DONE)


def _drain(proc, output, sources):
    try:
        while sources:
            item = output.get()
            if item is _DONE:
                sources -= 1
            else:
                yield item
    finally:
        if proc.poll() is None:
            log.info("stopping")
            proc.terminate()
        proc.wait()


class VideoProcessor(abc.ABC):
    """Runs ffmpeg to re-encode the video of a file, copying audio and subtitles."""

    _defaults: dict = {}
    _required_field = "preset"
    _required_message = "preset must be greater than zero"
    _split_carriage_returns = True

    def __init__(self, ffmpeg_path, qp=None):
        self.ffmpeg_path = ffmpeg_path
        self.quality_preset = qp if qp is not None else QualityPreset(**self._defaults)

    @abc.abstractmethod
    def command(self, input_path, temp_file):
        """Return the ffmpeg argument vector converting *input_path* into *temp_file*."""

    def _temp_name(self, extension):
        return f"{uuid.uuid4()}{extension}"

    def process(self, input_path):
        """Start ffmpeg on *input_path* and return an iterator over its output lines.

        Lines from stderr and stdout are merged in arrival order. Closing the
        iterator before the end stops ffmpeg.
        """
        if getattr(self.quality_preset, self._required_field) < 1:
            raise ValueError(self._required_message)

        temp_file = self._temp_name(_extension(input_path))
        proc = subprocess.Popen(
            self.command(os.fspath(input_path), temp_file),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        stderr_lines = (
            ffmpeg_lines(proc.stderr) if self._split_carriage_returns else _plain_lines(proc.stderr)
        )
        output = queue.Queue()
        for lines in (stderr_lines, _plain_lines(proc.stdout)):
            threading.Thread(target=_pump, args=(lines, output), daemon=True).start()
        return _drain(proc, output, 2)


class AV1SVTProcessor(VideoProcessor):
    """AV1 10-bit with the SVT encoder."""

    _defaults = {"preset": 6, "quality": 5, "crf": 22}

    def command(self, input_path, temp_file):
        qp = self.quality_preset
        return [
            self.ffmpeg_path,
            "-i", input_path,
            "-map", "0",
            "-c:a", "copy",
            "-c:s", "copy",
            "-c:v", "libsvtav1",
            "-pix_fmt", "yuv420p10le",
            "-crf", str(qp.crf),
            "-preset", str(qp.preset),
            temp_file,
        ]


class AV1Rav1eProcessor(VideoProcessor):
    """AV1 10-bit with the rav1e encoder."""

    _defaults = {"preset": 6, "quality": 5, "crf": 22}

    def command(self, input_path, temp_file):
        qp = self.quality_preset
        return [
            self.ffmpeg_path,
            "-i", input_path,
            "-map", "0",
            "-c:a", "copy",
            "-c:s", "copy",
            "-c:v", "librav1e",
            "-pix_fmt", "yuv420p10le",
            "-crf", str(qp.crf),
            "-preset", str(qp.preset),
            "-rav1e-params", f"speed={qp.quality}",
            temp_file,
        ]


class HEVCQSVProcessor(VideoProcessor):
    """HEVC main10 with Intel Quick Sync."""

    _defaults = {"quality": 60}
    _required_field = "quality"
    _required_message = "constant quality profile must be greater than zero"
    _split_carriage_returns = False

    def _temp_name(self, extension):
        return f"{uuid.uuid4()}.{extension}"

    def command(self, input_path, temp_file):
        return [
            self.ffmpeg_path,
            "-init_hw_device", "qsv=hw",
            "-filter_hw_device", "hw",
            "-i", input_path,
            "-map", "0",
            "-c:a", "copy",
            "-c:s", "copy",
            "-c:v", "hevc_qsv",
            "-pix_fmt", "p010le",
            "-profile:v", "main10",
            "-q", str(self.quality_preset.quality),
            temp_file,
        ]


class HEVCVideoToolboxProcessor(VideoProcessor):
    """HEVC 10-bit with Apple VideoToolbox."""

    _defaults = {"quality": 65}
    _required_field = "quality"

    def command(self, input_path, temp_file):
        return [
            self.ffmpeg_path,
            "-i", input_path,
            "-map", "0",
            "-c:a", "copy",
            "-c:s", "copy",
            "-c:v", "hevc_videotoolbox",
            "-q:v", str(self.quality_preset.quality),
            "-tag:v", "hvc1",
            "-pix_fmt", "p010le",
            temp_file,
        ]


_PROCESSORS = {
    Encoder.SVT_AV1: AV1SVTProcessor,
    Encoder.RAV1E_AV1: AV1Rav1eProcessor,
    Encoder.HEVC_QSV: HEVCQSVProcessor,
    Encoder.HEVC_VIDEOTOOLBOX: HEVCVideoToolboxProcessor,
}


def new_processor(encoder, qp=None):
    """Build the processor for *encoder* using the configured ffmpeg binary."""
    try:
        kind = Encoder(encoder)
    except ValueError:
        raise ValueError(f"unknown encoder: {encoder!r}") from None
    return _PROCESSORS[kind](config.instance().ffmpeg_path, qp)