"""Video conversion building blocks: ffmpeg encoder profiles, ffprobe metadata, progress parsing, scheduling and load balancing."""

__version__ = "0.1.0"