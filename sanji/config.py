"""Process-wide configuration loaded from a YAML file."""

from __future__ import annotations

import threading
from dataclasses import dataclass

import yaml

# YAML key -> attribute name
_FIELDS = {
    "root": "root",
    "ffmpegPath": "ffmpeg_path",
    "releasePrefix": "release_prefix",
}


@dataclass
class Config:
    """Settings shared by the conversion server."""

    root: str = ""
    ffmpeg_path: str = ""
    release_prefix: str = ""


_lock = threading.Lock()
_instance: Config | None = None


def _scalar_text(key, value):
    if isinstance(value, (dict, list)):
        raise ValueError(f"configuration key {key!r} must be a scalar")
    if isinstance(value, bool):
        return "true" if value else "false"
    return value if isinstance(value, str) else str(value)


def load_file(path):
    """Load the configuration at *path* and make it the shared instance.

    The shared instance is replaced by an empty configuration as soon as the
    file is opened, and then filled in from its contents.
    """
    global _instance
    with open(path, encoding="utf-8") as fd:
        text = fd.read()

    config = Config()
    with _lock:
        _instance = config

    document = yaml.safe_load(text)
    if document is None:
        raise ValueError(f"{path}: empty configuration file")
    if not isinstance(document, dict):
        raise ValueError(f"{path}: configuration must be a mapping")

    for key, attribute in _FIELDS.items():
        value = document.get(key)
        if value is None:
            continue
        setattr(config, attribute, _scalar_text(key, value))
    return config


def instance():
    """Return the shared configuration, creating a default one if needed."""
    global _instance
    with _lock:
        if _instance is None:
            _instance = Config(ffmpeg_path="ffmpeg")
        return _instance