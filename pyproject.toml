[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sanji"
version = "0.1.0"
description = "Building blocks for video conversion with ffmpeg: encoder profiles, ffprobe metadata, progress parsing, scheduling and load balancing"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["ffmpeg", "ffprobe", "av1", "hevc", "transcoding", "video"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sanji"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
