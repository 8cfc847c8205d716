# sanji

A library of building blocks for running video conversions with `ffmpeg`:
encoder profiles that build and run ffmpeg command lines, parsing of
`ffprobe` metadata, extraction of progress from ffmpeg's status lines, and
thread-based scheduling and load balancing of work.

`ffmpeg` and `ffprobe` must be installed and on the path (or configured)
for the parts that start them.

## Installation

```
pip install .
```

## Configuration (`sanji.config`)

Settings are read from a YAML mapping with the keys `root`, `ffmpegPath`
and `releasePrefix`; values are kept as text on a `Config` dataclass
(`root`, `ffmpeg_path`, `release_prefix`).

```yaml
root: /srv/videos
ffmpegPath: /usr/bin/ffmpeg
releasePrefix: ""
```

```python
from sanji import config

config.load_file("config.yml")
print(config.instance().ffmpeg_path)
```

`load_file()` replaces the shared instance and raises `ValueError` for an
empty file, a document that is not a mapping, or a non-scalar value.
Without a loaded file, `config.instance()` returns a default `Config` whose
`ffmpeg_path` is `"ffmpeg"`.

## Encoding (`sanji.processor`)

```python
from sanji.processor import Encoder, QualityPreset, new_processor

proc = new_processor(Encoder.SVT_AV1, QualityPreset(crf=28, preset=8))
for line in proc.process("movie.mkv"):
    print(line)
```

`new_processor(encoder, qp=None)` accepts an `Encoder` member or its integer
value (`SVT_AV1`=0, `RAV1E_AV1`=1, `HEVC_QSV`=2, `HEVC_VIDEOTOOLBOX`=3) and
uses the ffmpeg path from `config.instance()`; an unknown value raises
`ValueError`. With `qp=None` each processor uses its own defaults:

| Processor                   | Default preset                   |
|-----------------------------|----------------------------------|
| `AV1SVTProcessor`           | preset 6, quality 5, crf 22      |
| `AV1Rav1eProcessor`         | preset 6, quality 5, crf 22      |
| `HEVCQSVProcessor`          | quality 60                       |
| `HEVCVideoToolboxProcessor` | quality 65                       |

`command(input_path, temp_file)` returns the ffmpeg argument list without
running it. `process(input_path)` checks the preset (the AV1 processors need
`preset >= 1`, the HEVC ones `quality >= 1`, otherwise `ValueError`), starts
ffmpeg writing to a file with a random UUID name in the current directory,
and returns an iterator over the output lines of stderr and stdout as
bytes. Closing the iterator early terminates ffmpeg.

`sanji.splitting.ffmpeg_lines(stream)` splits a binary stream into lines at
either `\r` or `\n`, which is how ffmpeg's progress line is rewritten.

## Metadata and progress (`sanji.ffprobe`, `sanji.progress`)

```python
from sanji.ffprobe import parse_file, total_frames
from sanji.progress import parse_progress

meta = parse_file("movie.mkv")
frames = total_frames(meta.streams)
progress = parse_progress("frame=  26 fps= 13 q=22.0 bitrate=   5.3kbits/s", frames)
print(progress.ratio, progress.fps, progress.bit_rate)
```

- `parse_file(path)` runs `ffprobe` and decodes its JSON; `parse_output(data)`
  decodes JSON you already have into `FFprobeOutput` (`streams`, `format`).
- `Stream` offers `is_audio()`, `is_video()`, `is_subtitle()`, `parse_fps()`
  (whole frames per second from `avg_frame_rate`), `parse_duration()` (from
  the `DURATION` tag, `H:MM:SS[.fraction]`) and `total_frames()`.
- `Format.parse_duration()` reads the container duration in seconds.
- `FFprobeOutput.video_stream()` and `subtitle_stream()` return the first
  matching stream, or the first stream if none matches.
- `total_frames(streams)` multiplies the video frame rate by the duration,
  taking the duration of a subtitle stream with a non-zero `duration_ts`
  in preference.
- `parse_progress(log_entry, total_frames)` returns a `Progress` with
  `bit_rate`, `ratio` (frame / total frames), `fps` and `q` (always 0); it
  raises `ValueError` if the line has no `frame=` or `fps=` value.

## Scheduling and load balancing

`sanji.scheduler.RoundRobin(concurrency, processor, logger=None)` runs each
`sanji.jobs.ConversionJob` passed to `schedule()` on its own thread, with at
most `concurrency` conversions at once; `wait()` blocks until all scheduled
ones have finished. Errors are logged, not raised.

`sanji.balancer.LoadBalancer(num_workers)` starts worker threads;
`balance(work)` takes `Request(fn)` objects from the queue `work` and hands
each to the worker with the fewest pending requests. A worker calls `fn()`
and consumes the iterable it returns. Putting `None` on `work` ends
balancing once all dispatched requests have completed.

`sanji.jobs.Job` records a prepared conversion: its processor, output file,
open file object and a `stopped` event. `sanji.netutil.get_local_ip()`
returns the local address used for outgoing UDP traffic.

## What this package does not do

It provides no commands, no network conversion server and no HTTP API:
receiving uploaded files, starting conversions remotely, keeping a
registry of running jobs and streaming progress to clients are left to the
application that uses these pieces.

## Tests

```
pip install .[test]
pytest
```