import json
import sys

import pytest

from sanji import config
from sanji.processor import (
    AV1Rav1eProcessor,
    AV1SVTProcessor,
    Encoder,
    HEVCQSVProcessor,
    HEVCVideoToolboxProcessor,
    QualityPreset,
    new_processor,
)


def test_svt_command_with_defaults():
    p = AV1SVTProcessor("ffmpeg")
    assert p.command("in.mkv", "out.mkv") == [
        "ffmpeg", "-i", "in.mkv", "-map", "0", "-c:a", "copy", "-c:s", "copy",
        "-c:v", "libsvtav1", "-pix_fmt", "yuv420p10le", "-crf", "22", "-preset", "6",
        "out.mkv",
    ]


def test_rav1e_command_with_defaults():
    p = AV1Rav1eProcessor("ffmpeg")
    assert p.command("in.mkv", "out.mkv") == [
        "ffmpeg", "-i", "in.mkv", "-map", "0", "-c:a", "copy", "-c:s", "copy",
        "-c:v", "librav1e", "-pix_fmt", "yuv420p10le", "-crf", "22", "-preset", "6",
        "-rav1e-params", "speed=5", "out.mkv",
    ]


def test_qsv_command_with_defaults():
    p = HEVCQSVProcessor("ffmpeg")
    assert p.command("in.mkv", "out.mkv") == [
        "ffmpeg", "-init_hw_device", "qsv=hw", "-filter_hw_device", "hw",
        "-i", "in.mkv", "-map", "0", "-c:a", "copy", "-c:s", "copy",
        "-c:v", "hevc_qsv", "-pix_fmt", "p010le", "-profile:v", "main10",
        "-q", "60", "out.mkv",
    ]


def test_videotoolbox_command_with_defaults():
    p = HEVCVideoToolboxProcessor("ffmpeg")
    assert p.command("in.mkv", "out.mkv") == [
        "ffmpeg", "-i", "in.mkv", "-map", "0", "-c:a", "copy", "-c:s", "copy",
        "-c:v", "hevc_videotoolbox", "-q:v", "65", "-tag:v", "hvc1",
        "-pix_fmt", "p010le", "out.mkv",
    ]


def test_custom_preset_is_used():
    qp = QualityPreset(quality=3, crf=30, preset=4)
    argv = AV1Rav1eProcessor("/opt/ffmpeg", qp).command("a.mp4", "b.mp4")
    assert argv[0] == "/opt/ffmpeg"
    assert argv[argv.index("-crf") + 1] == "30"
    assert argv[argv.index("-preset") + 1] == "4"
    assert argv[argv.index("-rav1e-params") + 1] == "speed=3"


@pytest.mark.parametrize(
    "cls, qp, message",
    [
        (AV1SVTProcessor, QualityPreset(preset=0), "preset must be greater than zero"),
        (AV1Rav1eProcessor, QualityPreset(preset=0), "preset must be greater than zero"),
        (HEVCQSVProcessor, QualityPreset(quality=0),
         "constant quality profile must be greater than zero"),
        (HEVCVideoToolboxProcessor, QualityPreset(quality=0), "preset must be greater than zero"),
    ],
)
def test_invalid_preset_is_rejected(cls, qp, message):
    with pytest.raises(ValueError, match=message):
        cls("ffmpeg", qp).process("in.mkv")


@pytest.mark.parametrize(
    "encoder, cls",
    [
        (Encoder.SVT_AV1, AV1SVTProcessor),
        (Encoder.RAV1E_AV1, AV1Rav1eProcessor),
        (Encoder.HEVC_QSV, HEVCQSVProcessor),
        (Encoder.HEVC_VIDEOTOOLBOX, HEVCVideoToolboxProcessor),
        (0, AV1SVTProcessor),
        (3, HEVCVideoToolboxProcessor),
    ],
)
def test_new_processor_selects_class(encoder, cls):
    p = new_processor(encoder, None)
    assert type(p) is cls
    assert p.ffmpeg_path == config.instance().ffmpeg_path


def test_new_processor_passes_preset_through():
    qp = QualityPreset(quality=7, crf=1, preset=2)
    assert new_processor(Encoder.SVT_AV1, qp).quality_preset == qp
    assert new_processor(Encoder.HEVC_QSV, None).quality_preset == QualityPreset(quality=60)


def test_new_processor_rejects_unknown_encoder():
    with pytest.raises(ValueError):
        new_processor(42, None)


def test_missing_ffmpeg_raises(tmp_path):
    with pytest.raises(OSError):
        AV1SVTProcessor(str(tmp_path / "no-such-ffmpeg")).process("in.mkv")


def _fake_ffmpeg(tmp_path):
    script = tmp_path / "fake-ffmpeg"
    args_file = tmp_path / "args.json"
    script.write_text(
        f"#!{sys.executable}\n"
        "import json, sys\n"
        f"open({str(args_file)!r}, 'w').write(json.dumps(sys.argv[1:]))\n"
        "sys.stderr.write('frame=1\\rframe=2\\n')\n"
        "sys.stderr.flush()\n"
        "sys.stdout.write('done\\n')\n"
    )
    script.chmod(0o755)
    return str(script), args_file


def test_process_merges_and_splits_output(tmp_path):
    path, args_file = _fake_ffmpeg(tmp_path)
    lines = list(AV1SVTProcessor(path).process("movie.mkv"))
    assert sorted(lines) == [b"done", b"frame=1", b"frame=2"]
    argv = json.loads(args_file.read_text())
    assert argv[argv.index("-i") + 1] == "movie.mkv"
    assert argv[-1].endswith(".mkv")
    assert not argv[-1].endswith("..mkv")


def test_qsv_process_keeps_carriage_returns_and_double_dot(tmp_path):
    path, args_file = _fake_ffmpeg(tmp_path)
    lines = list(HEVCQSVProcessor(path).process("movie.mkv"))
    assert sorted(lines) == [b"done", b"frame=1\rframe=2"]
    assert json.loads(args_file.read_text())[-1].endswith("..mkv")