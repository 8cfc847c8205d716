import dataclasses

import pytest

from sanji.jobs import ConversionJob, Job
from sanji.processor import AV1SVTProcessor


def test_jobs_have_independent_stop_flags(tmp_path):
    processor = AV1SVTProcessor("ffmpeg")
    with open(tmp_path / "a.mkv", "wb") as fa, open(tmp_path / "b.mkv", "wb") as fb:
        first = Job(processor, "a.mkv", fa)
        second = Job(processor, "b.mkv", fb)
        first.stopped.set()
        assert first.stopped.is_set()
        assert not second.stopped.is_set()
        assert first.output_file == "a.mkv"
        assert second.processor is processor


def test_job_file_receives_data(tmp_path):
    target = tmp_path / "out.mkv"
    with open(target, "wb") as fd:
        job = Job(AV1SVTProcessor("ffmpeg"), str(target), fd)
        job.file.write(b"chunk")
    assert target.read_bytes() == b"chunk"


def test_conversion_jobs_compare_by_value():
    jobs = {ConversionJob("a.mkv"), ConversionJob("a.mkv"), ConversionJob("b.mkv")}
    assert len(jobs) == 2
    assert ConversionJob("a.mkv") == ConversionJob("a.mkv")


def test_conversion_job_is_immutable():
    job = ConversionJob("a.mkv")
    with pytest.raises(dataclasses.FrozenInstanceError):
        job.input_file = "b.mkv"
    assert job.input_file == "a.mkv"