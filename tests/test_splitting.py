import io

from sanji.splitting import ffmpeg_lines


class _Trickle:
    """A stream that hands out one byte per read."""

    def __init__(self, data):
        self._data = data

    def read(self, size=-1):
        head, self._data = self._data[:1], self._data[1:]
        return head


def test_carriage_return_and_newline_both_end_a_line():
    assert list(ffmpeg_lines(io.BytesIO(b"a\rb\nc"))) == [b"a", b"b", b"c"]


def test_crlf_yields_an_empty_line_between():
    assert list(ffmpeg_lines(io.BytesIO(b"a\r\nb"))) == [b"a", b"", b"b"]


def test_trailing_separator_adds_nothing():
    assert list(ffmpeg_lines(io.BytesIO(b"frame=1\n"))) == [b"frame=1"]


def test_empty_stream_yields_nothing():
    assert list(ffmpeg_lines(io.BytesIO(b""))) == []


def test_lines_survive_chunk_boundaries():
    data = b"frame=   26 fps= 13\rframe=   27 fps= 13\rdone"
    assert list(ffmpeg_lines(_Trickle(data))) == [
        b"frame=   26 fps= 13",
        b"frame=   27 fps= 13",
        b"done",
    ]


def test_joining_lines_restores_content():
    data = b"one\ntwo\rthree\nfour"
    lines = list(ffmpeg_lines(io.BytesIO(data)))
    assert b"\n".join(lines) == data.replace(b"\r", b"\n")