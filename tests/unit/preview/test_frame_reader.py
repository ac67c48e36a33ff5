"""Unit tests for splitting the frame channel into PNG frames."""

import io

import pytest

from chess_broadcast.preview.frame_reader import (
    PNG_SIGNATURE,
    FrameStreamError,
    iter_png_frames,
    read_png_frame,
)
from tests.infrastructure.fakes.png_frames import solid_png


class TestReadPngFrame:

    def test_back_to_back_frames(self):
        first = solid_png(color=(255, 0, 0))
        second = solid_png(width=8, height=8, color=(0, 0, 255))

        frames = list(iter_png_frames(io.BytesIO(first + second + first)))

        assert frames == [first, second, first]

    def test_empty_stream(self):
        assert read_png_frame(io.BytesIO(b"")) is None
        assert list(iter_png_frames(io.BytesIO(b""))) == []

    def test_truncated_frame(self):
        frame = solid_png()

        with pytest.raises(FrameStreamError):
            list(iter_png_frames(io.BytesIO(frame + frame[:-5])))

    def test_truncated_signature(self):
        with pytest.raises(FrameStreamError):
            read_png_frame(io.BytesIO(PNG_SIGNATURE[:3]))

    def test_not_png(self):
        with pytest.raises(FrameStreamError):
            read_png_frame(io.BytesIO(b"GIF89a\x00\x00" + b"\x00" * 32))

    def test_short_reads(self):
        frame = solid_png()

        class Trickle(io.RawIOBase):
            def __init__(self, data):
                self._data = data

            def readable(self):
                return True

            def read(self, size=-1):
                n = 3 if size is None or size < 0 else min(3, size)
                chunk, self._data = self._data[:n], self._data[n:]
                return chunk

        assert read_png_frame(Trickle(frame)) == frame

    def test_decodes_with_pillow(self):
        Image = pytest.importorskip("PIL.Image")
        frame = next(iter_png_frames(io.BytesIO(solid_png(width=5, height=2))))

        image = Image.open(io.BytesIO(frame))

        assert image.size == (5, 2)
