"""Split the frame channel byte stream into individual PNG images.

The producer writes complete PNG files back to back with no extra framing,
so frame boundaries come from the PNG structure itself: an 8 byte signature
followed by length-prefixed chunks, the last of which is ``IEND``.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterator, Optional

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_CHUNK_HEADER = struct.Struct(">I4s")
_CRC_SIZE = 4
_MAX_CHUNK_LENGTH = 2**31 - 1


class FrameStreamError(Exception):
    """The channel carried something that is not a complete PNG frame."""


def _read_exact(stream: BinaryIO, size: int, *, allow_eof: bool = False) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            if allow_eof and not buf:
                return b""
            raise FrameStreamError(f"Frame channel closed mid-frame ({len(buf)}/{size} bytes)")
        buf.extend(chunk)
    return bytes(buf)


def read_png_frame(stream: BinaryIO) -> Optional[bytes]:
    """Read one PNG image; None when the stream ends cleanly between frames."""
    signature = _read_exact(stream, len(PNG_SIGNATURE), allow_eof=True)
    if not signature:
        return None
    if signature != PNG_SIGNATURE:
        raise FrameStreamError(f"Expected PNG signature, got {signature!r}")

    parts = [signature]
    while True:
        header = _read_exact(stream, _CHUNK_HEADER.size)
        length, chunk_type = _CHUNK_HEADER.unpack(header)
        if length > _MAX_CHUNK_LENGTH:
            raise FrameStreamError(f"Invalid PNG chunk length {length}")
        body = _read_exact(stream, length + _CRC_SIZE)
        parts.append(header)
        parts.append(body)
        if chunk_type == b"IEND":
            return b"".join(parts)


def iter_png_frames(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        frame = read_png_frame(stream)
        if frame is None:
            return
        yield frame


__all__ = ["PNG_SIGNATURE", "FrameStreamError", "read_png_frame", "iter_png_frames"]
