"""Bounds-checked big-endian byte reader for SMF chunks.

All multi-byte integers in a Standard MIDI File are big-endian.  Lengths and
delta-times use the variable-length quantity (VLQ) encoding: 7 bits per
byte, most significant group first, high bit set on every byte but the last.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Optional, Union

from .errors import (
    InvalidFileHeaderError,
    InvalidTrackHeaderError,
    OutOfBoundsError,
    VLQOverflowError,
)
from .models import HEADER_TAG, TRACK_TAG

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

CHUNK_TAG_SIZE = 4
VLQ_MAX_VALUE = 0xFFFF_FFFF

# error raised when a chunk carries the wrong tag, keyed by the tag expected
TAG_ERRORS = {
    HEADER_TAG: InvalidFileHeaderError,
    TRACK_TAG: InvalidTrackHeaderError,
}

_I8 = struct.Struct(">b")
_U16 = struct.Struct(">H")
_I16 = struct.Struct(">h")
_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")


@dataclass(frozen=True)
class Chunk:
    """One ``tag + length + payload`` unit of an SMF file."""

    tag: str
    size: int  # declared length
    payload: bytes

    def reader(self) -> "ByteReader":
        return ByteReader(self.payload)


class ByteReader:
    """Cursor over an immutable buffer.

    ``consumed`` moves in lockstep with the cursor, including on
    :meth:`rewind`, and is what track decoding compares against the
    declared chunk size.
    """

    __slots__ = ("_data", "_length", "_pos", "consumed")

    def __init__(self, data: BytesLike):
        self._data = memoryview(data).toreadonly()
        self._length = len(self._data)
        self._pos = 0
        self.consumed = 0

    def __len__(self) -> int:
        return self._length

    @property
    def remaining(self) -> int:
        return self._length - self._pos

    def tell(self) -> int:
        return self._pos

    def at_end(self) -> bool:
        return self._pos >= self._length

    def _advance(self, size: int) -> int:
        """Reserve ``size`` bytes and return the offset they start at."""
        if size < 0:
            raise ValueError("size must be non-negative")
        if self.remaining < size:
            raise OutOfBoundsError(self._pos, size, self.remaining)
        start = self._pos
        self._pos += size
        self.consumed += size
        return start

    def rewind(self, size: int) -> None:
        if size < 0:
            raise ValueError("size must be non-negative")
        if size > self._pos:
            raise OutOfBoundsError(self._pos - size, size, self._pos)
        self._pos -= size
        self.consumed -= size

    # -- fixed width -------------------------------------------------------

    def read_u8(self) -> int:
        return self._data[self._advance(1)]

    def read_i8(self) -> int:
        return _I8.unpack_from(self._data, self._advance(1))[0]

    def read_u16(self) -> int:
        return _U16.unpack_from(self._data, self._advance(2))[0]

    def read_i16(self) -> int:
        return _I16.unpack_from(self._data, self._advance(2))[0]

    def read_u24(self) -> int:
        start = self._advance(3)
        return int.from_bytes(self._data[start : start + 3], "big")

    def read_u32(self) -> int:
        return _U32.unpack_from(self._data, self._advance(4))[0]

    def read_i32(self) -> int:
        return _I32.unpack_from(self._data, self._advance(4))[0]

    # -- variable width ----------------------------------------------------

    def read_bytes(self, size: int) -> bytes:
        start = self._advance(size)
        return bytes(self._data[start : start + size])

    def read_ascii(self, size: int) -> str:
        # latin-1 maps every byte value to the code point of the same value
        return self.read_bytes(size).decode("latin-1")

    def read_vlq(self) -> int:
        start = self._pos
        value = 0
        while True:
            byte = self.read_u8()
            value = (value << 7) | (byte & 0x7F)
            if value > VLQ_MAX_VALUE:
                raise VLQOverflowError(start)
            if byte & 0x80 == 0:
                return value

    def read_chunk(self, expected_tag: Optional[str] = None) -> Chunk:
        """Read one ``<tag> <u32 length> <payload>`` chunk.

        With ``expected_tag`` (``"MThd"`` or ``"MTrk"``) the tag is checked
        before the length is trusted, so a foreign file fails on its tag
        rather than on an implausible payload length.
        """
        offset = self._pos
        tag = self.read_ascii(CHUNK_TAG_SIZE)
        if expected_tag is not None and tag != expected_tag:
            raise TAG_ERRORS[expected_tag](tag)
        size = self.read_u32()
        payload = self.read_bytes(size)
        logger.debug("chunk %r at offset %d, %d byte(s)", tag, offset, size)
        return Chunk(tag=tag, size=size, payload=payload)


__all__ = ["ByteReader", "BytesLike", "Chunk", "VLQ_MAX_VALUE"]
