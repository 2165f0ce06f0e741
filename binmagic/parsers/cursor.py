"""
Bounds-Checked Byte Cursor
===========================

:class:`ByteCursor` is the only way the decoders touch the input buffer.
Every read checks ``offset + width <= len(buffer)`` first and raises
:class:`~binmagic.core.errors.OutOfBoundsError` instead of returning short
data.  Python integers do not overflow, so ``offset + width`` is exact even
for 64-bit offsets taken straight from a hostile header.

Slices are :class:`memoryview` objects over the original buffer; the buffer
itself is never copied.
"""

from __future__ import annotations

import struct
from typing import Any, Optional, Union

from binmagic.core.errors import OutOfBoundsError
from binmagic.core.models import Endianness
from binmagic.parsers.layout import RecordLayout

Buffer = Union[bytes, bytearray]


class ByteCursor:
    """Sequential and random-access reader over an immutable buffer.

    Multi-byte reads take the byte order explicitly; the cursor has no
    default endianness.

    Usage::

        cur = ByteCursor(data)
        magic = cur.slice(0, 4)
        cur.seek(0x10)
        e_type = cur.read_u16(Endianness.LITTLE)
    """

    __slots__ = ("_data", "_view", "_pos")

    def __init__(self, data: Buffer) -> None:
        self._data: Buffer = data
        self._view: memoryview = memoryview(data)
        self._pos: int = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._pos

    # ------------------------------------------------------------------ #
    #  Bounds
    # ------------------------------------------------------------------ #

    def check(self, offset: int, length: int) -> None:
        """Raise :class:`OutOfBoundsError` unless ``[offset, offset+length)`` fits."""
        if offset < 0 or length < 0 or offset + length > len(self._data):
            raise OutOfBoundsError(offset, length, len(self._data))

    def seek(self, offset: int) -> None:
        """Move the read position; the end of the buffer is a valid position."""
        self.check(offset, 0)
        self._pos = offset

    def slice(self, offset: int, length: int) -> memoryview:
        """Return a zero-copy view of ``length`` bytes at ``offset``."""
        self.check(offset, length)
        return self._view[offset:offset + length]

    def find(self, sub: bytes, start: int, end: int) -> int:
        """Index of *sub* within ``[start, end)``, or ``-1``.

        The range is bounds-checked like any other read.
        """
        self.check(start, end - start)
        return self._data.find(sub, start, end)

    # ------------------------------------------------------------------ #
    #  Scalar reads
    # ------------------------------------------------------------------ #

    def _read_uint(self, width: int, endianness: Endianness, offset: Optional[int]) -> int:
        start = self._pos if offset is None else offset
        self.check(start, width)
        value = int.from_bytes(self._view[start:start + width], endianness.value)
        if offset is None:
            self._pos = start + width
        return value

    def read_u8(self, endianness: Endianness = Endianness.LITTLE, offset: Optional[int] = None) -> int:
        return self._read_uint(1, endianness, offset)

    def read_u16(self, endianness: Endianness, offset: Optional[int] = None) -> int:
        return self._read_uint(2, endianness, offset)

    def read_u32(self, endianness: Endianness, offset: Optional[int] = None) -> int:
        return self._read_uint(4, endianness, offset)

    def read_u64(self, endianness: Endianness, offset: Optional[int] = None) -> int:
        return self._read_uint(8, endianness, offset)

    # ------------------------------------------------------------------ #
    #  Record reads
    # ------------------------------------------------------------------ #

    def read_record(
        self,
        record: RecordLayout,
        endianness: Endianness,
        offset: Optional[int] = None,
    ) -> dict[str, Any]:
        """Decode one fixed-size record described by *record*.

        Returns:
            Mapping of field name to decoded integer.
        """
        start = self._pos if offset is None else offset
        self.check(start, record.size)
        values = struct.unpack_from(
            endianness.struct_prefix + record.format, self._view, start
        )
        if offset is None:
            self._pos = start + record.size
        return dict(zip(record.names, values))
