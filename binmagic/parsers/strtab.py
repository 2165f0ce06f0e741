"""
String Table Resolver
======================

String tables are sections of concatenated NUL-terminated strings that
other records reference by byte offset.  Lookups go straight to the
offset and scan forward to the next NUL; any in-range offset is a valid
query, including one that lands in the middle of another string.

A scan never leaves the table: reaching the table's end without a
terminator raises :class:`~binmagic.core.errors.UnterminatedStringError`.
"""

from __future__ import annotations

from typing import Optional, Sequence

from binmagic.core.errors import (
    InvalidStringTableReferenceError,
    OutOfBoundsError,
    UnterminatedStringError,
)
from binmagic.core.models import SectionHeader
from binmagic.parsers.constants import SHT_NOBITS, SHT_STRTAB
from binmagic.parsers.cursor import ByteCursor


class StringTable:
    """A borrowed ``[start, start + size)`` window of the buffer."""

    __slots__ = ("_cursor", "start", "size", "section_index")

    def __init__(
        self,
        cursor: ByteCursor,
        start: int,
        size: int,
        section_index: Optional[int] = None,
    ) -> None:
        cursor.check(start, size)
        self._cursor = cursor
        self.start = start
        self.size = size
        self.section_index = section_index

    def get(self, offset: int) -> str:
        """Return the string starting at byte *offset* of the table.

        Raises:
            OutOfBoundsError: *offset* lies beyond the table.
            UnterminatedStringError: No NUL between *offset* and the table end.
        """
        if offset < 0 or offset > self.size:
            raise OutOfBoundsError(offset, 1, self.size)
        # An empty table still answers the conventional empty name
        if offset == 0 and self.size == 0:
            return ""

        begin = self.start + offset
        end = self.start + self.size
        nul = self._cursor.find(b"\x00", begin, end)
        if nul == -1:
            raise UnterminatedStringError(self.section_index, offset, self.size)
        return bytes(self._cursor.slice(begin, nul - begin)).decode("ascii", errors="replace")


class StringTableResolver:
    """Resolve ``(section_index, byte_offset)`` pairs to strings.

    A section referenced through a link field (``sh_link`` of a symbol
    table or dynamic section) must be ``SHT_STRTAB``.  A table supplied
    explicitly, such as the one named by ``e_shstrndx``, skips the type
    check but must still exist and occupy file space.
    """

    def __init__(self, cursor: ByteCursor, sections: Sequence[SectionHeader]) -> None:
        self._cursor = cursor
        self._sections = sections
        self._tables: dict[int, StringTable] = {}

    def table(self, section_index: int, *, explicit: bool = False) -> StringTable:
        """Return the :class:`StringTable` for a section.

        Raises:
            InvalidStringTableReferenceError: The section does not exist,
                has no file data, is not STRTAB (unless *explicit*), or
                extends past the buffer.
        """
        if not 0 <= section_index < len(self._sections):
            raise InvalidStringTableReferenceError(
                section_index, f"no such section ({len(self._sections)} present)"
            )
        section = self._sections[section_index]
        if section.type == SHT_NOBITS:
            raise InvalidStringTableReferenceError(section_index, "section has no file data (NOBITS)")
        if not explicit and section.type != SHT_STRTAB:
            raise InvalidStringTableReferenceError(
                section_index, f"type is {section.type_name}, expected STRTAB"
            )

        cached = self._tables.get(section_index)
        if cached is not None:
            return cached
        try:
            table = StringTable(self._cursor, section.offset, section.size, section_index)
        except OutOfBoundsError as exc:
            raise InvalidStringTableReferenceError(section_index, str(exc)) from exc
        self._tables[section_index] = table
        return table

    def resolve(self, section_index: int, byte_offset: int, *, explicit: bool = False) -> str:
        return self.table(section_index, explicit=explicit).get(byte_offset)
