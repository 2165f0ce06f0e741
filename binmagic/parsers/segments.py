"""
Program Header Decoder
=======================

Walks ``e_phoff`` / ``e_phnum`` / ``e_phentsize`` and produces the segment
descriptors in table order.  Structurally the same walk as the section
table, over the segment layout.
"""

from __future__ import annotations

from typing import Optional, Sequence

from binmagic.core.errors import MalformedProgramHeaderError
from binmagic.core.models import (
    Anomaly,
    AnomalyKind,
    ElfHeader,
    ElfIdentity,
    ProgramHeader,
    SectionHeader,
)
from binmagic.parsers.constants import PN_XNUM, PT_INTERP, PT_LOAD
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.layout import ClassLayout


def segment_count(header: ElfHeader, sections: Sequence[SectionHeader]) -> int:
    """Real program header count, honouring ``PN_XNUM`` extended numbering."""
    if header.e_phnum == PN_XNUM and sections:
        return sections[0].info
    return header.e_phnum


def decode_program_headers(
    cursor: ByteCursor,
    header: ElfHeader,
    identity: ElfIdentity,
    layout: ClassLayout,
    count: int,
) -> tuple[list[ProgramHeader], list[Anomaly]]:
    """Decode *count* program headers.

    Raises:
        MalformedProgramHeaderError: Bad ``e_phentsize``/``e_phoff`` (no
            index) or an entry whose file range falls outside the file.
        OutOfBoundsError: The table itself extends past the buffer.
    """
    if count == 0:
        return [], []

    record = layout.segment
    if header.e_phentsize != record.size:
        raise MalformedProgramHeaderError(
            None,
            f"e_phentsize is {header.e_phentsize}, expected {record.size} "
            f"for ELF{layout.bits}",
        )
    if header.e_phoff == 0:
        raise MalformedProgramHeaderError(None, f"e_phnum is {count} but e_phoff is 0")

    cursor.check(header.e_phoff, count * record.size)

    segments: list[ProgramHeader] = []
    anomalies: list[Anomaly] = []
    for index in range(count):
        fields = cursor.read_record(
            record, identity.endianness, offset=header.e_phoff + index * record.size
        )
        segment = ProgramHeader(index=index, **fields)
        if segment.offset + segment.filesz > len(cursor):
            raise MalformedProgramHeaderError(
                index,
                f"file range [{segment.offset:#x}, {segment.offset + segment.filesz:#x}) "
                f"extends past end of file ({len(cursor)} bytes)",
            )
        if segment.type == PT_LOAD and segment.filesz > segment.memsz:
            anomalies.append(Anomaly(
                kind=AnomalyKind.SEGMENT_FILESZ_EXCEEDS_MEMSZ,
                message=(
                    f"LOAD segment [{index}] p_filesz {segment.filesz:#x} "
                    f"exceeds p_memsz {segment.memsz:#x}"
                ),
                index=index,
            ))
        segments.append(segment)
    return segments, anomalies


def read_interpreter(cursor: ByteCursor, segments: Sequence[ProgramHeader]) -> Optional[str]:
    """Return the ``PT_INTERP`` path (e.g. ``/lib64/ld-linux-x86-64.so.2``)."""
    for segment in segments:
        if segment.type == PT_INTERP:
            raw = bytes(cursor.slice(segment.offset, segment.filesz))
            return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")
    return None
