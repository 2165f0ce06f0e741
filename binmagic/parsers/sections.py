"""
Section Table Decoder
======================

Walks ``e_shoff`` / ``e_shnum`` / ``e_shentsize`` and produces the section
headers in ELF index order, then attaches names from the section-name
string table.

Extended numbering (gABI "Sections" chapter): when a file has at least
``SHN_LORESERVE`` sections, ``e_shnum`` is 0 and the real count is stored
in ``sh_size`` of section 0; likewise ``e_shstrndx == SHN_XINDEX`` means
the real index is in section 0's ``sh_link``.

A bad entry aborts the whole table.  No partial section list is ever
returned.
"""

from __future__ import annotations

from binmagic.core.errors import (
    MalformedSectionHeaderError,
    OutOfBoundsError,
    UnterminatedStringError,
)
from binmagic.core.models import ElfHeader, ElfIdentity, SectionHeader
from binmagic.parsers.constants import SHN_UNDEF, SHN_XINDEX, SHT_NULL
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.layout import ClassLayout
from binmagic.parsers.strtab import StringTableResolver


def decode_section_table(
    cursor: ByteCursor,
    header: ElfHeader,
    identity: ElfIdentity,
    layout: ClassLayout,
) -> list[SectionHeader]:
    """Decode every section header (names are left empty).

    Raises:
        MalformedSectionHeaderError: Bad ``e_shentsize`` or table placement
            (no index), or an entry whose contents fall outside the file.
        OutOfBoundsError: The table itself extends past the buffer.
    """
    if header.e_shoff == 0:
        if header.e_shnum != 0:
            raise MalformedSectionHeaderError(
                None, f"e_shnum is {header.e_shnum} but e_shoff is 0"
            )
        return []

    record = layout.section
    if header.e_shentsize != record.size:
        raise MalformedSectionHeaderError(
            None,
            f"e_shentsize is {header.e_shentsize}, expected {record.size} "
            f"for ELF{layout.bits}",
        )

    count = header.e_shnum
    if count == 0:
        first = cursor.read_record(record, identity.endianness, offset=header.e_shoff)
        count = first["size"]
        if count == 0:
            return []

    # Whole table up front, so a huge count fails before any entry is built
    cursor.check(header.e_shoff, count * record.size)

    sections: list[SectionHeader] = []
    for index in range(count):
        fields = cursor.read_record(
            record, identity.endianness, offset=header.e_shoff + index * record.size
        )
        section = SectionHeader(index=index, **fields)
        if section.occupies_file and section.offset + section.size > len(cursor):
            raise MalformedSectionHeaderError(
                index,
                f"contents [{section.offset:#x}, {section.offset + section.size:#x}) "
                f"extend past end of file ({len(cursor)} bytes)",
            )
        sections.append(section)
    return sections


def section_name_index(header: ElfHeader, sections: list[SectionHeader]) -> int:
    """Return the real section-name string table index."""
    if header.e_shstrndx == SHN_XINDEX and sections:
        return sections[0].link
    return header.e_shstrndx


def resolve_section_names(
    sections: list[SectionHeader],
    resolver: StringTableResolver,
    shstrndx: int,
) -> list[SectionHeader]:
    """Return copies of *sections* with ``name`` filled in.

    ``SHN_UNDEF`` with a conventional NULL section 0 means the file has no
    section-name table; names stay empty.

    Raises:
        InvalidStringTableReferenceError: *shstrndx* is unusable.
        MalformedSectionHeaderError: An ``sh_name`` does not resolve.
    """
    if not sections:
        return sections
    if shstrndx == SHN_UNDEF and sections[0].type == SHT_NULL:
        return sections

    table = resolver.table(shstrndx, explicit=True)
    named: list[SectionHeader] = []
    for section in sections:
        try:
            name = table.get(section.name_offset)
        except (OutOfBoundsError, UnterminatedStringError) as exc:
            raise MalformedSectionHeaderError(
                section.index, f"sh_name {section.name_offset:#x}: {exc}"
            ) from exc
        named.append(section.model_copy(update={"name": name}))
    return named
