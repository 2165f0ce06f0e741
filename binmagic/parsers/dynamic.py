"""
Dynamic Section Decoder
========================

Lists the entries of ``.dynamic`` (``SHT_DYNAMIC``) up to the first
``DT_NULL``.  String-valued tags (``DT_NEEDED``, ``DT_SONAME``,
``DT_RPATH``, ``DT_RUNPATH``) are resolved against the section's
``sh_link`` string table.  Nothing is loaded or linked; this only names
what the dynamic linker would be asked for.
"""

from __future__ import annotations

from typing import Optional, Sequence

from binmagic.core.errors import (
    MalformedDynamicEntryError,
    MalformedSectionHeaderError,
    OutOfBoundsError,
    UnterminatedStringError,
)
from binmagic.core.models import DynamicEntry, ElfIdentity, SectionHeader
from binmagic.parsers.constants import DT_NULL, DT_STRING_TAGS, SHT_DYNAMIC
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.layout import ClassLayout
from binmagic.parsers.strtab import StringTableResolver


def find_dynamic_section(sections: Sequence[SectionHeader]) -> Optional[SectionHeader]:
    for section in sections:
        if section.type == SHT_DYNAMIC:
            return section
    return None


def decode_dynamic_section(
    cursor: ByteCursor,
    section: SectionHeader,
    resolver: StringTableResolver,
    identity: ElfIdentity,
    layout: ClassLayout,
) -> list[DynamicEntry]:
    """Decode the dynamic section.

    Raises:
        MalformedSectionHeaderError: A non-zero ``sh_entsize`` that is not the
            class's entry size.
        InvalidStringTableReferenceError: A string tag is present but
            ``sh_link`` is not a STRTAB.
        MalformedDynamicEntryError: A string tag's value does not resolve.
    """
    record = layout.dynamic
    if section.entsize not in (0, record.size):
        raise MalformedSectionHeaderError(
            section.index,
            f"dynamic section sh_entsize is {section.entsize}, expected {record.size}",
        )

    entries: list[DynamicEntry] = []
    for index in range(section.size // record.size):
        fields = cursor.read_record(
            record, identity.endianness, offset=section.offset + index * record.size
        )
        text: Optional[str] = None
        if fields["tag"] in DT_STRING_TAGS:
            table = resolver.table(section.link)
            try:
                text = table.get(fields["value"])
            except (OutOfBoundsError, UnterminatedStringError) as exc:
                raise MalformedDynamicEntryError(index, str(exc)) from exc
        entries.append(DynamicEntry(index=index, text=text, **fields))
        if fields["tag"] == DT_NULL:
            break
    return entries
