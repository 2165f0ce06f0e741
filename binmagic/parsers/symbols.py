"""
Symbol Table Decoder
=====================

Decodes ``SHT_SYMTAB`` (``.symtab``) and ``SHT_DYNSYM`` (``.dynsym``)
sections.  Entry layout comes from the class layout table, like every
other record.  Names are resolved eagerly through the string table named
by the section's ``sh_link``.

A symbol whose name does not resolve fails the whole table with
:class:`~binmagic.core.errors.UnresolvedSymbolNameError`; no placeholder
names are substituted.
"""

from __future__ import annotations

from typing import Sequence

from binmagic.core.errors import (
    MalformedSectionHeaderError,
    OutOfBoundsError,
    UnresolvedSymbolNameError,
    UnterminatedStringError,
)
from binmagic.core.models import ElfIdentity, SectionHeader, Symbol
from binmagic.parsers.constants import SHT_DYNSYM, SHT_SYMTAB
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.layout import ClassLayout
from binmagic.parsers.strtab import StringTableResolver

SYMBOL_TABLE_TYPES: frozenset[int] = frozenset({SHT_SYMTAB, SHT_DYNSYM})


def decode_symbol_table(
    cursor: ByteCursor,
    section: SectionHeader,
    resolver: StringTableResolver,
    identity: ElfIdentity,
    layout: ClassLayout,
) -> list[Symbol]:
    """Decode one symbol table section.

    Raises:
        MalformedSectionHeaderError: ``sh_entsize`` is not the class's symbol
            size, or ``sh_size`` is not a multiple of it.
        InvalidStringTableReferenceError: ``sh_link`` is not a STRTAB.
        UnresolvedSymbolNameError: A ``st_name`` does not resolve.
    """
    record = layout.symbol
    if section.entsize != record.size:
        raise MalformedSectionHeaderError(
            section.index,
            f"symbol table sh_entsize is {section.entsize}, expected {record.size}",
        )
    if section.size % record.size:
        raise MalformedSectionHeaderError(
            section.index,
            f"symbol table sh_size {section.size:#x} is not a multiple of {record.size}",
        )

    strtab = resolver.table(section.link)
    symbols: list[Symbol] = []
    for index in range(section.size // record.size):
        fields = cursor.read_record(
            record, identity.endianness, offset=section.offset + index * record.size
        )
        try:
            name = strtab.get(fields["name_offset"])
        except (OutOfBoundsError, UnterminatedStringError) as exc:
            raise UnresolvedSymbolNameError(index, section.index, fields["name_offset"]) from exc
        symbols.append(Symbol(index=index, table_index=section.index, name=name, **fields))
    return symbols


def decode_symbol_tables(
    cursor: ByteCursor,
    sections: Sequence[SectionHeader],
    resolver: StringTableResolver,
    identity: ElfIdentity,
    layout: ClassLayout,
) -> list[Symbol]:
    """Decode every symbol table in section order."""
    symbols: list[Symbol] = []
    for section in sections:
        if section.type in SYMBOL_TABLE_TYPES:
            symbols.extend(decode_symbol_table(cursor, section, resolver, identity, layout))
    return symbols
