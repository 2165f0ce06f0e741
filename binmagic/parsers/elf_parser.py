"""
ELF Binary Format Parser
==========================

Manual struct-based decoder for the Executable and Linkable Format (ELF),
the standard binary format for Unix-like operating systems including Linux,
FreeBSD, and Solaris.

All parsing is performed using :mod:`struct` without any external libraries
such as ``pyelftools``.  Both 32-bit (ELF32) and 64-bit (ELF64) variants in
either byte order share one decoding path; only the layout table differs.

The parser extracts:
    - ELF identity (magic, class, endianness, OS/ABI)
    - ELF header (type, machine, entry point, table geometry)
    - Section headers (name, type, flags, address, offset, size)
    - Program headers / segments (type, flags, offset, vaddr, sizes)
    - Symbol tables (.symtab and .dynsym)
    - Dynamic section (.dynamic) entries and the PT_INTERP path

Decoding is all-or-nothing: the first structural error propagates as an
:class:`~binmagic.core.errors.ElfError` and no partial model is built.
Soft anomalies are attached to the model as ``warnings``.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

from __future__ import annotations

from typing import Optional

from binmagic.core.models import Anomaly, ParsedElf
from binmagic.parsers.cursor import Buffer, ByteCursor
from binmagic.parsers.dynamic import decode_dynamic_section, find_dynamic_section
from binmagic.parsers.header import decode_header
from binmagic.parsers.identity import probe_identity
from binmagic.parsers.layout import layout_for
from binmagic.parsers.sections import (
    decode_section_table,
    resolve_section_names,
    section_name_index,
)
from binmagic.parsers.segments import decode_program_headers, read_interpreter, segment_count
from binmagic.parsers.strtab import StringTableResolver
from binmagic.parsers.symbols import decode_symbol_tables


class ELFParser:
    """Decode an in-memory ELF image into a :class:`ParsedElf`.

    The parser borrows *data*; it never reads files itself.  Instances
    hold no shared state, so separate buffers can be decoded on separate
    threads at the same time.

    Usage::

        parser = ELFParser(raw_bytes)
        elf = parser.parse()
        for section in elf.sections:
            print(section.name, hex(section.offset))
    """

    def __init__(self, data: Buffer) -> None:
        """Initialise the parser with raw binary data.

        Args:
            data: Complete ELF file contents.
        """
        self._data: Buffer = data
        self._result: Optional[ParsedElf] = None

    def parse(self) -> ParsedElf:
        """Decode the buffer (once; later calls return the same model).

        Raises:
            ElfError: The first structural problem found.
        """
        if self._result is None:
            self._result = self._decode()
        return self._result

    def _decode(self) -> ParsedElf:
        cursor = ByteCursor(self._data)
        warnings: list[Anomaly] = []

        identity, found = probe_identity(cursor)
        warnings.extend(found)
        layout = layout_for(identity.elf_class.bits)

        header, found = decode_header(cursor, identity, layout)
        warnings.extend(found)

        sections = decode_section_table(cursor, header, identity, layout)
        resolver = StringTableResolver(cursor, sections)
        sections = resolve_section_names(sections, resolver, section_name_index(header, sections))

        program_headers, found = decode_program_headers(
            cursor, header, identity, layout, segment_count(header, sections)
        )
        warnings.extend(found)

        symbols = decode_symbol_tables(cursor, sections, resolver, identity, layout)

        dynamic_section = find_dynamic_section(sections)
        dynamic = (
            decode_dynamic_section(cursor, dynamic_section, resolver, identity, layout)
            if dynamic_section is not None
            else []
        )

        return ParsedElf(
            identity=identity,
            header=header,
            sections=tuple(sections),
            program_headers=tuple(program_headers),
            symbols=tuple(symbols),
            dynamic=tuple(dynamic),
            interpreter=read_interpreter(cursor, program_headers),
            warnings=tuple(warnings),
        )


def parse_elf(data: Buffer) -> ParsedElf:
    """Module-level convenience wrapper around :meth:`ELFParser.parse`."""
    return ELFParser(data).parse()
