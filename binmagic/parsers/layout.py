"""
Per-Class Record Layouts
=========================

ELF32 and ELF64 store the same records with different field widths (and,
for program headers and symbols, a different field order).  Instead of
one decoder per class, each record kind is described here as a table of
``(name, struct code)`` fields, and every decoder runs one shared
algorithm over whichever table :func:`layout_for` selects.

Field names match the attributes of the corresponding model in
:mod:`binmagic.core.models`, so a decoded record maps straight onto it.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import NamedTuple

from binmagic.parsers.constants import EI_NIDENT


class Field(NamedTuple):
    name: str
    format: str


@dataclass(frozen=True, slots=True)
class RecordLayout:
    """One on-disk record: its fields in file order.

    ``format`` has no byte-order prefix; the reader adds it.  Sizes are
    computed with standard sizes and no padding.
    """
    kind: str
    fields: tuple[Field, ...]
    format: str = field(init=False)
    names: tuple[str, ...] = field(init=False)
    size: int = field(init=False)

    def __post_init__(self) -> None:
        fmt = "".join(f.format for f in self.fields)
        object.__setattr__(self, "format", fmt)
        object.__setattr__(self, "names", tuple(f.name for f in self.fields))
        object.__setattr__(self, "size", struct.calcsize("<" + fmt))


@dataclass(frozen=True, slots=True)
class ClassLayout:
    """All record layouts for one ELF class."""
    bits: int
    header: RecordLayout
    section: RecordLayout
    segment: RecordLayout
    symbol: RecordLayout
    dynamic: RecordLayout

    @property
    def header_size(self) -> int:
        """Full ``e_ehsize`` including the identification bytes."""
        return EI_NIDENT + self.header.size


def _header(addr: str) -> RecordLayout:
    return RecordLayout("header", (
        Field("e_type", "H"),
        Field("e_machine", "H"),
        Field("e_version", "I"),
        Field("e_entry", addr),
        Field("e_phoff", addr),
        Field("e_shoff", addr),
        Field("e_flags", "I"),
        Field("e_ehsize", "H"),
        Field("e_phentsize", "H"),
        Field("e_phnum", "H"),
        Field("e_shentsize", "H"),
        Field("e_shnum", "H"),
        Field("e_shstrndx", "H"),
    ))


def _section(word: str) -> RecordLayout:
    # sh_flags, sh_addr, sh_offset, sh_size, sh_addralign, sh_entsize are Xword/Addr/Off
    return RecordLayout("section", (
        Field("name_offset", "I"),
        Field("type", "I"),
        Field("flags", word),
        Field("addr", word),
        Field("offset", word),
        Field("size", word),
        Field("link", "I"),
        Field("info", "I"),
        Field("align", word),
        Field("entsize", word),
    ))


ELF32_LAYOUT = ClassLayout(
    bits=32,
    header=_header("I"),
    section=_section("I"),
    segment=RecordLayout("segment", (
        Field("type", "I"),
        Field("offset", "I"),
        Field("vaddr", "I"),
        Field("paddr", "I"),
        Field("filesz", "I"),
        Field("memsz", "I"),
        Field("flags", "I"),
        Field("align", "I"),
    )),
    symbol=RecordLayout("symbol", (
        Field("name_offset", "I"),
        Field("value", "I"),
        Field("size", "I"),
        Field("info", "B"),
        Field("other", "B"),
        Field("shndx", "H"),
    )),
    dynamic=RecordLayout("dynamic", (
        Field("tag", "i"),
        Field("value", "I"),
    )),
)

ELF64_LAYOUT = ClassLayout(
    bits=64,
    header=_header("Q"),
    section=_section("Q"),
    segment=RecordLayout("segment", (
        Field("type", "I"),
        Field("flags", "I"),
        Field("offset", "Q"),
        Field("vaddr", "Q"),
        Field("paddr", "Q"),
        Field("filesz", "Q"),
        Field("memsz", "Q"),
        Field("align", "Q"),
    )),
    symbol=RecordLayout("symbol", (
        Field("name_offset", "I"),
        Field("info", "B"),
        Field("other", "B"),
        Field("shndx", "H"),
        Field("value", "Q"),
        Field("size", "Q"),
    )),
    dynamic=RecordLayout("dynamic", (
        Field("tag", "q"),
        Field("value", "Q"),
    )),
)


def layout_for(bits: int) -> ClassLayout:
    """Select the layout table for a 32- or 64-bit file."""
    return ELF64_LAYOUT if bits == 64 else ELF32_LAYOUT
