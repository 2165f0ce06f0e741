"""Tests for the dynamic section decoder."""

from __future__ import annotations

import pytest

from binmagic.core.errors import (
    InvalidStringTableReferenceError,
    MalformedDynamicEntryError,
    MalformedSectionHeaderError,
)
from binmagic.parsers.constants import (
    DT_FLAGS,
    DT_NEEDED,
    DT_NULL,
    DT_RPATH,
    DT_RUNPATH,
    DT_SONAME,
    DT_STRSZ,
    SHT_DYNAMIC,
    SHT_PROGBITS,
)
from binmagic.parsers.elf_parser import parse_elf
from tests.elf_builder import DYNENTSIZE, ElfBuilder, pack_dynamic

ENTRIES = [
    (DT_NEEDED, "libm.so.6"),
    (DT_NEEDED, "libc.so.6"),
    (DT_SONAME, "libdemo.so.1"),
    (DT_RUNPATH, "$ORIGIN/../lib"),
    (DT_FLAGS, 0x8),
]


@pytest.mark.parametrize(("bits", "endian"), [(32, "little"), (32, "big"), (64, "little"), (64, "big")])
def test_dynamic_entries(bits, endian):
    builder = ElfBuilder(bits, endian)
    builder.add_dynamic(ENTRIES)
    elf = parse_elf(builder.build())

    assert [e.tag for e in elf.dynamic] == [DT_NEEDED, DT_NEEDED, DT_SONAME, DT_RUNPATH, DT_FLAGS, DT_NULL]
    assert elf.needed_libraries == ["libm.so.6", "libc.so.6"]
    assert elf.soname == "libdemo.so.1"
    assert elf.runpath == "$ORIGIN/../lib"
    assert elf.rpath is None
    assert elf.dynamic[4].text is None
    assert elf.dynamic[4].value == 0x8
    assert elf.dynamic[0].tag_name == "NEEDED"


def test_no_dynamic_section():
    builder = ElfBuilder()
    builder.add_section(".text", SHT_PROGBITS, b"\x90")
    elf = parse_elf(builder.build())
    assert elf.dynamic == ()
    assert elf.needed_libraries == []
    assert elf.soname is None


def test_entries_after_terminator_are_ignored():
    builder = ElfBuilder()
    dynstr, offsets = builder.add_string_table(".dynstr", ["libc.so.6"])
    data = (
        pack_dynamic(64, "little", DT_NEEDED, offsets["libc.so.6"])
        + pack_dynamic(64, "little", DT_NULL, 0)
        + pack_dynamic(64, "little", DT_NEEDED, 0x7FFF)
    )
    builder.add_section(".dynamic", SHT_DYNAMIC, data, link=dynstr, entsize=DYNENTSIZE[64])
    elf = parse_elf(builder.build())
    assert len(elf.dynamic) == 2
    assert elf.needed_libraries == ["libc.so.6"]


def test_rpath():
    builder = ElfBuilder()
    builder.add_dynamic([(DT_RPATH, "/opt/lib")])
    assert parse_elf(builder.build()).rpath == "/opt/lib"


def test_unresolvable_string_value():
    builder = ElfBuilder()
    dynstr, _ = builder.add_string_table(".dynstr", ["libc.so.6"])
    data = (
        pack_dynamic(64, "little", DT_STRSZ, 11)
        + pack_dynamic(64, "little", DT_NEEDED, 0x1000)
        + pack_dynamic(64, "little", DT_NULL, 0)
    )
    builder.add_section(".dynamic", SHT_DYNAMIC, data, link=dynstr, entsize=DYNENTSIZE[64])
    with pytest.raises(MalformedDynamicEntryError) as exc_info:
        parse_elf(builder.build())
    assert exc_info.value.index == 1


def test_wrong_entsize():
    builder = ElfBuilder()
    dynamic = builder.add_dynamic([(DT_NEEDED, "libc.so.6")], entsize=24)
    with pytest.raises(MalformedSectionHeaderError) as exc_info:
        parse_elf(builder.build())
    assert exc_info.value.index == dynamic


def test_link_must_be_a_string_table():
    builder = ElfBuilder()
    text = builder.add_section(".text", SHT_PROGBITS, b"\x00" * 16)
    data = pack_dynamic(64, "little", DT_NEEDED, 1) + pack_dynamic(64, "little", DT_NULL, 0)
    builder.add_section(".dynamic", SHT_DYNAMIC, data, link=text, entsize=DYNENTSIZE[64])
    with pytest.raises(InvalidStringTableReferenceError):
        parse_elf(builder.build())
