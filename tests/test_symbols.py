"""Tests for the symbol table decoder."""

from __future__ import annotations

import pytest

from binmagic.core.errors import (
    InvalidStringTableReferenceError,
    MalformedSectionHeaderError,
    UnresolvedSymbolNameError,
)
from binmagic.parsers.constants import (
    SHN_ABS,
    SHN_UNDEF,
    SHT_PROGBITS,
    SHT_SYMTAB,
    STB_GLOBAL,
    STB_LOCAL,
    STB_WEAK,
    STT_FILE,
    STT_FUNC,
    STT_OBJECT,
    STV_HIDDEN,
)
from binmagic.parsers.elf_parser import parse_elf
from tests.elf_builder import SYMENTSIZE, ElfBuilder, Sym, pack_symbol, string_table


def _info(bind: int, sym_type: int) -> int:
    return (bind << 4) | sym_type


def _builder(bits: int = 64, endian: str = "little") -> tuple[ElfBuilder, int]:
    builder = ElfBuilder(bits, endian)
    text = builder.add_section(".text", SHT_PROGBITS, b"\x90" * 32)
    builder.add_symbol_table([
        Sym("crt1.c", info=_info(STB_LOCAL, STT_FILE), shndx=SHN_ABS),
        Sym("main", value=0x401000, size=32, info=_info(STB_GLOBAL, STT_FUNC), shndx=text),
        Sym("helper", value=0x401010, size=8, info=_info(STB_WEAK, STT_FUNC), other=STV_HIDDEN, shndx=text),
        Sym("printf", info=_info(STB_GLOBAL, STT_FUNC)),
    ])
    return builder, text


@pytest.mark.parametrize(("bits", "endian"), [(32, "little"), (32, "big"), (64, "little"), (64, "big")])
def test_symbols_are_named_and_decoded(bits, endian):
    builder, text = _builder(bits, endian)
    elf = parse_elf(builder.build())

    symtab = elf.section_by_name(".symtab")
    symbols = elf.symbols_in(symtab.index)
    assert [s.name for s in symbols] == ["", "crt1.c", "main", "helper", "printf"]
    assert [s.index for s in symbols] == [0, 1, 2, 3, 4]

    main = symbols[2]
    assert main.value == 0x401000
    assert main.size == 32
    assert main.shndx == text
    assert (main.bind_name, main.type_name, main.visibility_name) == ("GLOBAL", "FUNC", "DEFAULT")
    assert main.table_index == symtab.index


def test_symbol_attributes():
    builder, _ = _builder()
    elf = parse_elf(builder.build())
    by_name = {s.name: s for s in elf.static_symbols}

    assert by_name["helper"].bind_name == "WEAK"
    assert by_name["helper"].visibility_name == "HIDDEN"
    assert by_name["crt1.c"].type_name == "FILE"
    assert elf.symbol_section_name(by_name["crt1.c"]) == "ABS"
    assert elf.symbol_section_name(by_name["printf"]) == "UND"
    assert elf.symbol_section_name(by_name["main"]) == ".text"


def test_static_and_dynamic_symbols_are_split():
    builder, _ = _builder()
    builder.add_symbol_table(
        [Sym("puts", info=_info(STB_GLOBAL, STT_FUNC)), Sym("environ", info=_info(STB_GLOBAL, STT_OBJECT))],
        dynamic=True,
    )
    elf = parse_elf(builder.build())
    assert [s.name for s in elf.dynamic_symbols] == ["", "puts", "environ"]
    assert "puts" not in {s.name for s in elf.static_symbols}
    assert len(elf.symbols) == len(elf.static_symbols) + len(elf.dynamic_symbols)


def test_no_symbol_tables():
    builder = ElfBuilder()
    builder.add_section(".text", SHT_PROGBITS, b"\x90")
    elf = parse_elf(builder.build())
    assert elf.symbols == ()
    assert elf.static_symbols == ()


@pytest.mark.parametrize("past_end", [0, 1])
def test_name_at_or_past_table_end(past_end):
    builder = ElfBuilder()
    strtab_bytes, _ = string_table(["main"])
    strtab, _ = builder.add_string_table(".strtab", ["main"])
    name_offset = len(strtab_bytes) + past_end
    data = pack_symbol(64, "little") + pack_symbol(64, "little", name_offset=name_offset)
    symtab = builder.add_section(".symtab", SHT_SYMTAB, data, link=strtab, entsize=SYMENTSIZE[64])

    with pytest.raises(UnresolvedSymbolNameError) as exc_info:
        parse_elf(builder.build())
    err = exc_info.value
    assert (err.index, err.table_index, err.name_offset) == (1, symtab, name_offset)


def test_wrong_entsize():
    builder, _ = _builder()
    symtab = builder.add_symbol_table([Sym("x")], entsize=16)
    with pytest.raises(MalformedSectionHeaderError) as exc_info:
        parse_elf(builder.build())
    assert exc_info.value.index == symtab


def test_size_not_multiple_of_entsize():
    builder = ElfBuilder()
    strtab, _ = builder.add_string_table(".strtab", ["a"])
    symtab = builder.add_section(
        ".symtab", SHT_SYMTAB, pack_symbol(64, "little") + b"\x00" * 5,
        link=strtab, entsize=SYMENTSIZE[64],
    )
    with pytest.raises(MalformedSectionHeaderError) as exc_info:
        parse_elf(builder.build())
    assert exc_info.value.index == symtab


def test_link_must_be_a_string_table():
    builder = ElfBuilder()
    text = builder.add_section(".text", SHT_PROGBITS, b"\x00" * 8)
    builder.add_section(
        ".symtab", SHT_SYMTAB, pack_symbol(64, "little"),
        link=text, entsize=SYMENTSIZE[64],
    )
    with pytest.raises(InvalidStringTableReferenceError) as exc_info:
        parse_elf(builder.build())
    assert exc_info.value.section_index == text


def test_undefined_symbol_defaults():
    builder, _ = _builder()
    null = parse_elf(builder.build()).static_symbols[0]
    assert null.name == ""
    assert null.shndx == SHN_UNDEF
    assert null.bind == STB_LOCAL
