"""End-to-end tests for :mod:`binmagic.parsers.elf_parser`."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from binmagic.core.errors import ElfError, NotElfError
from binmagic.parsers.constants import (
    DT_NEEDED,
    ET_DYN,
    PF_R,
    PF_X,
    PT_INTERP,
    PT_LOAD,
    SHT_PROGBITS,
    STB_GLOBAL,
    STT_FUNC,
)
from binmagic.parsers.elf_parser import ELFParser, parse_elf
from tests.elf_builder import ElfBuilder, Sym


def _dynamic_executable(bits: int = 64, endian: str = "little") -> bytes:
    builder = ElfBuilder(bits, endian, e_type=ET_DYN, entry=0x1040)
    interp = builder.add_section(".interp", SHT_PROGBITS, b"/lib/ld-musl.so.1\x00")
    text = builder.add_section(".text", SHT_PROGBITS, b"\xc3" * 16)
    builder.add_symbol_table([Sym("main", value=0x1040, size=16, info=(STB_GLOBAL << 4) | STT_FUNC, shndx=text)])
    builder.add_symbol_table([Sym("puts", info=(STB_GLOBAL << 4) | STT_FUNC)], dynamic=True)
    builder.add_dynamic([(DT_NEEDED, "libc.so")])
    builder.add_segment(PT_INTERP, PF_R, section=interp)
    builder.add_segment(PT_LOAD, PF_R | PF_X, section=text, vaddr=0x1040)
    return builder.build()


@pytest.mark.parametrize(("bits", "endian"), [(32, "little"), (32, "big"), (64, "little"), (64, "big")])
def test_full_image(bits, endian):
    elf = parse_elf(_dynamic_executable(bits, endian))
    assert elf.identity.elf_class.bits == bits
    assert elf.header.type_name == "DYN (Shared object file)"
    assert elf.interpreter == "/lib/ld-musl.so.1"
    assert [s.name for s in elf.static_symbols] == ["", "main"]
    assert [s.name for s in elf.dynamic_symbols] == ["", "puts"]
    assert elf.needed_libraries == ["libc.so"]
    assert [p.type_name for p in elf.program_headers] == ["INTERP", "LOAD"]
    assert elf.warnings == ()


def test_parse_is_cached():
    parser = ELFParser(_dynamic_executable())
    assert parser.parse() is parser.parse()


def test_bytearray_input():
    data = bytearray(_dynamic_executable())
    assert parse_elf(data) == parse_elf(bytes(data))


def test_model_is_immutable():
    elf = parse_elf(_dynamic_executable())
    with pytest.raises(ValidationError):
        elf.header.e_entry = 0
    with pytest.raises(ValidationError):
        elf.sections[1].name = "renamed"


def test_error_yields_no_model():
    parser = ELFParser(b"\x00" * 64)
    with pytest.raises(NotElfError):
        parser.parse()
    with pytest.raises(NotElfError):
        parser.parse()


def test_every_failure_is_an_elf_error():
    data = bytearray(_dynamic_executable())
    data[5] = 9
    with pytest.raises(ElfError) as exc_info:
        parse_elf(bytes(data))
    assert exc_info.value.kind == "UnsupportedEncoding"


def test_concurrent_decodes_are_independent():
    images = [_dynamic_executable(bits, endian) for bits in (32, 64) for endian in ("little", "big")] * 4
    expected = [parse_elf(image) for image in images]
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(parse_elf, images))
    assert results == expected


@pytest.mark.parametrize("cut", [1, 17, 63, 100, 200])
def test_truncated_images_fail_with_elf_errors(cut):
    data = _dynamic_executable()
    truncated = data[:len(data) - cut] if cut < len(data) else data[:1]
    with pytest.raises(ElfError):
        parse_elf(truncated)
