"""Tests for the ELF header decoder."""

from __future__ import annotations

import pytest

from binmagic.core.errors import MalformedHeaderError, OutOfBoundsError
from binmagic.core.models import AnomalyKind
from binmagic.parsers.constants import EM_ARM, ET_DYN, SHT_PROGBITS
from binmagic.parsers.elf_parser import parse_elf
from tests.elf_builder import EHSIZE, ElfBuilder, ident, pack_header

COMBINATIONS = [(32, "little"), (32, "big"), (64, "little"), (64, "big")]


@pytest.mark.parametrize(("bits", "endian"), COMBINATIONS)
def test_header_fields_round_trip(bits, endian):
    builder = ElfBuilder(bits, endian, e_type=ET_DYN, machine=EM_ARM, entry=0x8000)
    builder.add_section(".text", SHT_PROGBITS, b"\x00" * 8)
    data = builder.build(e_flags=0x5000200)

    elf = parse_elf(data)
    repacked = pack_header(bits, endian, **elf.header.model_dump())
    assert repacked == data[:EHSIZE[bits]]


@pytest.mark.parametrize(("bits", "endian"), COMBINATIONS)
def test_header_only_image(bits, endian):
    elf = parse_elf(pack_header(bits, endian))
    assert elf.header.e_ehsize == EHSIZE[bits]
    assert elf.sections == ()
    assert elf.program_headers == ()
    assert elf.warnings == ()


def test_wide_fields_are_not_truncated():
    elf = parse_elf(pack_header(64, "big", e_entry=0xFFFFFFFF80001000))
    assert elf.header.e_entry == 0xFFFFFFFF80001000


def test_header_names():
    elf = parse_elf(pack_header(64, "little"))
    assert elf.header.type_name == "EXEC (Executable file)"
    assert elf.header.machine_name == "Advanced Micro Devices X86-64"
    assert elf.header.version_name == "1 (EV_CURRENT)"


@pytest.mark.parametrize(("bits", "wrong"), [(32, 64), (64, 52), (64, 0)])
def test_ehsize_must_match_class(bits, wrong):
    with pytest.raises(MalformedHeaderError) as exc_info:
        parse_elf(pack_header(bits, "little", e_ehsize=wrong))
    assert exc_info.value.kind == "MalformedHeader"


def test_truncated_header_is_out_of_bounds():
    data = pack_header(64, "little")[:40]
    with pytest.raises(OutOfBoundsError):
        parse_elf(data)


def test_elf32_header_in_elf64_sized_buffer_is_fine():
    data = pack_header(32, "little") + bytes(12)
    assert parse_elf(data).header.e_ehsize == 52


def test_unexpected_e_version_is_a_warning():
    elf = parse_elf(pack_header(64, "little", e_version=0))
    assert elf.header.e_version == 0
    assert [a.kind for a in elf.warnings] == [AnomalyKind.HEADER_VERSION]
    assert elf.header.version_name == "0 (EV_NONE)"


def test_both_version_warnings_are_kept():
    data = pack_header(64, "little", ident_bytes=ident(version=2), e_version=2)
    kinds = [a.kind for a in parse_elf(data).warnings]
    assert kinds == [AnomalyKind.IDENT_VERSION, AnomalyKind.HEADER_VERSION]
