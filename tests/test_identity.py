"""Tests for the e_ident probe."""

from __future__ import annotations

import pytest

from binmagic.core.errors import (
    NotElfError,
    OutOfBoundsError,
    UnsupportedClassError,
    UnsupportedEncodingError,
)
from binmagic.core.models import AnomalyKind, ElfClass, Endianness
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.elf_parser import parse_elf
from binmagic.parsers.identity import probe_identity
from tests.elf_builder import ident


@pytest.mark.parametrize(
    ("bits", "endian", "elf_class", "endianness"),
    [
        (32, "little", ElfClass.ELF32, Endianness.LITTLE),
        (32, "big", ElfClass.ELF32, Endianness.BIG),
        (64, "little", ElfClass.ELF64, Endianness.LITTLE),
        (64, "big", ElfClass.ELF64, Endianness.BIG),
    ],
)
def test_class_and_encoding(bits, endian, elf_class, endianness):
    identity, anomalies = probe_identity(ByteCursor(ident(bits, endian)))
    assert identity.elf_class is elf_class
    assert identity.elf_class.bits == bits
    assert identity.endianness is endianness
    assert identity.version == 1
    assert anomalies == []


def test_osabi_and_ident_hex():
    identity, _ = probe_identity(ByteCursor(ident(64, "little", osabi=3, abi_version=1)))
    assert identity.osabi == 3
    assert identity.osabi_name == "UNIX - GNU"
    assert identity.abi_version == 1
    assert identity.ident_hex.startswith("7f 45 4c 46 02 01 01 03 01")


def test_empty_buffer_is_not_elf():
    with pytest.raises(NotElfError) as exc_info:
        probe_identity(ByteCursor(b""))
    assert exc_info.value.found == b""


def test_wrong_magic_is_not_elf():
    with pytest.raises(NotElfError) as exc_info:
        probe_identity(ByteCursor(b"\x7fELG" + bytes(12)))
    assert exc_info.value.kind == "NotElf"


def test_not_elf_names_the_likely_format():
    with pytest.raises(NotElfError) as exc_info:
        probe_identity(ByteCursor(b"MZ\x90\x00" + bytes(60)))
    assert exc_info.value.detected == "a PE/MS-DOS executable"
    assert "PE/MS-DOS" in str(exc_info.value)


@pytest.mark.parametrize("length", range(16))
def test_short_buffers_fail_cleanly(length):
    with pytest.raises((NotElfError, OutOfBoundsError)):
        probe_identity(ByteCursor(ident()[:length]))


def test_magic_only_is_out_of_bounds():
    with pytest.raises(OutOfBoundsError):
        probe_identity(ByteCursor(b"\x7fELF\x02\x01"))


@pytest.mark.parametrize("value", [0, 3, 0xFF])
def test_invalid_class(value):
    data = bytearray(ident())
    data[4] = value
    with pytest.raises(UnsupportedClassError) as exc_info:
        probe_identity(ByteCursor(bytes(data)))
    assert exc_info.value.value == value


def test_corrupt_class_stops_whole_decode(simple_image):
    data = bytearray(simple_image)
    data[4] = 0
    with pytest.raises(UnsupportedClassError):
        parse_elf(bytes(data))


@pytest.mark.parametrize("value", [0, 3])
def test_invalid_encoding(value):
    data = bytearray(ident())
    data[5] = value
    with pytest.raises(UnsupportedEncodingError) as exc_info:
        probe_identity(ByteCursor(bytes(data)))
    assert exc_info.value.value == value


def test_class_is_checked_before_encoding():
    data = bytearray(ident())
    data[4] = 0
    data[5] = 0
    with pytest.raises(UnsupportedClassError):
        probe_identity(ByteCursor(bytes(data)))


def test_unexpected_version_is_a_warning():
    identity, anomalies = probe_identity(ByteCursor(ident(version=0)))
    assert identity.version == 0
    assert [a.kind for a in anomalies] == [AnomalyKind.IDENT_VERSION]
