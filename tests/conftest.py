"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from shared.logger import MagicLogger

from binmagic.parsers.constants import PF_R, PF_X, PT_LOAD, SHF_ALLOC, SHF_EXECINSTR, SHT_PROGBITS
from tests.elf_builder import ElfBuilder


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write *data* under ``tmp_path`` and return the path."""
    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _write


@pytest.fixture
def quiet_logger() -> MagicLogger:
    return MagicLogger("tests", log_level="DEBUG", console_output=False)


@pytest.fixture
def simple_image() -> bytes:
    """64-bit LE executable with ``.text`` covered by one LOAD segment."""
    builder = ElfBuilder(entry=0x401000)
    text = builder.add_section(
        ".text", SHT_PROGBITS, b"\x90" * 16,
        flags=SHF_ALLOC | SHF_EXECINSTR, addr=0x401000, align=16,
    )
    builder.add_segment(PT_LOAD, PF_R | PF_X, section=text, vaddr=0x401000, paddr=0x401000, align=0x1000)
    return builder.build()
