"""
Leading-Byte Format Guesser
============================

When a buffer fails the ELF magic check, the error is more useful if it
says what the file *is*.  This module matches the leading bytes against a
small table of executable, object and archive signatures.

References:
    - Gary Kessler's File Signatures Table.
      https://www.garykessler.net/library/file_sigs.html
    - ``file(1)`` command magic database. https://github.com/file/file
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class _Signature:
    magic: bytes
    offset: int
    description: str


# Ordered by specificity (longer / rarer matches first)
_SIGNATURES: tuple[_Signature, ...] = (
    _Signature(b"!<arch>\n", 0, "an ar archive (static library)"),
    _Signature(b"\xfe\xed\xfa\xce", 0, "a Mach-O 32-bit binary"),
    _Signature(b"\xfe\xed\xfa\xcf", 0, "a Mach-O 64-bit binary"),
    _Signature(b"\xce\xfa\xed\xfe", 0, "a Mach-O 32-bit binary (reversed)"),
    _Signature(b"\xcf\xfa\xed\xfe", 0, "a Mach-O 64-bit binary (reversed)"),
    _Signature(b"\xca\xfe\xba\xbe", 0, "a Mach-O fat binary or Java class"),
    _Signature(b"dex\n", 0, "an Android DEX file"),
    _Signature(b"\x00asm", 0, "a WebAssembly binary"),
    _Signature(b"BC\xc0\xde", 0, "LLVM bitcode"),
    _Signature(b"PK\x03\x04", 0, "a ZIP archive"),
    _Signature(b"\x1f\x8b", 0, "GZIP compressed data"),
    _Signature(b"#!", 0, "a script"),
    _Signature(b"MZ", 0, "a PE/MS-DOS executable"),
)


def guess_format(data: bytes) -> Optional[str]:
    """Describe *data* from its leading bytes, or ``None`` if unknown."""
    for sig in _SIGNATURES:
        end = sig.offset + len(sig.magic)
        if len(data) >= end and data[sig.offset:end] == sig.magic:
            return sig.description
    return None
