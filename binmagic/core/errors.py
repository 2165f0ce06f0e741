"""
binmagic Error Taxonomy
========================

Every malformed-input path in the decoder ends in one of the exceptions
below.  Nothing is skipped silently: the first structural error aborts
the decode and reaches the caller with enough context (offset, index,
expected vs. found) to diagnose the corruption.

Soft anomalies (version mismatches, ``p_filesz > p_memsz``) are *not*
exceptions; they are collected as :class:`~binmagic.core.models.Anomaly`
records on the parsed model.
"""

from __future__ import annotations

from typing import Optional


class ElfError(Exception):
    """Base class for every ELF decoding failure.

    Attributes:
        kind: Stable name of the failure kind (e.g. ``"NotElf"``).
    """

    kind: str = "ElfError"


class NotElfError(ElfError):
    """The buffer does not start with the ELF magic bytes."""

    kind = "NotElf"

    def __init__(self, found: bytes, detected: Optional[str] = None) -> None:
        self.found = found
        self.detected = detected
        message = f"not an ELF file (magic {found.hex(' ') or '<empty>'})"
        if detected:
            message += f"; looks like {detected}"
        super().__init__(message)


class UnsupportedClassError(ElfError):
    """``e_ident[EI_CLASS]`` is neither ELFCLASS32 nor ELFCLASS64."""

    kind = "UnsupportedClass"

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"unsupported ELF class {value} (expected 1 or 2)")


class UnsupportedEncodingError(ElfError):
    """``e_ident[EI_DATA]`` is neither ELFDATA2LSB nor ELFDATA2MSB."""

    kind = "UnsupportedEncoding"

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"unsupported data encoding {value} (expected 1 or 2)")


class MalformedHeaderError(ElfError):
    """The ELF header is inconsistent with the detected class."""

    kind = "MalformedHeader"


class OutOfBoundsError(ElfError):
    """A read would extend past the end of the buffer."""

    kind = "OutOfBounds"

    def __init__(self, offset: int, requested_len: int, buffer_len: int) -> None:
        self.offset = offset
        self.requested_len = requested_len
        self.buffer_len = buffer_len
        super().__init__(
            f"read of {requested_len} byte(s) at offset {offset:#x} "
            f"exceeds buffer of {buffer_len} byte(s)"
        )


class _IndexedError(MalformedHeaderError):
    """A table entry failed validation; ``index`` is ``None`` for table-wide faults."""

    _label = "entry"

    def __init__(self, index: Optional[int], reason: str) -> None:
        self.index = index
        self.reason = reason
        where = f"{self._label} [{index}]" if index is not None else f"{self._label} table"
        super().__init__(f"malformed {where}: {reason}")


class MalformedSectionHeaderError(_IndexedError):
    kind = "MalformedSectionHeader"
    _label = "section header"


class MalformedProgramHeaderError(_IndexedError):
    kind = "MalformedProgramHeader"
    _label = "program header"


class InvalidStringTableReferenceError(ElfError):
    """A section index used as a string table is not usable as one."""

    kind = "InvalidStringTableReference"

    def __init__(self, section_index: int, reason: str) -> None:
        self.section_index = section_index
        self.reason = reason
        super().__init__(
            f"section [{section_index}] is not a valid string table: {reason}"
        )


class UnterminatedStringError(ElfError):
    """String resolution reached the end of its table without a NUL."""

    kind = "UnterminatedString"

    def __init__(self, section_index: Optional[int], offset: int, table_size: int) -> None:
        self.section_index = section_index
        self.offset = offset
        self.table_size = table_size
        super().__init__(
            f"string at offset {offset:#x} of string table "
            f"[{section_index}] ({table_size} bytes) has no terminator"
        )


class UnresolvedSymbolNameError(ElfError):
    """A symbol's ``st_name`` does not resolve inside its string table."""

    kind = "UnresolvedSymbolName"

    def __init__(self, index: int, table_index: int, name_offset: int) -> None:
        self.index = index
        self.table_index = table_index
        self.name_offset = name_offset
        super().__init__(
            f"symbol [{index}] of section [{table_index}]: "
            f"st_name {name_offset:#x} does not resolve"
        )


class MalformedDynamicEntryError(ElfError):
    """A dynamic-section entry references a string that cannot be resolved."""

    kind = "MalformedDynamicEntry"

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"malformed dynamic entry [{index}]: {reason}")


class FileTooLargeError(ElfError):
    """The input file exceeds the configured size limit."""

    kind = "FileTooLarge"

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"file too large: {size:,} bytes (max: {limit:,} bytes)")
