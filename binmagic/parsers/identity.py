"""
Identity Probe
===============

Reads the 16-byte ``e_ident`` prefix and decides the file class and byte
order before any width-specific parsing happens.

Checks run in a fixed order: magic, class, data encoding, version.  The
first three are fatal; a version byte other than ``EV_CURRENT`` is only
recorded as an anomaly because some toolchains emit non-conforming values.
"""

from __future__ import annotations

from binmagic.core.errors import NotElfError, UnsupportedClassError, UnsupportedEncodingError
from binmagic.core.models import Anomaly, AnomalyKind, ElfClass, ElfIdentity, Endianness
from binmagic.parsers.constants import (
    EI_ABIVERSION,
    EI_CLASS,
    EI_DATA,
    EI_NIDENT,
    EI_OSABI,
    EI_VERSION,
    ELF_MAGIC,
    ELFCLASS32,
    ELFCLASS64,
    ELFDATA2LSB,
    ELFDATA2MSB,
    EV_CURRENT,
)
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.magic import guess_format

_CLASSES: dict[int, ElfClass] = {
    ELFCLASS32: ElfClass.ELF32,
    ELFCLASS64: ElfClass.ELF64,
}

_ENCODINGS: dict[int, Endianness] = {
    ELFDATA2LSB: Endianness.LITTLE,
    ELFDATA2MSB: Endianness.BIG,
}


def probe_identity(cursor: ByteCursor) -> tuple[ElfIdentity, list[Anomaly]]:
    """Decode ``e_ident`` from the start of the buffer.

    Args:
        cursor: Cursor over the complete file buffer.

    Returns:
        The identity and any soft anomalies found.

    Raises:
        NotElfError: Magic mismatch (including buffers shorter than the magic).
        OutOfBoundsError: Valid magic but fewer than 16 bytes.
        UnsupportedClassError: ``EI_CLASS`` not 1 or 2.
        UnsupportedEncodingError: ``EI_DATA`` not 1 or 2.
    """
    head = bytes(cursor.slice(0, min(len(cursor), len(ELF_MAGIC))))
    if head != ELF_MAGIC:
        prefix = bytes(cursor.slice(0, min(len(cursor), EI_NIDENT)))
        raise NotElfError(head, guess_format(prefix))

    ident = bytes(cursor.slice(0, EI_NIDENT))

    elf_class = _CLASSES.get(ident[EI_CLASS])
    if elf_class is None:
        raise UnsupportedClassError(ident[EI_CLASS])

    endianness = _ENCODINGS.get(ident[EI_DATA])
    if endianness is None:
        raise UnsupportedEncodingError(ident[EI_DATA])

    anomalies: list[Anomaly] = []
    version = ident[EI_VERSION]
    if version != EV_CURRENT:
        anomalies.append(Anomaly(
            kind=AnomalyKind.IDENT_VERSION,
            message=f"e_ident[EI_VERSION] is {version}, expected {EV_CURRENT}",
        ))

    identity = ElfIdentity(
        elf_class=elf_class,
        endianness=endianness,
        version=version,
        osabi=ident[EI_OSABI],
        abi_version=ident[EI_ABIVERSION],
        ident_hex=ident.hex(" "),
    )
    return identity, anomalies
