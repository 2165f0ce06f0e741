"""
ELF Header Decoder
===================

Decodes the fixed-size file header that follows ``e_ident``.  The only
class-specific input is the :class:`~binmagic.parsers.layout.ClassLayout`
chosen from the identity; the read path is the same for both classes.
"""

from __future__ import annotations

from binmagic.core.errors import MalformedHeaderError
from binmagic.core.models import Anomaly, AnomalyKind, ElfHeader, ElfIdentity
from binmagic.parsers.constants import EI_NIDENT, EV_CURRENT
from binmagic.parsers.cursor import ByteCursor
from binmagic.parsers.layout import ClassLayout


def decode_header(
    cursor: ByteCursor,
    identity: ElfIdentity,
    layout: ClassLayout,
) -> tuple[ElfHeader, list[Anomaly]]:
    """Decode the ELF header.

    Raises:
        OutOfBoundsError: The buffer is shorter than the class's header.
        MalformedHeaderError: ``e_ehsize`` does not match the class
            (52 bytes for ELF32, 64 bytes for ELF64).
    """
    fields = cursor.read_record(layout.header, identity.endianness, offset=EI_NIDENT)
    header = ElfHeader(**fields)

    if header.e_ehsize != layout.header_size:
        raise MalformedHeaderError(
            f"e_ehsize is {header.e_ehsize}, expected {layout.header_size} "
            f"for ELF{layout.bits}"
        )

    anomalies: list[Anomaly] = []
    if header.e_version != EV_CURRENT:
        anomalies.append(Anomaly(
            kind=AnomalyKind.HEADER_VERSION,
            message=f"e_version is {header.e_version}, expected {EV_CURRENT}",
        ))
    return header, anomalies
