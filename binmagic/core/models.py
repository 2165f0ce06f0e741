"""
binmagic Data Models
=====================

Pydantic-based, immutable models for a decoded ELF file.  Every record
is a frozen value object: the decoder builds them once and the report
layer only reads them.

Cross-references between records (``sh_link``, ``sh_info``,
``st_shndx``) are kept as plain indices and resolved on demand through
the accessors on :class:`ParsedElf`.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - System V Application Binary Interface, Edition 4.1.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from binmagic.parsers import constants as c


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ElfClass(int, enum.Enum):
    """File class from ``e_ident[EI_CLASS]``."""
    ELF32 = 1
    ELF64 = 2

    @property
    def bits(self) -> int:
        return 32 * self.value


class Endianness(str, enum.Enum):
    """Data encoding from ``e_ident[EI_DATA]``.

    The value doubles as the ``byteorder`` argument of
    :meth:`int.from_bytes`.
    """
    LITTLE = "little"
    BIG = "big"

    @property
    def struct_prefix(self) -> str:
        """Byte-order prefix for :mod:`struct` format strings."""
        return "<" if self is Endianness.LITTLE else ">"


class AnomalyKind(str, enum.Enum):
    """Soft, non-fatal irregularities recorded on the model."""
    IDENT_VERSION = "ident_version"
    HEADER_VERSION = "header_version"
    SEGMENT_FILESZ_EXCEEDS_MEMSZ = "segment_filesz_exceeds_memsz"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Anomaly(_Frozen):
    """A warning-level observation that does not stop decoding.

    Attributes:
        kind: Anomaly category.
        message: Human-readable explanation.
        index: Table index the anomaly refers to, if any.
    """
    kind: AnomalyKind
    message: str
    index: Optional[int] = None


# ---------------------------------------------------------------------------
# Identity and header
# ---------------------------------------------------------------------------

class ElfIdentity(_Frozen):
    """Decoded ``e_ident`` prefix.

    Attributes:
        elf_class: 32- or 64-bit layout.
        endianness: Byte order of every multi-byte field.
        version: ``e_ident[EI_VERSION]`` (1 for conforming files).
        osabi: ``e_ident[EI_OSABI]``.
        abi_version: ``e_ident[EI_ABIVERSION]``.
        ident_hex: The 16 identification bytes as space-separated hex.
    """
    elf_class: ElfClass
    endianness: Endianness
    version: int
    osabi: int = 0
    abi_version: int = 0
    ident_hex: str = ""

    @property
    def osabi_name(self) -> str:
        return c.osabi_name(self.osabi)


class ElfHeader(_Frozen):
    """Class-independent ELF file header.

    Values are exactly what the file stores; 32-bit fields are widened
    to Python ints, never truncated.  Extended-numbering escape values
    (``e_shnum == 0``, ``e_shstrndx == SHN_XINDEX``,
    ``e_phnum == PN_XNUM``) are kept as-is here and resolved by the
    table decoders.
    """
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int

    @property
    def type_name(self) -> str:
        return c.type_name(self.e_type)

    @property
    def machine_name(self) -> str:
        return c.machine_name(self.e_machine)

    @property
    def version_name(self) -> str:
        return c.version_name(self.e_version)


# ---------------------------------------------------------------------------
# Sections and segments
# ---------------------------------------------------------------------------

class SectionHeader(_Frozen):
    """One entry of the section header table.

    Attributes:
        index: Position in the table (the ELF section index).
        name: Name resolved from the section-name string table.
        name_offset: Raw ``sh_name``.
        type: ``sh_type``.
        flags: ``sh_flags``.
        addr: Virtual address when loaded.
        offset: File offset of the section contents.
        size: Size in bytes.
        link: ``sh_link`` (a section index for most types).
        info: ``sh_info``.
        align: ``sh_addralign``.
        entsize: Size of each fixed-size entry, or 0.
    """
    index: int
    name: str = ""
    name_offset: int = 0
    type: int = c.SHT_NULL
    flags: int = 0
    addr: int = 0
    offset: int = 0
    size: int = 0
    link: int = 0
    info: int = 0
    align: int = 0
    entsize: int = 0

    @property
    def type_name(self) -> str:
        return c.section_type_name(self.type)

    @property
    def flags_str(self) -> str:
        return c.section_flags_str(self.flags)

    @property
    def occupies_file(self) -> bool:
        """Whether ``[offset, offset + size)`` lies in the file."""
        return self.type not in (c.SHT_NULL, c.SHT_NOBITS)

    @property
    def has_table(self) -> bool:
        return self.entsize > 0


class ProgramHeader(_Frozen):
    """One entry of the program header (segment) table."""
    index: int
    type: int = c.PT_NULL
    flags: int = 0
    offset: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    @property
    def type_name(self) -> str:
        return c.segment_type_name(self.type)

    @property
    def flags_str(self) -> str:
        return c.segment_flags_str(self.flags)


# ---------------------------------------------------------------------------
# Symbols and dynamic entries
# ---------------------------------------------------------------------------

class Symbol(_Frozen):
    """A symbol table entry with its name already resolved.

    Attributes:
        index: Position within its own symbol table.
        table_index: Section index of the SYMTAB/DYNSYM it came from.
        name: Name resolved through the table's ``sh_link`` string table.
        name_offset: Raw ``st_name``.
        value: ``st_value`` (usually an address).
        size: ``st_size``.
        info: ``st_info`` (binding in the high nibble, type in the low).
        other: ``st_other`` (visibility in the low two bits).
        shndx: ``st_shndx``.
    """
    index: int
    table_index: int
    name: str = ""
    name_offset: int = 0
    value: int = 0
    size: int = 0
    info: int = 0
    other: int = 0
    shndx: int = c.SHN_UNDEF

    @property
    def bind(self) -> int:
        return self.info >> 4

    @property
    def sym_type(self) -> int:
        return self.info & 0xF

    @property
    def visibility(self) -> int:
        return self.other & 0x3

    @property
    def bind_name(self) -> str:
        return c.symbol_bind_name(self.bind)

    @property
    def type_name(self) -> str:
        return c.symbol_type_name(self.sym_type)

    @property
    def visibility_name(self) -> str:
        return c.symbol_visibility_name(self.visibility)


class DynamicEntry(_Frozen):
    """A ``.dynamic`` entry; ``text`` is set for string-valued tags."""
    index: int
    tag: int
    value: int
    text: Optional[str] = None

    @property
    def tag_name(self) -> str:
        return c.dynamic_tag_name(self.tag)


# ---------------------------------------------------------------------------
# File metadata
# ---------------------------------------------------------------------------

class FileInfo(_Frozen):
    """Metadata about the inspected file, filled in by the engine."""
    path: str = ""
    size: int = 0
    md5: str = ""
    sha256: str = ""


# ---------------------------------------------------------------------------
# Aggregate model
# ---------------------------------------------------------------------------

class ParsedElf(_Frozen):
    """The complete decoded model of one ELF file.

    Constructed once by :func:`binmagic.parsers.elf_parser.parse_elf`
    and never mutated afterwards.
    """
    identity: ElfIdentity
    header: ElfHeader
    sections: tuple[SectionHeader, ...] = ()
    program_headers: tuple[ProgramHeader, ...] = ()
    symbols: tuple[Symbol, ...] = ()
    dynamic: tuple[DynamicEntry, ...] = ()
    interpreter: Optional[str] = None
    warnings: tuple[Anomaly, ...] = ()

    # -- sections ------------------------------------------------------ #

    def section(self, index: int) -> SectionHeader:
        """Return the section at ELF index *index* (raises ``IndexError``)."""
        if not 0 <= index < len(self.sections):
            raise IndexError(f"section index {index} out of range")
        return self.sections[index]

    def section_by_name(self, name: str) -> Optional[SectionHeader]:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def linked_section(self, section: SectionHeader) -> Optional[SectionHeader]:
        """Resolve ``section.link`` to a section, or ``None`` if unset/invalid."""
        if section.link == 0 or section.link >= len(self.sections):
            return None
        return self.sections[section.link]

    # -- symbols ------------------------------------------------------- #

    def symbols_in(self, table_index: int) -> tuple[Symbol, ...]:
        return tuple(s for s in self.symbols if s.table_index == table_index)

    def _symbols_of_type(self, sh_type: int) -> tuple[Symbol, ...]:
        tables = {s.index for s in self.sections if s.type == sh_type}
        return tuple(s for s in self.symbols if s.table_index in tables)

    @property
    def static_symbols(self) -> tuple[Symbol, ...]:
        """Symbols from ``SHT_SYMTAB`` sections (``.symtab``)."""
        return self._symbols_of_type(c.SHT_SYMTAB)

    @property
    def dynamic_symbols(self) -> tuple[Symbol, ...]:
        """Symbols from ``SHT_DYNSYM`` sections (``.dynsym``)."""
        return self._symbols_of_type(c.SHT_DYNSYM)

    def symbol_section_name(self, symbol: Symbol) -> str:
        if symbol.shndx == c.SHN_UNDEF:
            return "UND"
        if symbol.shndx == c.SHN_ABS:
            return "ABS"
        if symbol.shndx == c.SHN_COMMON:
            return "COM"
        if symbol.shndx < len(self.sections):
            return self.sections[symbol.shndx].name or str(symbol.shndx)
        return str(symbol.shndx)

    # -- dynamic section ----------------------------------------------- #

    def _dynamic_text(self, tag: int) -> list[str]:
        return [e.text for e in self.dynamic if e.tag == tag and e.text is not None]

    @property
    def needed_libraries(self) -> list[str]:
        """``DT_NEEDED`` library names in file order."""
        return self._dynamic_text(c.DT_NEEDED)

    @property
    def soname(self) -> Optional[str]:
        values = self._dynamic_text(c.DT_SONAME)
        return values[0] if values else None

    @property
    def rpath(self) -> Optional[str]:
        values = self._dynamic_text(c.DT_RPATH)
        return values[0] if values else None

    @property
    def runpath(self) -> Optional[str]:
        values = self._dynamic_text(c.DT_RUNPATH)
        return values[0] if values else None


class InspectionReport(BaseModel):
    """Serializable bundle of file metadata and the decoded model."""
    file: FileInfo = Field(default_factory=FileInfo)
    elf: Optional[ParsedElf] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
