"""
ELF Constants
==============

Numeric constants and display-name tables for the Executable and
Linkable Format, shared by the decoders and the report layer.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1 (generic ABI).
    - Linux man page: elf(5).
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
EI_NIDENT: int = 16

EI_CLASS: int = 4
EI_DATA: int = 5
EI_VERSION: int = 6
EI_OSABI: int = 7
EI_ABIVERSION: int = 8

ELFCLASSNONE: int = 0
ELFCLASS32: int = 1
ELFCLASS64: int = 2

ELFDATANONE: int = 0
ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

EV_NONE: int = 0
EV_CURRENT: int = 1

_EV_NAMES: dict[int, str] = {
    EV_NONE: "EV_NONE",
    EV_CURRENT: "EV_CURRENT",
}

_OSABI_NAMES: dict[int, str] = {
    0: "UNIX - System V",
    1: "HP-UX",
    2: "NetBSD",
    3: "UNIX - GNU",
    6: "Solaris",
    7: "AIX",
    8: "IRIX",
    9: "FreeBSD",
    10: "TRU64",
    11: "Novell Modesto",
    12: "OpenBSD",
    13: "OpenVMS",
    14: "HP NonStop Kernel",
    15: "AROS",
    16: "FenixOS",
    17: "Nuxi CloudABI",
    97: "ARM",
    255: "Standalone App",
}

# ---------------------------------------------------------------------------
# File type
# ---------------------------------------------------------------------------

ET_NONE: int = 0
ET_REL: int = 1   # Relocatable
ET_EXEC: int = 2  # Executable
ET_DYN: int = 3   # Shared object / PIE
ET_CORE: int = 4  # Core dump

_ET_NAMES: dict[int, str] = {
    ET_NONE: "NONE (No file type)",
    ET_REL: "REL (Relocatable file)",
    ET_EXEC: "EXEC (Executable file)",
    ET_DYN: "DYN (Shared object file)",
    ET_CORE: "CORE (Core file)",
}

# ---------------------------------------------------------------------------
# Machine architectures
# ---------------------------------------------------------------------------

EM_NONE: int = 0
EM_SPARC: int = 2
EM_386: int = 3
EM_68K: int = 4
EM_MIPS: int = 8
EM_PARISC: int = 15
EM_PPC: int = 20
EM_PPC64: int = 21
EM_S390: int = 22
EM_ARM: int = 40
EM_SH: int = 42
EM_SPARCV9: int = 43
EM_IA_64: int = 50
EM_X86_64: int = 62
EM_AVR: int = 83
EM_XTENSA: int = 94
EM_AARCH64: int = 183
EM_RISCV: int = 243
EM_BPF: int = 247
EM_LOONGARCH: int = 258

_EM_NAMES: dict[int, str] = {
    EM_NONE: "No machine",
    EM_SPARC: "SPARC",
    EM_386: "Intel 80386",
    EM_68K: "Motorola 68000",
    EM_MIPS: "MIPS I Architecture",
    EM_PARISC: "HPPA",
    EM_PPC: "PowerPC",
    EM_PPC64: "PowerPC64",
    EM_S390: "IBM S/390",
    EM_ARM: "ARM",
    EM_SH: "Renesas / SuperH SH",
    EM_SPARCV9: "SPARC v9 64-bit",
    EM_IA_64: "Intel IA-64",
    EM_X86_64: "Advanced Micro Devices X86-64",
    EM_AVR: "Atmel AVR 8-bit",
    EM_XTENSA: "Tensilica Xtensa",
    EM_AARCH64: "AArch64",
    EM_RISCV: "RISC-V",
    EM_BPF: "Linux BPF",
    EM_LOONGARCH: "LoongArch",
}

# ---------------------------------------------------------------------------
# Special section indices
# ---------------------------------------------------------------------------

SHN_UNDEF: int = 0
SHN_LORESERVE: int = 0xFF00
SHN_ABS: int = 0xFFF1
SHN_COMMON: int = 0xFFF2
SHN_XINDEX: int = 0xFFFF

# e_phnum escape value; the real count lives in section 0's sh_info
PN_XNUM: int = 0xFFFF

# ---------------------------------------------------------------------------
# Section header types
# ---------------------------------------------------------------------------

SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_RELA: int = 4
SHT_HASH: int = 5
SHT_DYNAMIC: int = 6
SHT_NOTE: int = 7
SHT_NOBITS: int = 8
SHT_REL: int = 9
SHT_SHLIB: int = 10
SHT_DYNSYM: int = 11
SHT_INIT_ARRAY: int = 14
SHT_FINI_ARRAY: int = 15
SHT_PREINIT_ARRAY: int = 16
SHT_GROUP: int = 17
SHT_SYMTAB_SHNDX: int = 18
SHT_GNU_ATTRIBUTES: int = 0x6FFFFFF5
SHT_GNU_HASH: int = 0x6FFFFFF6
SHT_GNU_LIBLIST: int = 0x6FFFFFF7
SHT_GNU_VERDEF: int = 0x6FFFFFFD
SHT_GNU_VERNEED: int = 0x6FFFFFFE
SHT_GNU_VERSYM: int = 0x6FFFFFFF

_SHT_NAMES: dict[int, str] = {
    SHT_NULL: "NULL",
    SHT_PROGBITS: "PROGBITS",
    SHT_SYMTAB: "SYMTAB",
    SHT_STRTAB: "STRTAB",
    SHT_RELA: "RELA",
    SHT_HASH: "HASH",
    SHT_DYNAMIC: "DYNAMIC",
    SHT_NOTE: "NOTE",
    SHT_NOBITS: "NOBITS",
    SHT_REL: "REL",
    SHT_SHLIB: "SHLIB",
    SHT_DYNSYM: "DYNSYM",
    SHT_INIT_ARRAY: "INIT_ARRAY",
    SHT_FINI_ARRAY: "FINI_ARRAY",
    SHT_PREINIT_ARRAY: "PREINIT_ARRAY",
    SHT_GROUP: "GROUP",
    SHT_SYMTAB_SHNDX: "SYMTAB_SHNDX",
    SHT_GNU_ATTRIBUTES: "GNU_ATTRIBUTES",
    SHT_GNU_HASH: "GNU_HASH",
    SHT_GNU_LIBLIST: "GNU_LIBLIST",
    SHT_GNU_VERDEF: "VERDEF",
    SHT_GNU_VERNEED: "VERNEED",
    SHT_GNU_VERSYM: "VERSYM",
}

# Section header flags, paired with the letter readelf prints for each
SHF_WRITE: int = 0x1
SHF_ALLOC: int = 0x2
SHF_EXECINSTR: int = 0x4
SHF_MERGE: int = 0x10
SHF_STRINGS: int = 0x20
SHF_INFO_LINK: int = 0x40
SHF_LINK_ORDER: int = 0x80
SHF_GROUP: int = 0x200
SHF_TLS: int = 0x400

_SHF_LETTERS: tuple[tuple[int, str], ...] = (
    (SHF_WRITE, "W"),
    (SHF_ALLOC, "A"),
    (SHF_EXECINSTR, "X"),
    (SHF_MERGE, "M"),
    (SHF_STRINGS, "S"),
    (SHF_INFO_LINK, "I"),
    (SHF_LINK_ORDER, "L"),
    (SHF_GROUP, "G"),
    (SHF_TLS, "T"),
)

# ---------------------------------------------------------------------------
# Program header types and flags
# ---------------------------------------------------------------------------

PT_NULL: int = 0
PT_LOAD: int = 1
PT_DYNAMIC: int = 2
PT_INTERP: int = 3
PT_NOTE: int = 4
PT_SHLIB: int = 5
PT_PHDR: int = 6
PT_TLS: int = 7
PT_GNU_EH_FRAME: int = 0x6474E550
PT_GNU_STACK: int = 0x6474E551
PT_GNU_RELRO: int = 0x6474E552
PT_GNU_PROPERTY: int = 0x6474E553

_PT_NAMES: dict[int, str] = {
    PT_NULL: "NULL",
    PT_LOAD: "LOAD",
    PT_DYNAMIC: "DYNAMIC",
    PT_INTERP: "INTERP",
    PT_NOTE: "NOTE",
    PT_SHLIB: "SHLIB",
    PT_PHDR: "PHDR",
    PT_TLS: "TLS",
    PT_GNU_EH_FRAME: "GNU_EH_FRAME",
    PT_GNU_STACK: "GNU_STACK",
    PT_GNU_RELRO: "GNU_RELRO",
    PT_GNU_PROPERTY: "GNU_PROPERTY",
}

PF_X: int = 0x1  # Execute
PF_W: int = 0x2  # Write
PF_R: int = 0x4  # Read

# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

STB_LOCAL: int = 0
STB_GLOBAL: int = 1
STB_WEAK: int = 2
STB_GNU_UNIQUE: int = 10

_STB_NAMES: dict[int, str] = {
    STB_LOCAL: "LOCAL",
    STB_GLOBAL: "GLOBAL",
    STB_WEAK: "WEAK",
    STB_GNU_UNIQUE: "UNIQUE",
}

STT_NOTYPE: int = 0
STT_OBJECT: int = 1
STT_FUNC: int = 2
STT_SECTION: int = 3
STT_FILE: int = 4
STT_COMMON: int = 5
STT_TLS: int = 6
STT_GNU_IFUNC: int = 10

_STT_NAMES: dict[int, str] = {
    STT_NOTYPE: "NOTYPE",
    STT_OBJECT: "OBJECT",
    STT_FUNC: "FUNC",
    STT_SECTION: "SECTION",
    STT_FILE: "FILE",
    STT_COMMON: "COMMON",
    STT_TLS: "TLS",
    STT_GNU_IFUNC: "IFUNC",
}

STV_DEFAULT: int = 0
STV_INTERNAL: int = 1
STV_HIDDEN: int = 2
STV_PROTECTED: int = 3

_STV_NAMES: dict[int, str] = {
    STV_DEFAULT: "DEFAULT",
    STV_INTERNAL: "INTERNAL",
    STV_HIDDEN: "HIDDEN",
    STV_PROTECTED: "PROTECTED",
}

# ---------------------------------------------------------------------------
# Dynamic tags
# ---------------------------------------------------------------------------

DT_NULL: int = 0
DT_NEEDED: int = 1
DT_PLTRELSZ: int = 2
DT_PLTGOT: int = 3
DT_HASH: int = 4
DT_STRTAB: int = 5
DT_SYMTAB: int = 6
DT_RELA: int = 7
DT_RELASZ: int = 8
DT_RELAENT: int = 9
DT_STRSZ: int = 10
DT_SYMENT: int = 11
DT_INIT: int = 12
DT_FINI: int = 13
DT_SONAME: int = 14
DT_RPATH: int = 15
DT_SYMBOLIC: int = 16
DT_REL: int = 17
DT_RELSZ: int = 18
DT_RELENT: int = 19
DT_PLTREL: int = 20
DT_DEBUG: int = 21
DT_TEXTREL: int = 22
DT_JMPREL: int = 23
DT_BIND_NOW: int = 24
DT_INIT_ARRAY: int = 25
DT_FINI_ARRAY: int = 26
DT_INIT_ARRAYSZ: int = 27
DT_FINI_ARRAYSZ: int = 28
DT_RUNPATH: int = 29
DT_FLAGS: int = 30
DT_GNU_HASH: int = 0x6FFFFEF5
DT_VERSYM: int = 0x6FFFFFF0
DT_RELACOUNT: int = 0x6FFFFFF9
DT_FLAGS_1: int = 0x6FFFFFFB
DT_VERNEED: int = 0x6FFFFFFE
DT_VERNEEDNUM: int = 0x6FFFFFFF

_DT_NAMES: dict[int, str] = {
    DT_NULL: "NULL",
    DT_NEEDED: "NEEDED",
    DT_PLTRELSZ: "PLTRELSZ",
    DT_PLTGOT: "PLTGOT",
    DT_HASH: "HASH",
    DT_STRTAB: "STRTAB",
    DT_SYMTAB: "SYMTAB",
    DT_RELA: "RELA",
    DT_RELASZ: "RELASZ",
    DT_RELAENT: "RELAENT",
    DT_STRSZ: "STRSZ",
    DT_SYMENT: "SYMENT",
    DT_INIT: "INIT",
    DT_FINI: "FINI",
    DT_SONAME: "SONAME",
    DT_RPATH: "RPATH",
    DT_SYMBOLIC: "SYMBOLIC",
    DT_REL: "REL",
    DT_RELSZ: "RELSZ",
    DT_RELENT: "RELENT",
    DT_PLTREL: "PLTREL",
    DT_DEBUG: "DEBUG",
    DT_TEXTREL: "TEXTREL",
    DT_JMPREL: "JMPREL",
    DT_BIND_NOW: "BIND_NOW",
    DT_INIT_ARRAY: "INIT_ARRAY",
    DT_FINI_ARRAY: "FINI_ARRAY",
    DT_INIT_ARRAYSZ: "INIT_ARRAYSZ",
    DT_FINI_ARRAYSZ: "FINI_ARRAYSZ",
    DT_RUNPATH: "RUNPATH",
    DT_FLAGS: "FLAGS",
    DT_GNU_HASH: "GNU_HASH",
    DT_VERSYM: "VERSYM",
    DT_RELACOUNT: "RELACOUNT",
    DT_FLAGS_1: "FLAGS_1",
    DT_VERNEED: "VERNEED",
    DT_VERNEEDNUM: "VERNEEDNUM",
}

# Tags whose d_val is an offset into the dynamic string table
DT_STRING_TAGS: frozenset[int] = frozenset({DT_NEEDED, DT_SONAME, DT_RPATH, DT_RUNPATH})


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------

def type_name(e_type: int) -> str:
    return _ET_NAMES.get(e_type, f"<unknown>: {e_type:#x}")


def machine_name(e_machine: int) -> str:
    return _EM_NAMES.get(e_machine, f"<unknown>: {e_machine:#x}")


def osabi_name(osabi: int) -> str:
    return _OSABI_NAMES.get(osabi, f"<unknown: {osabi:#x}>")


def version_name(version: int) -> str:
    return f"{version} ({_EV_NAMES.get(version, 'unknown')})"


def section_type_name(sh_type: int) -> str:
    return _SHT_NAMES.get(sh_type, f"{sh_type:#x}")


def segment_type_name(p_type: int) -> str:
    return _PT_NAMES.get(p_type, f"{p_type:#x}")


def symbol_bind_name(bind: int) -> str:
    return _STB_NAMES.get(bind, str(bind))


def symbol_type_name(sym_type: int) -> str:
    return _STT_NAMES.get(sym_type, str(sym_type))


def symbol_visibility_name(visibility: int) -> str:
    return _STV_NAMES[visibility & 0x3]


def dynamic_tag_name(tag: int) -> str:
    return _DT_NAMES.get(tag, f"{tag:#x}")


def section_flags_str(flags: int) -> str:
    """Convert ``sh_flags`` to readelf-style letters, e.g. ``"AX"``."""
    letters = "".join(letter for bit, letter in _SHF_LETTERS if flags & bit)
    return letters or "-"


def segment_flags_str(flags: int) -> str:
    """Convert ``p_flags`` to a fixed-width ``"RWX"`` string."""
    return "".join(
        letter if flags & bit else "-"
        for bit, letter in ((PF_R, "R"), (PF_W, "W"), (PF_X, "X"))
    )
