"""
binmagic Console Output
========================

Rich-powered terminal views of a decoded ELF file, in the spirit of
``readelf``: a file header panel, section and segment tables, static and
dynamic symbol tables, and the dynamic-linking summary.

Every view reads the immutable :class:`~binmagic.core.models.ParsedElf`;
nothing here decodes bytes.  Strings that come from the file (section
and symbol names, library paths) are escaped before they reach Rich so
they are never interpreted as markup.

References:
    - Rich library: https://github.com/Textualize/rich
    - GNU Binutils ``readelf`` output format.
"""

from __future__ import annotations

from typing import Sequence

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import MagicConsole

from binmagic.core.models import (
    ElfIdentity,
    Endianness,
    InspectionReport,
    ParsedElf,
    Symbol,
)

VIEWS: tuple[str, ...] = (
    "all",
    "header",
    "sections",
    "segments",
    "symbols",
    "dyn-syms",
    "dyn-libs",
)

_KIB = 1024


def format_size(size: int) -> str:
    """Render a byte count, adding a KiB figure from 1 KiB upwards.

    >>> format_size(16)
    '16 bytes'
    >>> format_size(4096)
    '4,096 bytes (4.0 KiB)'
    """
    if size < _KIB:
        return f"{size:,} bytes"
    return f"{size:,} bytes ({size / _KIB:.1f} KiB)"


def _data_encoding(identity: ElfIdentity) -> str:
    if identity.endianness is Endianness.LITTLE:
        return "2's complement, little endian"
    return "2's complement, big endian"


def _new_table(title: str = "") -> Table:
    return Table(
        title=title,
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        show_lines=False,
        padding=(0, 1),
    )


class ElfConsoleOutput:
    """Rich terminal display for inspection results.

    Usage::

        output = ElfConsoleOutput()
        output.display(report, view="sections")
    """

    def __init__(
        self,
        console: MagicConsole | None = None,
        *,
        max_symbols: int = 200,
        show_unnamed_symbols: bool = False,
    ) -> None:
        """Initialise the renderer.

        Args:
            console: Optional MagicConsole instance.  A new one is created
                     if not provided.
            max_symbols: Rows shown per symbol table; ``0`` shows all.
            show_unnamed_symbols: List symbols with an empty name.
        """
        self._console: MagicConsole = console or MagicConsole()
        self._max_symbols = max_symbols
        self._show_unnamed = show_unnamed_symbols

    # ------------------------------------------------------------------ #
    #  Dispatch
    # ------------------------------------------------------------------ #

    def display(self, report: InspectionReport, view: str = "all") -> None:
        """Display one inspection report.

        Args:
            report: Result from :class:`~binmagic.core.engine.InspectEngine`.
            view: One of :data:`VIEWS`.

        Raises:
            ValueError: *view* is not a known view.
        """
        if view not in VIEWS:
            raise ValueError(f"unknown view {view!r} (expected one of {', '.join(VIEWS)})")

        self._console.section(f"File: {escape(report.file.path)}")
        if report.elf is None:
            self._console.error(escape(report.error or "no ELF data"))
            self._console.blank()
            return

        elf = report.elf
        if view == "all":
            self.display_file_info(report)
            self.display_header(elf)
            self.display_sections(elf)
            self.display_segments(elf)
            self.display_symbols(elf, dynamic=False)
            self.display_symbols(elf, dynamic=True)
            self.display_dynamic(elf)
            self.display_libraries(elf)
        elif view == "header":
            self.display_header(elf)
        elif view == "sections":
            self.display_sections(elf)
        elif view == "segments":
            self.display_segments(elf)
        elif view == "symbols":
            self.display_symbols(elf, dynamic=False)
            self.display_symbols(elf, dynamic=True)
        elif view == "dyn-syms":
            self.display_symbols(elf, dynamic=True)
        elif view == "dyn-libs":
            self.display_libraries(elf)

        self.display_warnings(elf)

    # ------------------------------------------------------------------ #
    #  File and header
    # ------------------------------------------------------------------ #

    def display_file_info(self, report: InspectionReport) -> None:
        info = report.file
        lines: list[str] = [
            f"[bold]Path:[/bold]     {escape(info.path)}",
            f"[bold]Size:[/bold]     {format_size(info.size)}",
        ]
        if info.md5:
            lines.append(f"[bold]MD5:[/bold]      {info.md5}")
        if info.sha256:
            lines.append(f"[bold]SHA-256:[/bold]  {info.sha256}")

        self._console.rich.print(Panel(
            "\n".join(lines),
            title="[bold bright_cyan]File Information[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        ))
        self._console.blank()

    def display_header(self, elf: ParsedElf) -> None:
        """Display the ELF file header."""
        ident = elf.identity
        hdr = elf.header
        rows: list[tuple[str, str]] = [
            ("Magic", ident.ident_hex),
            ("Class", f"ELF{ident.elf_class.bits}"),
            ("Data", _data_encoding(ident)),
            ("Version", str(ident.version)),
            ("OS/ABI", ident.osabi_name),
            ("ABI Version", str(ident.abi_version)),
            ("Type", hdr.type_name),
            ("Machine", hdr.machine_name),
            ("Version", hdr.version_name),
            ("Entry point address", f"0x{hdr.e_entry:x}"),
            ("Start of program headers", f"{hdr.e_phoff} (bytes into file)"),
            ("Start of section headers", f"{hdr.e_shoff} (bytes into file)"),
            ("Flags", f"0x{hdr.e_flags:x}"),
            ("Size of this header", f"{hdr.e_ehsize} (bytes)"),
            ("Size of program headers", f"{hdr.e_phentsize} (bytes)"),
            ("Number of program headers", str(len(elf.program_headers))),
            ("Size of section headers", f"{hdr.e_shentsize} (bytes)"),
            ("Number of section headers", str(len(elf.sections))),
            ("Section header string table index", str(hdr.e_shstrndx)),
        ]
        width = max(len(label) for label, _ in rows) + 2
        body = "\n".join(f"[bold]{label + ':':<{width}}[/bold]{value}" for label, value in rows)

        self._console.rich.print(Panel(
            body,
            title="[bold bright_cyan]ELF Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        ))
        self._console.blank()

    # ------------------------------------------------------------------ #
    #  Sections and segments
    # ------------------------------------------------------------------ #

    def display_sections(self, elf: ParsedElf) -> None:
        """Display the section header table."""
        self._console.section("Section Headers")
        if not elf.sections:
            self._console.info("There are no sections in this file.")
            self._console.blank()
            return

        self._console.info(
            f"There are {len(elf.sections)} section headers, "
            f"starting at offset 0x{elf.header.e_shoff:x}"
        )

        tbl = _new_table()
        tbl.add_column("[Nr]", style="dim", justify="right")
        tbl.add_column("Name", style="bold")
        tbl.add_column("Type")
        tbl.add_column("Flags")
        tbl.add_column("Address", justify="right")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("EntSize", justify="right")
        tbl.add_column("Table")
        tbl.add_column("Link", justify="right")
        tbl.add_column("Info", justify="right")
        tbl.add_column("Align", justify="right")

        for sec in elf.sections:
            tbl.add_row(
                str(sec.index),
                escape(sec.name),
                sec.type_name,
                sec.flags_str,
                f"0x{sec.addr:x}",
                f"0x{sec.offset:x}",
                format_size(sec.size),
                str(sec.entsize),
                "table" if sec.has_table else "",
                str(sec.link),
                str(sec.info),
                str(sec.align),
            )

        self._console.rich.print(tbl)
        self._console.print(
            "[dim]Key to Flags: W (write), A (alloc), X (execute), M (merge), "
            "S (strings), I (info), L (link order), G (group), T (TLS)[/dim]"
        )
        self._console.blank()

    def display_segments(self, elf: ParsedElf) -> None:
        """Display the program header table."""
        self._console.section("Program Headers")
        if not elf.program_headers:
            self._console.info("There are no program headers in this file.")
            self._console.blank()
            return

        tbl = _new_table()
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Type", style="bold")
        tbl.add_column("Flags")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("VirtAddr", justify="right")
        tbl.add_column("PhysAddr", justify="right")
        tbl.add_column("FileSiz", justify="right")
        tbl.add_column("MemSiz", justify="right")
        tbl.add_column("Align", justify="right")

        for seg in elf.program_headers:
            tbl.add_row(
                str(seg.index),
                seg.type_name,
                seg.flags_str,
                f"0x{seg.offset:x}",
                f"0x{seg.vaddr:x}",
                f"0x{seg.paddr:x}",
                format_size(seg.filesz),
                format_size(seg.memsz),
                f"0x{seg.align:x}",
            )

        self._console.rich.print(tbl)
        if elf.interpreter is not None:
            self._console.info(f"Requesting program interpreter: {escape(elf.interpreter)}")
        self._console.blank()

    # ------------------------------------------------------------------ #
    #  Symbols
    # ------------------------------------------------------------------ #

    def display_symbols(self, elf: ParsedElf, *, dynamic: bool) -> None:
        """Display the ``.dynsym`` (*dynamic*) or ``.symtab`` symbols."""
        label = "Dynamic Symbols" if dynamic else "Symbols"
        self._console.section(label)

        symbols = elf.dynamic_symbols if dynamic else elf.static_symbols
        if not symbols:
            self._console.info(f"No {label.lower()} in this file.")
            self._console.blank()
            return

        shown = self._visible_symbols(symbols)
        tbl = _new_table()
        tbl.add_column("Num", style="dim", justify="right")
        tbl.add_column("Value", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("Type")
        tbl.add_column("Bind")
        tbl.add_column("Vis")
        tbl.add_column("Ndx", justify="right")
        tbl.add_column("Name", style="bold")

        for sym in shown:
            tbl.add_row(
                str(sym.index),
                f"0x{sym.value:x}",
                str(sym.size),
                sym.type_name,
                sym.bind_name,
                sym.visibility_name,
                escape(elf.symbol_section_name(sym)),
                escape(sym.name),
            )

        self._console.rich.print(tbl)
        if len(shown) < len(symbols):
            self._console.info(
                f"Showing {len(shown)} of {len(symbols)} symbols. "
                f"Use --json to export all symbols."
            )
        self._console.blank()

    def _visible_symbols(self, symbols: Sequence[Symbol]) -> list[Symbol]:
        visible = [s for s in symbols if self._show_unnamed or s.name]
        if self._max_symbols > 0:
            return visible[:self._max_symbols]
        return visible

    # ------------------------------------------------------------------ #
    #  Dynamic linking
    # ------------------------------------------------------------------ #

    def display_dynamic(self, elf: ParsedElf) -> None:
        """Display every ``.dynamic`` entry."""
        self._console.section("Dynamic Section")
        if not elf.dynamic:
            self._console.info("There is no dynamic section in this file.")
            self._console.blank()
            return

        tbl = _new_table()
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Tag", justify="right")
        tbl.add_column("Type", style="bold")
        tbl.add_column("Name/Value")

        for entry in elf.dynamic:
            value = escape(entry.text) if entry.text is not None else f"0x{entry.value:x}"
            tbl.add_row(
                str(entry.index),
                f"0x{entry.tag & 0xFFFFFFFFFFFFFFFF:x}",
                entry.tag_name,
                value,
            )

        self._console.rich.print(tbl)
        self._console.blank()

    def display_libraries(self, elf: ParsedElf) -> None:
        """Display needed libraries, SONAME, RPATH, RUNPATH and interpreter."""
        self._console.section("Dynamic Libraries")
        libraries = elf.needed_libraries
        if not libraries and elf.soname is None and elf.interpreter is None:
            self._console.info("This file does not use dynamic linking.")
            self._console.blank()
            return

        rows: list[tuple[str, str]] = [("NEEDED", escape(lib)) for lib in libraries]
        for label, value in (
            ("SONAME", elf.soname),
            ("RPATH", elf.rpath),
            ("RUNPATH", elf.runpath),
            ("INTERP", elf.interpreter),
        ):
            if value is not None:
                rows.append((label, escape(value)))

        self._console.table(
            "",
            ["Kind", "Value"],
            rows,
            styles=["bold", ""],
        )
        self._console.blank()

    # ------------------------------------------------------------------ #
    #  Anomalies
    # ------------------------------------------------------------------ #

    def display_warnings(self, elf: ParsedElf) -> None:
        for anomaly in elf.warnings:
            self._console.warning(escape(anomaly.message))
