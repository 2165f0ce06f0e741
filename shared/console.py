"""
binmagic Console Interface
===========================

Rich-powered console abstraction giving every binmagic view the same
palette: section rules, severity-coloured one-line messages and plain
tables.

The class wraps :class:`rich.console.Console`; renderers that need
panels or custom tables reach the underlying console through
:attr:`MagicConsole.rich`.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------
_MAGIC_THEME = Theme(
    {
        "magic.section": "bold bright_magenta",
        "magic.success": "bold green",
        "magic.warning": "bold yellow",
        "magic.error": "bold red",
        "magic.info": "bold bright_blue",
        "magic.dim": "dim white",
        "magic.label": "bold bright_white",
    }
)


class MagicConsole:
    """Unified console interface for binmagic output.

    Usage::

        con = MagicConsole()
        con.section("Section Headers")
        con.success("Decoded 29 sections")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording so output can be exported as text.
        """
        self._console = Console(
            theme=_MAGIC_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Section header
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        """Print a horizontal rule carrying *title*."""
        self._console.rule(
            f"  {title}  ",
            style="magic.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[magic.success][✔] SUCCESS:[/magic.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[magic.warning][⚠] WARNING:[/magic.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[magic.error][✘] ERROR:[/magic.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[magic.info][ℹ] INFO:[/magic.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
        justify: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Iterable of row tuples; each element is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
            justify:  Optional per-column justification (``"left"``/``"right"``).
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            align = justify[idx] if justify and idx < len(justify) else "left"
            tbl.add_column(col_name, style=style, justify=align)  # type: ignore[arg-type]

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()

    def divider(self, style: str = "dim") -> None:
        """Print a thin horizontal rule."""
        self._console.rule(style=style)

    def export_text(self) -> str:
        """Return recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
