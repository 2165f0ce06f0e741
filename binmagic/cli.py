"""
binmagic CLI -- ELF Inspector
==============================

Click-based command-line interface.  Decodes one or more ELF files and
prints readelf-style views of their headers, sections, segments, symbols
and dynamic-linking information.

Usage::

    # Everything
    binmagic /usr/bin/ls

    # Only the section table
    binmagic /usr/bin/ls --sections

    # Libraries a binary asks the dynamic linker for
    binmagic /usr/bin/ls --dyn-libs

    # Several files, JSON on stdout
    binmagic /usr/bin/ls /usr/lib/libc.so.6 --json

    # Save a JSON report
    binmagic /usr/bin/ls --output report.json

Exit status is 0 when every file decoded, 1 when any file failed, and 2
for usage errors.

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click

from shared.config import MagicConfig
from shared.console import MagicConsole
from shared.logger import MagicLogger

from binmagic import __version__
from binmagic.core.engine import InspectEngine
from binmagic.output.console import ElfConsoleOutput
from binmagic.output.report import ElfReportGenerator


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command("binmagic")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
)
@click.option("--all", "-a", "view", flag_value="all", default=True,
              help="Show every view (default).")
@click.option("--header", "-h", "view", flag_value="header",
              help="Show the ELF file header.")
@click.option("--sections", "-S", "view", flag_value="sections",
              help="Show the section headers.")
@click.option("--segments", "-l", "view", flag_value="segments",
              help="Show the program headers.")
@click.option("--symbols", "-s", "view", flag_value="symbols",
              help="Show static and dynamic symbol tables.")
@click.option("--dyn-syms", "view", flag_value="dyn-syms",
              help="Show the dynamic symbol table only.")
@click.option("--dyn-libs", "view", flag_value="dyn-libs",
              help="Show needed libraries, SONAME, RPATH/RUNPATH and interpreter.")
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output results as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Configuration file (TOML).  Default: binmagic.toml in the project root.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose/debug output.",
)
@click.version_option(__version__, prog_name="binmagic")
def binmagic_cli(
    paths: tuple[str, ...],
    view: str,
    json_output: bool,
    output_path: str | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """binmagic -- ELF Inspector.

    Decode ELF32/ELF64 files of either byte order and display their
    structure.  Nothing is executed, loaded or relocated.

    PATHS are one or more files to inspect.

    Examples:

    \b
        binmagic /usr/bin/ls
        binmagic /usr/bin/ls --sections
        binmagic a.out libfoo.so --json
    """
    console = MagicConsole()

    try:
        config = MagicConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Cannot load configuration: {exc}")
        sys.exit(1)

    settings = config.global_settings
    logger = MagicLogger(
        "engine",
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )

    engine = InspectEngine(config=config, logger=logger)
    try:
        reports = engine.inspect_all(paths)
    except KeyboardInterrupt:
        console.warning("Inspection interrupted by user.")
        sys.exit(130)

    failed = [r for r in reports if r.error is not None]
    report_gen = ElfReportGenerator()

    if json_output:
        click.echo(report_gen.to_json(reports))
    else:
        output_display = ElfConsoleOutput(
            console=console,
            max_symbols=config.inspect.max_symbols_displayed,
            show_unnamed_symbols=config.inspect.show_unnamed_symbols,
        )
        for report in reports:
            output_display.display(report, view=view)

    if output_path:
        try:
            report_path = report_gen.generate_json(reports, output_path)
        except OSError as exc:
            console.error(f"Cannot write report: {exc}")
            sys.exit(1)
        if not json_output:
            console.success(f"JSON report saved: {report_path}")

    if failed:
        if not json_output:
            console.error(f"{len(failed)} of {len(reports)} file(s) could not be decoded.")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``binmagic`` console script and ``python -m binmagic``."""
    binmagic_cli()


if __name__ == "__main__":
    main()
