"""
binmagic -- ELF Structure Inspector
====================================

Reports the structural layout of ELF object files: class, byte order,
header fields, section table, program (segment) table, symbol tables
and the dynamic section.  Intended for binary triage, reverse
engineering and build-artifact inspection from the command line.

Modules:
    - binmagic.parsers: Bounds-checked ELF decoders
    - binmagic.core.models: Immutable pydantic model of a decoded file
    - binmagic.core.engine: File loading and multi-file orchestration
    - binmagic.output: Console and JSON report output
    - binmagic.cli: Click-based command-line interface

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

__version__ = "1.0.0"
__tool_name__ = "binmagic"
