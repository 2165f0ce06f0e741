"""
binmagic Output
================

Output rendering modules for inspection results.

- ``console`` -- Rich-based terminal views
- ``report``  -- JSON report generation
"""

from binmagic.output.console import VIEWS, ElfConsoleOutput, format_size
from binmagic.output.report import ElfReportGenerator

__all__ = [
    "VIEWS",
    "ElfConsoleOutput",
    "ElfReportGenerator",
    "format_size",
]
