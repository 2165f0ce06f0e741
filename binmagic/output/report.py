"""
binmagic Report Generator
==========================

Builds machine-readable JSON reports from inspection results.  The
layout follows the decoded model field-for-field and adds the
human-readable names the console view shows (type, machine, flags), so
consumers do not need their own ELF constant tables.

References:
    - ECMA-404 The JSON Data Interchange Standard.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from binmagic import __version__
from binmagic.core.models import InspectionReport, ParsedElf, Symbol


class ElfReportGenerator:
    """Serialise :class:`InspectionReport` objects to JSON.

    Usage::

        gen = ElfReportGenerator()
        print(gen.to_json(reports))
        gen.generate_json(reports, "report.json")
    """

    def to_dict(self, reports: Sequence[InspectionReport]) -> dict[str, Any]:
        return {
            "report_type": "binmagic_elf_inspection",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "files": [self._file_entry(r) for r in reports],
        }

    def to_json(self, reports: Sequence[InspectionReport], indent: int = 2) -> str:
        return json.dumps(self.to_dict(reports), indent=indent, ensure_ascii=False)

    def generate_json(self, reports: Sequence[InspectionReport], output_path: str | Path) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(reports), encoding="utf-8")
        return str(path.resolve())

    # ------------------------------------------------------------------ #
    #  Sections of the report
    # ------------------------------------------------------------------ #

    def _file_entry(self, report: InspectionReport) -> dict[str, Any]:
        entry: dict[str, Any] = {"file": report.file.model_dump(mode="json")}
        if report.elf is None:
            entry["error"] = {"kind": report.error_kind, "message": report.error}
            return entry
        entry["elf"] = self._elf_entry(report.elf)
        return entry

    def _elf_entry(self, elf: ParsedElf) -> dict[str, Any]:
        ident = elf.identity
        hdr = elf.header
        return {
            "identity": {
                "class": f"ELF{ident.elf_class.bits}",
                "endianness": ident.endianness.value,
                "version": ident.version,
                "osabi": ident.osabi,
                "osabi_name": ident.osabi_name,
                "abi_version": ident.abi_version,
                "ident": ident.ident_hex,
            },
            "header": {
                **hdr.model_dump(mode="json"),
                "type_name": hdr.type_name,
                "machine_name": hdr.machine_name,
                "version_name": hdr.version_name,
            },
            "sections": [
                {
                    **s.model_dump(mode="json"),
                    "type_name": s.type_name,
                    "flags_str": s.flags_str,
                }
                for s in elf.sections
            ],
            "program_headers": [
                {
                    **p.model_dump(mode="json"),
                    "type_name": p.type_name,
                    "flags_str": p.flags_str,
                }
                for p in elf.program_headers
            ],
            "symbols": [self._symbol_entry(elf, s) for s in elf.symbols],
            "dynamic": [
                {**d.model_dump(mode="json"), "tag_name": d.tag_name}
                for d in elf.dynamic
            ],
            "needed_libraries": elf.needed_libraries,
            "soname": elf.soname,
            "rpath": elf.rpath,
            "runpath": elf.runpath,
            "interpreter": elf.interpreter,
            "warnings": [w.model_dump(mode="json") for w in elf.warnings],
        }

    @staticmethod
    def _symbol_entry(elf: ParsedElf, sym: Symbol) -> dict[str, Any]:
        return {
            **sym.model_dump(mode="json"),
            "bind": sym.bind_name,
            "type": sym.type_name,
            "visibility": sym.visibility_name,
            "section": elf.symbol_section_name(sym),
        }
