"""
binmagic Inspection Engine
===========================

Loads files from disk and runs the ELF decoder over them.  The decoder
itself is pure (bytes in, model or exception out); everything that
touches the filesystem, hashes, size limits and logging lives here.

Pipeline per file:
    1. Stat the file and enforce the configured size limit
    2. Read the whole file into memory
    3. Compute MD5 and SHA-256
    4. Decode with :func:`~binmagic.parsers.elf_parser.parse_elf`
    5. Log table counts and every soft anomaly

Several files are decoded concurrently on a thread pool; every decode
owns its buffer and model, so the workers share nothing.

References:
    - Python asyncio: running blocking code.
      https://docs.python.org/3/library/asyncio-eventloop.html#executing-code-in-thread-or-process-pools
"""

from __future__ import annotations

import asyncio
import hashlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Sequence

from shared.config import MagicConfig
from shared.logger import MagicLogger

from binmagic.core.errors import ElfError, FileTooLargeError
from binmagic.core.models import FileInfo, InspectionReport, ParsedElf
from binmagic.parsers.elf_parser import parse_elf


class InspectEngine:
    """Reads ELF files and produces :class:`InspectionReport` objects.

    Usage::

        engine = InspectEngine()
        report = engine.inspect("/usr/bin/ls")
        if report.elf is not None:
            print(report.elf.header.machine_name)

    Or for many files at once::

        reports = asyncio.run(engine.inspect_many(paths))
    """

    def __init__(
        self,
        config: MagicConfig | None = None,
        logger: MagicLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: binmagic configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: MagicConfig = config or MagicConfig()
        self._logger: MagicLogger = logger or MagicLogger("engine")

    # ------------------------------------------------------------------ #
    #  Loading
    # ------------------------------------------------------------------ #

    def load(self, file_path: str | Path) -> tuple[bytes, FileInfo]:
        """Read *file_path* and describe it.

        Raises:
            FileTooLargeError: The file exceeds ``inspect.max_file_size``.
            OSError: The file cannot be read.
        """
        path = Path(file_path)
        file_size = path.stat().st_size
        max_size = self._config.inspect.max_file_size
        if file_size > max_size:
            raise FileTooLargeError(file_size, max_size)

        data = path.read_bytes()
        info = FileInfo(
            path=str(path.resolve()),
            size=len(data),
            md5=hashlib.md5(data).hexdigest(),
            sha256=hashlib.sha256(data).hexdigest(),
        )
        self._logger.debug("Loaded file", size=info.size, sha256=info.sha256)
        return data, info

    # ------------------------------------------------------------------ #
    #  Single file
    # ------------------------------------------------------------------ #

    def decode(self, file_path: str | Path) -> InspectionReport:
        """Load and decode one file, propagating any failure.

        Raises:
            ElfError: The file is not a well-formed ELF image (or is too large).
            OSError: The file cannot be read.
        """
        with self._logger.operation(str(file_path)):
            data, info = self.load(file_path)
            with self._logger.timed("decode"):
                elf = parse_elf(data)
            self._log_summary(elf)
            return InspectionReport(file=info, elf=elf)

    def inspect(self, file_path: str | Path) -> InspectionReport:
        """Like :meth:`decode`, but failures are recorded on the report.

        The returned report has either ``elf`` set or ``error`` and
        ``error_kind`` set, never both.
        """
        try:
            return self.decode(file_path)
        except ElfError as exc:
            self._logger.error(f"{file_path}: {exc}", kind=exc.kind)
            return InspectionReport(
                file=FileInfo(path=str(file_path)),
                error=str(exc),
                error_kind=exc.kind,
            )
        except OSError as exc:
            self._logger.error(f"{file_path}: {exc}", kind=type(exc).__name__)
            return InspectionReport(
                file=FileInfo(path=str(file_path)),
                error=str(exc),
                error_kind=type(exc).__name__,
            )

    # ------------------------------------------------------------------ #
    #  Many files
    # ------------------------------------------------------------------ #

    async def inspect_many(self, file_paths: Sequence[str | Path]) -> list[InspectionReport]:
        """Inspect every path on a thread pool.

        Returns:
            One report per path, in the order the paths were given.
        """
        if not file_paths:
            return []

        workers = max(1, min(self._config.global_settings.max_workers, len(file_paths)))
        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="binmagic") as pool:
            tasks = [
                loop.run_in_executor(pool, self.inspect, file_path)
                for file_path in file_paths
            ]
            reports = await asyncio.gather(*tasks)

        failed = sum(1 for r in reports if r.error is not None)
        self._logger.debug(
            f"Inspected {len(reports)} file(s), {failed} failed",
            total=len(reports),
            failed=failed,
        )
        return list(reports)

    def inspect_all(self, file_paths: Sequence[str | Path]) -> list[InspectionReport]:
        """Synchronous wrapper around :meth:`inspect_many`."""
        return asyncio.run(self.inspect_many(file_paths))

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def _log_summary(self, elf: ParsedElf) -> None:
        self._logger.debug(
            f"Decoded ELF{elf.identity.elf_class.bits} {elf.identity.endianness.value}-endian "
            f"{elf.header.type_name}",
            sections=len(elf.sections),
            segments=len(elf.program_headers),
            symbols=len(elf.symbols),
            dynamic=len(elf.dynamic),
        )
        for anomaly in elf.warnings:
            self._logger.warning(anomaly.message, anomaly=anomaly.kind.value)
