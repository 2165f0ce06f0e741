"""Tests for the inspection engine."""

from __future__ import annotations

import asyncio
import hashlib
import json

import pytest

from shared.config import MagicConfig
from shared.logger import MagicLogger

from binmagic.core.engine import InspectEngine
from binmagic.core.errors import FileTooLargeError, NotElfError
from binmagic.parsers.constants import PF_R, PT_LOAD, SHT_PROGBITS
from tests.elf_builder import ElfBuilder


@pytest.fixture
def engine(quiet_logger) -> InspectEngine:
    return InspectEngine(config=MagicConfig(), logger=quiet_logger)


def test_load_describes_file(engine, write_file, simple_image):
    path = write_file("a.out", simple_image)
    data, info = engine.load(path)
    assert data == simple_image
    assert info.path == str(path.resolve())
    assert info.size == len(simple_image)
    assert info.md5 == hashlib.md5(simple_image).hexdigest()
    assert info.sha256 == hashlib.sha256(simple_image).hexdigest()


def test_inspect_success(engine, write_file, simple_image):
    report = engine.inspect(write_file("a.out", simple_image))
    assert report.error is None
    assert report.elf is not None
    assert report.elf.section_by_name(".text") is not None


def test_inspect_records_elf_errors(engine, write_file):
    report = engine.inspect(write_file("script.sh", b"#!/bin/sh\necho hi\n"))
    assert report.elf is None
    assert report.error_kind == "NotElf"
    assert "a script" in report.error


def test_inspect_records_os_errors(engine, tmp_path):
    report = engine.inspect(tmp_path / "missing")
    assert report.elf is None
    assert report.error_kind == "FileNotFoundError"


def test_decode_propagates(engine, write_file):
    with pytest.raises(NotElfError):
        engine.decode(write_file("blob", b"\x00" * 32))


def test_size_limit(quiet_logger, write_file, simple_image):
    config = MagicConfig()
    config.inspect.max_file_size = 64
    engine = InspectEngine(config=config, logger=quiet_logger)
    path = write_file("a.out", simple_image)

    with pytest.raises(FileTooLargeError) as exc_info:
        engine.load(path)
    assert exc_info.value.limit == 64
    assert engine.inspect(path).error_kind == "FileTooLarge"


def test_inspect_many_keeps_order(engine, write_file, simple_image):
    paths = [
        write_file("one", simple_image),
        write_file("two", b"not an elf"),
        write_file("three", simple_image),
    ]
    reports = asyncio.run(engine.inspect_many(paths))
    assert [r.file.path.endswith(name) for r, name in zip(reports, ["one", "two", "three"])] == [True] * 3
    assert [r.error is None for r in reports] == [True, False, True]


def test_inspect_all_with_no_paths(engine):
    assert engine.inspect_all([]) == []


def test_inspect_all_many_files(quiet_logger, write_file):
    config = MagicConfig()
    config.global_settings.max_workers = 3
    engine = InspectEngine(config=config, logger=quiet_logger)

    paths = []
    for i in range(10):
        builder = ElfBuilder(32 if i % 2 else 64, "big" if i % 3 else "little")
        text = builder.add_section(".text", SHT_PROGBITS, bytes([i]) * (i + 1))
        builder.add_segment(PT_LOAD, PF_R, section=text)
        paths.append(write_file(f"f{i}", builder.build()))

    reports = engine.inspect_all(paths)
    assert all(r.error is None for r in reports)
    assert [r.elf.section_by_name(".text").size for r in reports] == list(range(1, 11))


def test_json_log_file(tmp_path, write_file):
    log_file = tmp_path / "logs" / "binmagic.log"
    logger = MagicLogger("tests.json", log_level="DEBUG", log_file=log_file, json_logs=True, console_output=False)
    engine = InspectEngine(config=MagicConfig(), logger=logger)

    engine.inspect(write_file("bad", b"MZ" + bytes(62)))

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    errors = [r for r in records if r["level"] == "ERROR"]
    assert len(errors) == 1
    assert errors[0]["extra"]["kind"] == "NotElf"
    assert errors[0]["logger"] == "binmagic.tests.json"
    assert any(r.get("operation", "").endswith("bad") for r in records)


def test_anomalies_are_logged(tmp_path, write_file):
    log_file = tmp_path / "engine.log"
    logger = MagicLogger("tests.anomaly", log_file=log_file, console_output=False)
    engine = InspectEngine(config=MagicConfig(), logger=logger)

    builder = ElfBuilder()
    text = builder.add_section(".text", SHT_PROGBITS, b"\x90" * 32)
    builder.add_segment(PT_LOAD, PF_R, section=text, memsz=1)
    report = engine.inspect(write_file("odd", builder.build()))

    assert len(report.elf.warnings) == 1
    assert "WARNING" in log_file.read_text(encoding="utf-8")
