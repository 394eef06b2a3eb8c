"""Tests for nm based symbol decoding.

``subprocess.run`` is replaced so no real nm is needed.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict, List

import pytest

from symgraph.binary import decoder as decoder_module
from symgraph.binary.base import (
    BinaryFormat,
    DecoderUnavailableError,
    SymbolRecord,
    UndecodableFormatError,
    UnreadableInputError,
)
from symgraph.binary.decoder import SymbolDecoder, parse_nm_output, unique_records
from symgraph.config.schema import DecoderConfig

ELF_HEADER = b"\x7fELF\x02\x01\x01\x00" + b"\x00" * 56


def test_parse_nm_output_classifies_types() -> None:
    output = (
        b"malloc U\n"
        b"my_func T 0000000000001139 000000000000000b\n"
        b"weak_ref w\n"
        b"data_sym D 0000000000004010 0000000000000004\n"
        b"debug_info N 0000000000000000\n"
    )

    assert parse_nm_output(output) == [
        SymbolRecord(b"malloc", False),
        SymbolRecord(b"my_func", True),
        SymbolRecord(b"weak_ref", False),
        SymbolRecord(b"data_sym", True),
    ]


def test_parse_nm_output_skips_archive_headers_and_blank_lines() -> None:
    output = b"libfoo.a[foo.o]:\nfoo T 0 0\n\nlibfoo.a[bar.o]:\nfoo U\n"

    assert parse_nm_output(output) == [
        SymbolRecord(b"foo", True),
        SymbolRecord(b"foo", False),
    ]


def test_parse_nm_output_strips_symbol_versions() -> None:
    output = b"printf@GLIBC_2.2.5 U\nprintf@@GLIBC_2.2.5 T 0 0\n"

    assert parse_nm_output(output, strip_versions=True) == [
        SymbolRecord(b"printf", False),
        SymbolRecord(b"printf", True),
    ]
    assert parse_nm_output(output)[0].name == b"printf@GLIBC_2.2.5"


def test_unique_records_keeps_first_occurrence_order() -> None:
    records = [
        SymbolRecord(b"b", True),
        SymbolRecord(b"a", False),
        SymbolRecord(b"b", True),
        SymbolRecord(b"a", True),
    ]

    assert unique_records(records) == [
        SymbolRecord(b"b", True),
        SymbolRecord(b"a", False),
        SymbolRecord(b"a", True),
    ]


class FakeNm:
    """Stand-in for ``subprocess.run`` keyed on the ``-D`` flag."""

    def __init__(self, dynamic: object, static: object) -> None:
        self.outputs: Dict[bool, object] = {True: dynamic, False: static}
        self.calls: List[List[str]] = []

    def __call__(self, command, **kwargs):
        self.calls.append(list(command))
        result = self.outputs["-D" in command]
        if isinstance(result, BaseException):
            raise result
        return subprocess.CompletedProcess(command, 0, stdout=result, stderr=b"")


@pytest.fixture
def elf_file(tmp_path: Path) -> Path:
    target = tmp_path / "libdemo.so"
    target.write_bytes(ELF_HEADER)
    return target


def test_decode_merges_tables_without_duplicates(
    monkeypatch: pytest.MonkeyPatch, elf_file: Path
) -> None:
    fake = FakeNm(
        dynamic=b"demo_api T 1 2\nputs@GLIBC_2.2.5 U\n",
        static=b"demo_api T 1 2\nhelper t 3 4\nputs U\n",
    )
    monkeypatch.setattr(decoder_module.subprocess, "run", fake)

    decoded = SymbolDecoder().decode(elf_file)

    assert decoded.format is BinaryFormat.ELF
    assert decoded.records == [
        SymbolRecord(b"demo_api", True),
        SymbolRecord(b"puts", False),
        SymbolRecord(b"helper", True),
    ]
    assert decoded.defined_count == 2
    assert decoded.undefined_count == 1
    assert fake.calls[0] == ["nm", "-P", "-D", "--", str(elf_file)]
    assert fake.calls[1] == ["nm", "-P", "--", str(elf_file)]


def test_decode_tolerates_one_failing_table(
    monkeypatch: pytest.MonkeyPatch, elf_file: Path
) -> None:
    failure = subprocess.CalledProcessError(1, ["nm"], stderr=b"no dynamic section")
    monkeypatch.setattr(
        decoder_module.subprocess, "run", FakeNm(dynamic=failure, static=b"f T 0 0\n")
    )

    decoded = SymbolDecoder().decode(elf_file)

    assert decoded.records == [SymbolRecord(b"f", True)]


def test_decode_fails_when_every_table_fails(
    monkeypatch: pytest.MonkeyPatch, elf_file: Path
) -> None:
    failure = subprocess.CalledProcessError(1, ["nm"], stderr=b"file format not recognized")
    monkeypatch.setattr(decoder_module.subprocess, "run", FakeNm(failure, failure))

    with pytest.raises(UndecodableFormatError) as excinfo:
        SymbolDecoder().decode(elf_file)

    assert "file format not recognized" in str(excinfo.value)


def test_decode_timeout_is_undecodable(
    monkeypatch: pytest.MonkeyPatch, elf_file: Path
) -> None:
    timeout = subprocess.TimeoutExpired(["nm"], 60)
    monkeypatch.setattr(decoder_module.subprocess, "run", FakeNm(timeout, timeout))

    with pytest.raises(UndecodableFormatError):
        SymbolDecoder().decode(elf_file)


def test_missing_nm_is_fatal(monkeypatch: pytest.MonkeyPatch, elf_file: Path) -> None:
    missing = FileNotFoundError(2, "No such file or directory")
    monkeypatch.setattr(decoder_module.subprocess, "run", FakeNm(missing, missing))

    with pytest.raises(DecoderUnavailableError):
        SymbolDecoder(DecoderConfig(nm_path="llvm-nm")).decode(elf_file)


def test_unknown_magic_skips_nm(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeNm(b"", b"")
    monkeypatch.setattr(decoder_module.subprocess, "run", fake)
    text = tmp_path / "notes.txt"
    text.write_text("hello", encoding="utf-8")

    with pytest.raises(UndecodableFormatError):
        SymbolDecoder().decode(text)

    assert fake.calls == []


def test_unreadable_path_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(UnreadableInputError):
        SymbolDecoder().decode(tmp_path / "absent.so")


def test_static_only_configuration(monkeypatch: pytest.MonkeyPatch, elf_file: Path) -> None:
    fake = FakeNm(dynamic=b"dyn T 0 0\n", static=b"stat T 0 0\n")
    monkeypatch.setattr(decoder_module.subprocess, "run", fake)

    decoded = SymbolDecoder(DecoderConfig(include_dynamic=False)).decode(elf_file)

    assert decoded.records == [SymbolRecord(b"stat", True)]
    assert len(fake.calls) == 1
