"""Tests for configuration models and loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from symgraph.config import DecoderConfig, GraphBuildConfig, load_graph_build_config


def test_defaults() -> None:
    config = load_graph_build_config(None)

    assert config == GraphBuildConfig.default()
    assert config.sanitizer.reserved_underscores == 1
    assert config.decoder.nm_path == "nm"
    assert config.workers == 1
    assert config.merge is False


def test_load_toml_file(tmp_path: Path) -> None:
    path = tmp_path / "symgraph.toml"
    path.write_text(
        'name = "libs"\n'
        "workers = 4\n"
        "[sanitizer]\n"
        "reserved_underscores = 2\n"
        'extra_ignored_names = ["main"]\n'
        "[decoder]\n"
        'nm_path = "llvm-nm"\n',
        encoding="utf-8",
    )

    config = load_graph_build_config(path)

    assert config.name == "libs"
    assert config.workers == 4
    assert config.sanitizer.reserved_underscores == 2
    assert config.sanitizer.extra_ignored_names == ["main"]
    assert config.decoder.nm_path == "llvm-nm"


def test_load_json_file(tmp_path: Path) -> None:
    path = tmp_path / "symgraph.json"
    path.write_text('{"merge": true, "decoder": {"timeout": 5}}', encoding="utf-8")

    config = load_graph_build_config(str(path))

    assert config.merge is True
    assert config.decoder.timeout == 5.0


def test_load_inline_strings() -> None:
    assert load_graph_build_config('{"name": "a"}').name == "a"
    assert load_graph_build_config('name = "b"').name == "b"


def test_load_dict() -> None:
    assert load_graph_build_config({"group_by_directory": True}).group_by_directory is True


def test_invalid_toml_is_value_error() -> None:
    with pytest.raises(ValueError):
        load_graph_build_config("name = ")


def test_non_mapping_json_is_rejected() -> None:
    with pytest.raises(ValueError):
        load_graph_build_config("[1, 2]")


def test_unsupported_source_type() -> None:
    with pytest.raises(TypeError):
        load_graph_build_config(42)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "data",
    [
        {"workers": 0},
        {"sanitizer": {"reserved_underscores": -1}},
        {"decoder": {"timeout": 0}},
        {"decoder": {"nm_path": "-x"}},
    ],
)
def test_out_of_range_values_are_rejected(data: dict) -> None:
    with pytest.raises(ValidationError):
        GraphBuildConfig.from_dict(data)


def test_decoder_needs_a_symbol_table() -> None:
    with pytest.raises(ValidationError):
        DecoderConfig(include_dynamic=False, include_static=False)
