"""Helpers for loading graph build configuration from TOML/JSON sources.

This module provides a single entry point `load_graph_build_config`
that accepts various configuration sources:

* None -> default GraphBuildConfig
* dict -> GraphBuildConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Union

from symgraph.config.schema import GraphBuildConfig

logger = logging.getLogger("symgraph.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]


def _guess_format(text: str) -> str:
    stripped = text.lstrip()
    return "json" if stripped.startswith(("{", "[")) else "toml"


def load_graph_build_config(source: ConfigSource) -> GraphBuildConfig:
    """Load GraphBuildConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns GraphBuildConfig.default()
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        GraphBuildConfig instance.

    Raises:
        ValueError: If the text cannot be parsed or is not a mapping.
        pydantic.ValidationError: If values are out of range.
        TypeError: If ``source`` has an unsupported type.
    """
    if source is None:
        logger.debug("No config source provided; using default GraphBuildConfig")
        return GraphBuildConfig.default()

    if isinstance(source, dict):
        logger.debug("Loading GraphBuildConfig from provided dict")
        return GraphBuildConfig.from_dict(source)

    if isinstance(source, (str, Path)):
        path = Path(source)

        if path.is_file():
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = _guess_format(text)
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = _guess_format(text)
            logger.info("Loading configuration from inline %s string", fmt)

        if fmt == "json":
            data = json.loads(text)
        else:
            try:
                data = tomllib.loads(text)
            except tomllib.TOMLDecodeError as err:
                raise ValueError(f"Invalid TOML configuration: {err}") from err

        if not isinstance(data, dict):
            raise ValueError("Top-level configuration must be a mapping/dict")

        return GraphBuildConfig.from_dict(data)

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


__all__ = ["load_graph_build_config"]
