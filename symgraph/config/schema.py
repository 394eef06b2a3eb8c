"""Configuration schema definitions using Pydantic for validation.

This module provides strongly-typed configuration classes for the name
sanitizer, the binary decoder and the graph build as a whole. Using Pydantic
ensures configuration errors are caught early with clear error messages.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator


class SanitizerConfig(BaseModel):
    """Configuration for name sanitization.

    Attributes:
        reserved_underscores: Number of leading underscores that mark a
            compiler/linker reserved name. ``1`` rejects ``_foo``, ``2`` only
            rejects ``__foo``, ``0`` keeps both.
        extra_ignored_names: Additional exact names to drop, on top of
            ``""`` and ``_GLOBAL_OFFSET_TABLE_``.
    """

    reserved_underscores: int = Field(default=1, ge=0, le=8)
    extra_ignored_names: List[str] = Field(default_factory=list)

    model_config = {"extra": "allow"}


class DecoderConfig(BaseModel):
    """Configuration for the nm based symbol decoder.

    Attributes:
        nm_path: nm executable (e.g. ``llvm-nm`` for Mach-O or PE inputs).
        timeout: Timeout for a single nm invocation (seconds).
        include_dynamic: Read the dynamic symbol table (``nm -D``).
        include_static: Read the regular symbol table.
    """

    nm_path: str = "nm"
    timeout: float = Field(default=60.0, ge=1.0, le=600.0)
    include_dynamic: bool = True
    include_static: bool = True

    model_config = {"extra": "allow"}

    @field_validator("nm_path")
    @classmethod
    def validate_nm_path(cls, v: str) -> str:
        """Validate that the nm executable is a non-empty name."""
        if not v.strip():
            raise ValueError("nm_path must not be empty")
        if v.startswith("-"):
            raise ValueError(f"nm_path must not start with '-': {v!r}")
        return v

    @model_validator(mode="after")
    def validate_tables(self) -> "DecoderConfig":
        """Validate that at least one symbol table is read."""
        if not (self.include_dynamic or self.include_static):
            raise ValueError("At least one of include_dynamic/include_static must be enabled")
        return self


class GraphBuildConfig(BaseModel):
    """Top-level configuration for graph building.

    Attributes:
        name: Graph name written in the output header.
        merge: Strip symbol labels from edges before export.
        workers: Number of threads decoding input files.
        group_by_directory: Put file nodes in one cluster per parent
            directory.
        sanitizer: Name sanitizer configuration.
        decoder: Binary decoder configuration.
    """

    name: str = ""
    merge: bool = False
    workers: int = Field(default=1, ge=1, le=64)
    group_by_directory: bool = False
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)

    model_config = {"extra": "allow"}

    @classmethod
    def default(cls) -> "GraphBuildConfig":
        """Return a GraphBuildConfig instance with default values."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphBuildConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary.

        Returns:
            GraphBuildConfig instance.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()
