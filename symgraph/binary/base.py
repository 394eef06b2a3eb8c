"""Shared types and error hierarchy for symbol extraction and graph builds."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Union


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================

class SymgraphError(Exception):
    """Base class for all symgraph errors."""
    pass


class FatalError(SymgraphError):
    """Error that aborts the whole run.

    No partial graph can stand for "all requested inputs" once one of these
    is raised.
    """
    pass


class RecoverableError(SymgraphError):
    """Error that skips the current item; processing continues."""
    pass


class UnreadableInputError(FatalError):
    """Input path does not exist or cannot be opened or memory-mapped."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Unable to open {self.path}: {reason}")


class DecoderUnavailableError(FatalError):
    """The external symbol listing tool cannot be executed."""
    pass


class OutputWriteError(FatalError):
    """Output destination cannot be created or written."""
    pass


class UndecodableFormatError(RecoverableError):
    """Bytes do not match a recognized binary container; the file is skipped."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Unable to parse {self.path}: {reason}")


class InvalidSymbolTextError(RecoverableError):
    """A symbol name is not valid text; the single record is skipped."""

    def __init__(self, raw_name: bytes) -> None:
        self.raw_name = raw_name
        super().__init__(f"Symbol name is not valid UTF-8: {raw_name!r}")


# =============================================================================
# Records
# =============================================================================

class BinaryFormat(str, Enum):
    """Recognized binary container formats."""

    ELF = "elf"
    MACHO = "macho"
    MACHO_FAT = "macho_fat"
    PE = "pe"
    ARCHIVE = "archive"


@dataclass(frozen=True)
class SymbolRecord:
    """One symbol observed in a binary.

    Attributes:
        name: Raw symbol name as stored in the binary.
        defined: True for an exported symbol, False for an import.
    """

    name: bytes
    defined: bool


@dataclass
class DecodedFile:
    """Symbol records of one successfully decoded input file."""

    path: str
    format: BinaryFormat
    records: List[SymbolRecord]

    @property
    def defined_count(self) -> int:
        return sum(1 for record in self.records if record.defined)

    @property
    def undefined_count(self) -> int:
        return len(self.records) - self.defined_count
