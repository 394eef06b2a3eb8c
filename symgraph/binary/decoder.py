"""Symbol extraction through the system ``nm`` tool.

Each file is first memory-mapped and its magic bytes checked, so unreadable
paths and unknown formats are told apart before ``nm`` runs. Symbols are
then listed in POSIX output format (``nm -P``), dynamic table first, then the
regular table for plain object files and archives.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from symgraph.binary.base import (
    BinaryFormat,
    DecodedFile,
    DecoderUnavailableError,
    SymbolRecord,
    UndecodableFormatError,
)
from symgraph.binary.reader import detect_format, map_binary
from symgraph.config.schema import DecoderConfig

logger = logging.getLogger("symgraph.binary.decoder")

# nm type letters for symbols the file imports (weak references included)
UNDEFINED_TYPES = frozenset(b"Uwv")

# Debugging and stab entries carry no linkage meaning
SKIPPED_TYPES = frozenset(b"N-")

VERSION_SEPARATOR = b"@"


def parse_nm_output(output: bytes, strip_versions: bool = False) -> List[SymbolRecord]:
    """Parse ``nm -P`` output into symbol records.

    Args:
        output: Raw standard output of nm.
        strip_versions: Drop ELF ``@VERSION`` / ``@@VERSION`` suffixes.

    Returns:
        List[SymbolRecord]: Records in output order, duplicates included.
    """
    records: List[SymbolRecord] = []
    for line in output.splitlines():
        fields = line.split()
        if len(fields) < 2:
            # Blank line or archive member header like "libfoo.a[foo.o]:"
            continue

        name, sym_type = fields[0], fields[1]
        if len(sym_type) != 1 or sym_type[0] in SKIPPED_TYPES:
            continue

        if strip_versions:
            name = name.split(VERSION_SEPARATOR, 1)[0]

        records.append(SymbolRecord(name=name, defined=sym_type[0] not in UNDEFINED_TYPES))
    return records


def unique_records(records: Iterable[SymbolRecord]) -> List[SymbolRecord]:
    """Remove repeated records, keeping first-occurrence order."""
    seen: Dict[SymbolRecord, None] = {}
    for record in records:
        seen.setdefault(record, None)
    return list(seen)


class SymbolDecoder:
    """Extract symbol records from binaries with ``nm``."""

    def __init__(self, config: Optional[DecoderConfig] = None) -> None:
        """Initialize decoder.

        Args:
            config: Decoder configuration, defaults when omitted.
        """
        self.config = config or DecoderConfig()

    def _table_flags(self) -> List[Sequence[str]]:
        tables: List[Sequence[str]] = []
        if self.config.include_dynamic:
            tables.append(("-D",))
        if self.config.include_static:
            tables.append(())
        return tables

    def _run_nm(self, path: str, flags: Sequence[str]) -> bytes:
        """Run nm on one symbol table of ``path`` and return its stdout.

        Raises:
            DecoderUnavailableError: If nm cannot be executed.
            subprocess.CalledProcessError: If nm rejects the file.
            subprocess.TimeoutExpired: If nm exceeds the configured timeout.
        """
        command = [self.config.nm_path, "-P", *flags, "--", path]
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                check=True,
                capture_output=True,
                timeout=self.config.timeout,
            )
        except (FileNotFoundError, PermissionError) as err:
            raise DecoderUnavailableError(
                f"Unable to run {self.config.nm_path!r}: {err}"
            ) from err
        return result.stdout

    def decode(self, path: Union[str, Path]) -> DecodedFile:
        """Decode the symbol records of one file.

        Args:
            path: Input file path.

        Returns:
            DecodedFile: Format and unique records of the file.

        Raises:
            UnreadableInputError: If the file cannot be opened or mapped.
            UndecodableFormatError: If the format is unknown or nm fails on
                every symbol table.
            DecoderUnavailableError: If nm cannot be executed.
        """
        path_str = str(path)
        with map_binary(path_str) as memory:
            binary_format = detect_format(memory, path_str)
        logger.debug("Detected %s format for %s", binary_format.value, path_str)

        strip_versions = binary_format is BinaryFormat.ELF
        records: List[SymbolRecord] = []
        failures: List[str] = []
        succeeded = 0

        for flags in self._table_flags():
            try:
                output = self._run_nm(path_str, flags)
            except subprocess.CalledProcessError as err:
                message = (err.stderr or b"").decode("utf-8", "replace").strip()
                failures.append(message or f"nm exited with status {err.returncode}")
                continue
            except subprocess.TimeoutExpired as err:
                raise UndecodableFormatError(
                    path_str, f"nm timed out after {self.config.timeout}s"
                ) from err
            succeeded += 1
            records.extend(parse_nm_output(output, strip_versions=strip_versions))

        if not succeeded:
            raise UndecodableFormatError(path_str, "; ".join(failures) or "no symbol table")

        unique = unique_records(records)
        logger.debug("Decoded %s: %d symbol records", path_str, len(unique))
        return DecodedFile(path=path_str, format=binary_format, records=unique)
