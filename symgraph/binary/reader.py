"""Memory-mapped access to input binaries and container format detection."""

import logging
import mmap
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from symgraph.binary.base import BinaryFormat, UndecodableFormatError, UnreadableInputError

logger = logging.getLogger("symgraph.binary.reader")

ELF_MAGIC = b"\x7fELF"
MACHO_MAGICS = (
    b"\xfe\xed\xfa\xce",
    b"\xfe\xed\xfa\xcf",
    b"\xce\xfa\xed\xfe",
    b"\xcf\xfa\xed\xfe",
)
FAT_MAGICS = (b"\xca\xfe\xba\xbe", b"\xca\xfe\xba\xbf")
PE_MAGIC = b"MZ"
ARCHIVE_MAGICS = (b"!<arch>\n", b"!<thin>\n")

# Java class files share the fat Mach-O magic; their version field is >= 45
# while a fat header stores a small architecture count there.
_MAX_FAT_ARCHS = 30

HEADER_SIZE = 8


@contextmanager
def map_binary(path: Union[str, Path]) -> Iterator[mmap.mmap]:
    """Map a file read-only into memory.

    Args:
        path: Input file path.

    Yields:
        mmap.mmap: Read-only mapping of the whole file.

    Raises:
        UnreadableInputError: If the file cannot be opened or mapped. Empty
            files cannot be mapped and are reported the same way.
    """
    try:
        handle = open(path, "rb")
    except OSError as err:
        raise UnreadableInputError(path, err.strerror or str(err)) from err

    with handle:
        try:
            memory = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as err:
            raise UnreadableInputError(path, str(err)) from err

        with memory:
            logger.debug("Mapped %s (%d bytes)", path, len(memory))
            yield memory


def sniff_format(header: bytes) -> Optional[BinaryFormat]:
    """Return the container format announced by ``header``, or None."""
    if header.startswith(ELF_MAGIC):
        return BinaryFormat.ELF
    if header.startswith(ARCHIVE_MAGICS):
        return BinaryFormat.ARCHIVE
    if header[:4] in MACHO_MAGICS:
        return BinaryFormat.MACHO
    if header[:4] in FAT_MAGICS and len(header) >= HEADER_SIZE:
        if int.from_bytes(header[4:8], "big") <= _MAX_FAT_ARCHS:
            return BinaryFormat.MACHO_FAT
        return None
    if header.startswith(PE_MAGIC):
        return BinaryFormat.PE
    return None


def detect_format(buffer: Union[bytes, mmap.mmap], path: Union[str, Path] = "<buffer>") -> BinaryFormat:
    """Detect the binary container format of ``buffer``.

    Args:
        buffer: File contents (only the first bytes are inspected).
        path: Path used in error messages.

    Returns:
        BinaryFormat: Detected format.

    Raises:
        UndecodableFormatError: If no known magic number matches.
    """
    header = bytes(buffer[:HEADER_SIZE])
    detected = sniff_format(header)
    if detected is None:
        raise UndecodableFormatError(path, f"unknown file magic {header[:4]!r}")
    return detected
