"""Binary decoding: map input files and list their symbols."""

from symgraph.binary.base import (
    BinaryFormat,
    DecodedFile,
    DecoderUnavailableError,
    FatalError,
    InvalidSymbolTextError,
    OutputWriteError,
    RecoverableError,
    SymbolRecord,
    SymgraphError,
    UndecodableFormatError,
    UnreadableInputError,
)
from symgraph.binary.decoder import SymbolDecoder, parse_nm_output
from symgraph.binary.reader import detect_format, map_binary

__all__ = [
    "BinaryFormat",
    "DecodedFile",
    "DecoderUnavailableError",
    "FatalError",
    "InvalidSymbolTextError",
    "OutputWriteError",
    "RecoverableError",
    "SymbolDecoder",
    "SymbolRecord",
    "SymgraphError",
    "UndecodableFormatError",
    "UnreadableInputError",
    "detect_format",
    "map_binary",
    "parse_nm_output",
]
