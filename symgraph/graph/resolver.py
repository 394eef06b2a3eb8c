"""Symbol resolution: turn per-file symbol records into graph edges.

The resolver owns the pending-resolution index of a single build:

* ``providers``: symbol id -> files known to define it (append only).
* ``awaiting``: symbol id -> files that required it before any provider was
  known. The entry is drained the moment a provider registers.

A consumer seen before its provider is linked when the provider arrives; a
consumer seen after is linked at once. Edges therefore do not depend on the
order in which files are ingested. A provider registered after the symbol was
already resolved only serves consumers seen after it.

Intra-file uses never produce edges: a file that both defines and requires a
symbol is not linked to itself, whatever the record order.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from symgraph.binary.base import InvalidSymbolTextError, SymbolRecord
from symgraph.graph.manager import DependencyGraph
from symgraph.graph.names import NameSanitizer

logger = logging.getLogger("symgraph.graph.resolver")

RawName = Union[bytes, str]


def decode_symbol_name(raw_name: RawName) -> str:
    """Decode a raw symbol name to text.

    Raises:
        InvalidSymbolTextError: If ``raw_name`` is not valid UTF-8.
    """
    if isinstance(raw_name, str):
        return raw_name
    try:
        return raw_name.decode("utf-8")
    except UnicodeDecodeError as err:
        raise InvalidSymbolTextError(raw_name) from err


class SymbolResolver:
    """Pending-resolution index plus the ingestion algorithm.

    One resolver serves one graph build and is discarded afterwards.
    Records must be fed from a single thread, one file after another.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        sanitizer: Optional[NameSanitizer] = None,
    ) -> None:
        """Initialize resolver.

        Args:
            graph: Graph receiving nodes and edges.
            sanitizer: Name sanitizer, default rules when omitted.
        """
        self.graph = graph
        self.strings = graph.strings
        self.sanitizer = sanitizer or NameSanitizer()

        # Dicts with None values serve as insertion-ordered sets
        self._providers: Dict[int, Dict[int, None]] = {}
        self._awaiting: Dict[int, Dict[int, None]] = {}

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_file(self, path: str) -> Optional[int]:
        """Create the node of an input file.

        Args:
            path: Input path as given by the user.

        Returns:
            Optional[int]: File id, or None when the name is rejected.
        """
        name = self.sanitizer.sanitize(path)
        if name is None:
            logger.debug("File name rejected by sanitizer: %s", path)
            return None

        file_id = self.strings.intern(name)
        self.graph.add_node(file_id)
        return file_id

    def add_symbol(self, file_id: int, raw_name: RawName, is_defined: bool) -> Optional[int]:
        """Ingest one symbol record of ``file_id``.

        Args:
            file_id: Id returned by :meth:`add_file`.
            raw_name: Symbol name, bytes are decoded as UTF-8.
            is_defined: True for an exported symbol.

        Returns:
            Optional[int]: Symbol id, or None when the name is rejected.

        Raises:
            InvalidSymbolTextError: If a bytes name is not valid UTF-8.
        """
        name = self.sanitizer.sanitize(decode_symbol_name(raw_name))
        if name is None:
            return None

        symbol_id = self.strings.intern(name)
        if is_defined:
            self._define(file_id, symbol_id)
        else:
            self._require(file_id, symbol_id)
        return symbol_id

    def add_records(self, file_id: int, records: Iterable[SymbolRecord]) -> int:
        """Ingest all records of a file, skipping names that are not text.

        Returns:
            int: Number of records that were accepted.
        """
        accepted = 0
        for record in records:
            try:
                symbol_id = self.add_symbol(file_id, record.name, record.defined)
            except InvalidSymbolTextError as err:
                logger.debug("Skipping symbol: %s", err)
                continue
            if symbol_id is not None:
                accepted += 1
        return accepted

    def ingest(self, path: str, records: Iterable[SymbolRecord]) -> Optional[int]:
        """Add a file node and all of its records.

        Returns:
            Optional[int]: File id, or None when the file name is rejected.
        """
        file_id = self.add_file(path)
        if file_id is None:
            return None

        accepted = self.add_records(file_id, records)
        logger.debug("Ingested %s: %d symbols", path, accepted)
        return file_id

    def _define(self, file_id: int, symbol_id: int) -> None:
        self.graph.add_defined_symbol(file_id, symbol_id)

        providers = self._providers.setdefault(symbol_id, {})
        if providers and file_id not in providers:
            logger.debug(
                "Symbol %s defined by more than one file",
                self.strings.resolve(symbol_id),
            )
        providers[file_id] = None

        waiting = self._awaiting.pop(symbol_id, None)
        if waiting:
            for consumer_id in waiting:
                self._link(consumer_id, file_id, symbol_id)

    def _require(self, file_id: int, symbol_id: int) -> None:
        providers = self._providers.get(symbol_id)
        if providers:
            for provider_id in providers:
                self._link(file_id, provider_id, symbol_id)
            return

        self._awaiting.setdefault(symbol_id, {})[file_id] = None

    def _link(self, consumer_id: int, provider_id: int, symbol_id: int) -> None:
        if consumer_id == provider_id:
            return
        self.graph.link(consumer_id, provider_id, symbol_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def providers_of(self, symbol_id: int) -> List[int]:
        """Files registered as defining ``symbol_id``, in order."""
        return list(self._providers.get(symbol_id, ()))

    def awaiting_on(self, symbol_id: int) -> List[int]:
        """Files still waiting for a provider of ``symbol_id``, in order."""
        return list(self._awaiting.get(symbol_id, ()))

    def unresolved(self) -> Dict[str, List[str]]:
        """Symbols nobody defined, mapped to the files requiring them."""
        return {
            self.strings.resolve(symbol_id): [
                self.strings.resolve(file_id) for file_id in consumers
            ]
            for symbol_id, consumers in self._awaiting.items()
        }

    def conflicts(self) -> Dict[str, List[str]]:
        """Symbols defined by more than one file, mapped to those files."""
        return {
            self.strings.resolve(symbol_id): [
                self.strings.resolve(file_id) for file_id in providers
            ]
            for symbol_id, providers in self._providers.items()
            if len(providers) > 1
        }
