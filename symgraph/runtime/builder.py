"""Graph build runner.

Decodes every input file, then feeds the records to a single
:class:`SymbolResolver` in input order. Decoding may run on a thread pool;
``Executor.map`` hands results back in submission order, so the resolution
step sees exactly the sequence a sequential run would and the resulting
graph is identical.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Union

from symgraph.binary.base import DecodedFile, UndecodableFormatError
from symgraph.binary.decoder import SymbolDecoder
from symgraph.config.schema import GraphBuildConfig
from symgraph.graph.manager import DependencyGraph
from symgraph.graph.names import NameSanitizer, to_identifier
from symgraph.graph.resolver import SymbolResolver

logger = logging.getLogger("symgraph.runtime.builder")

CLUSTER_PREFIX = "cluster_"


@dataclass
class DecodeOutcome:
    """Result of decoding one input path.

    Exactly one of ``decoded`` and ``error`` is set.
    """

    path: str
    decoded: Optional[DecodedFile] = None
    error: Optional[UndecodableFormatError] = None


@dataclass
class BuildResult:
    """Outcome of a graph build.

    Attributes:
        graph: The dependency graph.
        resolver: Resolver used for the build, kept for reporting.
        processed: Paths that produced a file node.
        skipped: Paths skipped as undecodable, mapped to the reason.
        rejected: Paths whose file name the sanitizer rejected.
    """

    graph: DependencyGraph
    resolver: SymbolResolver
    processed: List[str] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    rejected: List[str] = field(default_factory=list)

    @property
    def unresolved(self) -> Dict[str, List[str]]:
        return self.resolver.unresolved()


def cluster_name_for(path: Union[str, Path]) -> str:
    """Return the cluster name grouping ``path`` by its parent directory."""
    directory = Path(path).resolve().parent.name or "root"
    return CLUSTER_PREFIX + to_identifier(directory)


class GraphBuilder:
    """Build a dependency graph from a list of binaries."""

    def __init__(
        self,
        config: Optional[GraphBuildConfig] = None,
        decoder: Optional[SymbolDecoder] = None,
    ) -> None:
        """Initialize builder.

        Args:
            config: Build configuration, defaults when omitted.
            decoder: Symbol decoder, built from ``config.decoder`` when omitted.
        """
        self.config = config or GraphBuildConfig.default()
        self.decoder = decoder or SymbolDecoder(self.config.decoder)
        self.sanitizer = NameSanitizer(
            reserved_underscores=self.config.sanitizer.reserved_underscores,
            extra_ignored_names=self.config.sanitizer.extra_ignored_names,
        )

    def _decode(self, path: str) -> DecodeOutcome:
        logger.info("Parsing file %s", path)
        try:
            return DecodeOutcome(path=path, decoded=self.decoder.decode(path))
        except UndecodableFormatError as err:
            return DecodeOutcome(path=path, error=err)

    def _iter_outcomes(self, paths: Sequence[str]) -> Iterator[DecodeOutcome]:
        """Yield decode outcomes in input order.

        Fatal errors propagate at the position of the failing path.
        """
        workers = min(self.config.workers, len(paths))
        if workers <= 1:
            for path in paths:
                yield self._decode(path)
            return

        logger.info("Decoding %d files with %d workers", len(paths), workers)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="Decoder")
        try:
            yield from executor.map(self._decode, paths)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def build(self, paths: Sequence[Union[str, Path]]) -> BuildResult:
        """Build the graph for ``paths``.

        Args:
            paths: Input binaries, processed in this order.

        Returns:
            BuildResult: Graph plus per-file bookkeeping.

        Raises:
            UnreadableInputError: If any input cannot be opened or mapped.
            DecoderUnavailableError: If nm cannot be executed.
        """
        path_list = [str(p) for p in paths]
        graph = DependencyGraph(name=self.config.name)
        resolver = SymbolResolver(graph, self.sanitizer)
        result = BuildResult(graph=graph, resolver=resolver)

        for outcome in self._iter_outcomes(path_list):
            if outcome.error is not None:
                logger.warning("%s", outcome.error)
                result.skipped[outcome.path] = outcome.error.reason
                continue

            file_id = resolver.ingest(outcome.path, outcome.decoded.records)
            if file_id is None:
                result.rejected.append(outcome.path)
                continue

            result.processed.append(outcome.path)
            if self.config.group_by_directory:
                graph.add_cluster(cluster_name_for(outcome.path), [file_id])

        if self.config.merge:
            logger.info("merging")
            graph.merge()

        stats = graph.get_statistics()
        logger.info(
            "Graph built: %d files, %d skipped, %d nodes, %d edges",
            len(result.processed),
            len(result.skipped),
            stats["nodes"],
            stats["edges"],
        )
        return result


def build_graph(
    paths: Sequence[Union[str, Path]],
    config: Optional[GraphBuildConfig] = None,
) -> BuildResult:
    """Convenience wrapper around :class:`GraphBuilder`."""
    return GraphBuilder(config).build(paths)
