"""Main CLI entry point for symgraph.

Parses shared objects and object files, resolves the symbols each one
imports against the symbols the others export, and writes the resulting
file dependency graph as DOT (or JSON).

Usage:
    symgraph [-v] [-m] [-o OUTPUT] [-f {dot,json}] FILE [FILE ...]
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from symgraph import __version__
from symgraph.binary.base import FatalError, OutputWriteError
from symgraph.config.loader import load_graph_build_config
from symgraph.config.schema import GraphBuildConfig
from symgraph.export import EXPORTERS
from symgraph.graph.manager import DependencyGraph
from symgraph.runtime.builder import BuildResult, GraphBuilder

logger = logging.getLogger("symgraph.cli")


def setup_logging(
    verbose: bool = False,
    console: Optional[Console] = None,
    log_file: Optional[str] = None,
) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
        log_file: Also write logs to this file (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    # Diagnostics go to stderr, stdout may carry the graph
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )
    handlers: List[logging.Handler] = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] [%(levelname)s] %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="symgraph",
        description="Parse shared objects and compute their internal and external dependencies.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-m",
        "--merge",
        action="store_true",
        help="Generate only one edge between libraries",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file (default: standard output)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=sorted(EXPORTERS),
        default="dot",
        help="Output format (default: dot)",
    )
    parser.add_argument(
        "-n",
        "--name",
        help="Graph name written in the output header",
    )
    parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional graph-build configuration. Can be a path to a TOML/JSON "
            "file or an inline TOML/JSON string. Command-line flags override "
            "values from the configuration."
        ),
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        help="Number of threads decoding input files (default: 1)",
    )
    parser.add_argument(
        "--group-by-directory",
        action="store_true",
        help="Place file nodes in one subgraph per parent directory",
    )
    parser.add_argument(
        "--report-unresolved",
        action="store_true",
        help=(
            "Log symbols that no input defines and symbols defined by more "
            "than one input"
        ),
    )
    parser.add_argument(
        "--log-file",
        help="Output log to file (optional), in addition to the console.",
    )
    parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="Input binaries (shared objects, object files, archives)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> GraphBuildConfig:
    """Load the configuration and apply command-line overrides.

    Raises:
        ValidationError: If a value is out of range.
        ValueError: If the configuration text cannot be parsed.
        OSError: If the configuration file cannot be read.
    """
    config = load_graph_build_config(args.config)

    overrides = {}
    if args.merge:
        overrides["merge"] = True
    if args.group_by_directory:
        overrides["group_by_directory"] = True
    if args.name is not None:
        overrides["name"] = args.name
    if args.workers is not None:
        overrides["workers"] = args.workers

    if not overrides:
        return config
    return GraphBuildConfig.from_dict({**config.model_dump(), **overrides})


def report_unresolved(result: BuildResult) -> None:
    """Log symbols left without provider and symbols with several providers."""
    for symbol, files in sorted(result.resolver.unresolved().items()):
        logger.warning("Unresolved symbol '%s' in %s", symbol, ", ".join(files))
    for symbol, files in sorted(result.resolver.conflicts().items()):
        logger.warning("Symbol '%s' defined in %s", symbol, ", ".join(files))


def write_output(graph: DependencyGraph, fmt: str, output: Optional[str]) -> None:
    """Write ``graph`` to ``output`` or standard output.

    Raises:
        OutputWriteError: If the destination cannot be written.
    """
    render, export = EXPORTERS[fmt]
    if output:
        export(graph, output)
        return

    try:
        sys.stdout.write(render(graph))
        sys.stdout.flush()
    except OSError as err:
        raise OutputWriteError(f"Unable to write to standard output: {err}") from err


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Arguments without the program name (default: ``sys.argv[1:]``).

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, log_file=args.log_file)

    try:
        config = resolve_config(args)
    except (ValidationError, ValueError, TypeError, OSError) as err:
        logger.error("Invalid configuration: %s", err)
        return 1

    try:
        result = GraphBuilder(config).build(args.files)
    except FatalError as err:
        logger.error("%s", err)
        return 1

    if args.report_unresolved:
        report_unresolved(result)

    logger.info("Exporting graph")
    try:
        write_output(result.graph, args.format, args.output)
    except OutputWriteError as err:
        logger.error("%s", err)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
