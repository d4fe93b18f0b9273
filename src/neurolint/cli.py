"""Command-line interface for NeuroLint.

Provides subcommands for listing layers, analyzing and transforming source
files, benchmarking the pipeline and printing version information.  Each
subcommand imports what it needs lazily so that ``neurolint info`` stays
cheap.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    neurolint = "neurolint.cli:main"

Usage examples::

    neurolint layers
    neurolint analyze --input src/App.tsx
    neurolint transform --input src/App.tsx --layers 1,3,4 --diff
    cat page.jsx | neurolint transform --input - --dry-run --export-logs logs.json
    neurolint benchmark --iterations 20
    neurolint info
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INPUT_REJECTED = 2


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        type=str,
        default=None,
        help="Source file to read, or '-' for stdin.",
    )
    source.add_argument(
        "--code",
        type=str,
        default=None,
        help="Source text given inline.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="neurolint",
        description=(
            "NeuroLint -- layered, validated code transformations for "
            "React / Next.js sources."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show version and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Level for diagnostic logging on stderr. (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- layers ------------------------------------------------------------
    subparsers.add_parser(
        "layers",
        help="List the transformation layers in execution order.",
    )

    # -- analyze -----------------------------------------------------------
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Detect issues and recommend layers.",
        description="Run the read-only analysis pass over a source file.",
    )
    _add_source_arguments(analyze_parser)
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the analysis as JSON instead of tables.",
    )

    # -- transform ---------------------------------------------------------
    transform_parser = subparsers.add_parser(
        "transform",
        help="Run transformation layers over a source file.",
        description="Run the requested layers; invalid layer output is reverted.",
    )
    _add_source_arguments(transform_parser)
    transform_parser.add_argument(
        "--layers",
        type=str,
        default=None,
        help="Comma-separated layer ids (e.g. '1,3,4').  Defaults to every layer.",
    )
    transform_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Report what would change without writing the transformed code.",
    )
    transform_parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print per-layer progress and record it in the session log.",
    )
    transform_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the final code here instead of stdout.",
    )
    transform_parser.add_argument(
        "--diff",
        action="store_true",
        default=False,
        help="Show a unified diff of the changes.",
    )
    transform_parser.add_argument(
        "--export-logs",
        type=str,
        default=None,
        help="Write the session log (JSON) to this path.",
    )
    transform_parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write the orchestration result (JSON) to this path.",
    )
    transform_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON or YAML config file with an 'orchestrator' section.",
    )

    # -- benchmark ---------------------------------------------------------
    bench_parser = subparsers.add_parser(
        "benchmark",
        help="Time the pipeline over built-in samples.",
    )
    bench_parser.add_argument(
        "--iterations",
        type=int,
        default=10,
        help="Runs per sample. (default: 10)",
    )
    bench_parser.add_argument(
        "--layers",
        type=str,
        default=None,
        help="Comma-separated layer ids.  Defaults to every layer.",
    )
    bench_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the benchmark report (JSON) to this path.",
    )

    # -- info --------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show version, layers and dependency status.",
    )

    return parser


# =========================================================================
# Helpers
# =========================================================================

def _parse_layer_ids(raw: str | None) -> list[int] | None:
    if raw is None:
        return None
    ids: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            from neurolint.domain.exceptions import InputRejectedError

            raise InputRejectedError(
                f"layer id {part!r} is not an integer", parameter="layers"
            ) from None
    return ids


def _read_source(args: argparse.Namespace) -> str:
    if args.code is not None:
        return args.code
    if args.input == "-":
        return sys.stdin.read()
    return Path(args.input).read_text(encoding="utf-8")


def _load_orchestrator_config(path: str | None) -> Any:
    from neurolint.infrastructure.config import OrchestratorConfig, load_config_file

    if path is None:
        return OrchestratorConfig()
    sections = load_config_file(path)
    config = sections.get("orchestrator")
    return config if isinstance(config, OrchestratorConfig) else OrchestratorConfig()


# =========================================================================
# Subcommand handlers
# =========================================================================

def _cmd_layers(args: argparse.Namespace) -> int:
    """Handle the ``layers`` subcommand."""
    from neurolint.layers import LAYER_EXECUTION_ORDER
    from neurolint.presentation.console import ConsoleReporter

    ConsoleReporter().render_layers(LAYER_EXECUTION_ORDER)
    return EXIT_OK


def _cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the ``analyze`` subcommand."""
    from neurolint.presentation.console import ConsoleReporter
    from neurolint.services.orchestrator import Orchestrator

    code = _read_source(args)
    analysis = Orchestrator().analyze(code)
    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2))
    else:
        ConsoleReporter().render_analysis(analysis)
    return EXIT_OK


def _cmd_transform(args: argparse.Namespace) -> int:
    """Handle the ``transform`` subcommand."""
    from rich.console import Console

    from neurolint.domain.enums import LayerId
    from neurolint.domain.events import LayerExecuted
    from neurolint.domain.values import TransformOptions
    from neurolint.presentation.console import ConsoleReporter
    from neurolint.presentation.export import export_json, export_logs
    from neurolint.services.orchestrator import Orchestrator

    code = _read_source(args)
    layer_ids = _parse_layer_ids(args.layers)
    if layer_ids is None:
        layer_ids = [int(i) for i in LayerId]

    # Reports go to stderr when the code itself goes to stdout.
    to_stdout = args.output is None and not args.dry_run
    reporter = ConsoleReporter(Console(stderr=to_stdout))

    orchestrator = Orchestrator(config=_load_orchestrator_config(args.config))
    if args.verbose:
        orchestrator.subscribe(reporter.render_progress, LayerExecuted)
    result = orchestrator.transform_sync(
        code,
        layer_ids,
        TransformOptions(verbose=args.verbose, dry_run=args.dry_run),
    )
    reporter.render_result(result, show_diff=args.diff)

    if args.output is not None and not args.dry_run:
        Path(args.output).write_text(result.final_code, encoding="utf-8")
        reporter.console.print(f"Wrote {args.output}")
    elif to_stdout:
        sys.stdout.write(result.final_code)

    if args.report is not None:
        export_json(result, args.report)
    if args.export_logs is not None:
        export_logs(orchestrator.session_logger, args.export_logs)
    return EXIT_OK


def _cmd_benchmark(args: argparse.Namespace) -> int:
    """Handle the ``benchmark`` subcommand."""
    import asyncio

    from neurolint.measurement.benchmark import run_benchmark
    from neurolint.presentation.console import ConsoleReporter
    from neurolint.presentation.export import export_json
    from neurolint.services.orchestrator import Orchestrator

    orchestrator = Orchestrator()
    report = asyncio.run(
        run_benchmark(
            orchestrator,
            layer_ids=_parse_layer_ids(args.layers),
            iterations=args.iterations,
        )
    )
    reporter = ConsoleReporter()
    reporter.render_benchmark(report)
    reporter.render_metrics(orchestrator.get_performance_metrics())
    if args.output is not None:
        export_json(report, args.output)
        reporter.console.print(f"Exported to {args.output}")
    return EXIT_OK


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from neurolint import __version__
    from neurolint.layers import LAYER_EXECUTION_ORDER

    print(f"NeuroLint v{__version__}")
    print()

    deps = {
        "numpy": "Benchmark statistics",
        "yaml": "YAML config files",
        "rich": "Console rendering",
    }
    print("Dependencies:")
    for pkg, desc in deps.items():
        try:
            mod = __import__(pkg)
            version = getattr(mod, "__version__", "unknown")
            print(f"  [installed] {pkg} {version} -- {desc}")
        except ImportError:
            print(f"  [missing]   {pkg} -- {desc}")
    print()

    print(f"Layers ({len(LAYER_EXECUTION_ORDER)}):")
    for layer in LAYER_EXECUTION_ORDER:
        print(f"  {int(layer.id)}. {layer.name} -- {layer.description}")
    print()
    return EXIT_OK


# =========================================================================
# Entry point
# =========================================================================

def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.version:
        from neurolint import __version__
        print(f"neurolint {__version__}")
        sys.exit(EXIT_OK)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_OK)

    handlers: dict[str, Any] = {
        "layers": _cmd_layers,
        "analyze": _cmd_analyze,
        "transform": _cmd_transform,
        "benchmark": _cmd_benchmark,
        "info": _cmd_info,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    from neurolint.domain.exceptions import InputRejectedError

    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except InputRejectedError as exc:
        print(f"Input rejected: {exc}", file=sys.stderr)
        exit_code = EXIT_INPUT_REJECTED
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = EXIT_ERROR

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
