"""CLI entrypoints for autodoc commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .analyzers import discover_analyzers
from .config import MAX_THREADS, MIN_THREADS, AnalysisConfig, ConfigError, FileConfig, load_config
from .errors import AutodocError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator, RunReport
from .output import OutputFormat, render
from .site_properties import SitePropertiesReader

MIN_TIMEOUT = 30
MAX_TIMEOUT = 3600
DEFAULT_TIMEOUT = 300


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _thread_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid thread count: {value}") from exc
    if not MIN_THREADS <= count <= MAX_THREADS:
        raise argparse.ArgumentTypeError(f"thread count must be between {MIN_THREADS} and {MAX_THREADS}")
    return count


def _timeout(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value}") from exc
    if not MIN_TIMEOUT <= seconds <= MAX_TIMEOUT:
        raise argparse.ArgumentTypeError(f"timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} seconds")
    return seconds


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autodoc",
        description="Extract configuration and type metadata from compiled class artifacts.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze class files, directories, jars or zip archives.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "targets",
        nargs="+",
        help="Class files, directories or archives to analyze.",
    )
    scope = analyze_parser.add_mutually_exclusive_group()
    scope.add_argument(
        "--config-only",
        action="store_true",
        help="Only extract configuration facts.",
    )
    scope.add_argument(
        "--types-only",
        action="store_true",
        help="Only extract type facts.",
    )
    analyze_parser.add_argument(
        "--validate",
        action="store_true",
        default=None,
        help="Validate the aggregate after analysis.",
    )
    mode = analyze_parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--parallel",
        type=_thread_count,
        metavar="N",
        help=f"Analyze on N worker threads ({MIN_THREADS}-{MAX_THREADS}).",
    )
    mode.add_argument(
        "--sequential",
        action="store_true",
        help="Analyze units one at a time.",
    )
    analyze_parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Only analyze units whose name fully matches PATTERN (repeatable).",
    )
    analyze_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Skip units whose name fully matches PATTERN (repeatable).",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=_timeout,
        metavar="SECONDS",
        help=f"Wall-clock limit per source ({MIN_TIMEOUT}-{MAX_TIMEOUT}, default {DEFAULT_TIMEOUT}).",
    )
    analyze_parser.add_argument(
        "--config-file",
        type=Path,
        help="Path to an .autodoc.yml file (defaults to ./.autodoc.yml when present).",
    )
    analyze_parser.add_argument(
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        help="Output format (default: text).",
    )
    analyze_parser.add_argument(
        "--output",
        type=Path,
        help="Write the rendered result to this file instead of stdout.",
    )
    analyze_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Allow --output to replace an existing file.",
    )
    analyze_parser.add_argument(
        "--with-core",
        action="store_true",
        help="Also analyze the jpf-core jar located through site.properties.",
    )
    analyze_parser.add_argument(
        "--no-site-lookup",
        action="store_true",
        help="Never read site.properties files.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def build_config(args: argparse.Namespace, file_config: FileConfig | None = None) -> AnalysisConfig:
    """Merge file settings and command-line flags; flags win."""
    builder = AnalysisConfig.builder().timeout(DEFAULT_TIMEOUT)
    if file_config is not None:
        file_config.apply(builder)

    if args.config_only:
        builder.analyze_configurations(True).analyze_types(False)
    if args.types_only:
        builder.analyze_configurations(False).analyze_types(True)
    if args.validate:
        builder.validate(True)
    if args.parallel is not None:
        builder.parallel(True).thread_count(args.parallel)
    if args.sequential:
        builder.parallel(False)
    for pattern in args.include:
        builder.include_pattern(pattern)
    for pattern in args.exclude:
        builder.exclude_pattern(pattern)
    if args.timeout is not None:
        builder.timeout(args.timeout)
    if getattr(args, "verbose", False):
        builder.verbose(True)
    if args.no_site_lookup:
        builder.site_lookup(False)
    return builder.build()


def _load_file_config(args: argparse.Namespace) -> FileConfig | None:
    if args.config_file is not None:
        if not args.config_file.exists():
            raise ConfigError(f"Config file not found: {args.config_file}")
        return load_config(args.config_file)
    return load_config(Path.cwd())


def _resolve_targets(args: argparse.Namespace, config: AnalysisConfig) -> List[str]:
    targets = [str(target) for target in args.targets]
    missing = [target for target in targets if not Path(target).expanduser().exists()]
    if missing:
        raise FileNotFoundError(f"Target not found: {', '.join(missing)}")
    if args.with_core:
        jar = SitePropertiesReader(enabled=config.site_lookup).core_jar_path()
        if jar is None:
            get_logger("cli").warning("jpf-core jar not found through site.properties; skipping --with-core")
        elif jar not in targets:
            targets.append(jar)
    return targets


def _select_format(args: argparse.Namespace, file_config: FileConfig | None) -> OutputFormat:
    if args.format:
        return OutputFormat.parse(args.format)
    if file_config is not None and file_config.output.format:
        return OutputFormat.parse(file_config.output.format)
    return OutputFormat.TEXT


def _render_report(report: RunReport, fmt: OutputFormat) -> str:
    return "\n".join(render(aggregate, fmt) for aggregate in report.results.values())


def _write_output(path: Path, content: str, *, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {path} (use --overwrite to replace it)")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _run_analyze(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    try:
        file_config = _load_file_config(args)
        config = build_config(args, file_config)
        targets = _resolve_targets(args, config)
        fmt = _select_format(args, file_config)
    except (ConfigError, FileNotFoundError, AutodocError) as exc:
        parser.exit(1, f"{exc}\n")

    enabled = file_config.analyzers.enabled if file_config and file_config.analyzers.enabled else None
    scope = file_config.analyzers.scope if file_config else None
    try:
        orchestrator = Orchestrator(analyzers=discover_analyzers(enabled, scope=scope))
    except (ValueError, TypeError, RuntimeError) as exc:
        parser.exit(1, f"autodoc analyze failed: {exc}\n")

    report = orchestrator.run_many(targets, config)
    content = _render_report(report, fmt)

    output_path: Optional[Path] = args.output
    if output_path is None and file_config is not None and file_config.output.directory is not None:
        output_path = file_config.output.directory / f"autodoc{fmt.extension}"
    try:
        if output_path is not None:
            _write_output(output_path, content, overwrite=bool(args.overwrite))
            print(f"Results written to {_relativize(output_path)}")
        else:
            sys.stdout.write(content)
    except (FileExistsError, OSError) as exc:
        parser.exit(1, f"{exc}\n")

    for source, exc in report.errors.items():
        print(f"autodoc analyze failed for {source}: {exc}", file=sys.stderr)
    return 1 if report.errors else 0


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for autodoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "analyze":
        status = _run_analyze(parser, args)
        if status:
            parser.exit(status, "Run with --verbose for more details.\n")
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
