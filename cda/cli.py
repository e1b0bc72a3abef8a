"""CLI entrypoints for cda commands."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from .config import (
    CONFIG_FILENAME,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PARALLELISM,
    DEFAULT_PROVIDER,
    CdaConfig,
    ConfigError,
    config_path_for,
    load_config,
    render_default_config,
)
from .crossref import cross_reference, cross_reference_with_llm
from .discovery import DiscoveryError, discover
from .llm import CompletionConfig, ProviderError, get_provider
from .logging import configure_logging, get_logger
from .orchestrator import (
    DEFAULT_BACKOFF_BASE,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_ENRICHMENT_BYTES,
    MODULE_COMPLETION,
    Orchestrator,
)
from .output import OutputError, OutputFormat, ensure_output_root, generate
from .stores import ProgressCheckpoint
from .verify import verify_output


def _add_global_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    # Subparsers repeat the global options so they work after the command name.
    verbose_default: object = argparse.SUPPRESS if suppress_default else False
    format_default: object = argparse.SUPPRESS if suppress_default else None
    log_file_default: object = argparse.SUPPRESS if suppress_default else None
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=verbose_default,
        help="Enable verbose logging.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=format_default,
        help="Output format (default: markdown, or output.format in .cda.yml).",
    )
    parser.add_argument(
        "--log-file",
        default=log_file_default,
        help="Also write the log to this file (env: CDA_LOG_FILE).",
    )


def _add_path_argument(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("path", nargs="?", default=".", help=help_text)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cda",
        description="Codebase Deep Analyzer - systematic codebase exploration and documentation.",
    )
    _add_global_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a codebase and generate documentation.",
    )
    _add_global_options(analyze_parser, suppress_default=True)
    _add_path_argument(analyze_parser, "Path to the codebase to analyze (defaults to current directory).")
    analyze_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help=f"Output directory for generated documentation (default: ./{DEFAULT_OUTPUT_DIR}).",
    )
    analyze_parser.add_argument(
        "-m",
        "--module",
        default=None,
        help="Only analyze this module or directory beneath the codebase root.",
    )
    analyze_parser.add_argument(
        "--provider",
        default=None,
        help="LLM provider: anthropic, openai or ollama (env: CDA_PROVIDER).",
    )
    analyze_parser.add_argument(
        "--model",
        default=None,
        help="Model to use for analysis (env: CDA_MODEL).",
    )
    analyze_parser.add_argument(
        "-p",
        "--parallelism",
        type=int,
        default=None,
        help=f"Number of concurrent analysis workers (default: {DEFAULT_PARALLELISM}).",
    )
    analyze_parser.add_argument(
        "--static-only",
        action="store_true",
        help="Skip LLM analysis and only run structural parsing.",
    )
    analyze_parser.add_argument(
        "--fresh",
        action="store_true",
        help="Discard the progress checkpoint and analyze every file again.",
    )

    verify_parser = subparsers.add_parser(
        "verify",
        help="Check that generated documentation still matches the codebase.",
    )
    _add_global_options(verify_parser, suppress_default=True)
    _add_path_argument(verify_parser, "Path to the analyzed codebase (defaults to current directory).")
    verify_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help=f"Directory holding the previous analysis (default: ./{DEFAULT_OUTPUT_DIR}).",
    )

    config_parser = subparsers.add_parser(
        "config",
        help=f"Show or create the {CONFIG_FILENAME} configuration file.",
    )
    _add_global_options(config_parser, suppress_default=True)
    _add_path_argument(config_parser, "Repository root holding the configuration file.")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help=f"Write a default {CONFIG_FILENAME}.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cda commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = _resolve_setting(args.log_file, "CDA_LOG_FILE", None)
    try:
        configure_logging(
            verbose=bool(args.verbose),
            log_file=Path(log_file).expanduser() if log_file else None,
        )
    except OSError as exc:
        parser.exit(1, f"Cannot open log file {log_file}: {exc}\n")

    if args.command == "config":
        _run_config(parser, args)
        return

    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "analyze":
        _run_analyze(parser, args, config)
    elif args.command == "verify":
        _run_verify(parser, args, config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_analyze(parser: argparse.ArgumentParser, args: argparse.Namespace, config: CdaConfig) -> None:
    logger = get_logger("cli")
    root = Path(args.path).expanduser().resolve()
    output_root = _resolve_output(args.output, config)
    fmt = OutputFormat(_resolve_format(args.format, config))
    settings = config.analysis
    if args.parallelism is not None:
        parallelism = args.parallelism
    else:
        parallelism = settings.parallelism or DEFAULT_PARALLELISM
    if parallelism < 1:
        parser.exit(1, "--parallelism must be at least 1\n")

    exclude_paths = list(settings.exclude_paths)
    if output_root != root and output_root.is_relative_to(root):
        exclude_paths.append("/" + output_root.relative_to(root).as_posix() + "/")

    try:
        logger.info("Analyzing codebase at %s", root)
        inventory = discover(
            root,
            args.module,
            exclude_paths=exclude_paths,
            max_file_size=settings.max_file_size,
        )
        logger.info(
            "Found %d files (%d source, %d config, %d docs, %d tests)",
            inventory.total_files(),
            len(inventory.source_files),
            len(inventory.config_files),
            len(inventory.doc_files),
            len(inventory.test_files),
        )
        ensure_output_root(output_root)

        orchestrator = Orchestrator(
            max_enrichment_bytes=settings.max_enrichment_bytes or DEFAULT_MAX_ENRICHMENT_BYTES,
            max_attempts=settings.max_attempts or DEFAULT_MAX_ATTEMPTS,
            backoff_base=(
                settings.backoff_base
                if settings.backoff_base is not None
                else DEFAULT_BACKOFF_BASE
            ),
            completion=_completion_config(config),
        )

        if args.static_only:
            logger.debug("Running static analysis only (--static-only)")
            analysis = orchestrator.run_static(inventory)
            crossref = cross_reference(analysis)
            written = generate(analysis, crossref, output_root, fmt)
        else:
            provider = get_provider(
                _resolve_setting(args.provider, "CDA_PROVIDER", config.llm.provider)
                or DEFAULT_PROVIDER,
                _resolve_setting(args.model, "CDA_MODEL", config.llm.model),
                request_timeout=config.llm.request_timeout,
            )
            if args.fresh:
                ProgressCheckpoint.in_directory(output_root).clear()
            analysis = orchestrator.run_streaming(inventory, provider, output_root, parallelism)
            crossref = cross_reference_with_llm(analysis, provider)
            written = generate(analysis, crossref, output_root, fmt, skip_existing_modules=True)
    except (DiscoveryError, OutputError, ProviderError, ValueError) as exc:
        parser.exit(1, f"cda analyze failed: {exc}\nRun with --verbose for more details.\n")

    logger.info(
        "Analyzed %d modules, found %d exports, %d potential gaps",
        len(analysis.modules),
        analysis.total_exports(),
        len(crossref.gaps),
    )
    print(f"Output written to {_relativize(output_root)} ({len(written)} files)")


def _run_verify(parser: argparse.ArgumentParser, args: argparse.Namespace, config: CdaConfig) -> None:
    output_root = _resolve_output(args.output, config)
    try:
        report = verify_output(
            Path(args.path), output_root, exclude_paths=config.analysis.exclude_paths
        )
    except (DiscoveryError, OutputError) as exc:
        parser.exit(1, f"cda verify failed: {exc}\n")

    if report.ok:
        print(f"Documentation is up to date ({report.analyzed} modules)")
        return
    for path in report.missing:
        print(f"missing: {path}")
    for name in report.orphaned:
        print(f"orphaned: {name}")
    parser.exit(
        1,
        f"{len(report.missing)} missing, {len(report.orphaned)} orphaned module documents\n",
    )


def _run_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    config_file = config_path_for(Path(args.path))
    if args.init:
        if config_file.exists():
            parser.exit(1, f"{_relativize(config_file)} already exists\n")
        try:
            config_file.write_text(render_default_config(), encoding="utf-8")
        except OSError as exc:
            parser.exit(1, f"Cannot write {config_file}: {exc}\n")
        print(f"Created {_relativize(config_file)}")
        return

    try:
        config = load_config(config_file)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    source = _relativize(config_file) if config_file.exists() else "built-in defaults"
    print(f"Configuration ({source}):")
    print(f"  provider:    {_resolve_setting(None, 'CDA_PROVIDER', config.llm.provider) or DEFAULT_PROVIDER}")
    print(f"  model:       {_resolve_setting(None, 'CDA_MODEL', config.llm.model) or '(provider default)'}")
    print(f"  parallelism: {config.analysis.parallelism or DEFAULT_PARALLELISM}")
    print(f"  format:      {config.output.format or OutputFormat.MARKDOWN.value}")
    print(f"  output:      {config.output.directory or DEFAULT_OUTPUT_DIR}")
    if config.analysis.exclude_paths:
        print(f"  exclude:     {', '.join(config.analysis.exclude_paths)}")


def _resolve_setting(flag: Optional[str], env_key: str, configured: Optional[str]) -> Optional[str]:
    """Flag beats environment, environment beats .cda.yml."""
    if flag:
        return flag
    env_value = os.environ.get(env_key)
    if env_value:
        return env_value
    return configured


def _resolve_output(flag: Optional[str], config: CdaConfig) -> Path:
    if flag:
        return Path(flag).expanduser().resolve()
    if config.output.directory:
        directory = Path(config.output.directory).expanduser()
        if not directory.is_absolute():
            directory = config.root / directory
        return directory.resolve()
    return (Path.cwd() / DEFAULT_OUTPUT_DIR).resolve()


def _resolve_format(flag: Optional[str], config: CdaConfig) -> str:
    value = flag or config.output.format or OutputFormat.MARKDOWN.value
    if value not in {fmt.value for fmt in OutputFormat}:
        return OutputFormat.MARKDOWN.value
    return value


def _completion_config(config: CdaConfig) -> CompletionConfig:
    return CompletionConfig(
        max_tokens=config.llm.max_tokens or MODULE_COMPLETION.max_tokens,
        temperature=(
            config.llm.temperature
            if config.llm.temperature is not None
            else MODULE_COMPLETION.temperature
        ),
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
