"""CLI entry point for tokenpack."""

from __future__ import annotations

import logging
import sys
import time
from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer

from tokenpack import __version__
from tokenpack.config import (
    DEFAULT_MAX_SIZE,
    DEFAULT_OVERFLOW,
    BudgetConfig,
    parse_since,
    parse_size,
    split_extensions,
)
from tokenpack.discovery import SKIP_DIRS, discover_candidates
from tokenpack.estimate import format_tokens
from tokenpack.exceptions import ConfigError, TokenpackError
from tokenpack.models import Candidate, Origin, PackPlan
from tokenpack.pipeline import build_plan
from tokenpack.render import OutputFormat
from tokenpack.toon import encode_listing, encode_plan
from tokenpack.writer import EmitResult, check_output_safety, write_parts


def _info(message: str) -> None:
    typer.echo(f"[INFO]  {message}", err=True)


def _warn(message: str) -> None:
    typer.echo(f"[WARN]  {message}", err=True)


def _fail(exc: TokenpackError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(exc.exit_code)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="[DEBUG] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tokenpack v{__version__}")
        raise typer.Exit()


def _show_banner(
    root: Path,
    output: Path | None,
    fmt: OutputFormat,
    config: BudgetConfig,
    boost: Sequence[str],
    follow_imports: bool,
) -> None:
    _info(f"Source:   {root}")
    if output is not None:
        _info(f"Output:   {output}")
    _info(f"Format:   {fmt.value}")
    if config.max_total_tokens:
        _info(
            f"Budget:   {format_tokens(config.max_total_tokens)} tokens "
            f"(overflow: {config.overflow_tolerance})"
        )
    if config.max_file_tokens:
        _info(f"Per-file: max {format_tokens(config.max_file_tokens)} tokens")
    if config.split_tokens:
        _info(f"Split:    ~{format_tokens(config.split_tokens)} tokens per part")
    if boost:
        _info(f"Boost:    {', '.join(boost)}")
    if follow_imports:
        _info("Imports:  following relative imports (one level)")


def _report_selection(plan: PackPlan) -> None:
    ledger = plan.ledger
    if ledger.skipped:
        _info(f"Skipped {ledger.skipped} files exceeding token budget")
    if plan.dependencies:
        added = sum(1 for c in plan.candidates if c.origin is Origin.IMPORT)
        _info(f"Imports:  {len(plan.dependencies)} edges, {added} files added")
    budget = plan.config.max_total_tokens
    if budget:
        _info(
            f"Selected {len(ledger.admitted)} files "
            f"(~{ledger.total_tokens} tokens within {budget} budget)"
        )
    else:
        _info(f"Selected {len(ledger.admitted)} files (~{ledger.total_tokens} tokens)")


def _report_emission(result: EmitResult, split: bool, elapsed: float) -> None:
    if split:
        for part in result.parts:
            _info(
                f"  Part {part.index}: {part.path} ({part.files} files, "
                f"~{part.tokens} tokens, {part.size_bytes} bytes)"
            )
        _info(f"Created {len(result.parts)} part files (~{result.tokens} total tokens)")
    for error in result.errors:
        _warn(f"Could not read {error}")
    _info(f"Done in {elapsed:.2f}s")
    _info(f"Size:     {result.size_bytes} bytes")
    _info(f"Tokens:   ~{result.tokens}")
    _info(f"Files:    {result.files}")
    if result.truncated:
        _info(f"Truncated: {result.truncated}")
    if result.errors:
        _warn(f"{len(result.errors)} files could not be read")


def _show_stats(files: Sequence[Candidate]) -> None:
    _info("Extension breakdown:")
    counts = Counter(f".{c.extension}" if c.extension else "(none)" for c in files)
    for ext, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        typer.echo(f"  {count:5d}  {ext}", err=True)


app = typer.Typer(
    name="tokenpack",
    help="Pack recent source files into token-budgeted output parts.",
    no_args_is_help=False,
)


@app.command()
def main(
    root: Annotated[
        Path,
        typer.Argument(
            help="Source directory to scan.",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Argument(help="Output file; parts get a _partN suffix."),
    ] = None,
    include: Annotated[
        list[str] | None,
        typer.Option("--include", "-i", help='Only these extensions (e.g. "ts,tsx").'),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-e", help='Skip these extensions (e.g. "log").'),
    ] = None,
    exclude_dirs: Annotated[
        str | None,
        typer.Option(
            "--exclude-dirs",
            "-d",
            help="Comma-separated directory names to skip (replaces defaults).",
        ),
    ] = None,
    max_size: Annotated[
        str,
        typer.Option("--max-size", "-s", help="Max source file size (e.g. 512K, 10M)."),
    ] = DEFAULT_MAX_SIZE,
    since: Annotated[
        str | None,
        typer.Option("--since", help="Only files modified after this ISO date."),
    ] = None,
    recent: Annotated[
        int,
        typer.Option(
            "--recent",
            "-r",
            min=0,
            help="Consider only the N most recently modified files.",
        ),
    ] = 0,
    max_tokens: Annotated[
        int,
        typer.Option(
            "--max-tokens",
            envvar="TOKENPACK_MAX_TOKENS",
            help="Total token budget (0 = unlimited).",
        ),
    ] = 0,
    max_file_tokens: Annotated[
        int,
        typer.Option(
            "--max-file-tokens",
            envvar="TOKENPACK_MAX_FILE_TOKENS",
            help="Per-file token cap; longer files are truncated (0 = no cap).",
        ),
    ] = 0,
    split_tokens: Annotated[
        int,
        typer.Option(
            "--split-tokens",
            envvar="TOKENPACK_SPLIT_TOKENS",
            help="Split output into parts of about N tokens (0 = single file).",
        ),
    ] = 0,
    overflow: Annotated[
        int,
        typer.Option(
            "--overflow",
            envvar="TOKENPACK_OVERFLOW",
            help="Tolerance above the budget before a file is skipped.",
        ),
    ] = DEFAULT_OVERFLOW,
    boost: Annotated[
        list[str] | None,
        typer.Option(
            "--boost",
            "-b",
            help="Glob pattern for files to place first (repeatable).",
        ),
    ] = None,
    follow_imports: Annotated[
        bool,
        typer.Option(
            "--follow-imports",
            help="Also include files imported by the selected files (one level).",
        ),
    ] = False,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", case_sensitive=False, help="Output format."),
    ] = OutputFormat.TEXT,
    line_numbers: Annotated[
        bool,
        typer.Option("--line-numbers", "-n", help="Prefix content lines with numbers."),
    ] = False,
    list_only: Annotated[
        bool,
        typer.Option("--list", help="List selected files with metadata; no output."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the selection plan without writing."),
    ] = False,
    stats: Annotated[
        bool,
        typer.Option("--stats", help="Show an extension breakdown afterwards."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log every selection decision."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Select files newest-first under a token budget and write them out."""
    started = time.perf_counter()
    _configure_logging(verbose)

    try:
        config = BudgetConfig.from_values(
            max_total_tokens=max_tokens,
            max_file_tokens=max_file_tokens,
            split_tokens=split_tokens,
            overflow_tolerance=overflow,
        )
        max_size_bytes = parse_size(max_size)
        since_ts = parse_since(since) if since else None
        if output is None and not (list_only or dry_run):
            raise ConfigError("Output file required (or use --list / --dry-run)")
        if output is not None and not (list_only or dry_run):
            check_output_safety(root, [output])
    except TokenpackError as exc:
        raise _fail(exc) from exc

    boost_patterns = list(boost or [])
    _show_banner(root, output, fmt, config, boost_patterns, follow_imports)

    skip_dirs = SKIP_DIRS
    if exclude_dirs is not None:
        skip_dirs = frozenset(d.strip() for d in exclude_dirs.split(",") if d.strip())

    _info("Collecting files...")
    candidates = discover_candidates(
        root,
        include_exts=split_extensions(include),
        exclude_exts=split_extensions(exclude),
        exclude_dirs=skip_dirs,
        max_size_bytes=max_size_bytes,
        since=since_ts,
        recent=recent,
    )
    if not candidates:
        typer.echo("No files matched criteria.", err=True)
        raise typer.Exit(1)
    _info(f"Found {len(candidates)} files")

    try:
        plan = build_plan(
            root,
            candidates,
            config,
            boost=boost_patterns,
            follow_imports=follow_imports,
        )
    except TokenpackError as exc:
        raise _fail(exc) from exc

    _report_selection(plan)

    if list_only:
        typer.echo(encode_listing(plan.selected, config))
    elif dry_run:
        typer.echo(encode_plan(plan))
        if config.split_tokens:
            _info(f"Would create {len(plan.parts)} output parts")
    else:
        assert output is not None
        try:
            result = write_parts(plan, output, fmt, line_numbers=line_numbers)
        except TokenpackError as exc:
            raise _fail(exc) from exc
        _report_emission(
            result, config.split_tokens > 0, time.perf_counter() - started
        )

    if stats:
        _show_stats(plan.selected)
