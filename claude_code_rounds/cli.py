#!/usr/bin/env python3
"""CLI interface for claude-code-rounds."""

import logging
import sys
import traceback
from pathlib import Path
from typing import Callable, Optional

import click

from .context import extract_context_fields
from .converter import (
    create_round_list_output,
    export_thinking_sessions,
    load_preamble_entries,
    load_rounds,
    rounds_output_filename,
    write_rounds_json,
)
from .models import RawEntry, Round, RoundListOutput
from .parser import truncate_text
from .rounds import (
    RoundNotFoundError,
    extract_round,
    filter_rounds_by_date,
    filter_rounds_by_keyword,
    prepend_entries,
)
from .utils import format_timestamp

SUMMARY_LINE_LENGTH = 60
RULE = "-" * 80

date_options = [
    click.option(
        "--from-date",
        type=str,
        help='Keep rounds starting from this date/time (e.g., "2 hours ago", "yesterday", "2025-06-08")',
    ),
    click.option(
        "--to-date",
        type=str,
        help='Keep rounds starting up to this date/time (e.g., "1 hour ago", "today", "2025-06-08 15:00")',
    ),
]


def with_date_options(func: Callable[..., None]) -> Callable[..., None]:
    for option in reversed(date_options):
        func = option(func)
    return func


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _handle_error(ctx: click.Context, error: Exception) -> None:
    if ctx.obj and ctx.obj.get("debug"):
        click.echo(traceback.format_exc(), err=True)
    _fail(str(error))


def print_round_list(output: RoundListOutput) -> None:
    click.echo(f"\nFile: {output.filePath}")
    click.echo(f"Total rounds: {output.totalRounds}\n")
    click.echo(RULE)
    for item in output.rounds:
        click.echo(f"\n  Round #{item.number}")
        click.echo(f"  Started: {format_timestamp(item.startTimestamp)}")
        click.echo(f"  Summary: {item.summary}")
        click.echo(f"  Entries: {item.entryCount}")
    click.echo("\n" + RULE)


def print_round_summaries(rounds: list[Round]) -> None:
    for r in rounds:
        click.echo(
            f"  Round #{r.roundNumber}: {truncate_text(r.summary, SUMMARY_LINE_LENGTH)}"
        )
    click.echo("")


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Show full traceback on errors.",
)
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """Extract conversation rounds from Claude Code session JSONL files."""
    # Configure logging to show warnings and above
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command("list")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@with_date_options
@click.option("--json", "as_json", is_flag=True, help="Print the round index as JSON.")
@click.pass_context
def list_command(
    ctx: click.Context,
    file: Path,
    from_date: Optional[str],
    to_date: Optional[str],
    as_json: bool,
) -> None:
    """List all rounds in a session file.

    FILE is a session .jsonl log or a .json file written by extract.
    """
    try:
        _, rounds = load_rounds(file)
        rounds = filter_rounds_by_date(rounds, from_date, to_date)
    except (OSError, ValueError) as e:
        _handle_error(ctx, e)
        return

    output = create_round_list_output(rounds, str(file))
    if as_json:
        click.echo(output.model_dump_json(indent=2))
    else:
        print_round_list(output)


@main.command("extract")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("./output"),
    show_default=True,
    help="Output directory.",
)
@click.option(
    "-r",
    "--round",
    "round_number",
    type=click.IntRange(min=0),
    default=None,
    help="Print a single round to stdout as JSONL.",
)
@click.option("-k", "--keyword", type=str, help="Extract rounds whose summary matches.")
@click.option(
    "-s",
    "--system",
    "system_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON array of entries to prepend to every round.",
)
@with_date_options
@click.pass_context
def extract_command(
    ctx: click.Context,
    file: Path,
    output_dir: Path,
    round_number: Optional[int],
    keyword: Optional[str],
    system_file: Optional[Path],
    from_date: Optional[str],
    to_date: Optional[str],
) -> None:
    """Extract rounds from a session file.

    FILE is a session .jsonl log or a .json file written by a previous
    extract. By default all rounds are written to OUTPUT/<name>.json. With
    --round a single round is printed to stdout; with --keyword only
    matching rounds are written.
    """
    try:
        entries, rounds = load_rounds(file)

        preamble: list[RawEntry] = []
        if system_file is not None:
            context = extract_context_fields(entries)
            preamble = load_preamble_entries(system_file, context)
            if preamble:
                plural = "entry" if len(preamble) == 1 else "entries"
                click.echo(
                    f"Loaded {len(preamble)} system {plural} from: {system_file}",
                    err=True,
                )
                if context:
                    click.echo(
                        f"   Merged context fields: {', '.join(context)}", err=True
                    )

        rounds = filter_rounds_by_date(rounds, from_date, to_date)
    except (OSError, ValueError) as e:
        _handle_error(ctx, e)
        return

    if not rounds:
        click.echo("No rounds found in file")
        return

    rounds = prepend_entries(rounds, preamble)

    if round_number is not None:
        try:
            click.echo(extract_round(rounds, round_number))
        except RoundNotFoundError as e:
            _fail(str(e))
        return

    partial = False
    if keyword is not None:
        rounds = filter_rounds_by_keyword(rounds, keyword)
        if not rounds:
            click.echo(f'No rounds found matching keyword: "{keyword}"')
            return
        partial = True

    output_path = output_dir / rounds_output_filename(file.stem, rounds, partial)
    try:
        write_rounds_json(rounds, output_path)
    except OSError as e:
        _handle_error(ctx, e)
        return

    if partial:
        click.echo(f'\nFound {len(rounds)} rounds matching "{keyword}"')
        click.echo(f"   Extracted to: {output_path}\n")
    else:
        click.echo(f"\nExtracted {len(rounds)} rounds to: {output_path}\n")
    print_round_summaries(rounds)


@main.command("thinking")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("./output/thinking"),
    show_default=True,
    help="Output directory.",
)
@click.option("-r", "--recursive", is_flag=True, help="Scan directories recursively.")
@click.option(
    "-e",
    "--extract",
    is_flag=True,
    help="Write each round with thinking to its own .jsonl file.",
)
@click.pass_context
def thinking_command(
    ctx: click.Context,
    directory: Path,
    output_dir: Path,
    recursive: bool,
    extract: bool,
) -> None:
    """Find session files with thinking content and export them."""
    mode = "extract rounds with thinking" if extract else "copy files with thinking"
    click.echo(f"\nScanning {directory}{' (recursive)' if recursive else ''}")
    click.echo(f"   Output: {output_dir}")
    click.echo(f"   Mode: {mode}")
    click.echo(RULE)

    try:
        result = export_thinking_sessions(
            directory, output_dir, recursive=recursive, extract=extract, silent=False
        )
    except OSError as e:
        _handle_error(ctx, e)
        return

    for file_path, error in result.failed:
        click.echo(f"  {file_path.name}: {error}")
    click.echo(RULE)
    click.echo(
        f"\nStatistics: {len(result.files_with_thinking)}/{result.files_scanned} files have thinking content"
    )
    if extract:
        click.echo(
            f"Extracted {result.thinking_rounds} thinking rounds from "
            f"{len(result.files_with_thinking)} files to {output_dir}\n"
        )
    else:
        click.echo(f"Copied {len(result.written)} files to {output_dir}\n")


if __name__ == "__main__":
    main()
