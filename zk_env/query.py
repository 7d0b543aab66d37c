"""
Query module for Zettelkasten notes.

This module provides the command line interface: build an index, filter
notes into an environment and display statistics about that environment.
"""

import os
import json
import logging
import time
from collections import Counter
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

import typer
from tabulate import tabulate

from zk_env.config import load_config, get_config_value, get_notes_dir, resolve_path
from zk_env.constants import DEFAULT_INDEX_FILENAME, DEFAULT_FILTER_MODE, DEFAULT_STATS_LIMIT
from zk_env.filter import Filter, FilterMode, tag_closure
from zk_env.index import load_notes_dir, load_index_file, save_index_file
from zk_env.models import NoteIndex, EnvironmentStatistics
from zk_env.statistics import compute_environment_statistics

app = typer.Typer(help="Filter Zettelkasten notes into environments and inspect their link graph.")

# ANSI Colors for formatting
COLOR_CODES: Dict[str, str] = {
    'reset': "\033[0m",
    'bold': "\033[1m",
    'red': "\033[31m",
    'green': "\033[32m",
    'yellow': "\033[33m",
    'cyan': "\033[36m",
}

OUTPUT_FORMATS = ('plain', 'json', 'table')

logger = logging.getLogger(__name__)

# --- Helper Functions ---

def colorize(text: str, color: Optional[str]) -> str:
    """Apply ANSI color to text if color is specified."""
    if color and color in COLOR_CODES:
        return f"{COLOR_CODES[color]}{text}{COLOR_CODES['reset']}"
    return text

def configure_logging(config: Dict[str, Any], verbose: bool = False) -> None:
    """Configure the root logger from the logging section of the config."""
    level = "DEBUG" if verbose else get_config_value(config, "logging.level", "INFO")
    log_file = get_config_value(config, "logging.file")
    kwargs: Dict[str, Any] = {"level": getattr(logging, level, logging.INFO),
                              "format": '%(levelname)s: %(message)s',
                              "force": True}
    if log_file:
        kwargs["filename"] = resolve_path(log_file)
    logging.basicConfig(**kwargs)

def resolve_mode(ctx: typer.Context, mode: Optional[str]) -> FilterMode:
    """Get the filter mode with priority: CLI > config file > default."""
    config = ctx.obj.get("config", {}) if ctx.obj else {}
    value = mode if mode is not None else get_config_value(config, "filter.default_mode", DEFAULT_FILTER_MODE)
    try:
        return FilterMode.from_string(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--mode")

def check_output_format(output_format: str) -> str:
    """Validate an output format name."""
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"Expected one of {', '.join(OUTPUT_FORMATS)}", param_hint="-o")
    return output_format

def load_index(ctx: typer.Context, index_file: Optional[Path], notes_dir: Optional[Path]) -> NoteIndex:
    """
    Load the note index.

    Priority: explicit index file > explicit notes directory > index file in
    the configured notes directory > scanning the configured notes directory.
    """
    config = ctx.obj.get("config", {}) if ctx.obj else {}
    start_time = time.time()

    if index_file is None and notes_dir is None:
        configured_dir = get_notes_dir(config)
        default_index = get_config_value(config, "index.index_file", DEFAULT_INDEX_FILENAME)
        candidate = Path(os.path.join(configured_dir, default_index))
        if candidate.exists():
            index_file = candidate
            logger.debug(f"Using default index file from config: {index_file}")
        else:
            notes_dir = Path(configured_dir)

    if index_file is not None:
        index = load_index_file(index_file)
        if index is None:
            logger.error(f"Could not load index file '{index_file}'.")
            raise typer.Exit(1)
    else:
        if not notes_dir.is_dir():
            logger.error(f"Notes directory '{notes_dir}' does not exist.")
            raise typer.Exit(1)
        exclude_patterns = get_config_value(config, "index.exclude_patterns")
        index = load_notes_dir(str(notes_dir), exclude_patterns)

    logger.debug(f"Loaded {len(index)} notes in {time.time() - start_time:.2f} seconds")
    return index

# --- Output Formatting ---

def format_matches(index: NoteIndex, matches: List[Tuple[str, int]], output_format: str) -> str:
    """Format (id, score) matches of a filter."""
    match output_format:
        case 'json':
            records = []
            for note_id, score in matches:
                record = index[note_id].to_dict()
                record['score'] = score
                records.append(record)
            return json.dumps(records, indent=2, ensure_ascii=False)
        case 'table':
            rows = [[note_id, index[note_id].name, score, ", ".join(sorted(index[note_id].tags))]
                    for note_id, score in matches]
            return tabulate(rows, headers=["id", "name", "score", "tags"], tablefmt="grid")
        case _:
            return "\n".join(f"{note_id}::{index[note_id].name}::{score}" for note_id, score in matches)

def format_statistics(stats: EnvironmentStatistics, output_format: str, limit: int,
                      use_color: bool = False) -> str:
    """Format environment statistics."""
    if output_format == 'json':
        return json.dumps(stats.to_dict(), indent=2)

    header = colorize("Environment Statistics:", 'bold' if use_color else None)
    lines = [
        header,
        f"  Notes: {stats.note_count_total:,}",
        f"  Unique tags: {stats.tag_count_total:,}",
        f"  Words: {stats.word_count_total:,}",
        f"  Characters: {stats.char_count_total:,}",
        "",
        "Links:",
        f"  Within environment: {stats.local_local_links:,}",
        f"  From environment to any note: {stats.local_global_links:,}",
        f"  From any note into environment: {stats.global_local_links:,}",
        f"  Broken: {colorize(f'{stats.broken_links:,}', 'red' if use_color and stats.broken_links else None)}",
    ]

    shown = stats.filtered_stats[:limit] if limit else stats.filtered_stats
    if shown:
        rows = [[s.id, s.match_score, s.inlinks_global, s.inlinks_local,
                 s.outlinks_local, s.outlinks_global, s.broken_links] for s in shown]
        headers = ["id", "score", "in (global)", "in (local)", "out (local)", "out (global)", "broken"]
        lines.append("")
        if output_format == 'table':
            lines.append(tabulate(rows, headers=headers, tablefmt="grid"))
        else:
            lines.append(tabulate(rows, headers=headers, tablefmt="plain"))
        if len(shown) < len(stats.filtered_stats):
            lines.append(f"... and {len(stats.filtered_stats) - len(shown)} more")
    return "\n".join(lines)

def count_tags(index: NoteIndex) -> Counter:
    """Count notes per tag path, ancestors included."""
    counter: Counter = Counter()
    for note in index.values():
        paths = set()
        for tag in note.tags:
            paths.update(tag_closure(tag))
        counter.update(paths)
    return counter

# --- Commands ---

@app.callback()
def main(ctx: typer.Context,
         config_file: Optional[Path] = typer.Option(None, "--config-file", help="Path to a YAML configuration file."),
         verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")):
    """Initialize the Typer context with configuration."""
    ctx.obj = {}
    ctx.obj["config"] = load_config(config_file)
    configure_logging(ctx.obj["config"], verbose)

@app.command(name="index")
def index_(
    ctx: typer.Context,
    notes_dir: Optional[Path] = typer.Argument(None, help="Notes directory to scan (default: from config)."),
    output_file: Optional[Path] = typer.Option(None, "-o", "--output-file", help="Index file to write."),
):
    """Scan a notes directory and write a JSON index file."""
    config = ctx.obj.get("config", {})
    if notes_dir is None:
        notes_dir = Path(get_notes_dir(config))
    if not notes_dir.is_dir():
        logger.error(f"Notes directory '{notes_dir}' does not exist.")
        raise typer.Exit(1)
    if output_file is None:
        output_file = notes_dir / get_config_value(config, "index.index_file", DEFAULT_INDEX_FILENAME)

    index = load_notes_dir(str(notes_dir), get_config_value(config, "index.exclude_patterns"), quiet=False)
    if not save_index_file(output_file, index):
        raise typer.Exit(1)
    typer.echo(f"Index updated: {len(index)} notes written to {output_file}")

@app.command(name="filter")
def filter_(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Query, e.g. '#os !#os/win >linux kernel'."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Combine predicates with 'any' or 'all'."),
    index_file: Optional[Path] = typer.Option(None, "-i", help="Path to index JSON file."),
    notes_dir: Optional[Path] = typer.Option(None, "-d", help="Notes directory to scan instead of an index file."),
    output_format: str = typer.Option("plain", "-o", help="Output format: plain, json, table."),
):
    """List the notes matching a query, best match first."""
    output_format = check_output_format(output_format)
    note_filter = Filter.parse(query, resolve_mode(ctx, mode))
    index = load_index(ctx, index_file, notes_dir)

    matches = []
    for note_id, note in index.items():
        score = note_filter.evaluate(note)
        if score is not None:
            matches.append((note_id, score))
    matches.sort(key=lambda item: (-item[1], item[0]))

    if not matches and output_format != 'json':
        typer.echo("No matching notes found.")
        return
    typer.echo(format_matches(index, matches, output_format))

@app.command(name="stats")
def stats(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Query selecting the environment (default: all notes)."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Combine predicates with 'any' or 'all'."),
    index_file: Optional[Path] = typer.Option(None, "-i", help="Path to index JSON file."),
    notes_dir: Optional[Path] = typer.Option(None, "-d", help="Notes directory to scan instead of an index file."),
    output_format: str = typer.Option("plain", "-o", help="Output format: plain, json, table."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of per-note rows (0 = all)."),
    color: bool = typer.Option(False, "--color", help="Colorize output."),
):
    """Display statistics about the environment selected by a query."""
    output_format = check_output_format(output_format)
    config = ctx.obj.get("config", {})
    if limit is None:
        limit = get_config_value(config, "stats.limit", DEFAULT_STATS_LIMIT)

    note_filter = Filter.parse(query, resolve_mode(ctx, mode))
    index = load_index(ctx, index_file, notes_dir)
    environment = compute_environment_statistics(index, note_filter)
    typer.echo(format_statistics(environment, output_format, limit, color))

@app.command(name="tags")
def tags(
    ctx: typer.Context,
    index_file: Optional[Path] = typer.Option(None, "-i", help="Path to index JSON file."),
    notes_dir: Optional[Path] = typer.Option(None, "-d", help="Notes directory to scan instead of an index file."),
):
    """List unique tag paths with the number of notes under each."""
    index = load_index(ctx, index_file, notes_dir)
    counter = count_tags(index)
    if not counter:
        typer.echo("No tags found.")
        return
    for tag in sorted(counter):
        typer.echo(f"{tag}::{counter[tag]}")

if __name__ == "__main__":
    app()
