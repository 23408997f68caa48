"""Command-line interface for midi-cleaner.

Provides commands for:
- clean: Merge, filter and quantize a transcribed NoteSequence
- info: Show NoteSequence statistics
"""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .core import (
    DEFAULT_MERGE_THRESHOLD,
    DEFAULT_MIN_NOTE_DURATION,
    DEFAULT_QUANTIZE_RESOLUTION,
    DEFAULT_TEMPO,
    InvalidArgumentError,
    Note,
    NoteSequence,
)

app = typer.Typer(
    name="midi-cleaner",
    help="Cleanup pipeline for transcribed note sequences",
    rich_markup_mode="markdown",
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr, keeping stdout for results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_sequence(input_file: Path) -> NoteSequence:
    from .input import NoteSequenceLoader

    try:
        return NoteSequenceLoader().load(input_file)
    except FileNotFoundError:
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def clean(
    input_file: Path = typer.Argument(..., help="Input NoteSequence JSON file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output JSON file path"
    ),
    min_duration: float = typer.Option(
        DEFAULT_MIN_NOTE_DURATION, "--min-duration", help="Minimum note duration in seconds"
    ),
    merge_threshold: float = typer.Option(
        DEFAULT_MERGE_THRESHOLD, "--merge-threshold", help="Maximum gap in seconds between merged notes"
    ),
    resolution: float = typer.Option(
        DEFAULT_QUANTIZE_RESOLUTION, "-r", "--resolution", help="Quantization grid in seconds"
    ),
    subdivision: int = typer.Option(
        0, "--subdivision", help="Derive the grid from the sequence tempo (e.g., 16 for 16th notes). 0 = use --resolution"
    ),
    quantize: bool = typer.Option(
        True, "-q", "--quantize/--no-quantize", help="Quantize notes to grid"
    ),
    single_pass: bool = typer.Option(
        False, "--single-pass", help="Use the simple same-pitch filter-then-merge cleanup"
    ),
    max_merges: Optional[int] = typer.Option(
        None, "--max-merges", help="Cap on cross-pitch merges (default: unbounded)"
    ),
    show_notes: bool = typer.Option(
        False, "--show-notes", help="Print original and cleaned notes"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Clean a transcribed NoteSequence.

    **Examples:**

        midi-cleaner clean transcription.json

        midi-cleaner clean transcription.json -o cleaned.json --resolution 0.25

        midi-cleaner clean transcription.json --subdivision 8 --show-notes
    """
    from .processing import CleanupConfig, NoteCleanup, Quantizer
    from .output import NoteSequenceExporter

    _setup_logging(verbose)
    sequence = _load_sequence(input_file)

    if output is None:
        output = input_file.with_suffix(".cleaned.json")

    try:
        if subdivision > 0:
            tempo = sequence.tempo or DEFAULT_TEMPO
            resolution = Quantizer.from_tempo(tempo, subdivision).resolution
            if not json_output:
                console.print(f"  Grid: 1/{subdivision} at {tempo:.1f} BPM = {resolution:.4f}s")

        config = CleanupConfig(
            min_note_duration=min_duration,
            merge_threshold=merge_threshold,
            quantize_resolution=resolution,
            max_cross_pitch_merges=max_merges,
            quantize=quantize,
        )
    except InvalidArgumentError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    cleaner = NoteCleanup(config)

    if not json_output:
        console.print(f"[blue]Cleaning:[/blue] {input_file} ({len(sequence.notes)} notes)")

    if single_pass:
        cleaned, stats = cleaner.cleanup_single_pass(sequence, return_stats=True)
    else:
        cleaned, stats = cleaner.cleanup(sequence, return_stats=True)

    NoteSequenceExporter().export(cleaned, output)

    if json_output:
        result = {
            "input": str(input_file),
            "output": str(output),
            "mode": "single-pass" if single_pass else "full",
            "original_count": stats.original_count,
            "final_count": stats.final_count,
            "merged_same_pitch": stats.merged_same_pitch,
            "merged_cross_pitch": stats.merged_cross_pitch,
            "removed_short_notes": stats.removed_short_notes,
            "cumulative_shift": stats.cumulative_shift,
            "notes_per_sec": stats.notes_per_sec,
            "parameters": {
                "min_duration": min_duration,
                "merge_threshold": merge_threshold,
                "resolution": resolution if quantize else None,
                "max_merges": max_merges,
            },
        }
        console.print_json(data=result)
        return

    console.print(
        f"  Merged: {stats.merged_same_pitch} same-pitch, {stats.merged_cross_pitch} cross-pitch"
    )
    console.print(f"  Removed: {stats.removed_short_notes} short notes")
    if quantize and not single_pass:
        console.print(f"  Gap shift: {stats.cumulative_shift:.3f}s")
    console.print(f"  Notes: {stats.original_count} -> {stats.final_count}")

    if show_notes:
        _show_notes_table("Original Notes", sequence.notes)
        _show_notes_table("Cleaned Notes", cleaned.notes)

    console.print(f"[blue]Exported to:[/blue] {output}")
    console.print("[green]Cleanup complete![/green]")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input NoteSequence JSON file"),
):
    """Show information about a NoteSequence file."""
    sequence = _load_sequence(input_file)
    notes = sequence.notes

    console.print(f"\n[bold]NoteSequence Info:[/bold] {input_file.name}")
    console.print(f"  Notes: {len(notes)}")

    if sequence.tempo is not None:
        console.print(f"  Tempo: {sequence.tempo:.1f} BPM")

    if not notes:
        return

    durations = np.array([n.duration for n in notes])
    start = min(n.start_time for n in notes)
    end = max(n.end_time for n in notes)
    low = min(notes, key=lambda n: n.pitch)
    high = max(notes, key=lambda n: n.pitch)

    console.print(f"  Time span: {start:.2f}-{end:.2f}s")
    console.print(f"  Pitch range: {low.pitch_name} ({low.pitch}) - {high.pitch_name} ({high.pitch})")
    console.print(f"  Mean duration: {durations.mean():.3f}s")
    if end > start:
        console.print(f"  Notes per second: {len(notes) / (end - start):.1f}")

    malformed = int(np.sum(durations < 0))
    if malformed:
        console.print(f"  [yellow]Malformed notes (end before start): {malformed}[/yellow]")


def _show_notes_table(title: str, notes: List[Note]) -> None:
    """Display notes in a table."""
    table = Table(title=title)
    table.add_column("Pitch", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("End", style="yellow")
    table.add_column("Velocity", style="magenta")

    for note in sorted(notes, key=lambda n: (n.start_time, n.pitch)):
        table.add_row(
            f"{note.pitch_name} ({note.pitch})",
            f"{note.start_time:.2f}",
            f"{note.end_time:.2f}",
            "-" if note.velocity is None else str(note.velocity),
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
