"""Command-line interface for pitchtrack.

Provides commands for:
- detect: Replay a recording through the engine and list stable readings
- note: Name the note for a frequency
- range: Find the lowest or highest stable note in a recording
- voices: Show the standard voice ranges
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.constants import DEFAULT_BUFFER_SIZE, DEFAULT_TICK_MS

app = typer.Typer(
    name="pitchtrack",
    help="Monophonic pitch tracking for ear training",
    rich_markup_mode="markdown",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_tracker(
    input_file: Path,
    sensitivity: str,
    buffer_size: int,
    tick_ms: int,
    gain: float,
    config_file: Optional[Path],
):
    """Wire file source, detector and stability filter from CLI options."""
    from .analysis import PitchDetector
    from .config import EngineConfig, load_config
    from .input import ArraySource
    from .processing import StabilityConfig, StabilityFilter
    from .tracker import PitchTracker

    if config_file is not None:
        config = load_config(config_file, default_sensitivity=sensitivity)
    else:
        config = EngineConfig(stability=StabilityConfig.from_preset(sensitivity))

    source = ArraySource.from_file(
        input_file, buffer_size=buffer_size, tick_ms=tick_ms, gain=gain
    )
    return PitchTracker(
        source,
        detector=PitchDetector(config=config.detector),
        stability=StabilityFilter(config=config.stability),
    )


def _collapse_readings(results, max_gap_ms: int) -> List[dict]:
    """Merge consecutive locked ticks on the same note into held segments."""
    segments: List[dict] = []
    for result in results:
        reading = result.stable
        if reading is None:
            continue
        last = segments[-1] if segments else None
        if last and last["note"] == reading.note_name and last["end_ms"] >= result.timestamp_ms - max_gap_ms:
            last["end_ms"] = result.timestamp_ms
            last["frequencies"].append(reading.frequency_hz)
            continue
        segments.append({
            "note": reading.note_name,
            "start_ms": result.timestamp_ms,
            "end_ms": result.timestamp_ms,
            "frequencies": [reading.frequency_hz],
            "cents": reading.cents_offset,
        })

    for segment in segments:
        freqs = segment.pop("frequencies")
        segment["frequency_hz"] = round(sum(freqs) / len(freqs), 2)
    return segments


@app.command()
def detect(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, FLAC, MP3...)"),
    sensitivity: str = typer.Option(
        "normal", "--sensitivity", "-s",
        help="Stability preset: very-strict/strict/normal/forgiving/very-forgiving",
    ),
    buffer_size: int = typer.Option(
        DEFAULT_BUFFER_SIZE, "--buffer-size", "-b", help="Samples per analysis buffer"
    ),
    tick_ms: int = typer.Option(
        DEFAULT_TICK_MS, "--tick-ms", help="Polling interval in milliseconds"
    ),
    gain: float = typer.Option(1.0, "--gain", "-g", help="Input gain (0.1-5.0)"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with engine options"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Replay an audio file through the pitch engine and list the held notes.

    **Examples:**

        pitchtrack detect take.wav

        pitchtrack detect take.wav -s very-forgiving --json
    """
    _setup_logging(verbose)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        tracker = _build_tracker(input_file, sensitivity, buffer_size, tick_ms, gain, config_file)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    results = list(tracker.run())
    segments = _collapse_readings(results, 2 * tick_ms)
    voiced = sum(1 for r in results if r.estimate.detected)

    if json_output:
        print(json.dumps({
            "file": str(input_file),
            "ticks": len(results),
            "voiced_ticks": voiced,
            "readings": segments,
        }, indent=2))
        return

    console.print(f"[blue]Analyzed:[/blue] {input_file}")
    console.print(f"  Ticks: {len(results)}, voiced: {voiced}, sample rate: {tracker.source.sample_rate} Hz")

    if not segments:
        console.print("[yellow]No stable notes found[/yellow]")
        return

    _show_readings_table(segments)


@app.command()
def note(
    frequency: float = typer.Argument(..., help="Frequency in Hz"),
):
    """Show the nearest note and cents offset for a frequency."""
    from .core import frequency_to_note

    try:
        reading = frequency_to_note(frequency)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    sign = "+" if reading.cents >= 0 else ""
    console.print(
        f"{frequency:.2f} Hz = [bold cyan]{reading.label}[/bold cyan] "
        f"({sign}{reading.cents} cents, MIDI {reading.midi})"
    )


@app.command("range")
def vocal_range(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    direction: str = typer.Option(
        "low", "--direction", "-d", help="Which extreme to find: low/high"
    ),
    tick_ms: int = typer.Option(
        DEFAULT_TICK_MS, "--tick-ms", help="Polling interval in milliseconds"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Find the lowest (or highest) note held steadily in a recording.

    Uses the very forgiving preset, as the vocal range setup does.
    """
    from .inference import VocalRangeRecorder, classify_voice

    _setup_logging(verbose)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        recorder = VocalRangeRecorder(direction)
        lowest, highest = VocalRangeRecorder("low"), VocalRangeRecorder("high")
        tracker = _build_tracker(
            input_file, "very-forgiving", DEFAULT_BUFFER_SIZE, tick_ms, 1.0, None
        )
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    for result in tracker.run():
        for r in (recorder, lowest, highest):
            r.update(result.stable)

    if recorder.extreme is None:
        console.print("[yellow]No stable note found[/yellow]")
        raise typer.Exit(1)

    reading = recorder.extreme
    console.print(
        f"{direction.capitalize()}est stable note: [bold cyan]{reading.note_name}[/bold cyan] "
        f"({reading.frequency_hz:.1f} Hz)"
    )

    voice = classify_voice(lowest.extreme.frequency_hz, highest.extreme.frequency_hz)
    console.print(f"Suggested voice type: [green]{voice.voice_type}[/green]")


@app.command()
def voices():
    """Show the standard voice ranges."""
    from .inference import STANDARD_RANGES

    table = Table(title="Standard Voice Ranges")
    table.add_column("Key", style="cyan")
    table.add_column("Voice", style="green")
    table.add_column("Low", style="yellow")
    table.add_column("High", style="yellow")
    table.add_column("Span (st)", style="magenta")

    for key, voice in STANDARD_RANGES.items():
        table.add_row(
            key,
            voice.voice_type,
            f"{voice.low_label} ({voice.low_hz:.1f} Hz)",
            f"{voice.high_label} ({voice.high_hz:.1f} Hz)",
            f"{voice.span_semitones:.0f}",
        )

    console.print(table)


def _show_readings_table(segments):
    """Display held notes in a table."""
    table = Table(title="Stable Readings")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("Cents", style="magenta")
    table.add_column("Held (ms)", style="yellow")

    for segment in segments:
        table.add_row(
            segment["note"],
            f"{segment['frequency_hz']:.2f}",
            f"{segment['cents']:+d}",
            f"{segment['start_ms']}-{segment['end_ms']}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
