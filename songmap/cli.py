"""Command-line interface for songmap.

Provides commands for:
- analyze: Map an audio file to chords and song sections
- info: Show audio file information
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TimeElapsedColumn,
)

app = typer.Typer(
    name="songmap",
    help="Audio to song map: chords and sections from recordings",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Track timing of processing stages."""

    stages: Dict[str, float] = field(default_factory=dict)
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        """Start timing a stage, closing the previous one."""
        if self._current_stage is not None:
            self.stop()
        self._current_stage = stage
        self._start_time = time.time()

    def stop(self) -> float:
        """Stop timing the current stage, return duration."""
        if self._current_stage is None:
            return 0.0
        duration = time.time() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def current_stage(self) -> Optional[str]:
        return self._current_stage

    @property
    def total_time(self) -> float:
        return sum(self.stages.values())

    def print_summary(self) -> None:
        """Print timing summary to console."""
        console.print("\n[bold]Timing Summary:[/bold]")
        for stage, duration in self.stages.items():
            console.print(f"  {stage}: {duration:.2f}s")
        console.print(f"  [bold]Total: {self.total_time:.2f}s[/bold]")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stages": self.stages,
            "total_time": self.total_time,
        }


def _open_source(input_file: Path):
    """Open an input file, exiting with a message on failure."""
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        return AudioLoader().open(input_file)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, FLAC, MP3, ...)"),
    quality: str = typer.Option(
        "balanced", "-q", "--quality", help="Detection quality: quick/balanced/detailed"
    ),
    workers: int = typer.Option(
        0, "-w", "--workers", help="Worker threads for window analysis (0 = one per CPU)"
    ),
    json_output: Optional[Path] = typer.Option(
        None, "--json", help="Write the song map as JSON to this path"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Show alternatives and stage timings"
    ),
):
    """Detect chords and song sections in an audio file.

    **Examples:**

        songmap analyze song.wav

        songmap analyze song.flac -q detailed --json song.json
    """
    from .core import AnalysisConfig, DetectionQuality
    from .analyzer import AudioAnalyzer, DetectionStatus
    from .inference import SectionDetector

    try:
        detection_quality = DetectionQuality(quality.lower())
    except ValueError:
        console.print(f"[yellow]Unknown quality '{quality}', using 'balanced'[/yellow]")
        detection_quality = DetectionQuality.BALANCED

    config = AnalysisConfig.from_quality(
        detection_quality, workers=workers if workers > 0 else None
    )
    analyzer = AudioAnalyzer(config=config, quality=detection_quality)
    timings = StageTimings()

    source = _open_source(input_file)
    with source:
        console.print(f"\n[bold blue]Song Map: {input_file.name}[/bold blue]")
        console.print(
            f"  Duration: {source.duration:.2f}s, Sample rate: {source.sample_rate}Hz, "
            f"Quality: {detection_quality.value}"
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Analyzing windows...", total=1.0)

            def on_status(fraction: float, status: DetectionStatus) -> None:
                if timings.current_stage != status.value:
                    timings.start(status.value)
                progress.update(
                    task,
                    completed=fraction,
                    description=status.value.replace("_", " ").capitalize(),
                )

            song_map = analyzer.map_song(source, on_status=on_status)
            timings.stop()

    console.print(
        f"\n   Windows: {song_map.window_count}, chords: {len(song_map.chords)}, "
        f"onsets: {len(song_map.onsets)}, sections: {len(song_map.sections)}"
    )

    if song_map.chords:
        _show_chords_table(song_map.chords, show_alternatives=verbose)
        console.print(f"   Average confidence: {song_map.average_confidence:.2f}")
        if song_map.low_confidence_count:
            console.print(
                f"[yellow]   Low-confidence chords: {song_map.low_confidence_count}[/yellow]"
            )
    else:
        console.print("[yellow]No chords detected![/yellow]")

    if song_map.sections:
        _show_sections_table(song_map.sections)
        counts = SectionDetector.summarize(song_map.sections)
        console.print(
            "   Sections: " + ", ".join(f"{t.value} x{n}" for t, n in counts.items())
        )
    else:
        console.print("[yellow]No repeating sections found[/yellow]")

    if json_output is not None:
        data = song_map.to_dict()
        data["source"] = str(input_file)
        data["timings"] = timings.to_dict()
        json_output.write_text(json.dumps(data, indent=2))
        console.print(f"\n[green]Song map saved to:[/green] {json_output}")

    if verbose:
        timings.print_summary()

    console.print("\n[green][OK] Analysis complete![/green]")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    source = _open_source(input_file)
    with source:
        console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
        console.print(f"  Duration: {source.duration:.2f} seconds")
        console.print(f"  Sample rate: {source.sample_rate} Hz")
        console.print(f"  Channels: {source.channels}")
        console.print(f"  Frames: {source.frames:,}")


def _show_chords_table(chords, show_alternatives: bool = False):
    """Display chords in a table."""
    table = Table(title="Detected Chords")
    table.add_column("#", style="dim")
    table.add_column("Chord", style="cyan")
    table.add_column("Time", style="yellow")
    table.add_column("Confidence", style="magenta")
    if show_alternatives:
        table.add_column("Alternatives", style="green")

    for chord in chords:
        row = [
            str(chord.position),
            chord.chord,
            f"{chord.start_time:.2f}-{chord.end_time:.2f}s",
            f"{chord.confidence:.2f} ({chord.confidence_level.value})",
        ]
        if show_alternatives:
            row.append(", ".join(a.chord for a in chord.alternatives))
        table.add_row(*row)

    console.print(table)


def _show_sections_table(sections):
    """Display sections in a table."""
    table = Table(title="Detected Sections")
    table.add_column("Section", style="cyan")
    table.add_column("Time", style="yellow")
    table.add_column("Pattern", style="green")
    table.add_column("Confidence", style="magenta")

    for section in sections:
        table.add_row(
            section.type.value,
            f"{section.start_time:.2f}-{section.end_time:.2f}s",
            " ".join(section.chord_pattern),
            f"{section.confidence:.2f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
