"""climbcodec CLI — encode, decode and inspect climb blobs.

Commands:
    climbcodec encode <recording.json>   Encode a JSON recording to a .climb blob
    climbcodec decode <file>             Decode a .climb blob back to JSON
    climbcodec info <file>               Show recording summary and sizes
    climbcodec validate <file>           Check that a blob decodes
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from climbcodec import __version__
from climbcodec.encoding.compressor import COMPRESSORS, get_compressor
from climbcodec.encoding.format import FILE_EXTENSION

console = Console()


def _codec(compressor: str):
    from climbcodec import ClimbCodec

    return ClimbCodec(compressor=get_compressor(compressor))


compressor_option = click.option(
    "--compressor",
    type=click.Choice(sorted(COMPRESSORS)),
    default="zlib",
    show_default=True,
    help="Byte compressor wrapped around the envelope",
)


@click.group()
@click.version_option(version=__version__, prog_name="climbcodec")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """climbcodec — compact storage for climb recordings."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output blob path")
@compressor_option
def encode(file: Path, output: Path | None, compressor: str) -> None:
    """Encode a JSON recording into a compressed blob."""
    from climbcodec import ClimbCodecError, Recording

    try:
        recording = Recording.from_json(file.read_bytes())
    except ValueError as e:
        console.print(f"[red]Error reading {file}: {escape(str(e))}[/red]")
        raise SystemExit(1)

    codec = _codec(compressor)
    try:
        blob = codec.encode(recording)
    except ClimbCodecError as e:
        console.print(f"[red]Cannot encode {file}: {type(e).__name__}: {escape(str(e))}[/red]")
        raise SystemExit(1)

    out_path = output or file.with_suffix(FILE_EXTENSION)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(blob)
    console.print(f"  Created: {out_path}")
    console.print(
        f"[green]Encoded {len(recording.samples)} points into {len(blob)} bytes[/green]"
    )


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output JSON path")
@compressor_option
def decode(file: Path, output: Path | None, compressor: str) -> None:
    """Decode a blob back into a JSON recording."""
    from climbcodec import ClimbCodecError

    codec = _codec(compressor)
    try:
        recording = codec.decode(file.read_bytes())
    except ClimbCodecError as e:
        console.print(f"[red]Cannot decode {file}: {type(e).__name__}: {escape(str(e))}[/red]")
        raise SystemExit(1)

    out_path = output or file.with_suffix(".json")
    out_path.write_text(recording.model_dump_json(by_alias=True, indent=2))
    console.print(f"  Created: {out_path}")
    console.print(f"[green]Decoded {len(recording.samples)} points[/green]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@compressor_option
def info(file: Path, compressor: str) -> None:
    """Show recording summary."""
    from climbcodec import ClimbCodecError
    from climbcodec.stats import summarize, validation_errors

    codec = _codec(compressor)
    blob = file.read_bytes()
    try:
        envelope, recording = codec.decode_with_envelope(blob)
    except ClimbCodecError as e:
        console.print(f"[red]Error opening {file}: {type(e).__name__}: {escape(str(e))}[/red]")
        raise SystemExit(1)

    # Header
    console.print()
    console.print(Panel.fit(
        f"[bold]{escape(recording.title)}[/bold]",
        subtitle=f"{file}",
    ))

    # Metadata table
    meta_table = Table(show_header=False, box=None, padding=(0, 2))
    meta_table.add_column("Key", style="dim")
    meta_table.add_column("Value")

    meta_table.add_row("Id", recording.id)
    meta_table.add_row("Author", recording.author)
    if recording.player_name != recording.author:
        meta_table.add_row("Player", recording.player_name)
    meta_table.add_row("Map", recording.map)
    meta_table.add_row("Biome", recording.biome_name)
    meta_table.add_row("Difficulty", recording.difficulty)
    meta_table.add_row("Game version", recording.game_version)
    if recording.mod_version:
        meta_table.add_row("Mod version", recording.mod_version)
    if recording.tags:
        meta_table.add_row("Tags", ", ".join(recording.tags))
    if recording.start_time is not None:
        meta_table.add_row("Started", recording.start_time.isoformat())
    meta_table.add_row("Format", f"v{envelope.version}")
    meta_table.add_row("Points", str(len(recording.samples)))
    meta_table.add_row("Blob size", f"{len(blob)} bytes")

    console.print(meta_table)

    # Derived metrics
    summary = summarize(recording)
    console.print()
    stats_table = Table(title="Climb Statistics")
    stats_table.add_column("Metric")
    stats_table.add_column("Value", justify="right")

    stats_table.add_row("Duration", f"{summary.duration:.2f} s")
    stats_table.add_row("Distance", f"{summary.total_distance:.2f} m")
    stats_table.add_row("Avg speed", f"{summary.average_speed:.2f} m/s")
    stats_table.add_row("Max speed", f"{summary.max_speed:.2f} m/s")
    stats_table.add_row("Altitude", f"{summary.min_altitude:.2f} .. {summary.max_altitude:.2f} m")
    stats_table.add_row("Ascent level", f"{summary.ascent_level} ({summary.difficulty})")
    stats_table.add_row("Biome", summary.biome)
    console.print(stats_table)

    # Problems
    errors = validation_errors(recording)
    if errors:
        console.print(Panel(
            "\n".join(f"[yellow]⚠[/yellow] {e}" for e in errors),
            title=f"[yellow]Warnings ({len(errors)})[/yellow]",
            border_style="yellow",
        ))

    console.print()


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@compressor_option
def validate(file: Path, compressor: str) -> None:
    """Check that a blob decodes to a non-empty recording."""
    codec = _codec(compressor)
    if codec.validate(file.read_bytes()):
        console.print(f"[green]✓ {file} is a valid climb blob[/green]")
    else:
        console.print(f"[red]✗ {file} could not be decoded[/red]")
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
