"""Info and validate commands for gpxkit CLI."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import typer
from rich.console import Console
from rich.table import Table

from gpxkit.core.config import load_config
from gpxkit.core.diagnostics import document_inventory, extension_namespaces
from gpxkit.core.trace import TraceWriter
from gpxkit.errors import GpxError
from gpxkit.io.gpx_reader import read_gpx_file
from gpxkit.utils.utils import format_file_size

console = Console()


def info(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="GPX file to inspect"),
    trace: Optional[Path] = typer.Option(None, "--trace", help="Write a JSONL trace of the read to this path"),
    config_file: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, help="Config file"),
):
    """Parse a GPX file and print what it contains."""
    try:
        cfg = load_config(config_file)
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)

    tracer = TraceWriter(trace) if trace is not None else None
    try:
        gpx = read_gpx_file(input_file, fallback_version=cfg.fallback_version, trace=tracer)
    except GpxError as e:
        console.print(f"[bold red]❌ Error:[/] {e}")
        raise typer.Exit(1)
    finally:
        if tracer is not None:
            tracer.close()

    inv = document_inventory(gpx)
    console.print(f"\n[bold cyan]📂[/] [green]{input_file.name}[/] [dim]({format_file_size(input_file.stat().st_size)})[/]")

    table = Table(title=f"GPX {inv['version']}", show_header=True, header_style="bold")
    table.add_column("Item")
    table.add_column("Count", justify="right")
    table.add_row("Waypoints", str(inv["waypoint_count"]))
    table.add_row("Routes", str(inv["route_count"]))
    table.add_row("Route points", str(inv["route_point_count"]))
    table.add_row("Tracks", str(inv["track_count"]))
    table.add_row("Track segments", str(inv["segment_count"]))
    table.add_row("Track points", str(inv["track_point_count"]))
    table.add_row("Extension blocks", str(inv["extension_count"]))
    console.print(table)

    if inv["creator"]:
        console.print(f"  Creator: [cyan]{inv['creator']}[/]")
    if inv["name"]:
        console.print(f"  Name: [cyan]{inv['name']}[/]")
    if inv["bounds"]:
        b = inv["bounds"]
        console.print(f"  Bounds: [cyan]{b['min_lat']},{b['min_lon']} → {b['max_lat']},{b['max_lon']}[/]")
    namespaces = {ns: n for ns, n in extension_namespaces(gpx).items() if ns}
    for ns, count in sorted(namespaces.items()):
        console.print(f"  Extension namespace [cyan]{ns}[/]: {count} element(s)")
    if trace is not None:
        console.print(f"[dim]Trace written to {trace}[/]")


def validate(
    files: List[Path] = typer.Argument(..., help="GPX files to check"),
    strict: bool = typer.Option(False, "--strict", help="Reject files without a 1.0/1.1 version attribute"),
):
    """Check that GPX files parse. Exits 1 if any file fails."""
    try:
        fallback = None if strict else load_config().fallback_version
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)

    failures = 0
    for path in files:
        try:
            gpx = read_gpx_file(path, fallback_version=fallback)
        except OSError as e:
            console.print(f"[bold red]❌[/] {path}: {e.strerror or e}")
            failures += 1
            continue
        except GpxError as e:
            console.print(f"[bold red]❌[/] {path}: {e}")
            failures += 1
            continue
        console.print(f"[bold green]✔[/] {path} [dim](GPX {gpx.version})[/]")

    if failures:
        console.print(f"\n[bold red]{failures} of {len(files)} file(s) failed[/]")
        raise typer.Exit(1)
