"""Convert command for gpxkit CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from enum import Enum
import typer
from rich.console import Console

from gpxkit.core.config import load_config
from gpxkit.core.diagnostics import version_narrowing_report
from gpxkit.errors import GpxError
from gpxkit.io.gpx_reader import read_gpx_file
from gpxkit.io.gpx_writer import write_gpx_file
from gpxkit.model import GpxVersion
from gpxkit.utils.utils import default_output_path, ensure_parent_dir, format_file_size

console = Console()


class ToVersion(str, Enum):
    v10 = "1.0"
    v11 = "1.1"


def convert(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="GPX file to read"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: next to the input)"),
    to: Optional[ToVersion] = typer.Option(None, "--to", help="GPX version to write (default: keep)"),
    indent: Optional[int] = typer.Option(None, "--indent", min=0, help="Spaces per level; 0 for compact output"),
    creator: Optional[str] = typer.Option(None, "--creator", help="Creator for documents that have none"),
    config_file: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, help="Config file"),
):
    """Read a GPX file and write it back out, optionally as another GPX version."""
    try:
        cfg = load_config(config_file)
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)

    try:
        gpx = read_gpx_file(input_file, fallback_version=cfg.fallback_version)
    except GpxError as e:
        console.print(f"[bold red]❌ Error:[/] {e}")
        raise typer.Exit(1)

    target = GpxVersion(to.value) if to is not None else (cfg.output_version or gpx.version)
    default_path = default_output_path(input_file, target if target != gpx.version else None)
    output_path = ensure_parent_dir(output or default_path)
    if output_path == input_file.resolve():
        console.print("[bold red]❌ Error:[/] output would overwrite the input file")
        raise typer.Exit(1)

    if target != gpx.version:
        for field, count in version_narrowing_report(gpx, target).items():
            console.print(f"[yellow]⚠[/] {count} {field} value(s) have no place in GPX {target} and will be dropped")

    width = cfg.indent if indent is None else indent
    try:
        size = write_gpx_file(
            gpx,
            output_path,
            version=target,
            indent=" " * width,
            creator=creator if creator is not None else cfg.creator,
        )
    except GpxError as e:
        console.print(f"[bold red]❌ Error:[/] {e}")
        raise typer.Exit(1)

    console.print(
        f"[bold green]✔[/] Wrote GPX {target} to [underline]{output_path}[/] [dim]({format_file_size(size)})[/]"
    )
