"""Small helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from gpxkit.model import GpxVersion


def format_file_size(size_bytes: int) -> str:
    """
    Human-readable file size.

    >>> format_file_size(2048)
    '2.0 KB'
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def ensure_parent_dir(output_file: Path) -> Path:
    """Create the directory that will hold `output_file`; return the resolved file path."""
    output_file = Path(output_file).resolve()
    output_file.parent.mkdir(parents=True, exist_ok=True)
    return output_file


def default_output_path(input_file: Path, version: Optional[GpxVersion]) -> Path:
    """
    Output path used by `convert` when -o is not given.

    track.gpx -> track.gpx11.gpx (or track.converted.gpx when the version is kept)
    """
    input_file = Path(input_file)
    suffix = f"gpx{str(version).replace('.', '')}" if version is not None else "converted"
    return input_file.with_name(f"{input_file.stem}.{suffix}.gpx")
