#!/usr/bin/env python3
"""
gpxkit - GPX 1.0 / 1.1 reader and writer
Main CLI entry point
"""

from __future__ import annotations

import logging

import typer

from gpxkit.commands import config_cmd, convert_cmd, inspect_cmd

app = typer.Typer(
    name="gpxkit",
    help="Inspect, validate and convert GPX 1.0 / 1.1 files",
    no_args_is_help=True,
    add_completion=True,
)

app.command(name="info", help="Show what a GPX file contains")(inspect_cmd.info)
app.command(name="validate", help="Check that GPX files parse")(inspect_cmd.validate)
app.command(name="convert", help="Rewrite a GPX file, optionally as another version")(convert_cmd.convert)

# Register command groups
app.add_typer(config_cmd.app, name="config", help="Manage configuration settings")


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    gpxkit - GPX 1.0 / 1.1 reader and writer

    Commands:
      info      - Parse a file and print an inventory
      validate  - Parse one or more files, report failures
      convert   - Read and re-write, e.g. --to 1.1
      config    - Manage configuration settings
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
