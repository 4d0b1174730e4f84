"""Config command for gpxkit CLI."""

from pathlib import Path
import typer
from rich.console import Console
import yaml

from gpxkit.core.config import DEFAULT_CONFIG_FILES, KNOWN_KEYS, GpxConfig, load_config

app = typer.Typer()
console = Console()


@app.command("show")
def show():
    """Show current configuration."""
    cfg = load_config()
    summary = cfg.get_config_summary()

    console.print("\n[bold]Current Configuration:[/]")
    console.print(f"  Config file: [cyan]{summary['config_file'] or '(defaults)'}[/]")
    console.print(f"  Fallback version: [cyan]{summary['fallback_version'] or 'strict (reject)'}[/]")
    console.print(f"  Output version: [cyan]{summary['output_version'] or 'keep input version'}[/]")
    console.print(f"  Indent: [cyan]{summary['indent'] or 'compact'}[/]")
    console.print(f"  Creator: [cyan]{summary['creator']}[/]")
    console.print()


@app.command("export")
def export(
    output: Path = typer.Option(Path(DEFAULT_CONFIG_FILES[0]), "--output", "-o", help="Where to write the template"),
):
    """Export configuration template."""
    GpxConfig().export_template(output)
    console.print(f"[bold green]✔[/] Configuration template exported to [underline]{output}[/]")
    console.print("[dim]Edit this file to change reader/writer defaults[/]")


@app.command("validate")
def validate(config_file: Path = typer.Argument(..., help="Config file to validate")):
    """Validate a configuration file."""
    if not config_file.exists():
        console.print(f"[bold red]❌ Invalid configuration:[/] file not found: {config_file}")
        raise typer.Exit(1)
    try:
        cfg = load_config(config_file)
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid configuration:[/] {e}")
        raise typer.Exit(1)
    console.print(f"[bold green]✔[/] Configuration file is valid: [underline]{config_file}[/]")
    for key, value in cfg.get_config_summary().items():
        if key != "config_file":
            console.print(f"  {key}: {value}")


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help=f"One of: {', '.join(sorted(KNOWN_KEYS))}"),
    value: str = typer.Argument(..., help="New value ('null' clears it)"),
):
    """Set a configuration value in gpxkit_config.yaml."""
    if key not in KNOWN_KEYS:
        console.print(f"[bold red]❌ Error:[/] unknown key '{key}'")
        raise typer.Exit(1)

    config_path = Path(DEFAULT_CONFIG_FILES[0])
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    parsed = yaml.safe_load(value)
    if key in ("fallback_version", "output_version") and parsed is not None:
        parsed = str(parsed)
    data[key] = parsed

    # Check before saving so a bad value never lands in the file.
    probe = GpxConfig()
    tmp_path = config_path.with_suffix(".yaml.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        probe.load_user_config(tmp_path)
    except ValueError as e:
        tmp_path.unlink(missing_ok=True)
        console.print(f"[bold red]❌ Error:[/] {e}")
        raise typer.Exit(1)
    tmp_path.replace(config_path)
    console.print(f"[bold green]✔[/] {key} set to: [cyan]{parsed}[/] (saved to {config_path})")
