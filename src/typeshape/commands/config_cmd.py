"""Configuration management commands for typeshape."""
import json
import typer
from pathlib import Path
from ..config import get_typeshape_path, load_config, CONFIG_FILE
from ..storage import write_json, read_json
from ..models import TypeshapeConfig

app = typer.Typer()

LIST_KEYS = {"source_roots", "library_paths", "exclude_patterns", "excluded_namespaces"}


def _parse_value(key: str, value: str) -> object:
    """Parse a command-line value for a config key.

    Booleans accept true/false; list keys accept a JSON list or a
    comma-separated string.
    """
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if key in LIST_KEYS:
        if value.startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


@app.command("show")
def config_show(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain text output"),
) -> None:
    """Show current configuration.

    Displays all configuration values and marks which are defaults vs custom.

    Example:
        typeshape config show
    """
    from rich.console import Console
    from rich.table import Table
    from rich.markup import escape
    from rich import box

    typeshape_path = get_typeshape_path(base)
    console = Console(force_terminal=not plain, no_color=plain)

    if not typeshape_path.exists():
        console.print("[red]Error:[/red] typeshape not initialized. Run 'typeshape init' first.")
        raise typer.Exit(1)

    config = load_config(base)
    defaults = TypeshapeConfig()

    console.print(f"[dim]Config file: {typeshape_path / CONFIG_FILE}[/dim]")
    console.print()

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Status", justify="center")

    for name in ("version", "include_init_fields", "unresolved_as_builtin", "command_logging"):
        value = getattr(config, name)
        status = "[dim]default[/dim]" if value == getattr(defaults, name) else "[green]custom[/green]"
        table.add_row(name, str(value), status)

    console.print(table)

    for name in ("source_roots", "library_paths", "excluded_namespaces", "exclude_patterns"):
        values = getattr(config, name)
        marker = "" if values == getattr(defaults, name) else " [green](custom)[/green]"
        console.print()
        console.print(f"[bold]{name}[/bold] ({len(values)}){marker}:")
        for value in values[:8]:
            console.print(f"  [dim]-[/dim] {escape(value)}")
        if len(values) > 8:
            console.print(f"  [dim]... and {len(values) - 8} more[/dim]")


@app.command("reset")
def config_reset(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Reset configuration to defaults."""
    typeshape_path = get_typeshape_path(base)

    if not typeshape_path.exists():
        typer.echo("Error: typeshape not initialized. Run 'typeshape init' first.", err=True)
        raise typer.Exit(1)

    config = TypeshapeConfig()
    write_json(typeshape_path / CONFIG_FILE, config.model_dump())

    typer.echo("Configuration reset to defaults.")
    typer.echo(f"  Excluded namespaces: {len(config.excluded_namespaces)}")


@app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key to set"),
    value: str = typer.Argument(..., help="Value to set"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Set a configuration value.

    Examples:
        typeshape config set unresolved_as_builtin true
        typeshape config set source_roots src,lib
        typeshape config set excluded_namespaces '["django", "mycompany.vendor"]'
    """
    typeshape_path = get_typeshape_path(base)

    if not typeshape_path.exists():
        typer.echo("Error: typeshape not initialized. Run 'typeshape init' first.", err=True)
        raise typer.Exit(1)

    config_file = typeshape_path / CONFIG_FILE
    config = read_json(config_file) if config_file.exists() else TypeshapeConfig().model_dump()

    try:
        parsed_value = _parse_value(key, value)
    except json.JSONDecodeError:
        typer.echo(f"Error: '{value}' is not a valid JSON list.", err=True)
        raise typer.Exit(1)

    if key not in TypeshapeConfig.model_fields:
        typer.echo(f"Warning: '{key}' is not a standard config key.", err=True)

    config[key] = parsed_value
    write_json(config_file, config)

    typer.echo(f"Set {key} = {parsed_value}")
