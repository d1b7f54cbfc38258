"""typeshape CLI - field structures of Python classes."""

import typer

app = typer.Typer(
    name="typeshape",
    help="Extract the field structure of Python classes as context for prompts and tools",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug diagnostics"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
) -> None:
    """typeshape - field structures of Python classes."""
    from .logging import log_from_cli, setup_logging

    setup_logging(verbose=verbose, quiet=quiet)
    # Log command invocation for development tracking
    try:
        log_from_cli()
    except Exception:
        # Don't let logging failures break the CLI
        pass


# Import and register command modules
from .commands import init as init_cmd
from .commands import structure as structure_cmd
from .commands import config_cmd

# Register init as a direct command (not a subcommand)
app.command(name="init")(init_cmd.init)

# Register structure commands at top level
app.command(name="structure")(structure_cmd.structure)
app.command(name="classes")(structure_cmd.classes)
app.command(name="usages")(structure_cmd.usages)
app.command(name="export")(structure_cmd.export)

# Register config commands as a subcommand group
app.add_typer(config_cmd.app, name="config", help="View and change configuration")
