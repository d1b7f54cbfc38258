"""Initialize typeshape in a repository."""

import typer
from pathlib import Path
from ..config import get_typeshape_path, CONFIG_FILE
from ..models import TypeshapeConfig
from ..storage import write_json


def _ensure_gitignore(base_path: Path) -> bool:
    """Add .typeshape/ and .typeshape-logs/ to .gitignore if not already present.

    Returns True if the file was modified.
    """
    gitignore = base_path / ".gitignore"
    entries_needed = [".typeshape/", ".typeshape-logs/"]

    existing_lines = []
    if gitignore.exists():
        existing_lines = gitignore.read_text().splitlines()

    missing = [e for e in entries_needed if e not in existing_lines]
    if not missing:
        return False

    with open(gitignore, "a") as f:
        # Add a newline separator if file doesn't end with one
        if existing_lines and existing_lines[-1].strip():
            f.write("\n")
        if not existing_lines:
            f.write("# typeshape data (local, not committed)\n")
        for entry in missing:
            f.write(f"{entry}\n")

    return True


def init(
    path: Path = typer.Argument(
        Path("."),
        help="Path to initialize typeshape in"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration"
    ),
    gitignore: bool = typer.Option(
        True,
        "--gitignore/--no-gitignore",
        help="Add typeshape directories to .gitignore"
    ),
) -> None:
    """Initialize typeshape with a default configuration.

    Creates .typeshape/config.json. Edit it (or use 'typeshape config set')
    to change source roots or the excluded namespaces.

    Example:
        typeshape init
        typeshape init path/to/project --force
    """
    if not path.exists():
        typer.echo(f"Error: Directory not found: {path}", err=True)
        raise typer.Exit(1)

    typeshape_path = get_typeshape_path(path)
    config_file = typeshape_path / CONFIG_FILE

    if config_file.exists() and not force:
        typer.echo(f"typeshape already initialized at {typeshape_path}")
        typer.echo("Use --force to overwrite the configuration.")
        raise typer.Exit(1)

    write_json(config_file, TypeshapeConfig().model_dump())

    typer.echo(f"Initialized typeshape at {typeshape_path}")
    if gitignore and _ensure_gitignore(path):
        typer.echo("  Updated .gitignore")
