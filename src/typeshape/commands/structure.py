"""Structure extraction commands for typeshape."""
import json
import typer
from pathlib import Path
from typing import Optional
from ..config import get_typeshape_path, STRUCTURES_FILE
from ..errors import AmbiguousClassError, NotInitializedError
from ..project import Project, open_project
from ..storage import write_jsonl
from ..structure.render import generate_structure_tree, structure_to_dict, structure_to_outline


def _open(base: Path) -> Project:
    """Open the project or exit with an error message."""
    try:
        return open_project(base)
    except NotInitializedError:
        typer.echo("Error: typeshape not initialized. Run 'typeshape init' first.", err=True)
        raise typer.Exit(1)


def structure(
    name: str = typer.Argument(..., help="Class name (simple, dotted or fully qualified)"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    as_json: bool = typer.Option(False, "--json", "-j", help="Output the structure as JSON"),
    outline: bool = typer.Option(False, "--outline", "-o", help="Output a prompt-ready outline"),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain text output"),
) -> None:
    """Show the field structure of a class.

    User-defined field types are expanded recursively; builtin and
    standard-library types are leaves. Classes in excluded namespaces
    have no structure.

    Example:
        typeshape structure BlogPost
        typeshape structure blog.models.BlogPost --json
    """
    from rich.console import Console

    project = _open(base)
    builder = project.builder()

    try:
        result = builder.build_by_name(name)
    except AmbiguousClassError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo("Use the fully qualified name.", err=True)
        raise typer.Exit(1)

    if result is None:
        symbol = project.index.find_class(name)
        if symbol is None:
            typer.echo(f"Error: Class not found: {name}", err=True)
        else:
            typer.echo(f"Error: No structure available for {symbol.qualified_name} "
                       "(excluded namespace)", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(structure_to_dict(result), indent=2))
    elif outline:
        typer.echo(structure_to_outline(result))
    elif plain:
        typer.echo(generate_structure_tree(result))
    else:
        Console().print(generate_structure_tree(result, use_color=True))


def classes(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    filter_text: Optional[str] = typer.Option(None, "--filter", "-f", help="Only classes whose qualified name contains this text"),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain text output"),
) -> None:
    """List the classes in the symbol index.

    Example:
        typeshape classes
        typeshape classes --filter models
    """
    from rich.console import Console
    from rich.table import Table
    from rich import box

    project = _open(base)
    symbols = [
        s for s in project.index.classes()
        if not filter_text or filter_text in s.qualified_name
    ]

    if not symbols:
        typer.echo("No classes found.")
        return

    if plain:
        for symbol in symbols:
            typer.echo(f"{symbol.qualified_name}  ({len(symbol.fields)} fields)  {symbol.file}:{symbol.line}")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Class", style="cyan")
    table.add_column("Fields", justify="right")
    table.add_column("Location", style="dim")
    for symbol in symbols:
        table.add_row(symbol.qualified_name, str(len(symbol.fields)), f"{symbol.file}:{symbol.line}")

    console = Console()
    console.print(table)
    console.print(f"[dim]{len(symbols)} classes[/dim]")


def usages(
    name: str = typer.Argument(..., help="Class name (simple, dotted or fully qualified)"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Find fields declared with a class as their type.

    Generic arguments count too: a field typed list[User] is a usage of User.

    Example:
        typeshape usages User
    """
    project = _open(base)

    try:
        symbol = project.index.find_class(name)
    except AmbiguousClassError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if symbol is None:
        typer.echo(f"Error: Class not found: {name}", err=True)
        raise typer.Exit(1)

    found = project.index.find_usages(symbol.qualified_name)
    if not found:
        typer.echo(f"No usages of {symbol.qualified_name}.")
        return

    typer.echo(f"Usages of {symbol.qualified_name} ({len(found)}):")
    for usage in found:
        typer.echo(f"  {usage.owner}.{usage.field}: {usage.annotation}  ({usage.file}:{usage.line})")


def export(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSONL file (default: .typeshape/structures.jsonl)"),
) -> None:
    """Export the structure of every indexed class as JSONL.

    Each line holds the qualified class name and its structure. Classes in
    excluded namespaces are skipped.

    Example:
        typeshape export
        typeshape export -o shapes.jsonl
    """
    project = _open(base)
    builder = project.builder()

    records = []
    skipped = 0
    for symbol in project.index.classes():
        result = builder.build(symbol)
        if result is None:
            skipped += 1
            continue
        records.append({
            "class": symbol.qualified_name,
            "structure": structure_to_dict(result),
        })

    output_path = output or get_typeshape_path(base) / STRUCTURES_FILE
    write_jsonl(output_path, records)

    typer.echo(f"Exported {len(records)} structures to {output_path}")
    if skipped:
        typer.echo(f"  Skipped: {skipped} (excluded namespaces)")
