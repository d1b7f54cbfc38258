"""Text renderings of type structures for terminals and prompts."""
from typing import Any

from rich.markup import escape

from ..models import TypeStructure


def _label(node: TypeStructure, use_color: bool) -> str:
    if use_color:
        name, display = escape(node.name), escape(node.display_type)
    else:
        name, display = node.name, node.display_type
    if node.reference:
        if use_color:
            return f"{name}: [magenta]{display}[/magenta] [dim](see above)[/dim]"
        return f"{name}: {display} (see above)"
    if node.is_builtin:
        if use_color:
            return f"{name}: [green]{display}[/green]"
        return f"{name}: {display}"
    if use_color:
        return f"{name}: [bold cyan]{display}[/bold cyan]"
    return f"{name}: {display}"


def format_structure(
    structure: TypeStructure,
    prefix: str = "",
    use_color: bool = False
) -> list[str]:
    """Format the children of a structure as tree lines."""
    lines: list[str] = []
    children = structure.children

    for i, child in enumerate(children):
        is_last = i == len(children) - 1
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{_label(child, use_color)}")
        if child.children:
            extension = "    " if is_last else "│   "
            lines.extend(format_structure(child, prefix + extension, use_color))

    return lines


def generate_structure_tree(structure: TypeStructure, use_color: bool = False) -> str:
    """Full tree for a class, root line included."""
    if use_color:
        lines = [f"[bold]{escape(structure.display_type)}[/bold]"]
    else:
        lines = [structure.display_type]
    lines.extend(format_structure(structure, use_color=use_color))
    return "\n".join(lines)


def structure_to_outline(structure: TypeStructure, indent: str = "  ") -> str:
    """Indented outline, compact enough to paste into a prompt.

    Example:
        class BlogPost:
          id: int
          comment: Comment
            author: User
              name: str
            text: str
    """
    lines = [f"class {structure.display_type}:"]

    def walk(node: TypeStructure, depth: int) -> None:
        for child in node.children:
            suffix = " (recursive)" if child.reference else ""
            lines.append(f"{indent * depth}{child.name}: {child.display_type}{suffix}")
            walk(child, depth + 1)

    walk(structure, 1)
    if len(lines) == 1:
        lines.append(f"{indent}...")
    return "\n".join(lines)


def structure_to_dict(structure: TypeStructure) -> dict[str, Any]:
    """Plain nested record, ready for json.dumps."""
    return structure.model_dump(exclude_none=True)
