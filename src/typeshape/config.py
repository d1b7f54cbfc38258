"""Configuration loading for typeshape."""

from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TypeshapeConfig

# typeshape configuration constants
TYPESHAPE_DIR = ".typeshape"
CONFIG_FILE = "config.json"
STRUCTURES_FILE = "structures.jsonl"

# Default exclusion patterns for file discovery
DEFAULT_EXCLUDE_PATTERNS = [
    ".*",              # All dot-prefixed folders (.git, .venv, .typeshape, etc.)
    "__pycache__",
    "node_modules",
    "*.egg-info",
    "dist",
    "build",
    "site-packages",
]

# Owner classes under these namespaces never get a structure.
# An entry matches the namespace itself and everything below it.
DEFAULT_EXCLUDED_NAMESPACES = [
    # ORMs
    "sqlalchemy",
    "django",
    "peewee",
    "tortoise",
    "mongoengine",
    # Web frameworks
    "flask",
    "fastapi",
    "starlette",
    "aiohttp",
    # HTTP clients
    "requests",
    "httpx",
    "urllib3",
    # Logging
    "loguru",
    "structlog",
    # Testing
    "pytest",
    "_pytest",
    "hypothesis",
    "mock",
]

# Builtin types that are plain values, never expanded
PRIMITIVE_TYPES = {
    "int", "float", "complex", "bool",
    "str", "bytes", "bytearray", "None",
}

# Wrappers that are unwrapped to their single argument
OPTIONAL_WRAPPERS = {"typing.Optional", "typing_extensions.Optional"}
UNION_WRAPPERS = {"typing.Union", "typing_extensions.Union"}
ANNOTATED_WRAPPERS = {"typing.Annotated", "typing_extensions.Annotated"}
CLASSVAR_WRAPPERS = {"typing.ClassVar", "typing_extensions.ClassVar"}
GENERIC_BASES = {"typing.Generic", "typing.Protocol", "typing_extensions.Protocol"}
TYPE_VAR_FACTORIES = {"TypeVar", "ParamSpec", "TypeVarTuple"}


def get_typeshape_path(base_path: Optional[Path] = None) -> Path:
    """Get the .typeshape directory path.

    Args:
        base_path: Base path to look for .typeshape directory.
                   If None, uses current working directory.

    Returns:
        Path to the .typeshape directory.
    """
    if base_path is None:
        base_path = Path.cwd()
    return base_path / TYPESHAPE_DIR


def find_project_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the root directory containing .typeshape by walking up.

    Args:
        start_path: Starting path for search. Defaults to cwd.

    Returns:
        Path to directory containing .typeshape, or None if not found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        if (current / TYPESHAPE_DIR).exists():
            return current
        current = current.parent

    # Check root
    if (current / TYPESHAPE_DIR).exists():
        return current

    return None


def load_config(base_path: Optional[Path] = None) -> "TypeshapeConfig":
    """Load the project configuration, falling back to defaults.

    Values in config.json override the defaults key by key. A missing,
    unreadable or invalid config file yields the defaults.
    """
    from .models import TypeshapeConfig
    from .storage import read_json

    config_file = get_typeshape_path(base_path) / CONFIG_FILE
    if not config_file.exists():
        return TypeshapeConfig()

    defaults = TypeshapeConfig().model_dump()
    try:
        data = read_json(config_file)
        if not isinstance(data, dict):
            return TypeshapeConfig()
        defaults.update({k: v for k, v in data.items() if k in defaults})
        # ValidationError is a ValueError
        return TypeshapeConfig.model_validate(defaults)
    except (OSError, ValueError):
        return TypeshapeConfig()


def resolve_roots(base_path: Path, config: "TypeshapeConfig") -> list[Path]:
    """Absolute source roots to index: project roots first, then library paths."""
    roots: list[Path] = []
    for entry in [*config.source_roots, *config.library_paths]:
        root = Path(entry)
        if not root.is_absolute():
            root = base_path / root
        if root.exists() and root not in roots:
            roots.append(root)
    return roots
