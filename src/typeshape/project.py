"""Loading a project's configuration and symbol index."""
from dataclasses import dataclass
from pathlib import Path

from .analysis.index import SymbolIndex
from .config import get_typeshape_path, load_config, resolve_roots
from .errors import NotInitializedError
from .models import TypeshapeConfig
from .structure.builder import StructureBuilder


@dataclass
class Project:
    """An initialized project: where it lives, how it is configured, what it contains."""
    base_path: Path
    config: TypeshapeConfig
    index: SymbolIndex

    def builder(self) -> StructureBuilder:
        """A fresh extraction session over this project's index."""
        return StructureBuilder.from_config(self.index, self.config)


def open_project(base_path: Path) -> Project:
    """Load config and index every configured source root.

    Raises:
        NotInitializedError: if base_path has no .typeshape directory.
    """
    if not get_typeshape_path(base_path).exists():
        raise NotInitializedError(
            f"typeshape not initialized in {base_path}. Run 'typeshape init' first."
        )

    config = load_config(base_path)
    index = SymbolIndex.build(
        resolve_roots(base_path, config),
        exclude_patterns=config.exclude_patterns,
        include_init_fields=config.include_init_fields,
    )
    return Project(base_path=base_path, config=config, index=index)
