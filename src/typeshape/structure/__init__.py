"""Type structure extraction - recursive shapes of classes."""
from .builder import StructureBuilder
from .cache import TOMBSTONE, StructureCache
from .classifier import Classification, TypeClassifier, TypeKind
from .namespaces import NamespaceFilter
from .render import format_structure, generate_structure_tree, structure_to_dict, structure_to_outline

__all__ = [
    "StructureBuilder",
    "StructureCache",
    "TOMBSTONE",
    "Classification",
    "TypeClassifier",
    "TypeKind",
    "NamespaceFilter",
    "format_structure",
    "generate_structure_tree",
    "structure_to_dict",
    "structure_to_outline",
]
