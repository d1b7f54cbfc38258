"""Recursive extraction of type structures."""
import logging
from typing import Optional

from .cache import TOMBSTONE, StructureCache
from .classifier import TypeClassifier, TypeKind
from .namespaces import NamespaceFilter
from ..analysis.index import SymbolIndex
from ..analysis.resolver import TypeResolver
from ..models import ClassSymbol, FieldSymbol, TypeRef, TypeStructure, TypeshapeConfig

logger = logging.getLogger(__name__)


def _bind(node: TypeStructure, field_name: str, display_type: str | None = None) -> TypeStructure:
    """Attach a (possibly shared) node under a field name.

    The node itself is returned when it already carries the right name.
    Otherwise a shallow copy is returned that shares the same children list,
    so the expanded structure is still built only once.
    """
    update = {}
    if node.name != field_name:
        update["name"] = field_name
    if display_type is not None and node.display_type != display_type:
        update["display_type"] = display_type
    return node.model_copy(update=update) if update else node


def _field_key(ref: TypeRef, owner: ClassSymbol) -> str:
    """Field-cache key for a resolved field type.

    Qualified canonical text is global. Type parameters and names that did
    not resolve only mean something in the owner's scope, so their keys are
    scoped and kept apart from each other.
    """
    if ref.is_type_param:
        return f"~{owner.module}.{ref.canonical}"
    if ref.target is None and not ref.is_union:
        return f"?{owner.module}.{ref.canonical}"
    return ref.canonical


def _lookup_key(name: str) -> str:
    """Type-cache key for a failed lookup by user-supplied name."""
    return f"name:{name}"


class StructureBuilder:
    """Build the shape tree of a class from the symbol index.

    For example, if a BlogPost class has a Comment field, and Comment has a
    User field, the structure of BlogPost is::

        BlogPost
        ├── id: int
        └── comment: Comment
            ├── author: User
            │   └── name: str
            └── text: str

    Structures are memoized in two caches owned by the builder: one keyed by
    the qualified name of the owner class, one keyed by the canonical text of
    a field type. Both also record tombstones for types that failed to
    resolve, so a failure is reported once. Discard the builder (or call
    ``reset``) to pick up source changes.

    A field whose class is already being expanded further up the current
    path becomes a back-reference node instead of being expanded again;
    a field typed with its own owner class is skipped.
    """

    def __init__(
        self,
        index: SymbolIndex,
        namespaces: Optional[NamespaceFilter] = None,
        classifier: Optional[TypeClassifier] = None,
        type_cache: Optional[StructureCache] = None,
        field_cache: Optional[StructureCache] = None,
    ):
        self.index = index
        self.resolver = TypeResolver(index)
        self.namespaces = namespaces or NamespaceFilter()
        self.classifier = classifier or TypeClassifier(index)
        self.type_cache = type_cache if type_cache is not None else StructureCache()
        self.field_cache = field_cache if field_cache is not None else StructureCache()

    @classmethod
    def from_config(cls, index: SymbolIndex, config: TypeshapeConfig) -> "StructureBuilder":
        return cls(
            index,
            namespaces=NamespaceFilter(config.excluded_namespaces),
            classifier=TypeClassifier(index, unresolved_as_builtin=config.unresolved_as_builtin),
        )

    def reset(self) -> None:
        """Forget every cached structure and tombstone."""
        self.type_cache.clear()
        self.field_cache.clear()

    def build_by_name(self, name: str) -> TypeStructure | None:
        """Build the structure of a class given its qualified, dotted or simple name.

        Unknown names are tombstoned and reported once.

        Raises:
            AmbiguousClassError: if a simple name matches several classes.
        """
        cached = self.type_cache.get(_lookup_key(name))
        if cached is TOMBSTONE:
            return None

        symbol = self.index.find_class(name)
        if symbol is None:
            logger.warning("Class not found: %s", name)
            self.type_cache.tombstone(_lookup_key(name))
            return None
        return self.build(symbol)

    def build(self, symbol: ClassSymbol) -> TypeStructure | None:
        """Build (or fetch) the structure of a class.

        Returns None when the class lives in an excluded namespace or was
        tombstoned earlier.
        """
        return self._build(symbol, in_flight=set())

    def _build(self, symbol: ClassSymbol, in_flight: set[str]) -> TypeStructure | None:
        qualified_name = symbol.qualified_name

        cached = self.type_cache.get(qualified_name)
        if cached is not None:
            logger.debug("Structure cache hit: %s", qualified_name)
            return None if cached is TOMBSTONE else cached

        pattern = self.namespaces.match(qualified_name)
        if pattern is not None:
            logger.debug("Skipping %s: excluded namespace %s", qualified_name, pattern)
            return None

        in_flight.add(qualified_name)
        try:
            children = []
            for field in symbol.fields:
                child = self._build_field(symbol, field, in_flight)
                if child is not None:
                    children.append(child)
        finally:
            in_flight.discard(qualified_name)

        structure = TypeStructure(
            name=symbol.name,
            display_type=symbol.name,
            children=children,
        )
        self.type_cache.put(qualified_name, structure)
        return structure

    def _build_field(
        self,
        owner: ClassSymbol,
        field: FieldSymbol,
        in_flight: set[str],
    ) -> TypeStructure | None:
        ref = self.resolver.resolve(field.annotation, owner)

        # Self-reference breaks the most common cycle up front
        if ref.target == owner.qualified_name:
            return None

        key = _field_key(ref, owner)
        cached = self.field_cache.get(key)
        if cached is TOMBSTONE:
            return None
        if cached is not None:
            return _bind(cached, field.name, ref.text if cached.is_builtin else None)

        result = self.classifier.classify(ref, owner.qualified_name)

        if result.kind.is_leaf:
            leaf = TypeStructure(name=field.name, display_type=ref.text, is_builtin=True)
            self.field_cache.put(key, leaf)
            return leaf

        if result.kind is TypeKind.SELF_REFERENCE:
            return None

        if result.kind is TypeKind.USER_DEFINED:
            target = result.target
            if target.qualified_name in in_flight:
                return TypeStructure(
                    name=field.name,
                    display_type=target.name,
                    reference=target.qualified_name,
                )
            nested = self._build(target, in_flight)
            if nested is None:
                return None
            nested.is_builtin = False
            self.field_cache.put(key, nested)
            return _bind(nested, field.name)

        logger.warning(
            "Unresolvable type for %s.%s: %s (%s)",
            owner.qualified_name, field.name, ref.text, result.reason,
        )
        self.field_cache.tombstone(key)
        return None
