"""Classification of a field's declared type."""
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..analysis.index import SymbolIndex
from ..config import PRIMITIVE_TYPES
from ..models import ClassSymbol, TypeRef

STDLIB_MODULES = frozenset(sys.stdlib_module_names) | {"typing_extensions"}


class TypeKind(str, Enum):
    """How a field type contributes to a structure."""

    PRIMITIVE = "primitive"
    BOXED = "boxed"
    USER_DEFINED = "user_defined"
    SELF_REFERENCE = "self_reference"
    UNRESOLVABLE = "unresolvable"

    @property
    def is_leaf(self) -> bool:
        return self in (TypeKind.PRIMITIVE, TypeKind.BOXED)


@dataclass
class Classification:
    """Result of classifying one type reference."""
    kind: TypeKind
    reason: str = ""
    target: Optional[ClassSymbol] = None


def is_stdlib_name(qualified_name: str) -> bool:
    """True for builtins and anything inside a standard-library module."""
    top = qualified_name.split('.')[0]
    return top == "builtins" or top in STDLIB_MODULES


class TypeClassifier:
    """Sort type references into primitive, boxed, user-defined or unresolvable.

    Args:
        index: Symbol index used to turn qualified names into classes.
        unresolved_as_builtin: Treat references that resolve to no indexed
            class as builtin leaves instead of dropping them. Type parameters
            are unresolvable either way.
    """

    def __init__(self, index: SymbolIndex, unresolved_as_builtin: bool = False):
        self.index = index
        self.unresolved_as_builtin = unresolved_as_builtin

    def classify(self, ref: TypeRef, owner_qualified_name: str | None) -> Classification:
        if not ref.supported:
            return Classification(TypeKind.UNRESOLVABLE, "unsupported annotation")
        if ref.is_type_param:
            return Classification(TypeKind.UNRESOLVABLE, "type parameter")
        if ref.is_union:
            return Classification(TypeKind.BOXED, "union")

        if ref.target is None:
            return self._unresolved("unknown name")

        if ref.target.startswith("builtins."):
            name = ref.target[len("builtins."):]
            if name in PRIMITIVE_TYPES and not ref.args:
                return Classification(TypeKind.PRIMITIVE)
            return Classification(TypeKind.BOXED, "builtin")

        if is_stdlib_name(ref.target):
            return Classification(TypeKind.BOXED, "standard library")

        symbol = self.index.get_class(ref.target)
        if symbol is None:
            return self._unresolved("not an indexed class")
        if symbol.qualified_name == owner_qualified_name:
            return Classification(TypeKind.SELF_REFERENCE, target=symbol)
        return Classification(TypeKind.USER_DEFINED, target=symbol)

    def _unresolved(self, reason: str) -> Classification:
        if self.unresolved_as_builtin:
            return Classification(TypeKind.BOXED, f"assumed builtin: {reason}")
        return Classification(TypeKind.UNRESOLVABLE, reason)
