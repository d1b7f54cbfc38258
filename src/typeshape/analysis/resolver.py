"""Resolution of field annotations to type references."""
import ast
from typing import TYPE_CHECKING

from .parser import get_dotted_name
from ..config import ANNOTATED_WRAPPERS, OPTIONAL_WRAPPERS, UNION_WRAPPERS
from ..models import ClassSymbol, TypeRef

if TYPE_CHECKING:
    from .index import SymbolIndex

LITERAL_WRAPPERS = {"typing.Literal", "typing_extensions.Literal"}

# "'\"X\"'" and deeper are not real annotations
MAX_FORWARD_DEPTH = 2


def _unsupported(text: str) -> TypeRef:
    return TypeRef(text=text, canonical=text, supported=False)


def _display(qualified: str) -> str:
    """Canonical spelling: builtins stay bare, everything else stays qualified."""
    if qualified.startswith("builtins."):
        return qualified[len("builtins."):]
    return qualified


def _flatten_union(node: ast.expr) -> list[ast.expr]:
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _flatten_union(node.left) + _flatten_union(node.right)
    return [node]


class TypeResolver:
    """Turn annotation source text into a TypeRef in the owner's module scope."""

    def __init__(self, index: "SymbolIndex"):
        self.index = index

    def resolve(self, annotation: str, owner: ClassSymbol) -> TypeRef:
        try:
            node = ast.parse(annotation, mode='eval').body
        except SyntaxError:
            return _unsupported(annotation)
        return self._resolve_node(node, owner, forward_depth=0)

    def _resolve_node(self, node: ast.expr, owner: ClassSymbol, forward_depth: int) -> TypeRef:
        if isinstance(node, ast.Constant):
            if node.value is None:
                return TypeRef(text="None", canonical="None", target="builtins.None")
            if isinstance(node.value, str) and forward_depth < MAX_FORWARD_DEPTH:
                # Forward reference: "Node"
                try:
                    inner = ast.parse(node.value.strip(), mode='eval').body
                except SyntaxError:
                    return _unsupported(node.value)
                return self._resolve_node(inner, owner, forward_depth + 1)
            return _unsupported(ast.unparse(node))

        dotted = get_dotted_name(node)
        if dotted is not None:
            return self._resolve_dotted(dotted, owner)

        if isinstance(node, ast.Subscript):
            return self._resolve_subscript(node, owner, forward_depth)

        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return self._resolve_union(_flatten_union(node), owner, ast.unparse(node), forward_depth)

        return _unsupported(ast.unparse(node))

    def _resolve_dotted(self, dotted: str, owner: ClassSymbol) -> TypeRef:
        if '.' not in dotted:
            module = self.index.get_module(owner.module)
            if dotted in owner.type_params or (module and dotted in module.type_vars):
                return TypeRef(text=dotted, canonical=dotted, is_type_param=True)

        qualified = self.index.resolve_name(owner.module, dotted, scope=owner.qualname)
        if qualified is None:
            return TypeRef(text=dotted, canonical=dotted)
        if self.index.is_type_var(qualified):
            return TypeRef(text=dotted, canonical=dotted, is_type_param=True)
        return TypeRef(text=dotted, canonical=_display(qualified), target=qualified)

    def _resolve_subscript(self, node: ast.Subscript, owner: ClassSymbol, forward_depth: int) -> TypeRef:
        text = ast.unparse(node)
        base = self._resolve_node(node.value, owner, forward_depth)
        elements = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]

        if base.target in OPTIONAL_WRAPPERS and len(elements) == 1:
            inner = self._resolve_node(elements[0], owner, forward_depth)
            return inner.model_copy(update={"text": text})
        if base.target in ANNOTATED_WRAPPERS:
            inner = self._resolve_node(elements[0], owner, forward_depth)
            return inner.model_copy(update={"text": text})
        if base.target in UNION_WRAPPERS:
            return self._resolve_union(elements, owner, text, forward_depth)

        if base.target in LITERAL_WRAPPERS:
            args = []
            canonical = f"{base.canonical}[{ast.unparse(node.slice)}]"
        else:
            args = [self._resolve_node(e, owner, forward_depth) for e in elements]
            canonical = f"{base.canonical}[{', '.join(a.canonical for a in args)}]"

        return TypeRef(
            text=text,
            canonical=canonical,
            target=base.target,
            args=args,
            is_type_param=base.is_type_param,
            supported=base.supported,
        )

    def _resolve_union(
        self,
        elements: list[ast.expr],
        owner: ClassSymbol,
        text: str,
        forward_depth: int,
    ) -> TypeRef:
        members = [self._resolve_node(e, owner, forward_depth) for e in elements]
        if len(members) == 1:
            return members[0].model_copy(update={"text": text})

        # X | None is just an optional X
        present = [m for m in members if m.canonical != "None"]
        if len(present) == 1:
            return present[0].model_copy(update={"text": text})

        return TypeRef(
            text=text,
            canonical=" | ".join(m.canonical for m in members),
            args=members,
            is_union=True,
        )
