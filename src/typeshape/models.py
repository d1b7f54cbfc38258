"""Pydantic models for typeshape records."""

from pydantic import BaseModel, Field
from typing import Optional

from .config import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_EXCLUDED_NAMESPACES


# === Symbol Records ===

class FieldSymbol(BaseModel):
    """A field declared on a class."""

    name: str
    annotation: str  # Annotation source text, e.g. "Optional['User']"
    line: int


class ClassSymbol(BaseModel):
    """Record for a class in the symbol index."""

    name: str  # Simple name, e.g. "Inner"
    qualname: str  # Dotted name inside the module, e.g. "Outer.Inner"
    module: str
    file: str
    line: int
    fields: list[FieldSymbol] = Field(default_factory=list)
    bases: list[str] = Field(default_factory=list)
    type_params: list[str] = Field(default_factory=list)  # PEP 695 and Generic[...] parameters

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.qualname}" if self.module else self.qualname


class ModuleRecord(BaseModel):
    """Everything the index needs to know about one module."""

    module: str
    file: str
    classes: list[ClassSymbol] = Field(default_factory=list)
    imports: dict[str, str] = Field(default_factory=dict)  # local name -> qualified target
    type_vars: list[str] = Field(default_factory=list)


class UsageRecord(BaseModel):
    """A field whose declared type mentions a class."""

    owner: str  # Qualified name of the class declaring the field
    field: str
    annotation: str
    file: str
    line: int


# === Type References ===

class TypeRef(BaseModel):
    """A field's declared type, resolved against its owner's module."""

    text: str  # Presentable form, as written
    canonical: str  # Names replaced by qualified names
    target: Optional[str] = None  # Qualified name of the head type
    args: list["TypeRef"] = Field(default_factory=list)
    is_union: bool = False
    is_type_param: bool = False
    supported: bool = True


# === Structures ===

class TypeStructure(BaseModel):
    """One node of a type's shape tree.

    Leaves for primitive and standard-library types have ``is_builtin`` set
    and no children. A node with ``reference`` set stands for a type that
    was already being expanded higher up the tree.
    """

    name: str
    display_type: str
    children: list["TypeStructure"] = Field(default_factory=list)
    is_builtin: bool = False
    reference: Optional[str] = None


# === Config ===

class TypeshapeConfig(BaseModel):
    """Configuration for typeshape."""

    version: str = "0.1.0"
    source_roots: list[str] = Field(default_factory=lambda: ["."])
    library_paths: list[str] = Field(default_factory=list)  # Extra roots, e.g. vendored packages
    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    excluded_namespaces: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_NAMESPACES))
    include_init_fields: bool = True  # Also collect self.x fields assigned in __init__
    unresolved_as_builtin: bool = False  # Keep unresolved field types as builtin leaves
    command_logging: bool = True  # Log command invocations to .typeshape-logs/
