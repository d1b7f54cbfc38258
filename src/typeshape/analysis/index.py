"""Symbol index over the Python files of a project."""
import builtins
import fnmatch
import logging
from pathlib import Path
from typing import Generator, Iterator

from .parser import PythonFileParser
from ..config import DEFAULT_EXCLUDE_PATTERNS
from ..errors import AmbiguousClassError
from ..models import ClassSymbol, ModuleRecord, TypeRef, UsageRecord

logger = logging.getLogger(__name__)

BUILTIN_NAMES = frozenset(dir(builtins)) | {"None"}

# Re-export chains longer than this are treated as unresolvable
MAX_ALIAS_HOPS = 16


def should_exclude(path: Path, patterns: list[str]) -> bool:
    """Check if path matches any exclude pattern.

    Matches patterns against individual path components to avoid substring
    false positives (e.g. 'lib' should not exclude 'libs/').
    """
    for pattern in patterns:
        # Special handling for dot-prefixed directory pattern
        if pattern == ".*":
            for part in path.parts:
                if part.startswith('.') and part not in ('.', '..'):
                    return True
            continue

        if any(c in pattern for c in '*?['):
            for part in path.parts:
                if fnmatch.fnmatch(part, pattern):
                    return True
        elif pattern in path.parts:
            return True
    return False


def find_python_files(
    directory: Path,
    exclude_patterns: list[str]
) -> Generator[Path, None, None]:
    """Find all Python files in directory, respecting exclude patterns."""
    for path in sorted(directory.rglob("*.py")):
        if not should_exclude(path.relative_to(directory), exclude_patterns):
            yield path


class SymbolIndex:
    """Read-only view of the classes, imports and type variables of a project.

    Modules are keyed by dotted name. When two roots provide the same module
    the first root wins, so project sources shadow library paths.
    """

    def __init__(self, modules: list[ModuleRecord] | None = None):
        self._modules: dict[str, ModuleRecord] = {}
        self._classes: dict[str, ClassSymbol] = {}
        self._module_classes: dict[str, dict[str, ClassSymbol]] = {}
        for record in modules or []:
            self.add_module(record)

    @classmethod
    def build(
        cls,
        roots: list[Path],
        exclude_patterns: list[str] | None = None,
        include_init_fields: bool = True,
    ) -> "SymbolIndex":
        """Parse every Python file under the given roots."""
        patterns = exclude_patterns if exclude_patterns is not None else DEFAULT_EXCLUDE_PATTERNS
        index = cls()
        for root in roots:
            for file_path in find_python_files(root, patterns):
                parser = PythonFileParser(file_path, root, include_init_fields=include_init_fields)
                if not parser.parse():
                    logger.debug("Skipping unparseable file %s", file_path)
                    continue
                index.add_module(parser.get_module_record())
        logger.debug("Indexed %d modules, %d classes", len(index._modules), len(index._classes))
        return index

    def add_module(self, record: ModuleRecord) -> bool:
        """Add a module record. Returns False if the module was already indexed."""
        if record.module in self._modules:
            return False
        self._modules[record.module] = record
        by_qualname = {}
        for symbol in record.classes:
            by_qualname[symbol.qualname] = symbol
            self._classes.setdefault(symbol.qualified_name, symbol)
        self._module_classes[record.module] = by_qualname
        return True

    def __len__(self) -> int:
        return len(self._classes)

    def get_module(self, name: str) -> ModuleRecord | None:
        return self._modules.get(name)

    def classes(self) -> Iterator[ClassSymbol]:
        """All indexed classes, in index order."""
        return iter(self._classes.values())

    def get_class(self, qualified_name: str | None) -> ClassSymbol | None:
        """Look up a class by qualified name, following re-exports."""
        if qualified_name is None:
            return None
        symbol = self._classes.get(qualified_name)
        if symbol is not None:
            return symbol
        canonical = self.canonicalize(qualified_name)
        return self._classes.get(canonical) if canonical else None

    def find_class(self, name: str) -> ClassSymbol | None:
        """Find a class by qualified name, qualname or simple name.

        Raises:
            AmbiguousClassError: if a non-qualified name matches several classes.
        """
        symbol = self.get_class(name)
        if symbol is not None:
            return symbol

        matches = [c for c in self._classes.values() if c.qualname == name]
        if not matches:
            matches = [c for c in self._classes.values() if c.name == name]
        if len(matches) > 1:
            raise AmbiguousClassError(name, [c.qualified_name for c in matches])
        return matches[0] if matches else None

    def resolve_name(self, module: str, dotted: str, scope: str = "") -> str | None:
        """Resolve a name as written in a module to a qualified name.

        Lookup order for the first component: classes nested in the
        enclosing class ``scope`` (a qualname such as ``Outer.Inner``) and
        its parents, classes defined at module level, import bindings, then
        builtins. The result is canonicalized so that re-exported classes
        resolve to their defining module.
        """
        head, _, rest = dotted.partition('.')
        record = self._modules.get(module)
        local = self._lookup_local(module, head, scope) if record is not None else None

        if local is not None:
            qualified = f"{module}.{local}" if module else local
        elif record is not None and head in record.imports:
            qualified = record.imports[head]
        elif head in BUILTIN_NAMES:
            qualified = f"builtins.{head}"
        else:
            return None

        if rest:
            qualified = f"{qualified}.{rest}"
        return self.canonicalize(qualified) or qualified

    def _lookup_local(self, module: str, head: str, scope: str) -> str | None:
        """Qualname of the innermost class named ``head`` visible from ``scope``."""
        by_qualname = self._module_classes.get(module, {})
        parts = scope.split('.') if scope else []
        for i in range(len(parts), -1, -1):
            candidate = '.'.join([*parts[:i], head])
            if candidate in by_qualname:
                return candidate
        return None

    def canonicalize(self, qualified: str, _hops: int = 0) -> str | None:
        """Follow re-exports until the name points at the module that defines it.

        Returns the name unchanged when no indexed module claims it, and None
        when the re-export chain does not terminate.
        """
        if qualified in self._classes:
            return qualified
        if _hops > MAX_ALIAS_HOPS:
            return None

        parts = qualified.split('.')
        # Longest indexed module prefix first
        for i in range(len(parts) - 1, 0, -1):
            module = '.'.join(parts[:i])
            record = self._modules.get(module)
            if record is None:
                continue
            name, rest = parts[i], parts[i + 1:]
            if name in self._module_classes[module]:
                candidate = '.'.join([module, name, *rest])
                return candidate
            if name in record.imports:
                target = record.imports[name]
                if rest:
                    target = '.'.join([target, *rest])
                if target == qualified:
                    return qualified
                return self.canonicalize(target, _hops + 1)
            break
        return qualified

    def is_type_var(self, qualified: str) -> bool:
        """True if the name is a module-level TypeVar of an indexed module."""
        module, _, name = qualified.rpartition('.')
        record = self._modules.get(module)
        return record is not None and name in record.type_vars

    def find_usages(self, qualified_name: str, resolver=None) -> list[UsageRecord]:
        """Find every field whose declared type mentions the given class."""
        from .resolver import TypeResolver

        resolver = resolver or TypeResolver(self)
        usages = []
        for owner in self._classes.values():
            for field in owner.fields:
                ref = resolver.resolve(field.annotation, owner)
                if _mentions(ref, qualified_name):
                    usages.append(UsageRecord(
                        owner=owner.qualified_name,
                        field=field.name,
                        annotation=field.annotation,
                        file=owner.file,
                        line=field.line,
                    ))
        return usages


def _mentions(ref: TypeRef, qualified_name: str) -> bool:
    if ref.target == qualified_name:
        return True
    return any(_mentions(arg, qualified_name) for arg in ref.args)
