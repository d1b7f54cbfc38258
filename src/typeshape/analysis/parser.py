"""AST parsing for Python files."""
import ast
from pathlib import Path
from ..config import CLASSVAR_WRAPPERS, GENERIC_BASES, TYPE_VAR_FACTORIES
from ..models import ClassSymbol, FieldSymbol, ModuleRecord


def get_module_from_path(path: Path, base_path: Path) -> str:
    """Convert file path to module name."""
    try:
        relative = path.relative_to(base_path)
        parts = list(relative.parts)
        if parts[-1].endswith('.py'):
            parts[-1] = parts[-1][:-3]
        if parts[-1] == '__init__':
            parts = parts[:-1]
        return '.'.join(parts)
    except ValueError:
        return path.stem


def extract_type_annotation(node: ast.expr | None) -> str | None:
    """Extract type annotation as string."""
    if node is None:
        return None
    return ast.unparse(node)


def get_dotted_name(node: ast.expr) -> str | None:
    """Return "a.b.c" for Name/Attribute chains, None for anything else."""
    parts = []
    current = node
    while isinstance(current, ast.Attribute):
        parts.append(current.attr)
        current = current.value
    if isinstance(current, ast.Name):
        parts.append(current.id)
        return '.'.join(reversed(parts))
    return None


class PythonFileParser:
    """Parse a Python file and extract its class shapes."""

    def __init__(self, file_path: Path, base_path: Path, include_init_fields: bool = True):
        self.file_path = file_path
        self.base_path = base_path
        self.include_init_fields = include_init_fields
        self.module = get_module_from_path(file_path, base_path)
        self.is_package = file_path.name == '__init__.py'
        self.tree: ast.Module | None = None
        self.source: str = ""
        self._imports: dict[str, str] = {}

    def parse(self) -> bool:
        """Parse the file. Returns True if successful."""
        try:
            self.source = self.file_path.read_text(encoding='utf-8')
            self.tree = ast.parse(self.source, filename=str(self.file_path))
            return True
        except (SyntaxError, UnicodeDecodeError, ValueError):
            return False

    def get_module_record(self) -> ModuleRecord:
        """Get the module record (imports, type variables, classes)."""
        self._imports = dict(self.get_imports())
        return ModuleRecord(
            module=self.module,
            file=str(self.file_path.relative_to(self.base_path)),
            classes=list(self.get_classes()),
            imports=self._imports,
            type_vars=self.get_type_vars(),
        )

    def get_imports(self) -> list[tuple[str, str]]:
        """Extract module-level import bindings as (local_name, qualified_target)."""
        if not self.tree:
            return []

        bindings = []
        for node in self.tree.body:
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        bindings.append((alias.asname, alias.name))
                    else:
                        # "import a.b" binds "a"
                        head = alias.name.split('.')[0]
                        bindings.append((head, head))
            elif isinstance(node, ast.ImportFrom):
                source = self._absolute_module(node.module or "", node.level or 0)
                for alias in node.names:
                    if alias.name == '*':
                        continue
                    target = f"{source}.{alias.name}" if source else alias.name
                    bindings.append((alias.asname or alias.name, target))
        return bindings

    def _absolute_module(self, module: str, level: int) -> str:
        """Resolve a (possibly relative) "from" import to an absolute module name."""
        if level == 0:
            return module

        # A package's __init__ is its own package; a plain module lives in its parent
        package = self.module.split('.') if self.module else []
        if not self.is_package:
            package = package[:-1]
        if level > 1:
            package = package[:len(package) - (level - 1)]

        if module:
            package.append(module)
        return '.'.join(package)

    def get_type_vars(self) -> list[str]:
        """Names bound at module level to TypeVar(...) and friends."""
        if not self.tree:
            return []

        names = []
        for node in self.tree.body:
            if not isinstance(node, ast.Assign) or not isinstance(node.value, ast.Call):
                continue
            factory = get_dotted_name(node.value.func)
            if factory is None or factory.split('.')[-1] not in TYPE_VAR_FACTORIES:
                continue
            for target in node.targets:
                if isinstance(target, ast.Name):
                    names.append(target.id)
        return names

    def get_classes(self):
        """Extract class definitions, nested classes included, in source order."""
        if not self.tree:
            return
        if not self._imports:
            self._imports = dict(self.get_imports())
        yield from self._walk_classes(self.tree.body, prefix="")

    def _walk_classes(self, body: list[ast.stmt], prefix: str):
        for node in body:
            if isinstance(node, ast.ClassDef):
                qualname = f"{prefix}{node.name}"
                yield self._make_class_symbol(node, qualname)
                yield from self._walk_classes(node.body, prefix=f"{qualname}.")

    def _make_class_symbol(self, node: ast.ClassDef, qualname: str) -> ClassSymbol:
        """Create a class symbol from an AST node."""
        return ClassSymbol(
            name=node.name,
            qualname=qualname,
            module=self.module,
            file=str(self.file_path.relative_to(self.base_path)),
            line=node.lineno,
            fields=self._collect_fields(node),
            bases=[ast.unparse(base) for base in node.bases],
            type_params=self._collect_type_params(node),
        )

    def _collect_type_params(self, node: ast.ClassDef) -> list[str]:
        params = []
        # PEP 695: class Box[T]: ...
        for param in getattr(node, 'type_params', []) or []:
            params.append(param.name)

        # class Box(Generic[T]): ...
        for base in node.bases:
            if not isinstance(base, ast.Subscript):
                continue
            if self._qualify(get_dotted_name(base.value)) not in GENERIC_BASES:
                continue
            elements = base.slice.elts if isinstance(base.slice, ast.Tuple) else [base.slice]
            for element in elements:
                if isinstance(element, ast.Name) and element.id not in params:
                    params.append(element.id)
        return params

    def _qualify(self, dotted: str | None) -> str | None:
        """Expand the head of a dotted name through this module's imports."""
        if dotted is None:
            return None
        head, _, rest = dotted.partition('.')
        target = self._imports.get(head, head)
        return f"{target}.{rest}" if rest else target

    def _is_classvar(self, annotation: ast.expr) -> bool:
        node = annotation
        if isinstance(node, ast.Subscript):
            node = node.value
        return self._qualify(get_dotted_name(node)) in CLASSVAR_WRAPPERS

    def _collect_fields(self, node: ast.ClassDef) -> list[FieldSymbol]:
        """Fields in declaration order: class body first, then __init__."""
        fields: list[FieldSymbol] = []
        seen: set[str] = set()

        for child in node.body:
            if not isinstance(child, ast.AnnAssign) or not isinstance(child.target, ast.Name):
                continue
            if self._is_classvar(child.annotation):
                continue
            name = child.target.id
            if name not in seen:
                seen.add(name)
                fields.append(FieldSymbol(
                    name=name,
                    annotation=extract_type_annotation(child.annotation),
                    line=child.lineno,
                ))

        if self.include_init_fields:
            for name, annotation, line in self._init_fields(node):
                if name not in seen:
                    seen.add(name)
                    fields.append(FieldSymbol(name=name, annotation=annotation, line=line))

        return fields

    def _init_fields(self, node: ast.ClassDef) -> list[tuple[str, str, int]]:
        """(name, annotation, line) for typed self attributes set in __init__, by line."""
        init = next(
            (n for n in node.body
             if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef)) and n.name == '__init__'),
            None
        )
        if init is None or not init.args.args:
            return []

        self_name = init.args.args[0].arg
        param_types = {
            arg.arg: extract_type_annotation(arg.annotation)
            for arg in [*init.args.posonlyargs, *init.args.args, *init.args.kwonlyargs]
            if arg.annotation is not None
        }

        found = []
        for stmt in ast.walk(init):
            if isinstance(stmt, ast.AnnAssign):
                attr = self._self_attribute(stmt.target, self_name)
                if attr and not self._is_classvar(stmt.annotation):
                    found.append((attr, extract_type_annotation(stmt.annotation), stmt.lineno))
            elif isinstance(stmt, ast.Assign) and isinstance(stmt.value, ast.Name):
                # self.x = x, where x is an annotated parameter
                annotation = param_types.get(stmt.value.id)
                if annotation is None:
                    continue
                for target in stmt.targets:
                    attr = self._self_attribute(target, self_name)
                    if attr:
                        found.append((attr, annotation, stmt.lineno))

        # ast.walk is breadth-first; report in source order
        return sorted(found, key=lambda item: item[2])

    @staticmethod
    def _self_attribute(target: ast.expr, self_name: str) -> str | None:
        if (isinstance(target, ast.Attribute)
                and isinstance(target.value, ast.Name)
                and target.value.id == self_name):
            return target.attr
        return None
