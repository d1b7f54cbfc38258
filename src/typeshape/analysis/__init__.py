"""Analysis module for typeshape - static symbol index of Python code."""
from .parser import PythonFileParser
from .index import SymbolIndex, find_python_files
from .resolver import TypeResolver

__all__ = [
    "PythonFileParser",
    "SymbolIndex",
    "find_python_files",
    "TypeResolver",
]
