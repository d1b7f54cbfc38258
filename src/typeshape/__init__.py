"""typeshape - field structures of Python classes.

typeshape indexes the classes of a Python project and extracts a
simplified, serializable shape of any class: its fields in declaration
order, with user-defined field types expanded recursively and builtin or
standard-library types kept as leaves. The result is meant as compact
context for prompt builders and other tools.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
