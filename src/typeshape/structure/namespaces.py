"""Exclusion of well-known third-party namespaces."""
import fnmatch

from ..config import DEFAULT_EXCLUDED_NAMESPACES


class NamespaceFilter:
    """Decide whether a qualified name belongs to an excluded namespace.

    Patterns are checked in order. A plain pattern such as ``django`` matches
    ``django`` itself and anything below it (``django.db.models.Model``) but
    not ``djangorestframework``. Patterns containing glob characters are
    matched against the whole name with fnmatch.
    """

    def __init__(self, patterns: list[str] | None = None):
        source = DEFAULT_EXCLUDED_NAMESPACES if patterns is None else patterns
        self.patterns = [p.strip().rstrip('.') for p in source if p.strip()]

    def is_excluded(self, qualified_name: str | None) -> bool:
        if not qualified_name:
            return False
        return self.match(qualified_name) is not None

    def match(self, qualified_name: str) -> str | None:
        """Return the first pattern that excludes the name, if any."""
        for pattern in self.patterns:
            if any(c in pattern for c in '*?['):
                if fnmatch.fnmatchcase(qualified_name, pattern):
                    return pattern
            elif qualified_name == pattern or qualified_name.startswith(pattern + '.'):
                return pattern
        return None
