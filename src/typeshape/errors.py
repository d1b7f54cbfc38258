"""Exceptions raised by typeshape."""


class TypeshapeError(Exception):
    """Base class for typeshape errors."""


class NotInitializedError(TypeshapeError):
    """Raised when a command needs a .typeshape directory that does not exist."""


class AmbiguousClassError(TypeshapeError):
    """Raised when a class name matches more than one indexed class."""

    def __init__(self, name: str, candidates: list[str]):
        self.name = name
        self.candidates = candidates
        super().__init__(
            f"'{name}' matches {len(candidates)} classes: {', '.join(candidates)}"
        )
