"""Shared fixtures: small on-disk Python projects."""
import pytest
import tempfile
import textwrap
from pathlib import Path

from typeshape.analysis.index import SymbolIndex


def write_files(root: Path, files: dict[str, str]) -> None:
    """Write {relative_path: source} under root, creating packages as needed."""
    for rel_path, source in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))


BLOG_FILES = {
    "blog/__init__.py": "",
    "blog/users.py": '''
        class User:
            name: str
    ''',
    "blog/models.py": '''
        from dataclasses import dataclass

        from .users import User


        @dataclass
        class Comment:
            author: User
            text: str


        @dataclass
        class BlogPost:
            id: int
            comment: Comment
    ''',
}


@pytest.fixture
def make_index():
    """Build a SymbolIndex from a dict of files in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)

        def build(files: dict[str, str], **kwargs) -> SymbolIndex:
            write_files(root, files)
            return SymbolIndex.build([root], **kwargs)

        yield build


@pytest.fixture
def blog_index(make_index) -> SymbolIndex:
    return make_index(BLOG_FILES)
