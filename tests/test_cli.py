"""Tests for typeshape CLI."""

import json
import pytest
from pathlib import Path
import tempfile
from typer.testing import CliRunner
from typeshape.cli import app
from typeshape.config import TYPESHAPE_DIR, CONFIG_FILE, STRUCTURES_FILE
from typeshape.storage import read_json, read_jsonl

from conftest import BLOG_FILES, write_files


runner = CliRunner()


@pytest.fixture
def project():
    """An initialized blog project."""
    with tempfile.TemporaryDirectory() as tmpdir:
        write_files(Path(tmpdir), BLOG_FILES)
        result = runner.invoke(app, ["init", tmpdir])
        assert result.exit_code == 0
        yield tmpdir


class TestInitCommand:
    """Tests for the init command."""

    def test_init_creates_config(self) -> None:
        """Test that init writes the default configuration."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(app, ["init", tmpdir])

            assert result.exit_code == 0
            assert "Initialized typeshape" in result.stdout

            config = read_json(Path(tmpdir) / TYPESHAPE_DIR / CONFIG_FILE)
            assert config["source_roots"] == ["."]
            assert "django" in config["excluded_namespaces"]

    def test_init_updates_gitignore(self) -> None:
        """Test that init adds its directories to .gitignore once."""
        with tempfile.TemporaryDirectory() as tmpdir:
            gitignore = Path(tmpdir) / ".gitignore"
            gitignore.write_text("*.pyc\n")

            runner.invoke(app, ["init", tmpdir])
            runner.invoke(app, ["init", tmpdir, "--force"])

            lines = gitignore.read_text().splitlines()
            assert lines.count(".typeshape/") == 1
            assert lines.count(".typeshape-logs/") == 1
            assert lines[0] == "*.pyc"

    def test_init_no_gitignore(self) -> None:
        """Test that --no-gitignore leaves .gitignore alone."""
        with tempfile.TemporaryDirectory() as tmpdir:
            runner.invoke(app, ["init", tmpdir, "--no-gitignore"])
            assert not (Path(tmpdir) / ".gitignore").exists()

    def test_init_fails_if_already_exists(self) -> None:
        """Test that init fails if .typeshape already exists."""
        with tempfile.TemporaryDirectory() as tmpdir:
            runner.invoke(app, ["init", tmpdir])

            result = runner.invoke(app, ["init", tmpdir])

            assert result.exit_code == 1
            assert "already initialized" in result.stdout

    def test_init_missing_directory(self) -> None:
        """Test that init reports a missing directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(app, ["init", str(Path(tmpdir) / "nope")])

            assert result.exit_code == 1
            assert "Directory not found" in result.output


class TestCLIHelp:
    """Tests for CLI help output."""

    def test_main_help(self) -> None:
        """Test that main help displays."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "field structure" in result.stdout

    def test_structure_help(self) -> None:
        """Test that structure help displays."""
        result = runner.invoke(app, ["structure", "--help"])

        assert result.exit_code == 0
        assert "--outline" in result.stdout


class TestStructureCommand:
    """Tests for the structure command."""

    def test_not_initialized(self) -> None:
        """Test that commands require init."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(app, ["structure", "User", "-b", tmpdir])

            assert result.exit_code == 1
            assert "not initialized" in result.output

    def test_plain_tree(self, project) -> None:
        """Test the plain tree output."""
        result = runner.invoke(app, ["structure", "BlogPost", "-b", project, "--plain"])

        assert result.exit_code == 0
        assert "BlogPost" in result.stdout
        assert "└── comment: Comment" in result.stdout
        assert "│   └── name: str" in result.stdout

    def test_outline(self, project) -> None:
        """Test the outline output."""
        result = runner.invoke(app, ["structure", "Comment", "-b", project, "--outline"])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "class Comment:",
            "  author: User",
            "    name: str",
            "  text: str",
        ]

    def test_json(self, project) -> None:
        """Test the JSON output."""
        result = runner.invoke(app, ["structure", "blog.users.User", "-b", project, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "User"
        assert data["children"][0]["display_type"] == "str"

    def test_rich_tree(self, project) -> None:
        """Test the default colored output."""
        result = runner.invoke(app, ["structure", "BlogPost", "-b", project])

        assert result.exit_code == 0
        assert "comment" in result.stdout

    def test_unknown_class(self, project) -> None:
        """Test that an unknown class is an error."""
        result = runner.invoke(app, ["structure", "Nope", "-b", project])

        assert result.exit_code == 1
        assert "Class not found: Nope" in result.output

    def test_ambiguous_class(self, project) -> None:
        """Test that an ambiguous simple name is an error."""
        write_files(Path(project), {"other.py": "class User:\n    id: int\n"})

        result = runner.invoke(app, ["structure", "User", "-b", project])

        assert result.exit_code == 1
        assert "matches 2 classes" in result.output

    def test_excluded_namespace(self, project) -> None:
        """Test that an excluded owner has no structure."""
        write_files(Path(project), {"django/db.py": "class Model:\n    id: int\n"})

        result = runner.invoke(app, ["structure", "Model", "-b", project])

        assert result.exit_code == 1
        assert "excluded namespace" in result.output


class TestClassesCommand:
    """Tests for the classes command."""

    def test_plain_listing(self, project) -> None:
        """Test one line per class."""
        result = runner.invoke(app, ["classes", "-b", project, "--plain"])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("blog.models.Comment  (2 fields)")

    def test_filter(self, project) -> None:
        """Test filtering by qualified name."""
        result = runner.invoke(app, ["classes", "-b", project, "--plain", "--filter", "users"])

        assert result.exit_code == 0
        assert "blog.users.User" in result.stdout
        assert "BlogPost" not in result.stdout

    def test_no_matches(self, project) -> None:
        """Test the empty listing message."""
        result = runner.invoke(app, ["classes", "-b", project, "--filter", "zzz"])

        assert result.exit_code == 0
        assert "No classes found." in result.stdout


class TestUsagesCommand:
    """Tests for the usages command."""

    def test_usages(self, project) -> None:
        """Test that fields typed with the class are listed."""
        result = runner.invoke(app, ["usages", "User", "-b", project])

        assert result.exit_code == 0
        assert "Usages of blog.users.User (1):" in result.stdout
        assert "blog.models.Comment.author: User" in result.stdout

    def test_no_usages(self, project) -> None:
        """Test a class nobody refers to."""
        result = runner.invoke(app, ["usages", "BlogPost", "-b", project])

        assert result.exit_code == 0
        assert "No usages of blog.models.BlogPost." in result.stdout


class TestExportCommand:
    """Tests for the export command."""

    def test_export_default_location(self, project) -> None:
        """Test that every class is exported to structures.jsonl."""
        result = runner.invoke(app, ["export", "-b", project])

        assert result.exit_code == 0
        assert "Exported 3 structures" in result.stdout

        records = list(read_jsonl(Path(project) / TYPESHAPE_DIR / STRUCTURES_FILE))
        assert [r["class"] for r in records] == [
            "blog.models.Comment",
            "blog.models.BlogPost",
            "blog.users.User",
        ]
        assert records[1]["structure"]["children"][1]["name"] == "comment"

    def test_export_skips_excluded(self, project) -> None:
        """Test that excluded owners are counted as skipped."""
        write_files(Path(project), {"django/db.py": "class Model:\n    id: int\n"})
        output = Path(project) / "out.jsonl"

        result = runner.invoke(app, ["export", "-b", project, "-o", str(output)])

        assert result.exit_code == 0
        assert "Skipped: 1" in result.stdout
        assert len(list(read_jsonl(output))) == 3


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_set_list_value(self, project) -> None:
        """Test comma-separated list values."""
        result = runner.invoke(app, ["config", "set", "excluded_namespaces", "django,acme.vendor", "-b", project])

        assert result.exit_code == 0
        config = read_json(Path(project) / TYPESHAPE_DIR / CONFIG_FILE)
        assert config["excluded_namespaces"] == ["django", "acme.vendor"]

    def test_set_bool_value(self, project) -> None:
        """Test boolean values."""
        result = runner.invoke(app, ["config", "set", "unresolved_as_builtin", "true", "-b", project])

        assert result.exit_code == 0
        config = read_json(Path(project) / TYPESHAPE_DIR / CONFIG_FILE)
        assert config["unresolved_as_builtin"] is True

    def test_set_unknown_key_warns(self, project) -> None:
        """Test that unknown keys are stored with a warning."""
        result = runner.invoke(app, ["config", "set", "colour", "blue", "-b", project])

        assert result.exit_code == 0
        assert "not a standard config key" in result.output

    def test_set_invalid_json(self, project) -> None:
        """Test that a malformed JSON list is rejected."""
        result = runner.invoke(app, ["config", "set", "source_roots", "[src", "-b", project])

        assert result.exit_code == 1

    def test_show(self, project) -> None:
        """Test that show lists settings."""
        result = runner.invoke(app, ["config", "show", "-b", project, "--plain"])

        assert result.exit_code == 0
        assert "unresolved_as_builtin" in result.stdout
        assert "excluded_namespaces" in result.stdout

    def test_reset(self, project) -> None:
        """Test that reset restores defaults."""
        runner.invoke(app, ["config", "set", "source_roots", "src", "-b", project])

        result = runner.invoke(app, ["config", "reset", "-b", project])

        assert result.exit_code == 0
        config = read_json(Path(project) / TYPESHAPE_DIR / CONFIG_FILE)
        assert config["source_roots"] == ["."]

    def test_excluded_namespaces_from_config(self, project) -> None:
        """Test that structure honors configured exclusions."""
        runner.invoke(app, ["config", "set", "excluded_namespaces", "blog.users", "-b", project])

        result = runner.invoke(app, ["structure", "Comment", "-b", project, "--outline"])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["class Comment:", "  text: str"]
