"""Tests for configuration loading and command logging."""

import json
import pytest
from pathlib import Path
import tempfile
from typeshape.config import (
    TYPESHAPE_DIR,
    CONFIG_FILE,
    find_project_root,
    get_typeshape_path,
    load_config,
    resolve_roots,
)
from typeshape.logging import (
    COMMAND_LOG_FILE,
    get_logs_path,
    log_command,
    split_command_line,
)
from typeshape.models import TypeshapeConfig
from typeshape.project import open_project
from typeshape.errors import NotInitializedError


def write_config(base: Path, data) -> None:
    config_file = base / TYPESHAPE_DIR / CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(data))


class TestLoadConfig:
    """Tests for config loading."""

    def test_missing_config_gives_defaults(self) -> None:
        """Test defaults when no config file exists."""
        with tempfile.TemporaryDirectory() as tmpdir:
            assert load_config(Path(tmpdir)) == TypeshapeConfig()

    def test_partial_config_merges_defaults(self) -> None:
        """Test that config keys override defaults one by one."""
        with tempfile.TemporaryDirectory() as tmpdir:
            write_config(Path(tmpdir), {"source_roots": ["src"], "colour": "blue"})

            config = load_config(Path(tmpdir))

            assert config.source_roots == ["src"]
            assert config.excluded_namespaces == TypeshapeConfig().excluded_namespaces

    def test_corrupt_config_gives_defaults(self) -> None:
        """Test that an unreadable config falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = get_typeshape_path(Path(tmpdir)) / CONFIG_FILE
            config_file.parent.mkdir()
            config_file.write_text("{not json")

            assert load_config(Path(tmpdir)) == TypeshapeConfig()

    @pytest.mark.parametrize("data", [[1, 2], "src", {"source_roots": 5}, {"include_init_fields": "maybe"}])
    def test_invalid_config_gives_defaults(self, data) -> None:
        """Test that valid JSON with the wrong shape or types falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            write_config(Path(tmpdir), data)

            assert load_config(Path(tmpdir)) == TypeshapeConfig()

    def test_invalid_config_does_not_break_open_project(self) -> None:
        """Test that a project with an invalid config still opens."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            (base / "core.py").write_text("class Core:\n    x: int\n")
            write_config(base, {"source_roots": 5})

            project = open_project(base)

            assert project.config == TypeshapeConfig()
            assert [c.qualified_name for c in project.index.classes()] == ["core.Core"]

    def test_find_project_root(self) -> None:
        """Test walking up to the directory holding .typeshape."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir).resolve()
            (base / TYPESHAPE_DIR).mkdir()
            nested = base / "a" / "b"
            nested.mkdir(parents=True)

            assert find_project_root(nested) == base

    def test_resolve_roots(self) -> None:
        """Test that roots are absolute, existing and deduplicated."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            (base / "src").mkdir()
            config = TypeshapeConfig(source_roots=["src", "src", "missing"], library_paths=["."])

            assert resolve_roots(base, config) == [base / "src", base / "."]


class TestOpenProject:
    """Tests for opening a project."""

    def test_requires_init(self) -> None:
        """Test that an uninitialized directory is rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(NotInitializedError):
                open_project(Path(tmpdir))

    def test_indexes_source_roots(self) -> None:
        """Test that only configured roots are indexed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            (base / "src").mkdir()
            (base / "src" / "core.py").write_text("class Core:\n    x: int\n")
            (base / "scripts.py").write_text("class Script:\n    y: int\n")
            write_config(base, {"source_roots": ["src"]})

            project = open_project(base)

            assert [c.qualified_name for c in project.index.classes()] == ["core.Core"]
            assert project.builder().build_by_name("Core").children[0].name == "x"


class TestCommandLogging:
    """Tests for command logging."""

    def test_split_command_line(self) -> None:
        """Test command and argument separation."""
        assert split_command_line(["-v", "structure", "User", "--json"]) == ("structure", ["User", "--json"])
        assert split_command_line(["config", "set", "a", "b"]) == ("config set", ["a", "b"])
        assert split_command_line([]) == ("unknown", [])

    def test_log_command_requires_init(self) -> None:
        """Test that nothing is logged outside an initialized project."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_command("structure", ["User"], Path(tmpdir))

            assert not get_logs_path(Path(tmpdir)).exists()

    def test_log_command_appends(self) -> None:
        """Test that invocations are appended to the log."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            write_config(base, {})

            log_command("structure", ["User", "--outline"], base)
            log_command("config set", ["source_roots", "src lib"], base)

            lines = (get_logs_path(base) / COMMAND_LOG_FILE).read_text().splitlines()
            assert len(lines) == 2
            assert lines[0].endswith("| structure | User --outline")
            assert lines[1].endswith('| config set | source_roots "src lib"')

    def test_log_command_disabled(self) -> None:
        """Test that command_logging=false turns logging off."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            write_config(base, {"command_logging": False})

            log_command("structure", ["User"], base)

            assert not get_logs_path(base).exists()
