"""Diagnostics setup and command logging for typeshape."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Log file location (outside .typeshape/ so it survives re-init)
TYPESHAPE_LOGS_DIR = ".typeshape-logs"
COMMAND_LOG_FILE = "commands.log"
MAX_LOG_SIZE_MB = 10


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route diagnostics through a rich handler on stderr.

    Args:
        verbose: Show debug messages (cache hits, skipped namespaces).
        quiet: Only show errors.

    Note:
        verbose takes precedence over quiet. Default level is WARNING,
        which shows unresolvable field types.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setLevel(level)

    package_logger = logging.getLogger("typeshape")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def get_logs_path(base_path: Optional[Path] = None) -> Path:
    """Get the .typeshape-logs directory path.

    Args:
        base_path: Base path for logs. Defaults to cwd.

    Returns:
        Path to .typeshape-logs directory.
    """
    if base_path is None:
        base_path = Path.cwd()
    return base_path / TYPESHAPE_LOGS_DIR


def is_logging_enabled(base_path: Optional[Path] = None) -> bool:
    """Check if command logging is enabled via config.

    Only projects initialized with ``typeshape init`` log commands.
    """
    from .config import get_typeshape_path, load_config

    if not get_typeshape_path(base_path).exists():
        return False
    return load_config(base_path).command_logging


def log_command(command: str, args: list[str], base_path: Optional[Path] = None) -> None:
    """Log a command invocation.

    Args:
        command: The command name (e.g., "config set").
        args: Command arguments.
        base_path: Base path. Defaults to cwd.
    """
    if not is_logging_enabled(base_path):
        return

    logs_path = get_logs_path(base_path)
    log_file = logs_path / COMMAND_LOG_FILE

    # Create directory on first write
    logs_path.mkdir(parents=True, exist_ok=True)

    # Check log rotation (simple size-based)
    if log_file.exists():
        size_mb = log_file.stat().st_size / (1024 * 1024)
        if size_mb > MAX_LOG_SIZE_MB:
            # Rotate: keep .1 backup
            backup = logs_path / f"{COMMAND_LOG_FILE}.1"
            if backup.exists():
                backup.unlink()
            log_file.rename(backup)

    timestamp = datetime.now().isoformat()
    args_str = " ".join(f'"{a}"' if " " in a else a for a in args)
    entry = f"{timestamp} | {command} | {args_str}\n"

    with log_file.open("a") as f:
        f.write(entry)


def split_command_line(args: list[str]) -> tuple[str, list[str]]:
    """Split argv (without the program name) into command name and arguments.

    Global options before the command are ignored. Group commands such as
    "config set" keep both words.
    """
    command_parts: list[str] = []
    remaining_args: list[str] = []
    in_command = True

    for arg in args:
        if in_command:
            if arg.startswith("-"):
                if command_parts:
                    in_command = False
                    remaining_args.append(arg)
                continue
            command_parts.append(arg)
            if command_parts[0] != "config" or len(command_parts) == 2:
                in_command = False
        else:
            remaining_args.append(arg)

    command = " ".join(command_parts) if command_parts else "unknown"
    return command, remaining_args


def log_from_cli() -> None:
    """Log the current CLI invocation.

    Call this from the CLI callback to capture all typeshape commands.
    """
    if len(sys.argv) < 2:
        return

    command, remaining_args = split_command_line(sys.argv[1:])
    log_command(command, remaining_args)
