"""Global CLI context."""

from __future__ import annotations

from pathlib import Path


class _Context:
    """Options set by the CLI callback and read by the commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None


_context = _Context()


def get_config_path() -> Path | None:
    """Get the config path given with --config."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    """Set the config path given with --config."""
    _context.config_path = path
