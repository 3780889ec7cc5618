"""Public CLI exports for Pipesmith."""

from __future__ import annotations

from .app import app, main
from .commands import compose
from .state import debug_enabled, emit_error, emit_warning, get_cli_state


__all__ = [
    "app",
    "compose",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "main",
]
