"""Console reporting of composer diagnostics for ``pipesmith compose``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pipesmith.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


class CliEmitter:
    """Report composer warnings and events on the rich console.

    Flushes and content-type changes are informational and only shown with
    ``--verbose``. Fragments dropped by a reduction are always reported, since
    their content is missing from the output. Flushed byte counts are totalled
    for the final summary.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)
        self.bytes_written = 0
        self.flushes = 0

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        data = dict(payload)
        self._state.record_event(name, data)

        if name == "flush":
            self.flushes += 1
            self.bytes_written += int(data.get("bytes", 0))
        elif name == "reduce" and data.get("dropped"):
            dropped = ", ".join(str(item) for item in data["dropped"])
            emit_warning(f"Fragments left out of '{data.get('root')}': {dropped}")
            return

        message = format_event_message(name, data)
        if message:
            render_message("info", message)

    def summary(self) -> str:
        return f"Wrote {self.bytes_written} bytes in {self.flushes} flush(es)"


__all__ = ["CliEmitter"]
