from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from pipesmith.core.flush import FlushResult
from pipesmith.ui.cli import state as cli_state


class RecordingEmitter:
    """Diagnostic emitter keeping everything it receives."""

    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[tuple[str, BaseException | None]] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append((message, exc))

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


class PlainStream:
    """Response whose ``write`` has no confirmation callback."""

    def __init__(self, *, headers_sent: bool = False, closed: bool = False) -> None:
        self.headers_sent = headers_sent
        self.closed = closed
        self.headers: dict[str, str] = {}
        self.writes: list[tuple[bytes, str]] = []

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def write(self, data: bytes, encoding: str) -> None:
        self.writes.append((data, encoding))


class ConfirmingStream(PlainStream):
    """Response confirming writes through a callback, possibly later."""

    def __init__(self, *, defer: bool = False, fail: BaseException | None = None) -> None:
        super().__init__()
        self.defer = defer
        self.fail = fail
        self.pending: list[Callable[[BaseException | None], None]] = []

    def write(  # type: ignore[override]
        self,
        data: bytes,
        encoding: str,
        callback: Callable[[BaseException | None], None],
    ) -> None:
        self.writes.append((data, encoding))
        if self.defer:
            self.pending.append(callback)
        else:
            callback(self.fail)

    def confirm(self) -> None:
        for callback in self.pending:
            callback(None)
        self.pending.clear()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def results() -> list[FlushResult]:
    return []


@pytest.fixture(autouse=True)
def _isolated_cli_state() -> Any:
    """Give every test a fresh CLI state instead of the one left by earlier tests."""
    token = cli_state._STATE_VAR.set(None)
    yield
    cli_state._STATE_VAR.reset(token)
