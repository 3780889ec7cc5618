"""Write/flush contract between the composer and the output stream."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import inspect
import logging
from typing import Any, Protocol, runtime_checkable

from .exceptions import StreamWriteError


logger = logging.getLogger(__name__)


WriteCallback = Callable[[BaseException | None], None]


@runtime_checkable
class OutputStream(Protocol):
    """Response body collaborator.

    ``write`` may accept an optional third ``callback`` argument invoked once
    the transport confirms the write.
    """

    closed: bool

    def write(self, data: bytes, encoding: str, *args: Any) -> Any: ...


@dataclass(frozen=True, slots=True)
class FlushResult:
    """Completion value delivered once per flush."""

    error: BaseException | None = None
    written: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


FlushCallback = Callable[[FlushResult], None]


class Completion:
    """One-shot wrapper guaranteeing a single completion per operation."""

    def __init__(self, callback: FlushCallback | None) -> None:
        self._callback = callback
        self.result: FlushResult | None = None

    @property
    def done(self) -> bool:
        return self.result is not None

    def __call__(self, result: FlushResult | None = None) -> bool:
        """Signal completion, returning ``False`` when already signalled."""
        result = result or FlushResult()
        if self.result is not None:
            logger.debug("Ignoring extra completion signal: %r", result)
            return False
        self.result = result
        if self._callback is not None:
            self._callback(result)
        return True


def accepts_callback(write: Callable[..., Any]) -> bool:
    """Return whether ``write`` takes a completion callback after the encoding."""
    try:
        signature = inspect.signature(write)
    except (TypeError, ValueError):
        return False

    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
    return positional >= 3


def is_closed(stream: Any) -> bool:
    return bool(getattr(stream, "closed", False) or getattr(stream, "finished", False))


def write_payload(
    stream: OutputStream,
    data: bytes,
    encoding: str,
    completion: Completion,
) -> None:
    """Write ``data`` and route the outcome through ``completion``.

    Streams without write confirmation complete right after ``write`` returns.
    """
    written = len(data)

    def _confirmed(error: BaseException | None = None) -> None:
        if error is not None:
            wrapped = StreamWriteError(f"Response rejected {written} bytes: {error}")
            wrapped.__cause__ = error
            completion(FlushResult(error=wrapped))
        else:
            completion(FlushResult(written=written))

    deferred = accepts_callback(stream.write)
    try:
        if deferred:
            stream.write(data, encoding, _confirmed)
        else:
            stream.write(data, encoding)
    except Exception as exc:  # noqa: BLE001 - transport errors go to the completion channel
        wrapped = StreamWriteError(f"Unable to write {written} bytes to response: {exc}")
        wrapped.__cause__ = exc
        completion(FlushResult(error=wrapped))
        return

    if not deferred:
        completion(FlushResult(written=written))


__all__ = [
    "Completion",
    "FlushCallback",
    "FlushResult",
    "OutputStream",
    "WriteCallback",
    "accepts_callback",
    "is_closed",
    "write_payload",
]
