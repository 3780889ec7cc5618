"""Custom exception hierarchy for the response composition pipeline."""

from __future__ import annotations


class PipesmithError(RuntimeError):
    """Base exception for response composition failures."""


class ConfigurationError(PipesmithError):
    """Raised when a configuration source cannot be loaded or validated."""


class MissingCollaboratorError(PipesmithError):
    """Raised when a required collaborator (templates, stream) was not provided."""


class TemplateError(PipesmithError):
    """Raised when a bootstrap template cannot be located or rendered."""


class SerializationError(PipesmithError):
    """Raised when queued structured payloads cannot be stringified."""


class StreamClosedError(PipesmithError):
    """Raised when content is flushed to an output stream that is already closed."""


class StreamWriteError(PipesmithError):
    """Raised when the output stream rejects a write."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ConfigurationError",
    "MissingCollaboratorError",
    "PipesmithError",
    "SerializationError",
    "StreamClosedError",
    "StreamWriteError",
    "TemplateError",
    "exception_hint",
    "exception_messages",
]
