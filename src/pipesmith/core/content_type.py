"""One-way negotiation of the response content type."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Protocol, runtime_checkable

from .diagnostics import DiagnosticEmitter, NullEmitter


logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"


class ContentType(str, Enum):
    """Aggregate output formats a response can be graded to."""

    MARKUP = "text/html"
    STRUCTURED = "application/json"

    @property
    def mime(self) -> str:
        return self.value


@runtime_checkable
class HeaderSink(Protocol):
    """Response-header collaborator consulted on content-type transitions."""

    headers_sent: bool

    def set_header(self, name: str, value: str) -> None: ...


def parse_charset(content_type: str | None) -> str | None:
    """Return the ``charset`` parameter of a content-type string, if present."""
    if not content_type:
        return None
    _, _, params = content_type.partition(";")
    for param in params.split(";"):
        key, sep, value = param.partition("=")
        if not sep or key.strip().lower() != "charset":
            continue
        value = value.strip().strip("\"'")
        if value:
            return value
    return None


class ContentTypeNegotiator:
    """Decide whether a response is markup or structured JSON.

    The transition from markup to structured fires at most once, the first time
    a non-string payload is observed. The header collaborator is told about the
    new MIME type unless headers were already sent, in which case only the
    internal state changes.
    """

    def __init__(
        self,
        *,
        headers: HeaderSink | None = None,
        charset: str = DEFAULT_CHARSET,
        content_type: str | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._headers = headers
        self._default_charset = charset
        self._emitter = emitter or NullEmitter()
        self.state = ContentType.MARKUP
        self.header_value = content_type or ContentType.MARKUP.mime
        self.header_applied = False

    @property
    def mime(self) -> str:
        return self.state.mime

    @property
    def is_structured(self) -> bool:
        return self.state is ContentType.STRUCTURED

    @property
    def charset(self) -> str:
        """Charset used to encode output; an explicit header parameter wins."""
        return parse_charset(self.header_value) or self._default_charset

    def observe(self, payload: Any) -> bool:
        """Inspect a queued payload, returning whether the transition fired."""
        if self.state is not ContentType.MARKUP:
            return False
        if payload is None or isinstance(payload, str):
            return False

        self.state = ContentType.STRUCTURED
        self.header_applied = self._apply_header(self.state.mime)
        self._emitter.event(
            "content_type",
            {"mime": self.state.mime, "header_applied": self.header_applied},
        )
        return True

    def _apply_header(self, mime: str) -> bool:
        if self._headers is None:
            logger.debug("No header collaborator, content type recorded as %s", mime)
            return False

        if getattr(self._headers, "headers_sent", False):
            self._emitter.warning(f"Headers already sent, ignoring content type change: {mime}")
            return False

        try:
            self._headers.set_header("Content-Type", mime)
        except Exception as exc:  # noqa: BLE001 - header failures are reported, not raised
            self._emitter.warning(f"Unable to set Content-Type header to {mime}", exc)
            return False

        self.header_value = mime
        return True


__all__ = [
    "DEFAULT_CHARSET",
    "ContentType",
    "ContentTypeNegotiator",
    "HeaderSink",
    "parse_charset",
]
