"""Bootstrap composer owning the fragment queue of one response.

The bootstrap renders the document head, collects the fragments produced by
nested components, and writes them to the response:

- it queues the rendered head (metadata, dependencies, no-script fallback)
  so the first flush pushes it out immediately,
- it regrades the response to JSON when a component queues a structured value,
- it reduces queued markup into a single document when rendering in one pass,
- it flushes whatever is queued with exactly one completion per call.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
import logging
from typing import Any

from pipesmith.core.config import BootstrapConfig, RequestInfo
from pipesmith.core.content_type import ContentType, ContentTypeNegotiator, HeaderSink
from pipesmith.core.dependencies import DependencyResolver, join_dependencies
from pipesmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from pipesmith.core.exceptions import (
    MissingCollaboratorError,
    SerializationError,
    StreamClosedError,
)
from pipesmith.core.fallback import build_fallback
from pipesmith.core.flush import (
    Completion,
    FlushCallback,
    FlushResult,
    OutputStream,
    is_closed,
    write_payload,
)
from pipesmith.core.fragments import Fragment, FragmentQueue
from pipesmith.core.reducer import ReductionReport, TreeReducer
from pipesmith.core.serializer import join_fragments
from pipesmith.core.templates import TemplateEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BootstrapData:
    """Values handed to the bootstrap template."""

    title: str
    description: str
    keywords: tuple[str, ...]
    robots: tuple[str, ...]
    favicon: str
    author: str
    dependencies: str
    fallback: str
    charset: str
    child: str
    length: int
    id: str
    name: str

    def as_context(self) -> dict[str, Any]:
        return asdict(self)


KEYS: tuple[str, ...] = tuple(BootstrapData.__dataclass_fields__)


class Bootstrap:
    """Compose one response out of asynchronously queued fragments."""

    keys = KEYS

    def __init__(
        self,
        config: BootstrapConfig | None = None,
        *,
        request: RequestInfo | None = None,
        stream: OutputStream | None = None,
        headers: HeaderSink | None = None,
        templates: TemplateEngine | None = None,
        resolver: DependencyResolver | None = None,
        components: Sequence[str] = (),
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.config = config or BootstrapConfig()
        self.request = request or RequestInfo()
        self.stream = stream
        self.templates = templates
        self.emitter = emitter or LoggingEmitter()

        if headers is None and isinstance(stream, HeaderSink):
            headers = stream
        self.negotiator = ContentTypeNegotiator(
            headers=headers,
            charset=self.config.charset,
            content_type=self.config.content_type,
            emitter=self.emitter,
        )
        self._queue = FragmentQueue(self.negotiator, outstanding=self.config.length)
        self.reducer = TreeReducer(
            attribute=self.config.marker_attribute,
            unmatched=self.config.unmatched,
            emitter=self.emitter,
        )

        self._child = "root"
        self.child = self.config.child

        self.dependencies = self._resolve_dependencies(resolver, list(components))

        logger.debug("Initialized in %s mode", self.config.mode.value)
        self.fallback = build_fallback(
            self.config.mode,
            path=self.request.path,
            query=self.request.query,
        )

    def _resolve_dependencies(
        self, resolver: DependencyResolver | None, components: list[str]
    ) -> str:
        """Resolve component dependencies followed by the configured extras."""
        if resolver is None:
            if components:
                raise MissingCollaboratorError(
                    "Bootstrap requires a dependency resolver to include component assets."
                )
            return join_dependencies(self.config.dependencies)

        resolved = join_dependencies(resolver.resolve(components)) if components else ""
        return resolved + join_dependencies(resolver.resolve(self.config.dependencies))

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def child(self) -> str:
        """Name of the component rendered directly inside the bootstrap."""
        return self._child

    @child.setter
    def child(self, value: Any) -> None:
        if not isinstance(value, str):
            return
        self._child = value

    @property
    def outstanding(self) -> int:
        """Fragments still expected; maintained by the caller through ``queue``."""
        return self._queue.outstanding

    @outstanding.setter
    def outstanding(self, value: int) -> None:
        self._queue.outstanding = value

    @property
    def content_type(self) -> ContentType:
        return self.negotiator.state

    @property
    def charset(self) -> str:
        return self.negotiator.charset

    @property
    def fragments(self) -> tuple[Fragment, ...]:
        return self._queue.snapshot()

    def __len__(self) -> int:
        return len(self._queue)

    def data(self) -> BootstrapData:
        return BootstrapData(
            title=self.config.title,
            description=self.config.description,
            keywords=tuple(self.config.keywords),
            robots=tuple(self.config.robots),
            favicon=self.config.favicon,
            author=self.config.author,
            dependencies=self.dependencies,
            fallback=self.fallback,
            charset=self.charset,
            child=self.child,
            length=self.outstanding,
            id=self.id,
            name=self.name,
        )

    def render(self) -> Bootstrap:
        """Queue the rendered document head.

        The first flush pushes the head out immediately; in sync mode it is
        reduced together with the other fragments instead.
        """
        if self.templates is None:
            raise MissingCollaboratorError(
                "Bootstrap requires a template engine to render the document head."
            )

        view = self.templates.render(self.config.template, self.data().as_context())
        logger.debug("Queueing initial headers")
        self._queue.append(Fragment(name=self.name, payload=view))
        return self

    def queue(self, name: str, parent: str | None, payload: Any, *, count: int = 1) -> Bootstrap:
        """Add a fragment produced by the component ``name``."""
        self._queue.enqueue(name, parent, payload, count=count)
        return self

    def reduce(self, root: str | None = None) -> ReductionReport:
        """Collapse queued markup into one fragment; structured output is left alone."""
        if self.negotiator.is_structured:
            return ReductionReport()

        fragments, report = self.reducer.reduce(self._queue.snapshot(), root=root or self.name)
        self._queue.replace(fragments)
        self.emitter.event(
            "reduce",
            {
                "root": report.root,
                "attached": list(report.attached),
                "dropped": list(report.dropped),
            },
        )
        return report

    def join(self, on_done: FlushCallback | Completion | None = None) -> str | None:
        """Serialize and drain the queue.

        Serialization failures leave the queue untouched, are reported once
        through ``on_done``, and make this return ``None``.
        """
        completion = on_done if isinstance(on_done, Completion) else Completion(on_done)
        text = self._serialize(completion)
        if text is None:
            return None

        self._queue.drain()
        return text

    def _serialize(self, completion: Completion) -> str | None:
        result = join_fragments(self._queue.snapshot(), structured=self.negotiator.is_structured)
        if not result.ok:
            self.emitter.error("Captured error while stringifying JSON data", result.error)
            completion(FlushResult(error=result.error))
            return None
        return result.text

    def _encode(self, text: str, completion: Completion) -> bytes | None:
        charset = self.charset
        try:
            return text.encode(charset)
        except (UnicodeError, LookupError) as exc:
            error = SerializationError(f"Unable to encode response body as {charset}: {exc}")
            error.__cause__ = exc
            self.emitter.error("Captured error while encoding response body", error)
            completion(FlushResult(error=error))
            return None

    def flush(self, on_done: FlushCallback | None = None) -> None:
        """Write everything queued so far to the output stream.

        The queue is drained only once its content is serialized and encoded.
        """
        if self.stream is None:
            raise MissingCollaboratorError("Bootstrap requires an output stream to flush content.")

        completion = Completion(on_done)
        closed = is_closed(self.stream)
        if closed:
            error = StreamClosedError("Response was closed, unable to flush content")
            completion(FlushResult(error=error))

        if not self._queue:
            completion(FlushResult())
            return

        text = self._serialize(completion)
        if text is None:
            return
        data = self._encode(text, completion)
        if data is None:
            return

        self._queue.drain()
        charset = self.charset
        if not data or closed:
            completion(FlushResult())
            return

        logger.debug("Writing %d bytes of %s to response", len(data), charset)
        write_payload(self.stream, data, charset, completion)
        self.emitter.event("flush", {"bytes": len(data), "charset": charset})


__all__ = ["KEYS", "Bootstrap", "BootstrapData"]
