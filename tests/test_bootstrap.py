from __future__ import annotations

import json

from conftest import ConfirmingStream, PlainStream, RecordingEmitter
import pytest

from pipesmith import (
    Bootstrap,
    BootstrapConfig,
    ContentType,
    FlushResult,
    Fragment,
    JinjaTemplateEngine,
    RenderMode,
    RequestInfo,
    TagDependencyResolver,
)
from pipesmith.core.exceptions import (
    MissingCollaboratorError,
    SerializationError,
    StreamClosedError,
    StreamWriteError,
)
from pipesmith.core.response import BufferedResponse


def _bootstrap(emitter: RecordingEmitter, stream: object | None = None, **config) -> Bootstrap:
    return Bootstrap(
        BootstrapConfig(**config),
        stream=stream if stream is not None else PlainStream(),
        emitter=emitter,
    )


def test_flush_on_empty_queue_completes_without_writing(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream)

    bootstrap.flush(results.append)
    bootstrap.flush(results.append)

    assert results == [FlushResult(), FlushResult()]
    assert stream.writes == []


def test_join_preserves_order_and_empties_queue(emitter: RecordingEmitter) -> None:
    bootstrap = _bootstrap(emitter)
    bootstrap.queue("b", "a", "<b>").queue("a", None, "<a>").queue("c", None, "")

    assert bootstrap.join() == "<b><a>"
    assert len(bootstrap) == 0


def test_flush_writes_encoded_markup(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream)
    bootstrap.queue("a", None, "<p>café</p>")

    bootstrap.flush(results.append)

    data = "<p>café</p>".encode()
    assert stream.writes == [(data, "utf-8")]
    assert results == [FlushResult(written=len(data))]
    assert ("flush", {"bytes": len(data), "charset": "utf-8"}) in emitter.events


def test_charset_parameter_on_content_type_wins(emitter: RecordingEmitter) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream, content_type="text/html; charset=latin-1")
    bootstrap.queue("a", None, "é")

    bootstrap.flush()

    assert stream.writes == [("é".encode("latin-1"), "latin-1")]


def test_structured_payload_regrades_response(emitter: RecordingEmitter) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream)

    bootstrap.queue("api", None, {"items": [1]})

    assert bootstrap.content_type is ContentType.STRUCTURED
    assert stream.headers == {"Content-Type": "application/json"}

    bootstrap.flush()
    ((data, _),) = stream.writes
    assert json.loads(data) == {"items": [1]}


def test_circular_payload_reports_one_error_and_keeps_queue(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream)
    payload: dict[str, object] = {}
    payload["self"] = payload
    bootstrap.queue("loop", None, payload)

    bootstrap.flush(results.append)

    (result,) = results
    assert isinstance(result.error, SerializationError)
    assert len(bootstrap) == 1
    assert stream.writes == []
    assert len(emitter.errors) == 1


def test_closed_stream_reports_error_and_drains(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream(closed=True)
    bootstrap = _bootstrap(emitter, stream)
    bootstrap.queue("a", None, "x")

    bootstrap.flush(results.append)

    (result,) = results
    assert isinstance(result.error, StreamClosedError)
    assert len(bootstrap) == 0
    assert stream.writes == []


def test_zero_length_output_completes_without_writing(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream)
    bootstrap.queue("a", None, "")

    bootstrap.flush(results.append)

    assert results == [FlushResult()]
    assert stream.writes == []
    assert len(bootstrap) == 0


def test_confirming_stream_completes_on_confirmation(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = ConfirmingStream(defer=True)
    bootstrap = _bootstrap(emitter, stream)
    bootstrap.queue("a", None, "abc")

    bootstrap.flush(results.append)
    assert results == []

    stream.confirm()
    assert results == [FlushResult(written=3)]


def test_rejected_write_surfaces_through_completion(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    bootstrap = _bootstrap(emitter, ConfirmingStream(fail=OSError("reset")))
    bootstrap.queue("a", None, "abc")

    bootstrap.flush(results.append)

    (result,) = results
    assert isinstance(result.error, StreamWriteError)
    assert len(bootstrap) == 0


def test_queue_counts_down_outstanding(emitter: RecordingEmitter) -> None:
    bootstrap = _bootstrap(emitter, length=3)

    bootstrap.queue("a", None, "x").queue("b", None, "y", count=2)

    assert bootstrap.outstanding == 0
    assert [fragment.name for fragment in bootstrap.fragments] == ["a", "b"]


def test_child_setter_ignores_non_strings(emitter: RecordingEmitter) -> None:
    bootstrap = _bootstrap(emitter, child="main")

    bootstrap.child = 42
    assert bootstrap.child == "main"

    bootstrap.child = "aside"
    assert bootstrap.child == "aside"


def test_keys_list_template_values() -> None:
    assert {"title", "fallback", "dependencies", "child", "length", "id"} <= set(Bootstrap.keys)


def test_missing_collaborators_are_reported(emitter: RecordingEmitter) -> None:
    bootstrap = Bootstrap(emitter=emitter)

    with pytest.raises(MissingCollaboratorError):
        bootstrap.render()
    with pytest.raises(MissingCollaboratorError):
        bootstrap.flush()
    with pytest.raises(MissingCollaboratorError):
        Bootstrap(components=["app.js"], emitter=emitter)


def test_render_queues_document_head(emitter: RecordingEmitter) -> None:
    bootstrap = Bootstrap(
        BootstrapConfig(title="Demo", child="main", length=2, dependencies=["site.css"]),
        request=RequestInfo(path="/page", query={"lang": "en"}),
        templates=JinjaTemplateEngine(),
        resolver=TagDependencyResolver(),
        components=["app.js"],
        emitter=emitter,
    )

    bootstrap.render()

    (head,) = bootstrap.fragments
    assert head.name == "bootstrap"
    assert "<title>Demo</title>" in head.payload
    assert '<script src="app.js"></script><link rel="stylesheet" href="site.css">' in head.payload
    assert "URL=/page?no_pagelet_js=1&lang=en" in head.payload
    assert head.payload.endswith('data-pipe-length="2">')
    assert 'data-pagelet="main"' in head.payload
    assert bootstrap.outstanding == 2


def test_sync_mode_reduces_head_and_components(emitter: RecordingEmitter) -> None:
    stream = BufferedResponse()
    bootstrap = Bootstrap(
        BootstrapConfig(mode=RenderMode.SYNC, child="main"),
        stream=stream,
        templates=JinjaTemplateEngine(),
        emitter=emitter,
    )
    bootstrap.render()
    bootstrap.queue("item", "main", "<li>one</li>")
    bootstrap.queue("main", "bootstrap", '<ul data-pagelet="item"></ul>')

    report = bootstrap.reduce()
    bootstrap.flush()

    assert report.root == "bootstrap"
    html = stream.getvalue().decode()
    assert "no_pagelet_js=1" in html
    assert "<noscript>" not in html
    assert html.endswith('<ul data-pagelet="item"><li>one</li></ul>')


def test_reduce_leaves_structured_queue_alone(emitter: RecordingEmitter) -> None:
    bootstrap = _bootstrap(emitter)
    bootstrap.queue("a", None, "<p></p>").queue("b", "a", {"x": 1})

    report = bootstrap.reduce()

    assert report.root is None
    assert bootstrap.fragments == (
        Fragment(name="a", payload="<p></p>"),
        Fragment(name="b", parent="a", payload={"x": 1}),
    )


def test_buffered_response_rejects_late_headers(emitter: RecordingEmitter) -> None:
    stream = BufferedResponse()
    bootstrap = _bootstrap(emitter, stream)
    bootstrap.queue("head", None, "<html>")
    bootstrap.flush()

    bootstrap.queue("api", None, {"late": True})

    assert stream.headers == {}
    assert bootstrap.content_type is ContentType.STRUCTURED
    assert emitter.warnings


def test_mutually_referencing_payloads_keep_queue_on_join(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    bootstrap = _bootstrap(emitter)
    left: dict[str, object] = {}
    right: dict[str, object] = {"left": left}
    left["right"] = right
    bootstrap.queue("left", None, left).queue("right", None, right)

    assert bootstrap.join(results.append) is None

    (result,) = results
    assert isinstance(result.error, SerializationError)
    assert len(bootstrap) == 2


def test_unencodable_markup_reports_one_error_and_keeps_queue(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream, content_type="text/html; charset=latin-1")
    bootstrap.queue("a", None, "<p>€</p>")

    bootstrap.flush(results.append)

    (result,) = results
    assert isinstance(result.error, SerializationError)
    assert isinstance(result.error.__cause__, UnicodeEncodeError)
    assert len(bootstrap) == 1
    assert stream.writes == []
    assert len(emitter.errors) == 1


def test_unknown_charset_reports_one_error_and_keeps_queue(
    emitter: RecordingEmitter, results: list[FlushResult]
) -> None:
    stream = PlainStream()
    bootstrap = _bootstrap(emitter, stream)
    bootstrap.negotiator.header_value = "text/html; charset=bogus"
    bootstrap.queue("a", None, "<p>x</p>")

    bootstrap.flush(results.append)

    (result,) = results
    assert isinstance(result.error, SerializationError)
    assert isinstance(result.error.__cause__, LookupError)
    assert len(bootstrap) == 1
    assert stream.writes == []
