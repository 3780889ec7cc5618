"""Implementation of the ``pipesmith compose`` command."""

from __future__ import annotations

from typing import Any

import typer

from pipesmith.bootstrap import Bootstrap
from pipesmith.core.config import BootstrapConfig, RequestInfo, load_config
from pipesmith.core.dependencies import TagDependencyResolver
from pipesmith.core.exceptions import PipesmithError
from pipesmith.core.flush import FlushResult
from pipesmith.core.reducer import UnmatchedPolicy
from pipesmith.core.response import BufferedResponse
from pipesmith.core.templates import JinjaTemplateEngine

from .._options import (
    AttributeOption,
    ConfigOption,
    DebugOption,
    DropUnmatchedOption,
    FragmentsArgument,
    HeadOption,
    OutputPathOption,
    ReduceOption,
    RootOption,
    TemplateDirOption,
    UrlOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, render_message, set_cli_state
from ..utils import load_fragments, write_output


def _config_overrides(attribute: str | None, drop_unmatched: bool) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if attribute:
        overrides["marker_attribute"] = attribute
    if drop_unmatched:
        overrides["unmatched"] = UnmatchedPolicy.DROP
    return overrides


def compose(
    inputs: FragmentsArgument,
    config_path: ConfigOption = None,
    url: UrlOption = None,
    template_dirs: TemplateDirOption = None,
    head: HeadOption = False,
    reduce_tree: ReduceOption = True,
    root: RootOption = None,
    attribute: AttributeOption = None,
    drop_unmatched: DropUnmatchedOption = False,
    output: OutputPathOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Compose queued fragments into one response body."""
    state = set_cli_state(verbosity=verbose, debug=debug)
    emitter = CliEmitter(state)

    overrides = _config_overrides(attribute, drop_unmatched)
    try:
        if config_path is not None:
            config = load_config(config_path, overrides=overrides)
        else:
            config = BootstrapConfig.model_validate(overrides)
    except PipesmithError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    entries = load_fragments(inputs)
    response = BufferedResponse()
    bootstrap = Bootstrap(
        config,
        request=RequestInfo.from_url(url) if url else None,
        stream=response,
        templates=JinjaTemplateEngine(template_dirs or ()),
        resolver=TagDependencyResolver(),
        emitter=emitter,
    )

    try:
        if head:
            bootstrap.render()
        for entry in entries:
            bootstrap.queue(entry.name, entry.parent, entry.payload, count=entry.count)
        if reduce_tree:
            bootstrap.reduce(root)
    except PipesmithError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    results: list[FlushResult] = []
    bootstrap.flush(results.append)
    outcome = results[0] if results else FlushResult()
    if not outcome.ok:
        emit_error(f"Unable to flush response: {outcome.error}", exception=outcome.error)
        raise typer.Exit(code=1)

    render_message(
        "info",
        f"Content-Type: {response.headers.get('Content-Type', bootstrap.negotiator.header_value)}",
    )
    render_message("info", emitter.summary())
    if bootstrap.outstanding > 0:
        emitter.warning(f"{bootstrap.outstanding} fragment(s) still outstanding at flush time.")
    write_output(output, response.getvalue())


__all__ = ["compose"]
