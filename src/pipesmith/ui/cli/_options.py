"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
COMPOSITION_PANEL = "Composition"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

FragmentsArgument = Annotated[
    Path,
    typer.Argument(
        metavar="INPUT",
        help="JSON or YAML file listing fragments as {name, parent, payload} entries.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Bootstrap configuration file (TOML or YAML).",
        exists=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

UrlOption = Annotated[
    str | None,
    typer.Option(
        "--url",
        help="Request URL used to build the no-script fallback.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

TemplateDirOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--template-dir",
        help="Directory searched for templates before the built-in ones. Repeatable.",
        exists=True,
        file_okay=False,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

HeadOption = Annotated[
    bool,
    typer.Option(
        "--head/--no-head",
        help="Render the bootstrap document head before the fragments.",
        rich_help_panel=COMPOSITION_PANEL,
    ),
]

ReduceOption = Annotated[
    bool,
    typer.Option(
        "--reduce/--no-reduce",
        help="Substitute children into their parents' markers before writing.",
        rich_help_panel=COMPOSITION_PANEL,
    ),
]

RootOption = Annotated[
    str | None,
    typer.Option(
        "--root",
        help="Fragment kept as the document root when several trees are queued.",
        rich_help_panel=COMPOSITION_PANEL,
    ),
]

AttributeOption = Annotated[
    str | None,
    typer.Option(
        "--attribute",
        help="Marker attribute identifying child placeholders (default: data-pagelet).",
        rich_help_panel=COMPOSITION_PANEL,
    ),
]

DropUnmatchedOption = Annotated[
    bool,
    typer.Option(
        "--drop-unmatched",
        help="Drop disconnected fragments instead of retrying them against every marker.",
        rich_help_panel=COMPOSITION_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="File receiving the composed body. Defaults to stdout.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
