"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import json
from pathlib import Path
import sys
from typing import Any

import typer
import yaml


@dataclass(frozen=True, slots=True)
class FragmentEntry:
    """Fragment read from an input file, in queue order."""

    name: str
    parent: str | None
    payload: Any
    count: int = 1


def _parse_entries(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yml", ".yaml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def load_fragments(path: Path) -> list[FragmentEntry]:
    """Read fragment entries from a JSON or YAML list."""
    try:
        raw = _parse_entries(path)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"Unable to parse fragments from '{path}': {exc}") from exc

    if not isinstance(raw, list):
        raise typer.BadParameter(f"'{path}' must contain a list of fragments.")

    entries: list[FragmentEntry] = []
    for position, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise typer.BadParameter(f"Fragment #{position} in '{path}' must be a mapping.")
        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise typer.BadParameter(f"Fragment #{position} in '{path}' requires a 'name'.")
        parent = item.get("parent")
        if parent is not None and not isinstance(parent, str):
            raise typer.BadParameter(f"Fragment '{name}' has a non-string 'parent'.")
        count = item.get("count", 1)
        if not isinstance(count, int) or isinstance(count, bool):
            raise typer.BadParameter(f"Fragment '{name}' has a non-integer 'count'.")
        entries.append(
            FragmentEntry(name=name, parent=parent, payload=item.get("payload"), count=count)
        )
    return entries


def write_output(target: Path | None, content: bytes) -> None:
    """Persist the composed body to ``target`` or stdout."""
    if target is None:
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
        return
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as exc:  # pragma: no cover - filesystem errors
        raise OSError(f"Failed to write output to '{target}': {exc}") from exc


__all__ = ["FragmentEntry", "load_fragments", "write_output"]
