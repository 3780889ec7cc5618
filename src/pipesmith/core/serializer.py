"""Serialize queued fragments into one response body."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import json
from typing import Any

from .exceptions import SerializationError
from .fragments import Fragment


@dataclass(frozen=True, slots=True)
class JoinResult:
    """Outcome of joining a fragment list."""

    text: str | None = None
    error: SerializationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def join_markup(fragments: Sequence[Fragment]) -> str:
    """Concatenate contributing payloads in queue order."""
    return "".join(
        fragment.payload if isinstance(fragment.payload, str) else str(fragment.payload)
        for fragment in fragments
        if fragment.contributes
    )


def structured_value(fragments: Sequence[Fragment]) -> Any:
    """Return the value to serialize for a structured response.

    A single contributing fragment is serialized on its own; several are keyed
    by fragment name, later duplicates replacing earlier ones.
    """
    contributing = [fragment for fragment in fragments if fragment.contributes]
    if len(contributing) == 1:
        return contributing[0].payload
    return {fragment.name: fragment.payload for fragment in contributing}


def join_structured(fragments: Sequence[Fragment]) -> str:
    """Serialize structured fragments to JSON text.

    Raises:
        SerializationError: payloads are circular or not JSON serializable.
    """
    try:
        return json.dumps(structured_value(fragments), ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(f"Unable to stringify structured payload: {exc}") from exc


def join_fragments(fragments: Sequence[Fragment], *, structured: bool) -> JoinResult:
    """Join fragments without raising; failures are returned in the result."""
    if not structured:
        return JoinResult(text=join_markup(fragments))
    try:
        return JoinResult(text=join_structured(fragments))
    except SerializationError as exc:
        return JoinResult(error=exc)


__all__ = [
    "JoinResult",
    "join_fragments",
    "join_markup",
    "join_structured",
    "structured_value",
]
