"""Tokenizer locating placeholder markers inside parent markup.

A marker is an attribute such as ``data-pagelet="child"`` that identifies the
element whose content belongs to a named child fragment. The value may be
spelled with single quotes, double quotes, or unquoted. Child content goes
right after the ``>`` that closes the opening tag carrying the marker.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


DEFAULT_MARKER_ATTRIBUTE = "data-pagelet"

_NAME_CHARS = frozenset("-_:.")
_QUOTES = "\"'"


@dataclass(frozen=True, slots=True)
class Marker:
    """A marker occurrence found in a markup string."""

    name: str
    start: int
    end: int
    insert_at: int | None

    @property
    def terminated(self) -> bool:
        return self.insert_at is not None


def _at_attribute_boundary(markup: str, index: int) -> bool:
    if index == 0:
        return True
    previous = markup[index - 1]
    return not (previous.isalnum() or previous in _NAME_CHARS)


def _read_value(markup: str, start: int) -> tuple[str, int] | None:
    """Read an attribute value starting at ``start``; return (value, end)."""
    if start >= len(markup):
        return None

    opening = markup[start]
    if opening in _QUOTES:
        closing = markup.find(opening, start + 1)
        if closing == -1:
            return None
        return markup[start + 1 : closing], closing + 1

    end = start
    while end < len(markup) and not markup[end].isspace() and markup[end] != ">":
        end += 1
    value = markup[start:end]
    if value.endswith("/") and markup.startswith(">", end):
        value = value[:-1]
        end -= 1
    if not value:
        return None
    return value, end


def find_tag_end(markup: str, start: int) -> int:
    """Return the index of the ``>`` closing the current tag, or -1.

    Quoted attribute values are skipped so a ``>`` inside them does not end the
    tag. A quote only opens a value when it directly follows ``=``.
    """
    quote: str | None = None
    previous = ""
    for index in range(start, len(markup)):
        char = markup[index]
        if quote is not None:
            if char == quote:
                quote = None
                previous = char
            continue
        if char in _QUOTES and previous == "=":
            quote = char
        elif char == ">":
            return index
        if not char.isspace():
            previous = char
    return -1


def iter_markers(
    markup: str,
    attribute: str = DEFAULT_MARKER_ATTRIBUTE,
) -> Iterator[Marker]:
    """Yield every well-formed marker attribute in ``markup``."""
    needle = f"{attribute}="
    index = markup.find(needle)
    while index != -1:
        if _at_attribute_boundary(markup, index):
            parsed = _read_value(markup, index + len(needle))
            if parsed is not None:
                value, end = parsed
                tag_end = find_tag_end(markup, end)
                yield Marker(
                    name=value,
                    start=index,
                    end=end,
                    insert_at=None if tag_end == -1 else tag_end + 1,
                )
        index = markup.find(needle, index + 1)


def locate(markup: str, name: str, attribute: str = DEFAULT_MARKER_ATTRIBUTE) -> list[int]:
    """Return insertion offsets for every terminated marker referencing ``name``."""
    return [
        marker.insert_at
        for marker in iter_markers(markup, attribute)
        if marker.name == name and marker.insert_at is not None
    ]


def has_marker(markup: str, name: str, attribute: str = DEFAULT_MARKER_ATTRIBUTE) -> bool:
    return bool(locate(markup, name, attribute))


def splice(markup: str, insertions: Iterable[tuple[int, str]]) -> str:
    """Insert text at the given offsets of the original ``markup``.

    Insertions sharing an offset keep their relative order.
    """
    ordered = sorted(insertions, key=lambda item: item[0])
    if not ordered:
        return markup

    parts: list[str] = []
    cursor = 0
    for offset, text in ordered:
        parts.append(markup[cursor:offset])
        parts.append(text)
        cursor = offset
    parts.append(markup[cursor:])
    return "".join(parts)


__all__ = [
    "DEFAULT_MARKER_ATTRIBUTE",
    "Marker",
    "find_tag_end",
    "has_marker",
    "iter_markers",
    "locate",
    "splice",
]
