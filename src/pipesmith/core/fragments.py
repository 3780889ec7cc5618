"""Fragment records and the per-response fragment queue."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import math
from typing import Any

from .content_type import ContentTypeNegotiator


@dataclass(frozen=True, slots=True)
class Fragment:
    """One named unit of output produced by a component."""

    name: str
    parent: str | None = None
    payload: Any = None

    @property
    def is_empty(self) -> bool:
        return is_empty_payload(self.payload)

    @property
    def contributes(self) -> bool:
        """Whether the fragment adds anything to joined output."""
        return bool(self.name) and not self.is_empty


def is_empty_payload(value: Any) -> bool:
    """Return whether ``value`` should be treated as no content at all.

    ``None``, ``False``, the empty string, numeric zero, and NaN are empty.
    Empty containers are values and still serialize.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


class FragmentQueue:
    """Arrival-ordered fragments of one response plus the outstanding count."""

    def __init__(
        self,
        negotiator: ContentTypeNegotiator,
        *,
        outstanding: int = 0,
    ) -> None:
        self._negotiator = negotiator
        self._fragments: list[Fragment] = []
        self.outstanding = outstanding

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(tuple(self._fragments))

    def __bool__(self) -> bool:
        return bool(self._fragments)

    def enqueue(
        self,
        name: str,
        parent: str | None,
        payload: Any,
        *,
        count: int = 1,
    ) -> Fragment:
        """Queue a fragment, regrading the response first when needed."""
        self._negotiator.observe(payload)
        self.outstanding -= count
        fragment = Fragment(name=name, parent=parent or None, payload=payload)
        self._fragments.append(fragment)
        return fragment

    def append(self, fragment: Fragment) -> None:
        """Append a fragment without touching the outstanding count."""
        self._negotiator.observe(fragment.payload)
        self._fragments.append(fragment)

    def snapshot(self) -> tuple[Fragment, ...]:
        return tuple(self._fragments)

    def replace(self, fragments: Iterable[Fragment]) -> None:
        self._fragments = list(fragments)

    def drain(self) -> list[Fragment]:
        """Return every queued fragment and leave the queue empty."""
        drained, self._fragments = self._fragments, []
        return drained


__all__ = ["Fragment", "FragmentQueue", "is_empty_payload"]
