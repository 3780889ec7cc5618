"""Resolve component dependencies into script and stylesheet tags."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from html import escape
from typing import Protocol, runtime_checkable


@runtime_checkable
class DependencyResolver(Protocol):
    """Collaborator turning a component list into dependency markup."""

    def resolve(self, components: Sequence[str]) -> str | Sequence[str]: ...


def join_dependencies(resolved: str | Iterable[str] | None) -> str:
    """Flatten resolver output that may be pre-joined or a collection."""
    if resolved is None:
        return ""
    if isinstance(resolved, str):
        return resolved
    return "".join(item for item in resolved if item)


class TagDependencyResolver:
    """Map asset paths to tags; entries already written as markup pass through."""

    def resolve(self, components: Sequence[str]) -> list[str]:
        tags: list[str] = []
        seen: set[str] = set()
        for component in components:
            entry = component.strip()
            if not entry or entry in seen:
                continue
            seen.add(entry)
            tags.append(self.tag_for(entry))
        return tags

    @staticmethod
    def tag_for(entry: str) -> str:
        if entry.startswith("<"):
            return entry
        path = entry.split("?", 1)[0].split("#", 1)[0].lower()
        source = escape(entry, quote=True)
        if path.endswith(".css"):
            return f'<link rel="stylesheet" href="{source}">'
        return f'<script src="{source}"></script>'


__all__ = ["DependencyResolver", "TagDependencyResolver", "join_dependencies"]
