"""Tree reduction of queued markup fragments into a single document.

Fragments arrive in completion order, but the document shape comes from the
parent/child relation. Reduction runs in two tree-wide passes:

1. *Locate*: every child marker in every parent is tagged with an opaque token
   inserted right after the ``>`` that closes the marker's opening tag.
2. *Fill*: a post-order walk swaps each token for the child's reduced markup,
   so grandchildren are embedded before a child lands in its own parent.

Locating everything before filling anything keeps children that share a name
in different branches from being substituted into the wrong parent.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
import logging

from .diagnostics import DiagnosticEmitter, NullEmitter
from .fragments import Fragment, is_empty_payload
from .markers import DEFAULT_MARKER_ATTRIBUTE, has_marker, locate, splice


logger = logging.getLogger(__name__)

_TOKEN = "\x00pipesmith-fragment-{index}\x00"


class UnmatchedPolicy(str, Enum):
    """What happens to root candidates other than the designated root."""

    RETRY = "retry"
    DROP = "drop"


@dataclass(slots=True, eq=False)
class _Node:
    index: int
    fragment: Fragment
    markup: str
    parent: _Node | None = None
    children: list[_Node] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.fragment.name

    @property
    def token(self) -> str:
        return _TOKEN.format(index=self.index)

    def ancestors(self) -> Iterator[_Node]:
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def attach(self, child: _Node) -> None:
        child.parent = self
        self.children.append(child)


@dataclass(frozen=True, slots=True)
class ReductionReport:
    """Summary of one reduction."""

    root: str | None = None
    merged: int = 0
    attached: tuple[str, ...] = ()
    dropped: tuple[str, ...] = ()


def _as_markup(payload: object) -> str:
    if is_empty_payload(payload):
        return ""
    return payload if isinstance(payload, str) else str(payload)


def _preorder(root: _Node) -> Iterator[_Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _postorder(root: _Node) -> list[_Node]:
    ordered: list[_Node] = []
    stack: list[tuple[_Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            ordered.append(node)
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children))
    return ordered


class TreeReducer:
    """Collapse a flat fragment list into a single root fragment."""

    def __init__(
        self,
        *,
        attribute: str = DEFAULT_MARKER_ATTRIBUTE,
        unmatched: UnmatchedPolicy = UnmatchedPolicy.RETRY,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.attribute = attribute
        self.unmatched = UnmatchedPolicy(unmatched)
        self._emitter = emitter or NullEmitter()

    def reduce(
        self,
        fragments: Sequence[Fragment],
        *,
        root: str | None = None,
    ) -> tuple[list[Fragment], ReductionReport]:
        """Return the collapsed fragment list together with a report.

        ``root`` names the preferred root; when no root candidate carries that
        name, the first root candidate in arrival order is used.
        """
        if not fragments:
            return [], ReductionReport()

        nodes = [
            _Node(index=index, fragment=fragment, markup=_as_markup(fragment.payload))
            for index, fragment in enumerate(fragments)
        ]
        self._link(nodes)

        roots = [node for node in nodes if node.parent is None]
        designated = next((node for node in roots if root and node.name == root), roots[0])

        attached: list[str] = []
        if self.unmatched is UnmatchedPolicy.RETRY:
            attached = self._retry(designated, [node for node in roots if node is not designated])
            roots = [node for node in nodes if node.parent is None]

        unplaced: set[int] = set()
        for node in nodes:
            unplaced.update(self._locate(node))
        for tree in roots:
            self._fill(tree)

        members = {node.index for node in _preorder(designated)}
        dropped = tuple(
            node.name
            for node in nodes
            if node.index not in members
            or (node.index in unplaced and node is not designated)
        )
        report = ReductionReport(
            root=designated.name,
            merged=len(members),
            attached=tuple(attached),
            dropped=dropped,
        )
        logger.debug(
            "Reduced %d fragments into '%s' (attached=%s, dropped=%s)",
            len(nodes),
            report.root,
            list(report.attached),
            list(report.dropped),
        )
        return [Fragment(name=designated.name, payload=designated.markup)], report

    def _link(self, nodes: list[_Node]) -> None:
        by_name: dict[str, list[_Node]] = {}
        for node in nodes:
            by_name.setdefault(node.name, []).append(node)

        for node in nodes:
            parent_name = node.fragment.parent
            if not parent_name:
                continue
            candidate = next(
                (other for other in by_name.get(parent_name, ()) if other is not node),
                None,
            )
            if candidate is None:
                continue
            if node in candidate.ancestors():
                self._emitter.warning(
                    f"Fragment '{node.name}' would form a cycle with '{parent_name}'; "
                    "treating it as a root."
                )
                continue
            candidate.attach(node)

    def _retry(self, designated: _Node, pending: list[_Node]) -> list[str]:
        """Attach orphan trees to any designated-tree node carrying their marker."""
        attached: list[str] = []
        progress = True
        while pending and progress:
            progress = False
            members = sorted(_preorder(designated), key=lambda item: item.index)
            for orphan in list(pending):
                host = next(
                    (
                        node
                        for node in members
                        if has_marker(node.markup, orphan.name, self.attribute)
                    ),
                    None,
                )
                if host is None:
                    continue
                host.attach(orphan)
                pending.remove(orphan)
                attached.append(orphan.name)
                progress = True
        return attached

    def _locate(self, parent: _Node) -> set[int]:
        """Tag child markers in ``parent``; return indexes of children without one."""
        if not parent.children:
            return set()

        insertions: list[tuple[int, str]] = []
        missing: set[int] = set()
        for child in parent.children:
            offsets = locate(parent.markup, child.name, self.attribute)
            if not offsets:
                missing.add(child.index)
                continue
            insertions.extend((offset, child.token) for offset in offsets)

        parent.markup = splice(parent.markup, insertions)
        return missing

    @staticmethod
    def _fill(root: _Node) -> None:
        for node in _postorder(root):
            for child in node.children:
                node.markup = node.markup.replace(child.token, child.markup)


__all__ = ["ReductionReport", "TreeReducer", "UnmatchedPolicy"]
