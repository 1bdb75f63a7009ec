"""Caller-owned tree of test nodes that verdicts are written onto."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Literal

from cucumber_batch.models.tree import NodeKind, NodeSpec
from cucumber_batch.paths import is_same_file, normalize_path

log = logging.getLogger(__name__)

type NodeState = Literal["idle", "started", "passed", "failed"]

ADDRESSABLE_KINDS: frozenset[NodeKind] = frozenset(["scenario", "example"])


@dataclass(kw_only=True)
class TestNode:
    """A node of the tree, addressed by its file and line.

    Relationships are explicit: each node knows its parent id and the ids of
    its children.
    """

    __test__ = False

    node_id: int
    kind: NodeKind
    file: str
    line: int | None = None
    label: str = ""
    parent_id: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        """Whether the node has no children."""
        return not self.children

    @property
    def addressable(self) -> bool:
        """Whether a scenario verdict can be attached to this node."""
        return self.is_leaf and self.line is not None and self.kind in ADDRESSABLE_KINDS


@dataclass(frozen=True, kw_only=True)
class NodeMessage:
    """Failure message attached to a node, with its source location."""

    text: str
    file: str
    line: int | None = None


@dataclass(frozen=True, kw_only=True)
class NodeOutcome:
    """Latest state recorded for a node."""

    state: NodeState = "idle"
    messages: Sequence[NodeMessage] = ()


class TestTree:
    """Arena of test nodes keyed by stable integer ids.

    The tree is built and owned by the caller. Verdicts only ever change node
    outcomes through ``mark_started``, ``mark_passed`` and ``mark_failed``;
    nodes are never created or removed while results are applied.
    """

    __test__ = False

    def __init__(self) -> None:
        self._nodes: dict[int, TestNode] = {}
        self._outcomes: dict[int, NodeOutcome] = {}
        self._roots: list[int] = []

    @classmethod
    def from_specs(cls, specs: Iterable[NodeSpec]) -> "TestTree":
        """Build a tree from nested node specifications."""
        tree = cls()
        for spec in specs:
            tree._add_spec(spec, parent_id=None)
        return tree

    def _add_spec(self, spec: NodeSpec, parent_id: int | None) -> int:
        node_id = self.add_node(
            kind=spec.kind,
            file=spec.file,
            line=spec.line,
            label=spec.label,
            parent_id=parent_id,
        )
        for child in spec.children:
            self._add_spec(child, parent_id=node_id)
        return node_id

    def add_node(
        self,
        *,
        kind: NodeKind,
        file: str,
        line: int | None = None,
        label: str = "",
        parent_id: int | None = None,
    ) -> int:
        """Add a node under ``parent_id`` (or as a root) and return its id."""
        if parent_id is not None and parent_id not in self._nodes:
            raise KeyError(f"Unknown parent node {parent_id}")

        node_id = len(self._nodes)
        self._nodes[node_id] = TestNode(
            node_id=node_id,
            kind=kind,
            file=file,
            line=line,
            label=label,
            parent_id=parent_id,
        )
        if parent_id is None:
            self._roots.append(node_id)
        else:
            self._nodes[parent_id].children.append(node_id)
        return node_id

    def node(self, node_id: int) -> TestNode:
        """Return the node with the given id."""
        return self._nodes[node_id]

    @property
    def roots(self) -> Sequence[int]:
        """Ids of the top-level nodes."""
        return tuple(self._roots)

    def __len__(self) -> int:
        return len(self._nodes)

    def descendants(self, node_id: int) -> Iterator[TestNode]:
        """Yield every descendant of a node, depth first, in insertion order."""
        for child_id in self._nodes[node_id].children:
            child = self._nodes[child_id]
            yield child
            yield from self.descendants(child_id)

    def find(self, file: str, line: int | None = None) -> TestNode | None:
        """Find the node for a file (``line`` None) or a line within it.

        Files are matched like report entries, so a relative target path
        finds a node holding the absolute path and vice versa. An exact
        match on the normalized path is preferred over a suffix match.
        Without a line the file-level node is returned, i.e. the node of
        that file whose parent belongs to another file or that is a root.
        """
        wanted = normalize_path(file)
        fallback: TestNode | None = None
        for node in self._nodes.values():
            if not self._selects(node, line) or not _same_file(node.file, file):
                continue
            if normalize_path(node.file) == wanted:
                return node
            if fallback is None:
                fallback = node
        return fallback

    def _selects(self, node: TestNode, line: int | None) -> bool:
        if line is None:
            return self._is_file_node(node)
        return node.line == line and node.kind != "feature"

    def _is_file_node(self, node: TestNode) -> bool:
        if node.kind == "feature":
            return True
        if node.parent_id is None:
            return True
        parent = self._nodes[node.parent_id]
        return not _same_file(parent.file, node.file)

    def outcome(self, node_id: int) -> NodeOutcome:
        """Return the latest outcome recorded for a node."""
        return self._outcomes.get(node_id, NodeOutcome())

    def mark_started(self, node_id: int) -> None:
        """Record that a node is part of a running batch."""
        self._set(node_id, NodeOutcome(state="started"))

    def mark_passed(self, node_id: int) -> None:
        """Record that a node passed."""
        self._set(node_id, NodeOutcome(state="passed"))

    def mark_failed(self, node_id: int, messages: Sequence[NodeMessage] = ()) -> None:
        """Record that a node failed with the given messages."""
        self._set(node_id, NodeOutcome(state="failed", messages=tuple(messages)))

    def _set(self, node_id: int, outcome: NodeOutcome) -> None:
        if node_id not in self._nodes:
            raise KeyError(f"Unknown node {node_id}")
        log.debug("Node %d -> %s", node_id, outcome.state)
        self._outcomes[node_id] = outcome

    def snapshot(self) -> list[dict[str, object]]:
        """Return a JSON-serializable view of every node and its outcome."""
        nodes: list[dict[str, object]] = []
        for node in self._nodes.values():
            outcome = self.outcome(node.node_id)
            nodes.append(
                {
                    "id": node.node_id,
                    "kind": node.kind,
                    "file": node.file,
                    "line": node.line,
                    "label": node.label,
                    "parent": node.parent_id,
                    "state": outcome.state,
                    "messages": [
                        {"text": m.text, "line": m.line} for m in outcome.messages
                    ],
                }
            )
        return nodes


def _same_file(left: str, right: str) -> bool:
    return is_same_file(left, right) or is_same_file(right, left)
