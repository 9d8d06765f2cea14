"""Read-only e-graph view.

Classes and nodes are stored as an index arena: every class and node gets a
dense integer index, and all structural queries used by the search run on
those indices. Labels supplied by the caller are translated at the boundary.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from ...errors import MalformedEGraphError

INF_LEVEL = math.inf


@dataclass(frozen=True)
class ENode:
    """One candidate operator application."""
    node_id: Hashable
    op: Any
    children: Tuple[Hashable, ...] = ()

    def __post_init__(self):
        # Accept any sequence of children, store a tuple
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def arity(self) -> int:
        return len(self.children)

    def __repr__(self) -> str:
        return f"ENode({self.node_id!r}, op={self.op!r}, children={list(self.children)})"


@dataclass(frozen=True)
class EClass:
    """An equivalence class of interchangeable e-nodes."""
    class_id: Hashable
    nodes: Tuple[Hashable, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"EClass({self.class_id!r}, nodes={list(self.nodes)})"


class EGraph:
    """Immutable e-graph with a designated root class.

    Construction validates the structure and computes, bottom-up, the
    extraction level of every class: the height of the shallowest acyclic
    term rooted there (infinite if there is none). A root with infinite level
    cannot be extracted and is rejected with MalformedEGraphError.

    Args:
        classes: EClass records, in enumeration order
        nodes: ENode records
        root: Root class id
    """

    def __init__(self, classes: Sequence[EClass], nodes: Sequence[ENode], root: Hashable):
        self._class_ids: List[Hashable] = []
        self._class_index: Dict[Hashable, int] = {}
        for eclass in classes:
            if eclass.class_id in self._class_index:
                raise MalformedEGraphError(f"Duplicate class id {eclass.class_id!r}")
            self._class_index[eclass.class_id] = len(self._class_ids)
            self._class_ids.append(eclass.class_id)

        self._node_ids: List[Hashable] = []
        self._node_index: Dict[Hashable, int] = {}
        self._node_ops: List[Any] = []
        self._node_children: List[Tuple[int, ...]] = []
        for enode in nodes:
            if enode.node_id in self._node_index:
                raise MalformedEGraphError(f"Duplicate node id {enode.node_id!r}")
            children = []
            for child in enode.children:
                if child not in self._class_index:
                    raise MalformedEGraphError(
                        f"Node {enode.node_id!r} references unknown class {child!r}"
                    )
                children.append(self._class_index[child])
            self._node_index[enode.node_id] = len(self._node_ids)
            self._node_ids.append(enode.node_id)
            self._node_ops.append(enode.op)
            self._node_children.append(tuple(children))

        self._node_class: List[int] = [-1] * len(self._node_ids)
        self._class_nodes: List[Tuple[int, ...]] = []
        for class_idx, eclass in enumerate(classes):
            members = []
            for node_id in eclass.nodes:
                if node_id not in self._node_index:
                    raise MalformedEGraphError(
                        f"Class {eclass.class_id!r} references unknown node {node_id!r}"
                    )
                node_idx = self._node_index[node_id]
                if self._node_class[node_idx] != -1:
                    raise MalformedEGraphError(
                        f"Node {node_id!r} belongs to more than one class"
                    )
                self._node_class[node_idx] = class_idx
                members.append(node_idx)
            self._class_nodes.append(tuple(members))

        orphans = [self._node_ids[i] for i, c in enumerate(self._node_class) if c == -1]
        if orphans:
            raise MalformedEGraphError(f"Nodes without a class: {orphans!r}")

        if root not in self._class_index:
            raise MalformedEGraphError(f"Unknown root class {root!r}")
        self._root = self._class_index[root]

        self._class_level, self._node_level = self._compute_levels()
        if self._class_level[self._root] == INF_LEVEL:
            raise MalformedEGraphError(
                f"Root class {root!r} has no acyclic extraction"
            )

    @classmethod
    def from_dict(
        cls,
        classes: Mapping[Hashable, Iterable[Tuple[Hashable, Any, Sequence[Hashable]]]],
        root: Hashable
    ) -> "EGraph":
        """Build from {class_id: [(node_id, op, [child class ids]), ...]}."""
        eclasses = []
        enodes = []
        for class_id, members in classes.items():
            node_ids = []
            for node_id, op, children in members:
                enodes.append(ENode(node_id=node_id, op=op, children=tuple(children)))
                node_ids.append(node_id)
            eclasses.append(EClass(class_id=class_id, nodes=tuple(node_ids)))
        return cls(eclasses, enodes, root)

    def to_dict(self) -> Dict[Hashable, List[Tuple[Hashable, Any, List[Hashable]]]]:
        """Inverse of from_dict."""
        return {
            self._class_ids[class_idx]: [
                (self._node_ids[n], self._node_ops[n],
                 [self._class_ids[c] for c in self._node_children[n]])
                for n in members
            ]
            for class_idx, members in enumerate(self._class_nodes)
        }

    def _compute_levels(self) -> Tuple[List[float], List[float]]:
        """Least fixpoint of class/node extraction levels."""
        class_level = [INF_LEVEL] * len(self._class_ids)
        node_level = [INF_LEVEL] * len(self._node_ids)
        changed = True
        while changed:
            changed = False
            for node_idx, children in enumerate(self._node_children):
                level = 1 + max((class_level[c] for c in children), default=-1)
                if level < node_level[node_idx]:
                    node_level[node_idx] = level
                    class_idx = self._node_class[node_idx]
                    if level < class_level[class_idx]:
                        class_level[class_idx] = level
                    changed = True
        return class_level, node_level

    # Label-level contract

    def root(self) -> Hashable:
        return self._class_ids[self._root]

    def classes(self) -> List[Hashable]:
        return list(self._class_ids)

    def nodes(self, class_id: Hashable) -> List[Hashable]:
        return [self._node_ids[i] for i in self._class_nodes[self.class_index(class_id)]]

    def children(self, node_id: Hashable) -> List[Hashable]:
        return [self._class_ids[c] for c in self._node_children[self.node_index(node_id)]]

    def op(self, node_id: Hashable) -> Any:
        return self._node_ops[self.node_index(node_id)]

    def class_of(self, node_id: Hashable) -> Hashable:
        return self._class_ids[self._node_class[self.node_index(node_id)]]

    def level(self, class_id: Hashable) -> float:
        """Extraction level of a class (inf if unextractable)."""
        return self._class_level[self.class_index(class_id)]

    def is_extractable(self, class_id: Hashable) -> bool:
        return self.level(class_id) != INF_LEVEL

    def class_index(self, class_id: Hashable) -> int:
        try:
            return self._class_index[class_id]
        except KeyError:
            raise KeyError(f"Unknown class {class_id!r}") from None

    def node_index(self, node_id: Hashable) -> int:
        try:
            return self._node_index[node_id]
        except KeyError:
            raise KeyError(f"Unknown node {node_id!r}") from None

    # Index-level queries used by the tracker

    @property
    def num_classes(self) -> int:
        return len(self._class_ids)

    @property
    def num_nodes(self) -> int:
        return len(self._node_ids)

    @property
    def root_index(self) -> int:
        return self._root

    def class_label(self, class_idx: int) -> Hashable:
        return self._class_ids[class_idx]

    def node_label(self, node_idx: int) -> Hashable:
        return self._node_ids[node_idx]

    def node_op(self, node_idx: int) -> Any:
        return self._node_ops[node_idx]

    def class_members(self, class_idx: int) -> Tuple[int, ...]:
        return self._class_nodes[class_idx]

    def node_children(self, node_idx: int) -> Tuple[int, ...]:
        return self._node_children[node_idx]

    def node_class(self, node_idx: int) -> int:
        return self._node_class[node_idx]

    def node_level(self, node_idx: int) -> float:
        return self._node_level[node_idx]

    def class_level(self, class_idx: int) -> float:
        return self._class_level[class_idx]

    # Whole-graph views

    def reachable_classes(self, start: Optional[Hashable] = None) -> List[Hashable]:
        """Classes reachable from start (default root), in BFS order."""
        first = self._root if start is None else self.class_index(start)
        seen = {first}
        order = [first]
        i = 0
        while i < len(order):
            for node_idx in self._class_nodes[order[i]]:
                for child in self._node_children[node_idx]:
                    if child not in seen:
                        seen.add(child)
                        order.append(child)
            i += 1
        return [self._class_ids[c] for c in order]

    def to_networkx(self) -> nx.DiGraph:
        """Bipartite class -> node -> child class graph.

        Class vertices are ("class", id), node vertices are ("node", id).
        """
        graph = nx.DiGraph()
        for class_idx, members in enumerate(self._class_nodes):
            class_key = ("class", self._class_ids[class_idx])
            graph.add_node(class_key, kind="class", level=self._class_level[class_idx])
            for node_idx in members:
                node_key = ("node", self._node_ids[node_idx])
                graph.add_node(node_key, kind="node", op=self._node_ops[node_idx])
                graph.add_edge(class_key, node_key)
                for child in self._node_children[node_idx]:
                    graph.add_edge(node_key, ("class", self._class_ids[child]))
        return graph

    def __repr__(self) -> str:
        return (f"EGraph({self.num_classes} classes, {self.num_nodes} nodes, "
                f"root={self.root()!r})")
