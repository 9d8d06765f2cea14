"""Partial-term tracker for top-down extraction.

Extraction starts at the root class and resolves classes depth-first: the
next class to resolve is always the first unassigned child of the node on top
of the DFS stack. A class stays on the ancestor path while its children are
being resolved, so a move whose node points back at an ancestor would close
a cycle. Such moves are filtered out of `legal_moves()`, which means no state
reachable through `apply()` ever contains a cyclic term.

Only classes reachable through chosen nodes are visited: the cost of one
playout is proportional to the size of the extracted term, not of the
e-graph.

A dead end is a non-terminal state whose pending class has no legal move
(every candidate would close a cycle on the current path). Dead ends are a
property of the path taken, not of the e-graph, and the search learns to
avoid them.
"""

from typing import Dict, Hashable, List, Optional

import numpy as np

from ..egraph.graph import EGraph, INF_LEVEL
from .term import Term
from ...errors import InvariantViolationError

UNASSIGNED = -1


class ExtractionState:
    """Assignment + DFS frontier + ancestor path for one playout.

    All bookkeeping is index based: `assigned[c]` is the node chosen for
    class index c (or UNASSIGNED), `on_path[c]` marks classes whose subterm
    is still in progress.
    """

    __slots__ = ['egraph', 'assigned', 'order', 'on_path', 'stack', 'pending']

    def __init__(self, egraph: EGraph):
        self.egraph = egraph
        self.assigned = np.full(egraph.num_classes, UNASSIGNED, dtype=np.int64)
        self.order: List[int] = []
        self.on_path = np.zeros(egraph.num_classes, dtype=bool)
        # Frames are [class_idx, node_idx, next_child_position]
        self.stack: List[List[int]] = []
        self.pending: Optional[int] = egraph.root_index

    @property
    def is_terminal(self) -> bool:
        """True once every referenced class is assigned."""
        return self.pending is None

    @property
    def is_dead_end(self) -> bool:
        return self.pending is not None and not self.legal_moves()

    @property
    def num_assigned(self) -> int:
        return len(self.order)

    def is_legal(self, node_idx: int) -> bool:
        """Whether choosing node_idx for the pending class keeps the term acyclic."""
        if self.pending is None:
            return False
        if self.egraph.node_class(node_idx) != self.pending:
            return False
        if self.egraph.node_level(node_idx) == INF_LEVEL:
            return False
        for child in self.egraph.node_children(node_idx):
            if child == self.pending or self.on_path[child]:
                return False
        return True

    def legal_moves(self) -> List[int]:
        """Legal nodes for the pending class, in class enumeration order."""
        if self.pending is None:
            return []
        return [n for n in self.egraph.class_members(self.pending) if self.is_legal(n)]

    def apply(self, node_idx: int) -> None:
        """Resolve the pending class with node_idx and advance.

        Raises:
            InvariantViolationError: if the move is not legal
        """
        if not self.is_legal(node_idx):
            raise InvariantViolationError(
                f"Illegal move: node {self.egraph.node_label(node_idx)!r} for class "
                f"{None if self.pending is None else self.egraph.class_label(self.pending)!r}"
            )
        class_idx = self.pending
        self.assigned[class_idx] = node_idx
        self.order.append(class_idx)
        if self.egraph.node_children(node_idx):
            self.stack.append([class_idx, node_idx, 0])
            self.on_path[class_idx] = True
        self._advance()

    def _advance(self) -> None:
        """Find the next class to resolve, popping finished frames."""
        while self.stack:
            frame = self.stack[-1]
            children = self.egraph.node_children(frame[1])
            while frame[2] < len(children):
                child = children[frame[2]]
                if self.assigned[child] == UNASSIGNED:
                    self.pending = child
                    return
                if self.on_path[child]:
                    raise InvariantViolationError(
                        f"Class {self.egraph.class_label(child)!r} closes a cycle"
                    )
                frame[2] += 1
            self.stack.pop()
            self.on_path[frame[0]] = False
        self.pending = None

    def pending_class(self) -> Optional[Hashable]:
        """Label of the class to resolve next (None when terminal)."""
        return None if self.pending is None else self.egraph.class_label(self.pending)

    def frontier(self) -> List[Hashable]:
        """Referenced-but-unassigned classes, next to resolve first."""
        seen = set()
        result = []
        for frame in reversed(self.stack):
            children = self.egraph.node_children(frame[1])
            for child in children[frame[2]:]:
                if self.assigned[child] == UNASSIGNED and child not in seen:
                    seen.add(child)
                    result.append(child)
        if self.pending is not None and self.pending not in seen:
            result.insert(0, self.pending)
        return [self.egraph.class_label(c) for c in result]

    def ancestor_path(self) -> List[Hashable]:
        """Classes in progress, outermost first."""
        return [self.egraph.class_label(frame[0]) for frame in self.stack]

    def assignment(self) -> Dict[Hashable, Hashable]:
        """Current (possibly partial) assignment, in resolution order."""
        return {
            self.egraph.class_label(c): self.egraph.node_label(int(self.assigned[c]))
            for c in self.order
        }

    def to_term(self) -> Term:
        """Complete term for a terminal state.

        Raises:
            InvariantViolationError: if the state is not terminal
        """
        if not self.is_terminal:
            raise InvariantViolationError(
                f"State is not terminal, {self.pending_class()!r} is still pending"
            )
        return Term(self.egraph, self.assignment())

    def copy(self) -> 'ExtractionState':
        clone = ExtractionState.__new__(ExtractionState)
        clone.egraph = self.egraph
        clone.assigned = self.assigned.copy()
        clone.order = list(self.order)
        clone.on_path = self.on_path.copy()
        clone.stack = [list(frame) for frame in self.stack]
        clone.pending = self.pending
        return clone

    def __repr__(self) -> str:
        return (f"ExtractionState(assigned={self.num_assigned}, "
                f"pending={self.pending_class()!r}, depth={len(self.stack)})")
