"""Completed extraction: one e-node per visited e-class."""

from typing import Any, Dict, Hashable, Iterator, List, Tuple

import networkx as nx

from ..egraph.graph import EGraph
from ...errors import InvariantViolationError


class Term:
    """A fully-resolved, acyclic assignment rooted at the e-graph root.

    This is what the cost oracle consumes. Classes reachable more than once
    appear once (the term is a DAG, not a tree).

    Attributes:
        egraph: The e-graph the term was extracted from
        assignment: class id -> node id, in resolution order
    """

    def __init__(self, egraph: EGraph, assignment: Dict[Hashable, Hashable]):
        self.egraph = egraph
        self.assignment = dict(assignment)

    @property
    def root(self) -> Hashable:
        return self.egraph.root()

    def as_dict(self) -> Dict[Hashable, Hashable]:
        return dict(self.assignment)

    def node(self, class_id: Hashable) -> Hashable:
        """Node chosen for class_id."""
        return self.assignment[class_id]

    def children(self, class_id: Hashable) -> List[Hashable]:
        """Child classes of the node chosen for class_id."""
        return self.egraph.children(self.assignment[class_id])

    def nodes(self) -> List[Hashable]:
        return list(self.assignment.values())

    def ops(self) -> List[Any]:
        """Operators of the chosen nodes, in resolution order."""
        return [self.egraph.op(n) for n in self.assignment.values()]

    def tree_size(self) -> int:
        """Number of nodes in the term unfolded as a tree (shared subterms counted per use)."""
        sizes: Dict[Hashable, int] = {}
        for class_id in self._bottom_up_order():
            sizes[class_id] = 1 + sum(sizes[c] for c in self.children(class_id))
        return sizes[self.root]

    def to_expr(self, class_id: Hashable = None) -> Tuple:
        """Nested (op, *children) tuples, shared subterms repeated."""
        memo: Dict[Hashable, Tuple] = {}
        for cid in self._bottom_up_order():
            node_id = self.assignment[cid]
            memo[cid] = (self.egraph.op(node_id),) + tuple(
                memo[c] for c in self.egraph.children(node_id)
            )
        return memo[self.root if class_id is None else class_id]

    def _bottom_up_order(self) -> List[Hashable]:
        """Children before parents."""
        return list(reversed(list(nx.topological_sort(self.to_networkx()))))

    def to_networkx(self) -> nx.DiGraph:
        """Class dependency graph induced by the chosen nodes."""
        graph = nx.DiGraph()
        for class_id, node_id in self.assignment.items():
            graph.add_node(class_id, node=node_id, op=self.egraph.op(node_id))
            for child in self.egraph.children(node_id):
                graph.add_edge(class_id, child)
        return graph

    def validate(self) -> None:
        """Check structural correctness.

        Raises:
            InvariantViolationError: on any problem
        """
        if self.root not in self.assignment:
            raise InvariantViolationError("Root class is not assigned")
        for class_id, node_id in self.assignment.items():
            if self.egraph.class_of(node_id) != class_id:
                raise InvariantViolationError(
                    f"Node {node_id!r} is not a member of class {class_id!r}"
                )
            for child in self.egraph.children(node_id):
                if child not in self.assignment:
                    raise InvariantViolationError(
                        f"Class {child!r} is referenced but not assigned"
                    )
        graph = self.to_networkx()
        if not nx.is_directed_acyclic_graph(graph):
            raise InvariantViolationError(
                f"Term contains a cycle: {nx.find_cycle(graph)}"
            )
        unreachable = set(self.assignment) - nx.descendants(graph, self.root) - {self.root}
        if unreachable:
            raise InvariantViolationError(
                f"Assigned classes unreachable from root: {sorted(map(repr, unreachable))}"
            )

    def __len__(self) -> int:
        return len(self.assignment)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.assignment)

    def __getitem__(self, class_id: Hashable) -> Hashable:
        return self.assignment[class_id]

    def __contains__(self, class_id: Hashable) -> bool:
        return class_id in self.assignment

    def __eq__(self, other) -> bool:
        if not isinstance(other, Term):
            return False
        return self.egraph is other.egraph and self.assignment == other.assignment

    def __hash__(self) -> int:
        return hash(frozenset(self.assignment.items()))

    def __repr__(self) -> str:
        if len(self) > 16:
            return f"Term({len(self)} classes, root={self.root!r})"
        return f"Term({self.assignment!r})"
