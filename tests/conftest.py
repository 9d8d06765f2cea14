"""Pytest fixtures for testing."""

import pytest

from mcts_extract.core.cost.oracle import node_count_cost, tree_size_cost
from mcts_extract.core.egraph.generators import random_egraph
from mcts_extract.core.egraph.graph import EClass, EGraph, ENode


@pytest.fixture
def seed():
    """Seed for reproducible runs."""
    return 42


@pytest.fixture
def scenario_egraph():
    """c0 = {A(c1), B}, c1 = {C, D}."""
    return EGraph.from_dict(
        {
            "c0": [("A", "A", ["c1"]), ("B", "B", [])],
            "c1": [("C", "C", []), ("D", "D", [])],
        },
        root="c0",
    )


@pytest.fixture
def node_count_oracle():
    """Cost = number of nodes in the term (B -> 1, A(C) -> 2)."""
    return node_count_cost


@pytest.fixture
def cyclic_egraph():
    """c0 = {F(c1), L}, c1 = {G(c0), M}: G always closes a cycle."""
    return EGraph.from_dict(
        {
            "c0": [("F", "F", ["c1"]), ("L", "L", [])],
            "c1": [("G", "G", ["c0"]), ("M", "M", [])],
        },
        root="c0",
    )


@pytest.fixture
def shared_egraph():
    """c0 = {P(c1, c2)}, c1 = {Q(c2)}, c2 = {x, y}: c2 is reached twice."""
    return EGraph.from_dict(
        {
            "c0": [("P", "P", ["c1", "c2"])],
            "c1": [("Q", "Q", ["c2"])],
            "c2": [("x", "x", []), ("y", "y", [])],
        },
        root="c0",
    )


@pytest.fixture
def dead_end_egraph():
    """c0 = {A(c1), B}, c1 = {E(c0)}: choosing A leads to a dead end."""
    return EGraph.from_dict(
        {
            "c0": [("A", "A", ["c1"]), ("B", "B", [])],
            "c1": [("E", "E", ["c0"])],
        },
        root="c0",
    )


@pytest.fixture
def high_utility_egraph():
    """Small integer-labelled e-graph with a single cheap term.

    Classes 0..3, nodes 0..5. The only term with cost 0 is
    {0: 1, 2: 4, 3: 5}; everything else costs 1.
    """
    node_children = [[2, 1], [2, 2], [2, 3], [3], [3, 3], []]
    class_nodes = [[0, 1], [2, 3], [4], [5]]
    nodes = [ENode(node_id=i, op=f"n{i}", children=c) for i, c in enumerate(node_children)]
    classes = [EClass(class_id=i, nodes=n) for i, n in enumerate(class_nodes)]
    return EGraph(classes, nodes, root=0)


@pytest.fixture
def high_utility_oracle():
    def oracle(term):
        target = term.as_dict() == {0: 1, 2: 4, 3: 5}
        return 0.0 if target else 1.0
    return oracle


@pytest.fixture
def random_egraph_factory():
    return random_egraph


@pytest.fixture
def tree_size_oracle():
    """Deterministic cost: unfolded tree size plus a per-operator weight."""
    def oracle(term):
        weights = sum(int(str(op)[-1]) for op in term.ops())
        return tree_size_cost(term) + weights
    return oracle
