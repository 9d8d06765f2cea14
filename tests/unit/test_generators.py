"""Test random e-graphs and the built-in oracles."""

import numpy as np

from mcts_extract.core.cost.oracle import ORACLES, node_count_cost, tree_size_cost
from mcts_extract.core.egraph.generators import random_egraph
from mcts_extract.core.egraph.graph import EGraph
from mcts_extract.core.extraction.term import Term


def test_random_egraph_is_seeded():
    a = random_egraph(np.random.default_rng(3), num_classes=10)
    b = random_egraph(np.random.default_rng(3), num_classes=10)
    assert a.to_dict() == b.to_dict()
    assert all(a.is_extractable(c) for c in a.classes())


def test_random_egraph_shape():
    egraph = random_egraph(np.random.default_rng(0), num_classes=30, max_nodes=2, max_arity=1)
    assert egraph.num_classes == 30
    assert egraph.root() == "c0"
    assert all(1 <= len(egraph.nodes(c)) <= 2 for c in egraph.classes())


def test_to_dict_roundtrip(shared_egraph):
    rebuilt = EGraph.from_dict(shared_egraph.to_dict(), root=shared_egraph.root())
    assert rebuilt.to_dict() == shared_egraph.to_dict()
    assert rebuilt.to_dict()["c0"] == [("P", "P", ["c1", "c2"])]


def test_builtin_oracles(shared_egraph):
    term = Term(shared_egraph, {"c0": "P", "c1": "Q", "c2": "x"})
    assert node_count_cost(term) == 3.0
    assert tree_size_cost(term) == 4.0
    assert set(ORACLES) == {"node_count", "tree_size"}
