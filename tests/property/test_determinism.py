"""Same e-graph, oracle, seed and budget give the same result."""

import numpy as np
import pytest

from mcts_extract.config import ExtractorConfig
from mcts_extract.mcts.search import MCTSExtractor


def _run(egraph, oracle, **kwargs):
    extractor = MCTSExtractor(egraph, oracle, ExtractorConfig(**kwargs))
    return extractor.extract()


@pytest.mark.parametrize("graph_seed", range(5))
def test_same_seed_same_result(random_egraph_factory, tree_size_oracle, graph_seed):
    egraph = random_egraph_factory(np.random.default_rng(graph_seed))
    first = _run(egraph, tree_size_oracle, max_playouts=80, seed=7)
    second = _run(egraph, tree_size_oracle, max_playouts=80, seed=7)

    assert first.as_dict() == second.as_dict()
    assert first.cost == second.cost
    assert first.best_cost == second.best_cost
    assert first.statistics["nodes"] == second.statistics["nodes"]


def test_same_seed_same_result_with_options(random_egraph_factory, tree_size_oracle):
    egraph = random_egraph_factory(np.random.default_rng(42), num_classes=16)
    options = dict(
        max_playouts=90, seed=3, rollouts_per_leaf=2, playouts_per_round=30,
        rollout_policy="weighted"
    )
    first = _run(egraph, tree_size_oracle, **options)
    second = _run(egraph, tree_size_oracle, **options)
    assert first.as_dict() == second.as_dict()
    assert first.statistics["nodes"] == second.statistics["nodes"]


def test_longer_run_extends_shorter_run(random_egraph_factory, tree_size_oracle):
    """The first N playouts of a 2N run are the N run."""
    egraph = random_egraph_factory(np.random.default_rng(5))
    short = _run(egraph, tree_size_oracle, max_playouts=40, seed=1)
    long = _run(egraph, tree_size_oracle, max_playouts=80, seed=1)

    short_nodes = short.statistics["nodes"]
    long_nodes = long.statistics["nodes"]
    assert len(long_nodes) >= len(short_nodes)
    for a, b in zip(short_nodes, long_nodes):
        assert (a["class"], a["node"], a["parent"]) == (b["class"], b["node"], b["parent"])
        assert b["visits"] >= a["visits"]
