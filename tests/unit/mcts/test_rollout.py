"""Test rollout policies and completion."""

import numpy as np
import pytest

from mcts_extract.core.egraph.graph import EGraph
from mcts_extract.core.extraction.state import ExtractionState
from mcts_extract.errors import ConfigError
from mcts_extract.mcts.rollout import (
    UniformRolloutPolicy,
    WeightedRolloutPolicy,
    exhaustive_completion,
    get_rollout_policy,
    level_weight,
    rollout,
)


def test_rollout_completes(scenario_egraph, seed):
    state = ExtractionState(scenario_egraph)
    assert rollout(state, UniformRolloutPolicy(), np.random.default_rng(seed))
    assert state.is_terminal
    state.to_term().validate()


def test_rollout_is_seeded(random_egraph_factory, seed):
    egraph = random_egraph_factory(np.random.default_rng(7))
    results = []
    for _ in range(2):
        state = ExtractionState(egraph)
        finished = rollout(state, UniformRolloutPolicy(), np.random.default_rng(seed))
        results.append((finished, state.assignment()))
    assert results[0] == results[1]


def test_rollout_reports_dead_end(dead_end_egraph):
    state = ExtractionState(dead_end_egraph)
    state.apply(dead_end_egraph.node_index("A"))
    assert not rollout(state, UniformRolloutPolicy(), np.random.default_rng(0))
    assert state.is_dead_end


def test_uniform_covers_all_moves(scenario_egraph):
    rng = np.random.default_rng(0)
    policy = UniformRolloutPolicy()
    state = ExtractionState(scenario_egraph)
    moves = state.legal_moves()
    seen = {policy.choose(state, moves, rng) for _ in range(50)}
    assert seen == set(moves)


def test_weighted_policy_follows_weights(scenario_egraph):
    b = scenario_egraph.node_index("B")
    policy = WeightedRolloutPolicy(lambda eg, n: 1.0 if n == b else 0.0)
    state = ExtractionState(scenario_egraph)
    rng = np.random.default_rng(0)
    assert all(policy.choose(state, state.legal_moves(), rng) == b for _ in range(20))


def test_weighted_policy_zero_weights_fall_back(scenario_egraph):
    policy = WeightedRolloutPolicy(lambda eg, n: 0.0)
    state = ExtractionState(scenario_egraph)
    assert policy.choose(state, state.legal_moves(), np.random.default_rng(0)) in state.legal_moves()


def test_weighted_policy_rejects_negative(scenario_egraph):
    policy = WeightedRolloutPolicy(lambda eg, n: -1.0)
    state = ExtractionState(scenario_egraph)
    with pytest.raises(ValueError):
        policy.choose(state, state.legal_moves(), np.random.default_rng(0))


def test_level_weight(scenario_egraph):
    a = scenario_egraph.node_index("A")
    b = scenario_egraph.node_index("B")
    assert level_weight(scenario_egraph, b) == 1.0
    assert level_weight(scenario_egraph, a) == pytest.approx(0.5)


def test_get_rollout_policy():
    assert isinstance(get_rollout_policy("uniform"), UniformRolloutPolicy)
    assert isinstance(get_rollout_policy("weighted"), WeightedRolloutPolicy)
    policy = UniformRolloutPolicy()
    assert get_rollout_policy(policy) is policy
    with pytest.raises(ConfigError):
        get_rollout_policy("greedy")


def test_exhaustive_completion_from_root(random_egraph_factory):
    for k in range(10):
        egraph = random_egraph_factory(np.random.default_rng(k))
        state = ExtractionState(egraph)
        completed = exhaustive_completion(state)
        assert completed is not None
        completed.to_term().validate()
        assert state.num_assigned == 0


def test_exhaustive_completion_backtracks():
    """The first candidate below X dead-ends, so the search must back up."""
    eg = EGraph.from_dict(
        {
            "r": [("X", "X", ["a"]), ("L", "L", [])],
            # A1 and A2 have the same level; A1 is tried first but b can
            # only point back at r, which is on the path
            "a": [("A1", "A1", ["b"]), ("A2", "A2", ["d"])],
            "b": [("B", "B", ["r"])],
            "d": [("D", "D", ["e"])],
            "e": [("E", "E", [])],
        },
        root="r",
    )
    state = ExtractionState(eg)
    state.apply(eg.node_index("X"))
    completed = exhaustive_completion(state)
    assert completed is not None
    assert completed.assignment() == {"r": "X", "a": "A2", "d": "D", "e": "E"}


def test_exhaustive_completion_none_for_dead_end(dead_end_egraph):
    state = ExtractionState(dead_end_egraph)
    state.apply(dead_end_egraph.node_index("A"))
    assert exhaustive_completion(state) is None


def test_exhaustive_completion_respects_limit(random_egraph_factory):
    egraph = random_egraph_factory(np.random.default_rng(3), num_classes=20)
    assert exhaustive_completion(ExtractionState(egraph), max_states=0) is None
