"""Test statistical comparisons and baselines."""

import numpy as np
import pytest

from mcts_extract.comparison import (
    best_of_n_baseline,
    compare_budgets,
    compute_effect_size,
    mann_whitney_u_test,
    run_budget_trials,
    statistical_significance_test,
    welch_ttest,
)


@pytest.fixture
def samples():
    rng = np.random.default_rng(0)
    cheap = list(rng.normal(1.0, 0.2, size=30))
    costly = list(rng.normal(2.0, 0.2, size=30))
    return cheap, costly


def test_cheaper_candidate_is_significant(samples):
    cheap, costly = samples
    _, p, significant = welch_ttest(cheap, costly)
    assert significant and p < 0.05
    _, p, significant = mann_whitney_u_test(cheap, costly)
    assert significant and p < 0.05
    assert compute_effect_size(cheap, costly) > 0


def test_costlier_candidate_is_not_significant(samples):
    cheap, costly = samples
    _, _, significant = mann_whitney_u_test(costly, cheap)
    assert not significant
    assert compute_effect_size(costly, cheap) < 0


def test_effect_size_degenerate():
    assert compute_effect_size([1.0], [2.0]) == 0.0
    assert compute_effect_size([1.0, 1.0], [1.0, 1.0]) == 0.0


def test_significance_requires_samples():
    result = statistical_significance_test([1.0] * 3, [2.0] * 3)
    assert not result["significant"]
    assert "error" in result


def test_significance_report(samples):
    cheap, costly = samples
    result = statistical_significance_test(cheap, costly, test_type="welch")
    assert result["significant"]
    assert result["candidate_n"] == 30
    assert result["candidate_mean"] < result["baseline_mean"]
    with pytest.raises(ValueError):
        statistical_significance_test(cheap, costly, test_type="ks")


def test_best_of_n_baseline(scenario_egraph, node_count_oracle):
    best, meta = best_of_n_baseline(scenario_egraph, node_count_oracle, n_samples=20, seed=0)
    assert best == 1.0
    assert len(meta["all_costs"]) == 20
    assert meta["best_term"].as_dict() == {"c0": "B"}
    assert meta["dead_ends"] == 0


def test_best_of_n_counts_dead_ends(dead_end_egraph):
    best, meta = best_of_n_baseline(dead_end_egraph, lambda t: 1.0, n_samples=40, seed=0)
    assert best == 1.0
    assert meta["dead_ends"] > 0
    assert meta["dead_ends"] + len(meta["all_costs"]) == 40


def test_budget_trials(scenario_egraph, node_count_oracle):
    trials = run_budget_trials(scenario_egraph, node_count_oracle, budgets=[2, 8], seeds=range(3))
    assert set(trials) == {2, 8}
    assert all(len(costs) == 3 for costs in trials.values())
    assert all(c == 1.0 for c in trials[8])

    report = compare_budgets(trials, small=2, large=8, min_samples=10)
    assert report["large_budget"] == 8
    assert not report["significant"]
