"""Experiments comparing budgets and baselines."""

from .budget_scaling import best_of_n_baseline, compare_budgets, run_budget_trials
from .statistical_tests import (
    compute_effect_size,
    mann_whitney_u_test,
    statistical_significance_test,
    welch_ttest,
)

__all__ = [
    "best_of_n_baseline",
    "compare_budgets",
    "run_budget_trials",
    "compute_effect_size",
    "mann_whitney_u_test",
    "statistical_significance_test",
    "welch_ttest",
]
