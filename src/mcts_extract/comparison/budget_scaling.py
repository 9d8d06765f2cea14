"""Budget scaling and baseline experiments.

Best-of-N: N independent uniform rollouts from the root, keep the cheapest.
MCTS: the same number of oracle calls, spent through the search tree.

With a deterministic oracle, more budget should never hurt in expectation:
mean best-found cost at 2N playouts <= mean best-found cost at N.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .statistical_tests import statistical_significance_test
from ..config import ExtractorConfig
from ..core.cost.oracle import CostOracle, OracleEvaluator
from ..core.egraph.graph import EGraph
from ..core.extraction.state import ExtractionState
from ..core.extraction.term import Term
from ..mcts.rollout import UniformRolloutPolicy, rollout
from ..mcts.search import MCTSExtractor
from ..utils.seed import make_rng

logger = logging.getLogger(__name__)


def best_of_n_baseline(
    egraph: EGraph,
    oracle: CostOracle,
    n_samples: int,
    seed: Optional[int] = None
) -> Tuple[Optional[float], Dict]:
    """Best-of-N baseline: N uniform rollouts from the root, pick the cheapest.

    Returns:
        (best_cost, metadata) where metadata holds all costs and the best term.
        best_cost is None if every sample failed.
    """
    rng = make_rng(seed)
    policy = UniformRolloutPolicy()
    evaluator = OracleEvaluator(oracle)

    costs: List[float] = []
    best_term: Optional[Term] = None
    best_cost: Optional[float] = None
    dead_ends = 0
    for _ in range(n_samples):
        state = ExtractionState(egraph)
        if not rollout(state, policy, rng):
            dead_ends += 1
            continue
        term = state.to_term()
        cost = evaluator.evaluate(term)
        if cost is None:
            continue
        costs.append(cost)
        if best_cost is None or cost < best_cost:
            best_term, best_cost = term, cost

    metadata = {
        'all_costs': costs,
        'best_cost': best_cost,
        'best_term': best_term,
        'mean_cost': float(np.mean(costs)) if costs else None,
        'std_cost': float(np.std(costs)) if costs else None,
        'failures': evaluator.stats.failures,
        'dead_ends': dead_ends,
    }
    return best_cost, metadata


def run_budget_trials(
    egraph: EGraph,
    oracle: CostOracle,
    budgets: Sequence[int],
    seeds: Sequence[int],
    **config_kwargs
) -> Dict[int, List[Optional[float]]]:
    """Best-found MCTS cost for every (budget, seed) pair.

    Args:
        egraph: E-graph to extract from
        oracle: Cost oracle
        budgets: Playout budgets to compare
        seeds: One independent run per seed
        **config_kwargs: Extra ExtractorConfig fields

    Returns:
        budget -> best-found costs, in seed order
    """
    results: Dict[int, List[Optional[float]]] = {}
    for budget in budgets:
        costs = []
        for seed in seeds:
            config = ExtractorConfig(
                max_playouts=budget,
                seed=seed,
                collect_statistics=False,
                **config_kwargs
            )
            result = MCTSExtractor(egraph, oracle, config).extract()
            costs.append(result.best_cost)
        results[budget] = costs
        finite = [c for c in costs if c is not None]
        logger.info(
            f"Budget {budget}: mean best cost "
            f"{np.mean(finite) if finite else float('nan'):.4f} over {len(finite)} runs"
        )
    return results


def compare_budgets(
    trials: Dict[int, List[Optional[float]]],
    small: int,
    large: int,
    min_samples: int = 10
) -> Dict:
    """Test whether budget `large` finds cheaper terms than budget `small`."""
    large_costs = [c for c in trials[large] if c is not None]
    small_costs = [c for c in trials[small] if c is not None]
    result = statistical_significance_test(large_costs, small_costs, min_samples=min_samples)
    result['small_budget'] = small
    result['large_budget'] = large
    return result
