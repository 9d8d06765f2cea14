#!/usr/bin/env python3
"""Run MCTS extraction against a best-of-N baseline.

Generates a random e-graph, then for every budget N runs MCTS with N
playouts and best-of-N uniform rollouts for each seed and compares the
best-found costs.

Usage:
    python experiments/run_extraction.py \
        --num_classes 30 \
        --oracle tree_size \
        --budgets 50 100 200 \
        --num_seeds 10
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcts_extract.comparison import best_of_n_baseline, run_budget_trials, statistical_significance_test
from mcts_extract.config import ExtractorConfig
from mcts_extract.core.cost.oracle import ORACLES
from mcts_extract.core.egraph.generators import random_egraph
from mcts_extract.utils.config import load_config
from mcts_extract.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Compare MCTS extraction with best-of-N")
    parser.add_argument("--num_classes", type=int, default=30,
                        help="E-classes in the generated e-graph")
    parser.add_argument("--back_edge_prob", type=float, default=0.3,
                        help="Probability of a cycle-creating back edge")
    parser.add_argument("--graph_seed", type=int, default=42,
                        help="Seed for the generated e-graph")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML extractor config")
    parser.add_argument("--oracle", type=str, choices=sorted(ORACLES), default="tree_size",
                        help="Built-in cost oracle")
    parser.add_argument("--budgets", type=int, nargs="+", default=[50, 100, 200],
                        help="Playout budgets")
    parser.add_argument("--num_seeds", type=int, default=10,
                        help="Independent runs per budget")
    parser.add_argument("--output", type=str, default=None,
                        help="Write results to this YAML file")
    parser.add_argument("--log_file", type=str, default=None, help="Log file")

    args = parser.parse_args()

    setup_logging(log_file=args.log_file, name="")

    egraph = random_egraph(
        np.random.default_rng(args.graph_seed),
        num_classes=args.num_classes,
        back_edge_prob=args.back_edge_prob
    )
    oracle = ORACLES[args.oracle]
    options = load_config(args.config) if args.config else {}
    # Budget and seed are set per trial
    for key in ("max_playouts", "seed"):
        options.pop(key, None)
    options.setdefault("collect_statistics", False)
    ExtractorConfig.from_dict(options)

    logger.info("=" * 60)
    logger.info(f"MCTS extraction on {egraph}")
    logger.info("=" * 60)

    seeds = list(range(args.num_seeds))
    mcts = run_budget_trials(egraph, oracle, args.budgets, seeds, **options)

    summary = {}
    for budget in args.budgets:
        baseline = [best_of_n_baseline(egraph, oracle, budget, seed)[0] for seed in seeds]
        baseline = [c for c in baseline if c is not None]
        candidate = [c for c in mcts[budget] if c is not None]
        test = statistical_significance_test(candidate, baseline, min_samples=min(10, len(seeds)))

        summary[budget] = {
            "mcts_mean": float(np.mean(candidate)) if candidate else None,
            "baseline_mean": float(np.mean(baseline)) if baseline else None,
            "p_value": float(test["p_value"]),
            "effect_size": float(test["effect_size"]),
            "significant": bool(test["significant"]),
        }
        logger.info(
            f"Budget {budget}: MCTS {summary[budget]['mcts_mean']}, "
            f"best-of-N {summary[budget]['baseline_mean']}, "
            f"p={test['p_value']:.4f}, d={test['effect_size']:.3f}"
        )

    if args.output:
        with open(args.output, 'w') as f:
            yaml.safe_dump({"oracle": args.oracle, "results": summary}, f, sort_keys=False)
        logger.info(f"Results written to {args.output}")


if __name__ == "__main__":
    main()
