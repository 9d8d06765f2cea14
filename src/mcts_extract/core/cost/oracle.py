"""Cost oracle interface.

The oracle is an external, possibly expensive and noisy function from a
complete Term to a scalar cost (lower is better). It signals failure by
raising, or by returning None / NaN / infinity or a non-numeric marker. Failures are never fatal to
the search: they are mapped to a worst-case value and learned from.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..extraction.term import Term

logger = logging.getLogger(__name__)

CostOracle = Callable[[Term], Optional[float]]


def node_count_cost(term: Term) -> float:
    """Number of distinct classes in the term (shared subterms count once)."""
    return float(len(term))


def tree_size_cost(term: Term) -> float:
    """Size of the term unfolded as a tree."""
    return float(term.tree_size())


ORACLES = {
    "node_count": node_count_cost,
    "tree_size": tree_size_cost,
}


@dataclass
class OracleStats:
    """Counters for oracle usage during one run."""
    calls: int = 0
    failures: int = 0

    @property
    def failure_rate(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.failures / self.calls


class OracleEvaluator:
    """Wraps a user oracle, catching failures and counting calls.

    Safe to share between playout threads; only the counters are locked, the
    oracle itself runs unlocked.
    """

    def __init__(self, oracle: CostOracle):
        self.oracle = oracle
        self.stats = OracleStats()
        self._lock = threading.Lock()

    def evaluate(self, term: Term) -> Optional[float]:
        """Return the cost of term, or None if the oracle failed."""
        try:
            cost = self.oracle(term)
        except Exception as exc:  # any oracle crash is a worst-case sample
            logger.debug(f"Oracle failed on {term!r}: {exc!r}")
            cost = None
        else:
            if cost is not None:
                try:
                    cost = float(cost)
                except (TypeError, ValueError):
                    logger.debug(f"Oracle returned non-numeric cost {cost!r} for {term!r}")
                    cost = None
            if cost is not None and (math.isnan(cost) or math.isinf(cost)):
                logger.debug(f"Oracle returned non-finite cost {cost} for {term!r}")
                cost = None

        with self._lock:
            self.stats.calls += 1
            if cost is None:
                self.stats.failures += 1
        return cost

    __call__ = evaluate
