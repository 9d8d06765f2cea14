"""Concurrent playouts on a shared search tree.

Tree walks and statistic updates happen under one lock. The expensive part
of a playout (rollout and oracle call) runs without it, so independent
oracle evaluations overlap. While a playout is in flight its path carries
virtual loss: pessimistic phantom visits that steer concurrent selections
away from the same unexplored branch. Virtual loss is removed before the
real value is backpropagated, so final statistics are the same kind of data
as in sequential mode.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional

from .backprop import apply_virtual_loss, backpropagate_path, revert_virtual_loss
from .search import Budget, evaluate_leaf, replay, select_and_expand
from ..utils.seed import playout_rng

if TYPE_CHECKING:
    from .search import MCTSExtractor

logger = logging.getLogger(__name__)


class ParallelPlayoutRunner:
    """Runs a batch of playouts for an MCTSExtractor on a thread pool.

    Each playout gets its own generator derived from the run seed and the
    playout index; the order in which playouts observe each other's
    statistics depends on thread timing, so runs are not bit-for-bit
    reproducible.
    """

    def __init__(self, extractor: "MCTSExtractor", num_workers: int):
        self.extractor = extractor
        self.num_workers = num_workers
        self._lock = threading.Lock()
        self._started = 0

    def run(self, budget: Budget, start: int, limit: Optional[int] = None) -> int:
        """Run playouts from tree node start until budget or limit is reached.

        Returns:
            Number of playouts started
        """
        self._started = 0
        with ThreadPoolExecutor(max_workers=self.num_workers) as pool:
            futures = [
                pool.submit(self._worker, budget, start, limit)
                for _ in range(self.num_workers)
            ]
            # Re-raise the first worker exception, if any
            for future in futures:
                future.result()
        return self._started

    def _worker(self, budget: Budget, start: int, limit: Optional[int]) -> None:
        ex = self.extractor
        config = ex.config
        tree = ex.tree
        loss_value = ex.transform.failure_value

        while True:
            with self._lock:
                if limit is not None and self._started >= limit:
                    return
                index = budget.claim()
                if index is None:
                    return
                self._started += 1
                state = replay(ex.egraph, tree, start)
                path = select_and_expand(
                    tree, state, start, config.exploration_constant, loss_value
                )
                apply_virtual_loss(tree, path, config.virtual_loss)

            try:
                leaf = evaluate_leaf(
                    state,
                    ex.evaluator,
                    ex.policy,
                    ex.transform,
                    playout_rng(ex.seed_sequence, index),
                    config.rollouts_per_leaf
                )
            except BaseException:
                with self._lock:
                    revert_virtual_loss(tree, path, config.virtual_loss)
                raise

            with self._lock:
                revert_virtual_loss(tree, path, config.virtual_loss)
                backpropagate_path(tree, path, leaf.value)
                ex.record(leaf)
