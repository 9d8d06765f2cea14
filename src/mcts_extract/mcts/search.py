"""Main MCTS search for extraction.

One iteration:

def iterate(tree):
    state, path = select_and_expand(tree)     # UCT walk, add one child
    term = rollout(state)                     # random legal completion
    value = transform(oracle(term))           # worst case on failure
    backpropagate(path, value)

Costs are only available for complete terms, so the tree never scores
partial assignments directly: every statistic comes from whole-term oracle
calls made at the end of playouts. After the budget runs out the tree is
read off greedily (most visits, then best mean) to produce the result.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .backprop import backpropagate_path
from .rollout import (
    RolloutPolicy,
    exhaustive_completion,
    get_rollout_policy,
    rollout,
)
from .tree import SearchTree
from .ucb import select_most_visited, select_move
from ..config import ExtractorConfig
from ..core.cost.oracle import CostOracle, OracleEvaluator
from ..core.cost.value import ValueTransform, get_value_transform
from ..core.egraph.graph import EGraph
from ..core.extraction.state import ExtractionState
from ..core.extraction.term import Term
from ..errors import InvariantViolationError
from ..utils.seed import make_seed_sequence, playout_rng

logger = logging.getLogger(__name__)

# States explored by backtracking completion before retrying from a shallower state
COMPLETION_STATE_LIMIT = 10000
FINAL_COMPLETION_STREAM = 1


@dataclass
class LeafEvaluation:
    """Outcome of the rollouts run from one expanded node."""
    value: float = 0.0
    evaluations: int = 0
    failures: int = 0
    dead_ends: int = 0
    best_term: Optional[Term] = None
    best_cost: Optional[float] = None


@dataclass
class ExtractionResult:
    """Result of one extraction run.

    Attributes:
        term: Term read off the tree by greedy descent
        cost: Oracle cost of term (None if the oracle failed on it)
        best_term: Best term observed in any playout (or term, if better)
        best_cost: Cost of best_term
        num_playouts: Completed select/expand/playout/backprop iterations
        num_evaluations: Oracle calls, including the final one
        num_failures: Oracle failures
        num_dead_ends: Rollouts that hit an unresolvable class
        elapsed: Wall-clock seconds
        statistics: Tree diagnostics, if collected
    """
    term: Term
    cost: Optional[float]
    best_term: Optional[Term]
    best_cost: Optional[float]
    num_playouts: int
    num_evaluations: int
    num_failures: int
    num_dead_ends: int
    elapsed: float
    statistics: Optional[Dict[str, Any]] = None

    def as_dict(self) -> Dict[Any, Any]:
        """The extracted term as class id -> node id."""
        return self.term.as_dict()


class Budget:
    """Playout count and/or wall-clock limit, checked between iterations."""

    def __init__(self, max_playouts: Optional[int] = None, time_limit: Optional[float] = None):
        self.max_playouts = max_playouts
        self.time_limit = time_limit
        self.start = time.monotonic()
        self.claimed = 0
        self._lock = threading.Lock()

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start

    def exhausted(self) -> bool:
        if self.max_playouts is not None and self.claimed >= self.max_playouts:
            return True
        if self.time_limit is not None and self.elapsed >= self.time_limit:
            return True
        return False

    def claim(self) -> Optional[int]:
        """Reserve one playout; returns its index or None if exhausted."""
        with self._lock:
            if self.exhausted():
                return None
            index = self.claimed
            self.claimed += 1
            return index


def replay(egraph: EGraph, tree: SearchTree, index: int) -> ExtractionState:
    """State reached by the moves from the root to tree node index."""
    state = ExtractionState(egraph)
    for move in tree.moves_to(index):
        state.apply(move)
    return state


def _record_moves(tree: SearchTree, index: int, state: ExtractionState) -> List[int]:
    moves = state.legal_moves()
    node = tree[index]
    if node.num_moves is None:
        node.num_moves = len(moves)
        node.terminal = state.is_terminal
    return moves


def select_and_expand(
    tree: SearchTree,
    state: ExtractionState,
    start: int = 0,
    c: float = 1.41,
    loss_value: float = 0.0
) -> List[int]:
    """Tree policy: selection + expansion.

    Applies the selected moves to state (which must be the state of node
    start) and stops after creating one new child, or at a terminal or
    dead-end node.

    Returns:
        Tree indices from the root to the last node reached
    """
    egraph = state.egraph
    path = tree.path_from_root(start)
    index = start
    while True:
        moves = _record_moves(tree, index, state)
        if not moves:
            break

        class_idx = state.pending
        move, child = select_move(tree, index, moves, c, loss_value)
        state.apply(move)
        if child is None:
            child = tree.add_child(
                index, move, egraph.class_label(class_idx), egraph.node_label(move)
            )
            _record_moves(tree, child, state)
            path.append(child)
            break
        path.append(child)
        index = child
    return path


def evaluate_leaf(
    state: ExtractionState,
    evaluator: OracleEvaluator,
    policy: RolloutPolicy,
    transform: ValueTransform,
    rng: np.random.Generator,
    rollouts: int = 1
) -> LeafEvaluation:
    """Run rollouts from state and average their values.

    Dead ends and oracle failures contribute the transform's failure value.
    state is consumed when rollouts == 1.
    """
    leaf = LeafEvaluation()
    total = 0.0
    for _ in range(rollouts):
        playout = state.copy() if rollouts > 1 else state
        if not rollout(playout, policy, rng):
            leaf.dead_ends += 1
            total += transform.failure_value
            continue

        term = playout.to_term()
        cost = evaluator.evaluate(term)
        leaf.evaluations += 1
        if cost is None:
            leaf.failures += 1
            total += transform.failure_value
            continue

        total += transform(cost)
        if leaf.best_cost is None or cost < leaf.best_cost:
            leaf.best_term = term
            leaf.best_cost = cost

    leaf.value = total / rollouts
    return leaf


def iterate(
    tree: SearchTree,
    egraph: EGraph,
    evaluator: OracleEvaluator,
    policy: RolloutPolicy,
    transform: ValueTransform,
    rng: np.random.Generator,
    config: ExtractorConfig,
    start: int = 0
) -> LeafEvaluation:
    """Single MCTS iteration from tree node start.

    1. Replay the moves to start
    2. UCB select down the tree, expand one untried move
    3. Roll out to a complete term, score it with the oracle
    4. Backpropagate the value from the root to the expanded node

    Returns:
        The leaf evaluation that was backpropagated
    """
    state = replay(egraph, tree, start)
    path = select_and_expand(tree, state, start, config.exploration_constant)
    leaf = evaluate_leaf(
        state, evaluator, policy, transform, rng, config.rollouts_per_leaf
    )
    backpropagate_path(tree, path, leaf.value)
    return leaf


class MCTSExtractor:
    """Extracts a low-cost acyclic term from an e-graph with MCTS.

    Args:
        egraph: E-graph to extract from (never modified)
        oracle: Callable Term -> cost; may fail (see OracleEvaluator)
        config: Search configuration
        rollout_policy: Overrides config.rollout_policy with an instance
        value_transform: Overrides config.value_transform with an instance
    """

    def __init__(
        self,
        egraph: EGraph,
        oracle: CostOracle,
        config: Optional[ExtractorConfig] = None,
        rollout_policy: Optional[Union[str, RolloutPolicy]] = None,
        value_transform: Optional[Union[str, ValueTransform]] = None
    ):
        self.config = config or ExtractorConfig()
        self.egraph = egraph
        self.oracle = oracle
        self.policy = get_rollout_policy(rollout_policy or self.config.rollout_policy)
        self.transform = get_value_transform(
            value_transform or self.config.value_transform,
            failure_cost=self.config.failure_cost
        )
        self._reset()

    def _reset(self) -> None:
        self.tree = SearchTree()
        self.evaluator = OracleEvaluator(self.oracle)
        self.seed_sequence = make_seed_sequence(self.config.seed)
        self.num_playouts = 0
        self.num_dead_ends = 0
        self.best_term: Optional[Term] = None
        self.best_cost: Optional[float] = None
        self.committed = 0

    def extract(self) -> ExtractionResult:
        """Run the search under the configured budget and read off a term."""
        self._reset()
        budget = Budget(self.config.max_playouts, self.config.time_limit)
        logger.info(
            f"Extracting from {self.egraph} with budget "
            f"playouts={self.config.max_playouts}, time_limit={self.config.time_limit}"
        )

        self._search(budget)

        rng = playout_rng(self.seed_sequence, 0, stream=FINAL_COMPLETION_STREAM)
        term = self.final_term(rng)
        cost = self.evaluator.evaluate(term)
        if cost is not None and (self.best_cost is None or cost < self.best_cost):
            self.best_term, self.best_cost = term, cost

        stats = self.evaluator.stats
        result = ExtractionResult(
            term=term,
            cost=cost,
            best_term=self.best_term,
            best_cost=self.best_cost,
            num_playouts=self.num_playouts,
            num_evaluations=stats.calls,
            num_failures=stats.failures,
            num_dead_ends=self.num_dead_ends,
            elapsed=budget.elapsed,
            statistics=self.get_statistics() if self.config.collect_statistics else None
        )
        logger.info(
            f"Extraction finished: {result.num_playouts} playouts, cost={cost}, "
            f"best_cost={self.best_cost}, tree_nodes={len(self.tree)}, "
            f"elapsed={result.elapsed:.2f}s"
        )
        return result

    def _search(self, budget: Budget) -> None:
        """Run playouts, committing moves between rounds if configured."""
        per_round = self.config.playouts_per_round
        if per_round is None:
            self._run_batch(budget, self.committed, None)
            return

        while not budget.exhausted():
            self._run_batch(budget, self.committed, per_round)
            choice = select_most_visited(self.tree, self.committed, skip_dead_ends=True)
            if choice is None:
                # Only dead ends so far; search another round from here
                continue
            _, child = choice
            self.committed = child
            node = self.tree[child]
            logger.debug(f"Committed {node.class_id!r} -> {node.node_id!r} at depth {node.depth}")
            if node.terminal:
                break

    def _run_batch(self, budget: Budget, start: int, limit: Optional[int]) -> int:
        if self.config.num_workers > 1:
            from .parallel import ParallelPlayoutRunner
            return ParallelPlayoutRunner(self, self.config.num_workers).run(budget, start, limit)

        ran = 0
        while limit is None or ran < limit:
            index = budget.claim()
            if index is None:
                break
            leaf = iterate(
                self.tree,
                self.egraph,
                self.evaluator,
                self.policy,
                self.transform,
                playout_rng(self.seed_sequence, index),
                self.config,
                start
            )
            self.record(leaf)
            ran += 1
        return ran

    def record(self, leaf: LeafEvaluation) -> None:
        """Fold one leaf evaluation into the run totals."""
        self.num_playouts += 1
        self.num_dead_ends += leaf.dead_ends
        if leaf.best_cost is not None and (
            self.best_cost is None or leaf.best_cost < self.best_cost
        ):
            self.best_term, self.best_cost = leaf.best_term, leaf.best_cost

        if self.num_playouts % self.config.log_interval == 0:
            logger.info(
                f"Playout {self.num_playouts}: nodes={len(self.tree)}, "
                f"root_Q={self.tree.root.Q:.4f}, best_cost={self.best_cost}, "
                f"failures={self.evaluator.stats.failures}, dead_ends={self.num_dead_ends}"
            )

    def final_term(self, rng: np.random.Generator) -> Term:
        """Greedy descent from the root, completed by rollouts if needed.

        Follows the most visited child (ties: higher mean, then first
        discovered). Where the tree ends, the rest of the term is filled in
        with the rollout policy, then by backtracking. If the greedy path
        itself leads somewhere unresolvable, completion is retried from
        successively shallower states on the path; from the root it always
        succeeds because the root is extractable.
        """
        state = ExtractionState(self.egraph)
        states = [state.copy()]
        index = 0
        while not state.is_terminal:
            choice = select_most_visited(self.tree, index)
            if choice is None:
                break
            move, index = choice
            state.apply(move)
            states.append(state.copy())

        for depth in range(len(states) - 1, -1, -1):
            completed = self._complete(
                states[depth], rng, None if depth == 0 else COMPLETION_STATE_LIMIT
            )
            if completed is not None:
                if depth < len(states) - 1:
                    logger.warning(
                        f"Greedy descent hit an unresolvable state, completed from depth {depth}"
                    )
                term = completed.to_term()
                term.validate()
                return term

        raise InvariantViolationError("Root class could not be completed")

    def _complete(
        self,
        state: ExtractionState,
        rng: np.random.Generator,
        max_states: Optional[int]
    ) -> Optional[ExtractionState]:
        if state.is_terminal:
            return state
        for _ in range(self.config.completion_attempts):
            attempt = state.copy()
            if rollout(attempt, self.policy, rng):
                return attempt
        return exhaustive_completion(state, max_states=max_states)

    def get_statistics(self) -> Dict[str, Any]:
        """Return search statistics."""
        stats = self.evaluator.stats
        return {
            "tree": self.tree.get_statistics(),
            "nodes": self.tree.node_statistics(),
            "classes": self.tree.class_statistics(self.egraph),
            "oracle": {
                "calls": stats.calls,
                "failures": stats.failures,
                "failure_rate": stats.failure_rate,
            },
            "num_playouts": self.num_playouts,
            "num_dead_ends": self.num_dead_ends,
            "committed_depth": self.tree[self.committed].depth,
        }
