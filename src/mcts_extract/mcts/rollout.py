"""Playout (rollout) engine.

A rollout completes a partial assignment into a full term by repeatedly
choosing a legal move for the pending class. Randomness comes only from the
generator passed in, so the same seed and the same state give the same
rollout.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Type, Union

import numpy as np

from ..core.egraph.graph import EGraph
from ..core.extraction.state import ExtractionState
from ..errors import ConfigError

logger = logging.getLogger(__name__)

WeightFn = Callable[[EGraph, int], float]


def level_weight(egraph: EGraph, node_idx: int) -> float:
    """Prefer nodes with shallow acyclic extractions."""
    return 1.0 / (1.0 + egraph.node_level(node_idx))


class RolloutPolicy:
    """Chooses one move among the legal moves of the pending class."""

    name = "base"

    def choose(self, state: ExtractionState, moves: Sequence[int], rng: np.random.Generator) -> int:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class UniformRolloutPolicy(RolloutPolicy):
    """Uniform random among legal moves."""

    name = "uniform"

    def choose(self, state, moves, rng):
        return moves[int(rng.integers(len(moves)))]


class WeightedRolloutPolicy(RolloutPolicy):
    """Random among legal moves, proportional to weight_fn(egraph, node).

    Args:
        weight_fn: Non-negative weight per node index. Defaults to
            level_weight. If all weights of a move set are zero the choice
            falls back to uniform.
    """

    name = "weighted"

    def __init__(self, weight_fn: Optional[WeightFn] = None):
        self.weight_fn = weight_fn or level_weight

    def choose(self, state, moves, rng):
        weights = np.array([self.weight_fn(state.egraph, m) for m in moves], dtype=np.float64)
        if np.any(weights < 0):
            raise ValueError("Rollout weights must be non-negative")
        total = weights.sum()
        if total <= 0:
            return moves[int(rng.integers(len(moves)))]
        return moves[int(rng.choice(len(moves), p=weights / total))]


ROLLOUT_POLICIES: Dict[str, Type[RolloutPolicy]] = {
    UniformRolloutPolicy.name: UniformRolloutPolicy,
    WeightedRolloutPolicy.name: WeightedRolloutPolicy,
}


def get_rollout_policy(spec: Union[str, RolloutPolicy]) -> RolloutPolicy:
    """Resolve a rollout policy by name (or pass an instance through)."""
    if isinstance(spec, RolloutPolicy):
        return spec
    if spec not in ROLLOUT_POLICIES:
        raise ConfigError(
            f"Unknown rollout policy {spec!r}, expected one of {sorted(ROLLOUT_POLICIES)}"
        )
    return ROLLOUT_POLICIES[spec]()


def rollout(
    state: ExtractionState,
    policy: RolloutPolicy,
    rng: np.random.Generator
) -> bool:
    """Complete state in place.

    Returns:
        True if the state is now terminal, False if a dead end was reached
    """
    while not state.is_terminal:
        moves = state.legal_moves()
        if not moves:
            return False
        state.apply(policy.choose(state, moves, rng))
    return True


def exhaustive_completion(
    state: ExtractionState,
    max_states: Optional[int] = None
) -> Optional[ExtractionState]:
    """Deterministic backtracking completion.

    Moves are tried in order of extraction level (shallowest first). Along a
    path of minimum-level choices levels strictly decrease, so a child can
    never be an ancestor: starting from the root this finds a term without
    backtracking. From an arbitrary state it may need to backtrack.

    Args:
        state: Starting state (not modified)
        max_states: Give up after exploring this many states

    Returns:
        A terminal copy of the state, or None if no completion exists (or the
        limit was hit)
    """
    egraph = state.egraph
    stack: List[ExtractionState] = [state.copy()]
    explored = 0
    while stack:
        current = stack.pop()
        if current.is_terminal:
            return current
        explored += 1
        if max_states is not None and explored > max_states:
            logger.debug(f"Exhaustive completion gave up after {max_states} states")
            return None
        moves = sorted(current.legal_moves(), key=egraph.node_level)
        # Reversed so the shallowest move is popped first
        for move in reversed(moves):
            child = current.copy()
            child.apply(move)
            stack.append(child)
    return None
