"""MCTS module: tree search for extraction.

The tree only ever grows. Each playout walks it with UCT, adds one node,
completes the term at random and feeds the oracle's verdict back up the
path. Over many playouts the visit counts concentrate on the moves that
lead to cheap terms.
"""

from .node import NodeStatus, SearchNode
from .tree import SearchTree
from .ucb import select_most_visited, select_move, ucb_score
from .backprop import apply_virtual_loss, backpropagate, backpropagate_path, revert_virtual_loss
from .rollout import (
    RolloutPolicy,
    UniformRolloutPolicy,
    WeightedRolloutPolicy,
    exhaustive_completion,
    get_rollout_policy,
    rollout,
)
from .search import (
    Budget,
    ExtractionResult,
    LeafEvaluation,
    MCTSExtractor,
    evaluate_leaf,
    iterate,
    select_and_expand,
)

__all__ = [
    "NodeStatus",
    "SearchNode",
    "SearchTree",
    "select_move",
    "select_most_visited",
    "ucb_score",
    "backpropagate",
    "backpropagate_path",
    "apply_virtual_loss",
    "revert_virtual_loss",
    "RolloutPolicy",
    "UniformRolloutPolicy",
    "WeightedRolloutPolicy",
    "exhaustive_completion",
    "get_rollout_policy",
    "rollout",
    "Budget",
    "ExtractionResult",
    "LeafEvaluation",
    "MCTSExtractor",
    "evaluate_leaf",
    "iterate",
    "select_and_expand",
]
