"""UCB selection for extraction MCTS."""

import math
from typing import Optional, Sequence, Tuple

from .node import NodeStatus, SearchNode
from .tree import SearchTree


def ucb_score(
    child: SearchNode,
    parent_visits: float,
    c: float = 1.41,
    loss_value: float = 0.0
) -> float:
    """Compute UCB score.

    UCB = Q + c * sqrt(ln(N_parent) / N_child)

    In-flight virtual loss counts as extra child visits valued at
    loss_value.

    Args:
        child: Child node
        parent_visits: Visits of the parent (including virtual loss)
        c: Exploration constant
        loss_value: Value assigned to each unit of virtual loss

    Returns:
        UCB score
    """
    visits = child.visit_count + child.virtual_loss
    if visits <= 0:
        return float('inf')

    exploitation = (child.total_value + child.virtual_loss * loss_value) / visits
    exploration = c * math.sqrt(math.log(max(parent_visits, 1.0)) / visits)

    return exploitation + exploration


def select_move(
    tree: SearchTree,
    index: int,
    moves: Sequence[int],
    c: float = 1.41,
    loss_value: float = 0.0
) -> Tuple[int, Optional[int]]:
    """Pick the next move from the node at index.

    Untried moves come first, in enumeration order. Once every legal move
    has a child, the child with the highest UCB score wins; ties go to the
    child discovered first.

    Args:
        tree: Search tree
        index: Current node
        moves: Legal moves from the current state
        c: Exploration constant
        loss_value: Virtual loss value

    Returns:
        (move, child index or None if the move is untried)
    """
    if not moves:
        raise ValueError("No legal moves to select from")

    node = tree[index]
    for move in moves:
        if move not in node.children:
            return move, None

    parent_visits = node.visit_count + node.virtual_loss
    legal = set(moves)
    best_move, best_child, best_score = None, None, float('-inf')
    for move, child_index in node.children.items():
        if move not in legal:
            continue
        score = ucb_score(tree[child_index], parent_visits, c, loss_value)
        if best_child is None or score > best_score:
            best_move, best_child, best_score = move, child_index, score

    return best_move, best_child


def select_most_visited(
    tree: SearchTree,
    index: int,
    skip_dead_ends: bool = False
) -> Optional[Tuple[int, int]]:
    """Select most visited child (for final selection).

    Ties: higher mean value, then first discovered.

    Args:
        tree: Search tree
        index: Node whose children are compared
        skip_dead_ends: Ignore children known to be unresolvable

    Returns:
        (move, child index), or None if no child qualifies
    """
    node = tree[index]
    best = None
    best_key = None
    for move, child_index in node.children.items():
        child = tree[child_index]
        if skip_dead_ends and child.status == NodeStatus.DEAD_END:
            continue
        key = (child.visit_count, child.Q)
        if best is None or key > best_key:
            best, best_key = (move, child_index), key
    return best
