"""Backpropagation for extraction MCTS.

Each playout updates, for every node on the path from the start node to the
expanded node:
- Visit count
- Accumulated value (mean = W / N)

Parallel playouts additionally reserve their path with virtual loss while
the oracle runs, so concurrent selections spread out.
"""

from typing import Sequence

from .tree import SearchTree


def backpropagate_path(tree: SearchTree, path: Sequence[int], value: float) -> None:
    """Backpropagate along explicit path."""
    for index in path:
        node = tree[index]
        node.visit_count += 1
        node.total_value += value


def backpropagate(tree: SearchTree, index: int, value: float) -> None:
    """Backpropagate value from node to root."""
    backpropagate_path(tree, tree.get_path_to_root(index), value)


def apply_virtual_loss(tree: SearchTree, path: Sequence[int], amount: float = 1.0) -> None:
    for index in path:
        tree[index].virtual_loss += amount


def revert_virtual_loss(tree: SearchTree, path: Sequence[int], amount: float = 1.0) -> None:
    for index in path:
        node = tree[index]
        node.virtual_loss = max(0.0, node.virtual_loss - amount)
