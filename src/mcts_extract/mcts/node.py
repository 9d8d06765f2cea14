"""MCTS node for extraction search."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Hashable, Optional


class NodeStatus(Enum):
    """Expansion state of a search node. Transitions only move forward."""
    UNEXPANDED = "unexpanded"
    PARTIALLY_EXPANDED = "partially_expanded"
    FULLY_EXPANDED = "fully_expanded"
    TERMINAL = "terminal"
    DEAD_END = "dead_end"


@dataclass
class SearchNode:
    """MCTS node for extraction search.

    One node per reachable partial assignment, i.e. per sequence of moves
    from the root. Nodes live in a SearchTree arena and refer to each other
    by index.

    Attributes:
        index: Position in the tree arena
        parent: Parent index (None for root)
        move: E-node index chosen to reach this node (None for root)
        class_id: Class resolved by the move leading here (None for root)
        node_id: Node chosen by that move (None for root)
        depth: Number of moves from the root
        children: move (node index in the e-graph) -> child arena index,
            in discovery order
        visit_count: N - completed playouts through this node
        total_value: W - sum of backpropagated values
        virtual_loss: Pending in-flight playouts (parallel mode)
        num_moves: Legal moves from this state, recorded on first visit
        terminal: Whether this state is a complete term
    """
    index: int
    parent: Optional[int] = None
    move: Optional[int] = None
    class_id: Optional[Hashable] = None
    node_id: Optional[Hashable] = None
    depth: int = 0
    children: Dict[int, int] = field(default_factory=dict)
    visit_count: int = 0
    total_value: float = 0.0
    virtual_loss: float = 0.0
    num_moves: Optional[int] = None
    terminal: bool = False

    @property
    def Q(self) -> float:
        """Average value (Q = W / N)."""
        if self.visit_count == 0:
            return 0.0
        return self.total_value / self.visit_count

    @property
    def status(self) -> NodeStatus:
        if self.num_moves is None:
            return NodeStatus.UNEXPANDED
        if self.num_moves == 0:
            return NodeStatus.TERMINAL if self.terminal else NodeStatus.DEAD_END
        if not self.children:
            return NodeStatus.UNEXPANDED
        if len(self.children) < self.num_moves:
            return NodeStatus.PARTIALLY_EXPANDED
        return NodeStatus.FULLY_EXPANDED

    def is_leaf(self) -> bool:
        """Check if node has no children."""
        return len(self.children) == 0

    def is_fully_expanded(self) -> bool:
        return self.num_moves is not None and len(self.children) >= self.num_moves

    def __repr__(self) -> str:
        return (f"SearchNode(#{self.index}, {self.class_id!r}->{self.node_id!r}, "
                f"visits={self.visit_count}, Q={self.Q:.3f}, {self.status.value})")
