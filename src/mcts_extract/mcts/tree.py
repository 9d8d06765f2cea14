"""MCTS tree structure for extraction.

The tree is an arena: nodes are stored in a list and addressed by index,
each node keeps its parent index and a move -> child index map. The tree only
grows during a run.
"""

from collections import defaultdict
from typing import Dict, Hashable, List, Optional

from .node import NodeStatus, SearchNode
from ..core.egraph.graph import EGraph


class SearchTree:
    """Arena of SearchNodes rooted at the empty assignment."""

    def __init__(self):
        self.nodes: List[SearchNode] = [SearchNode(index=0)]

    @property
    def root(self) -> SearchNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> SearchNode:
        return self.nodes[index]

    def add_child(
        self,
        parent: int,
        move: int,
        class_id: Hashable,
        node_id: Hashable
    ) -> int:
        """Create the child reached from parent by move and return its index."""
        parent_node = self.nodes[parent]
        if move in parent_node.children:
            raise ValueError(f"Move {node_id!r} already expanded under node {parent}")
        child = SearchNode(
            index=len(self.nodes),
            parent=parent,
            move=move,
            class_id=class_id,
            node_id=node_id,
            depth=parent_node.depth + 1
        )
        self.nodes.append(child)
        parent_node.children[move] = child.index
        return child.index

    def child(self, parent: int, move: int) -> Optional[int]:
        return self.nodes[parent].children.get(move)

    def path_from_root(self, index: int) -> List[int]:
        """Indices from the root down to index."""
        return list(reversed(self.get_path_to_root(index)))

    def moves_to(self, index: int) -> List[int]:
        """Moves leading from the root to index."""
        return [self.nodes[i].move for i in self.path_from_root(index)[1:]]

    def get_path_to_root(self, index: int) -> List[int]:
        """Indices from index up to the root."""
        path = []
        current: Optional[int] = index
        while current is not None:
            path.append(current)
            current = self.nodes[current].parent
        return path

    def count_by_status(self) -> Dict[str, int]:
        counts: Dict[str, int] = {status.value: 0 for status in NodeStatus}
        for node in self.nodes:
            counts[node.status.value] += 1
        return counts

    def max_depth(self) -> int:
        return max(node.depth for node in self.nodes)

    def get_statistics(self) -> dict:
        """Get tree statistics."""
        return {
            "total_nodes": len(self.nodes),
            "max_depth": self.max_depth(),
            "root_visits": self.root.visit_count,
            "root_Q": self.root.Q,
            **self.count_by_status()
        }

    def node_statistics(self) -> List[dict]:
        """Per search node visit/value records, in creation order."""
        return [
            {
                "index": node.index,
                "parent": node.parent,
                "depth": node.depth,
                "class": node.class_id,
                "node": node.node_id,
                "visits": node.visit_count,
                "mean_value": node.Q,
                "status": node.status.value,
            }
            for node in self.nodes
        ]

    def class_statistics(self, egraph: EGraph) -> Dict[Hashable, Dict[Hashable, dict]]:
        """Visits and mean value per (class, node), summed over the tree.

        A class can be resolved at many tree nodes (different paths reach it),
        so this aggregates all moves that chose a given node.
        """
        visits: Dict[Hashable, Dict[Hashable, int]] = defaultdict(lambda: defaultdict(int))
        values: Dict[Hashable, Dict[Hashable, float]] = defaultdict(lambda: defaultdict(float))
        for node in self.nodes[1:]:
            visits[node.class_id][node.node_id] += node.visit_count
            values[node.class_id][node.node_id] += node.total_value

        stats: Dict[Hashable, Dict[Hashable, dict]] = {}
        for class_id in egraph.classes():
            if class_id not in visits:
                continue
            stats[class_id] = {}
            for node_id, count in visits[class_id].items():
                stats[class_id][node_id] = {
                    "visits": count,
                    "mean_value": values[class_id][node_id] / count if count else 0.0,
                }
        return stats
