"""Random e-graphs for experiments and tests."""

import numpy as np

from .graph import EGraph


def random_egraph(
    rng: np.random.Generator,
    num_classes: int = 12,
    max_nodes: int = 3,
    max_arity: int = 2,
    back_edge_prob: float = 0.3
) -> EGraph:
    """Random well-formed e-graph with cycles.

    Class k always has one node whose children are classes > k, so every
    class is extractable; the other nodes may point anywhere, and with
    probability back_edge_prob also at an earlier class, which creates
    cycles.

    Node ids are "n{k}_{j}", ops "op{j}", class ids "c{k}"; the root is "c0".
    """
    classes = {}
    for k in range(num_classes):
        members = []
        forward = list(range(k + 1, num_classes))
        for j in range(int(rng.integers(1, max_nodes + 1))):
            if j == 0:
                arity = int(rng.integers(0, max_arity + 1)) if forward else 0
                children = [int(c) for c in rng.choice(forward, size=arity)] if arity else []
            else:
                arity = int(rng.integers(0, max_arity + 1))
                children = [int(c) for c in rng.choice(num_classes, size=arity)] if arity else []
                if k > 0 and rng.random() < back_edge_prob:
                    children.append(int(rng.integers(0, k)))
            members.append((f"n{k}_{j}", f"op{j}", [f"c{c}" for c in children]))
        classes[f"c{k}"] = members
    return EGraph.from_dict(classes, root="c0")
