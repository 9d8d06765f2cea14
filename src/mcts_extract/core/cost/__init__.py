from .oracle import (
    ORACLES,
    CostOracle,
    OracleEvaluator,
    OracleStats,
    node_count_cost,
    tree_size_cost,
)
from .value import NegatedCost, ReciprocalCost, ValueTransform, get_value_transform

__all__ = [
    "ORACLES",
    "CostOracle",
    "OracleEvaluator",
    "OracleStats",
    "node_count_cost",
    "tree_size_cost",
    "NegatedCost",
    "ReciprocalCost",
    "ValueTransform",
    "get_value_transform",
]
