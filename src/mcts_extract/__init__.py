"""MCTS extraction for e-graphs with black-box costs.

Extracts a minimum-cost acyclic term when cost is only defined on complete
terms ("run this program", "count correct bits"), not as a sum of node
costs.

Core loop:
1. Select: walk the search tree with UCT from the empty assignment
2. Expand: add one untried (class, node) choice
3. Playout: complete the term top-down with random legal moves
4. Score: call the cost oracle on the complete term
5. Backprop: update visit counts and mean values back to the root

Components:
- core/egraph/ - Read-only e-graph view (index arena)
- core/extraction/ - Partial-term tracker, completed terms
- core/cost/ - Oracle wrapper, cost -> value transforms
- mcts/ - Tree, UCB selection, rollouts, backprop, driver
- comparison/ - Budget scaling and best-of-N baselines
"""

__version__ = "0.1.0"

from typing import Optional

from .config import ExtractorConfig
from .core.egraph.graph import EClass, EGraph, ENode
from .core.extraction.state import ExtractionState
from .core.extraction.term import Term
from .errors import (
    ConfigError,
    ExtractionError,
    InvariantViolationError,
    MalformedEGraphError,
    OracleFailure,
)
from .mcts.search import ExtractionResult, MCTSExtractor

__all__ = [
    "ExtractorConfig",
    "EClass",
    "EGraph",
    "ENode",
    "ExtractionState",
    "Term",
    "ConfigError",
    "ExtractionError",
    "InvariantViolationError",
    "MalformedEGraphError",
    "OracleFailure",
    "ExtractionResult",
    "MCTSExtractor",
    "extract",
]


def extract(
    egraph: EGraph,
    oracle,
    config_path: Optional[str] = None,
    **kwargs
) -> ExtractionResult:
    """High-level API to run an extraction.

    Args:
        egraph: E-graph with a designated root class
        oracle: Callable Term -> cost (lower is better)
        config_path: Optional YAML config file; kwargs override its values
        **kwargs: ExtractorConfig options

    Returns:
        Extraction result
    """
    if config_path is not None:
        from .utils.config import load_config
        options = {**load_config(config_path), **kwargs}
    else:
        options = kwargs
    config = ExtractorConfig.from_dict(options)
    return MCTSExtractor(egraph, oracle, config).extract()
