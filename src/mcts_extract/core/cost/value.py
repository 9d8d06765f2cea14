"""Cost -> value transforms.

MCTS maximizes value, the oracle reports cost. The transform must be
monotonically decreasing in cost and is fixed for a whole run, since it
decides the optimization direction and the scale the exploration constant
works against.
"""

from typing import Dict, Type, Union

from ...errors import ConfigError


class ValueTransform:
    """Maps a cost to a value; failures map to `failure_value`."""

    name = "base"

    @property
    def failure_value(self) -> float:
        raise NotImplementedError

    def __call__(self, cost: float) -> float:
        raise NotImplementedError

    def to_value(self, cost) -> float:
        """Value for cost, or the failure value if cost is None."""
        if cost is None:
            return self.failure_value
        return self(cost)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReciprocalCost(ValueTransform):
    """value = 1 / (1 + cost) for cost >= 0, 2 - 1 / (1 - cost) below 0.

    Strictly decreasing over all real costs and bounded in (0, 2), which
    keeps UCT well scaled with an exploration constant around sqrt(2).
    Non-negative costs land in (0, 1], negative ones in (1, 2). Failures
    map to 0.
    """

    name = "reciprocal"

    @property
    def failure_value(self) -> float:
        return 0.0

    def __call__(self, cost: float) -> float:
        if cost >= 0.0:
            return 1.0 / (1.0 + cost)
        return 2.0 - 1.0 / (1.0 - cost)


class NegatedCost(ValueTransform):
    """value = -cost.

    Unbounded, so the exploration constant should be scaled to the oracle's
    cost range. Failures count as `failure_cost`.
    """

    name = "negate"

    def __init__(self, failure_cost: float = 1e6):
        self.failure_cost = failure_cost

    @property
    def failure_value(self) -> float:
        return -self.failure_cost

    def __call__(self, cost: float) -> float:
        return -cost

    def __repr__(self) -> str:
        return f"NegatedCost(failure_cost={self.failure_cost})"


VALUE_TRANSFORMS: Dict[str, Type[ValueTransform]] = {
    ReciprocalCost.name: ReciprocalCost,
    NegatedCost.name: NegatedCost,
}


def get_value_transform(
    spec: Union[str, ValueTransform],
    failure_cost: float = 1e6
) -> ValueTransform:
    """Resolve a transform by name (or pass an instance through)."""
    if isinstance(spec, ValueTransform):
        return spec
    if spec == NegatedCost.name:
        return NegatedCost(failure_cost=failure_cost)
    if spec in VALUE_TRANSFORMS:
        return VALUE_TRANSFORMS[spec]()
    raise ConfigError(
        f"Unknown value transform {spec!r}, expected one of {sorted(VALUE_TRANSFORMS)}"
    )
