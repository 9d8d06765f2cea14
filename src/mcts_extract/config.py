"""Extractor configuration."""

import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ConfigError
from .utils.config import load_config, save_config


@dataclass
class ExtractorConfig:
    """Configuration for MCTS extraction.

    The value transform decides the optimization direction and the scale of
    mean values, so the exploration constant is tuned against it: sqrt(2)
    suits the default reciprocal transform, whose values lie in (0, 1].
    """
    exploration_constant: float = math.sqrt(2.0)
    # Budget: stop when either limit is hit; None disables a limit
    max_playouts: Optional[int] = 1000
    time_limit: Optional[float] = None
    seed: Optional[int] = None
    rollout_policy: str = "uniform"
    value_transform: str = "reciprocal"
    # Cost charged for failures under the "negate" transform
    failure_cost: float = 1e6
    rollouts_per_leaf: int = 1
    # Commit the most visited move after this many playouts (None = never)
    playouts_per_round: Optional[int] = None
    num_workers: int = 1
    virtual_loss: float = 1.0
    completion_attempts: int = 16
    collect_statistics: bool = True
    log_interval: int = 100

    def __post_init__(self):
        if self.exploration_constant < 0:
            raise ConfigError("exploration_constant must be non-negative")
        if self.max_playouts is None and self.time_limit is None:
            raise ConfigError("At least one of max_playouts or time_limit must be set")
        if self.max_playouts is not None and self.max_playouts < 0:
            raise ConfigError("max_playouts must be non-negative")
        if self.time_limit is not None and self.time_limit < 0:
            raise ConfigError("time_limit must be non-negative")
        if self.rollouts_per_leaf < 1:
            raise ConfigError("rollouts_per_leaf must be at least 1")
        if self.playouts_per_round is not None and self.playouts_per_round < 1:
            raise ConfigError("playouts_per_round must be at least 1")
        if self.num_workers < 1:
            raise ConfigError("num_workers must be at least 1")
        if self.virtual_loss < 0:
            raise ConfigError("virtual_loss must be non-negative")
        if self.completion_attempts < 0:
            raise ConfigError("completion_attempts must be non-negative")
        if self.log_interval < 1:
            raise ConfigError("log_interval must be at least 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractorConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ExtractorConfig":
        return cls.from_dict(load_config(path))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_yaml(self, path: Union[str, Path]) -> None:
        save_config(self.to_dict(), path)
