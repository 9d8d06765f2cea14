"""Logging, seeding and configuration helpers."""

from .config import load_config, save_config
from .logging import setup_logging
from .seed import make_rng, playout_rng

__all__ = [
    "load_config",
    "save_config",
    "setup_logging",
    "make_rng",
    "playout_rng",
]
