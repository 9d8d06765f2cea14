"""Seedable random generators.

Randomness is always passed explicitly; nothing in the package touches the
global numpy or `random` state.
"""

from typing import Optional

import numpy as np


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a generator from an optional seed."""
    return np.random.default_rng(seed)


def make_seed_sequence(seed: Optional[int] = None) -> np.random.SeedSequence:
    return np.random.SeedSequence(seed)


def playout_rng(
    root: np.random.SeedSequence,
    playout_index: int,
    stream: int = 0
) -> np.random.Generator:
    """Independent generator for one playout, derived from the run seed.

    The same (root entropy, playout_index) pair always yields the same
    stream, regardless of which worker thread runs the playout. Separate
    streams keep auxiliary draws (e.g. final completion) independent of the
    playouts.
    """
    child = np.random.SeedSequence(entropy=root.entropy, spawn_key=(stream, playout_index))
    return np.random.default_rng(child)
