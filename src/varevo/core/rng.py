"""
Random number generator seeding.

Every independent unit of work (one variant, one random reference) gets its
own ``numpy.random.Generator``, spawned from a single master seed. The
generators are created once, up front, and handed to the work items, so the
results do not depend on how many worker threads run them.
"""

from typing import Union

import numpy as np

Seed = Union[None, int, np.random.SeedSequence]


def seed_sequence(seed: Seed) -> np.random.SeedSequence:
    """Wrap a master seed in a ``SeedSequence`` (passed through if it already is one)."""
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)


def spawn_generators(seed: Seed, n: int) -> list[np.random.Generator]:
    """
    Create ``n`` independent generators from one master seed.

    Parameters
    ----------
    seed : int or numpy.random.SeedSequence, optional
        Master seed. ``None`` draws fresh entropy from the OS.
    n : int
        Number of generators

    Returns
    -------
    list of numpy.random.Generator
        Statistically independent generators, one per work item

    Examples
    --------
    >>> a = spawn_generators(42, 3)
    >>> b = spawn_generators(42, 3)
    >>> a[2].random() == b[2].random()
    True
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    children = seed_sequence(seed).spawn(n)
    return [np.random.default_rng(child) for child in children]
