"""
Single-pass weighted sampling of one position from a range.

Weights are read lazily, one block of positions at a time, so the caller
never has to build a per-position weight (or prefix-sum) array for the whole
range. Within a block the skip search is a cumulative sum and a binary search.

References
----------
Efraimidis, P. S., and P. G. Spirakis. 2006. Weighted random sampling with a
reservoir. Information Processing Letters 97:181-185.
"""

import math
from typing import Callable, Optional, Sequence, Union

import numpy as np

from ..exceptions import (
    DegenerateDistributionError,
    InvalidDistributionError,
    OutOfRangeError,
)

WeightSource = Union[Callable[[int], float], Sequence[float], np.ndarray]

# Positions evaluated per block when weights come from a plain callable
CALLABLE_BLOCK_SIZE = 256


def _block_reader(weights: WeightSource, end: int) -> Callable[[int], np.ndarray]:
    """
    Return ``read(pos)``, giving the weights from ``pos`` onward as a
    non-empty float array that stops at ``end`` at the latest.

    Objects with a ``block(pos)`` method supply their own blocks, plain
    callables are evaluated ``CALLABLE_BLOCK_SIZE`` positions at a time and
    anything else is converted to one array up front.
    """
    if hasattr(weights, "block"):
        raw = weights.block
    elif callable(weights):
        def raw(pos: int) -> np.ndarray:
            n = min(CALLABLE_BLOCK_SIZE, end - pos)
            return np.fromiter(
                (weights(i) for i in range(pos, pos + n)), dtype=np.float64, count=n
            )
    else:
        arr = np.asarray(weights, dtype=np.float64)

        def raw(pos: int) -> np.ndarray:
            return arr[pos:end]

    def read(pos: int) -> np.ndarray:
        block = np.asarray(raw(pos), dtype=np.float64)[:end - pos]
        if block.size == 0:
            raise OutOfRangeError(f"no weight available at position {pos}")
        negative = np.flatnonzero(block < 0)
        if negative.size:
            i = int(negative[0])
            raise InvalidDistributionError(f"negative weight {block[i]} at position {pos + i}")
        return block

    return read


def _open_uniform(rng: np.random.Generator) -> float:
    """Uniform draw on the open interval (0, 1)."""
    r = rng.random()
    while r == 0.0:
        r = rng.random()
    return r


def _skip_weight(r: float, key: float) -> float:
    """
    Total weight to jump over before the next replacement: ln(r) / ln(key).

    A key that underflowed to 0 is beaten by any positive weight; a key that
    rounded up to 1 can never be beaten.
    """
    if key <= 0.0:
        return 0.0
    if key >= 1.0:
        return math.inf
    return math.log(r) / math.log(key)


def _jump(
    read: Callable[[int], np.ndarray], pos: int, end: int, skip: float
) -> Optional[tuple[int, float]]:
    """
    First position in ``[pos, end)`` where the cumulative weight exceeds
    ``skip``, with its weight, or None if the range runs out first.

    The returned weight is always positive.
    """
    while pos < end:
        block = read(pos)
        cum = np.cumsum(block)
        if cum[-1] > skip:
            j = int(np.searchsorted(cum, skip, side="right"))
            return pos + j, float(block[j])
        skip -= float(cum[-1])
        pos += block.size
    return None


def _check_range(start: int, end: int) -> None:
    if start < 0 or end <= start:
        raise OutOfRangeError(f"invalid sampling range [{start}, {end})")


def weighted_reservoir(
    weights: WeightSource,
    start: int,
    end: int,
    rng: np.random.Generator,
) -> int:
    """
    Sample a position in ``[start, end)`` proportionally to its weight.

    Implements A-ExpJ with a reservoir of size one. After every draw the
    algorithm computes how much cumulative weight it can skip before the held
    key gets replaced, then jumps straight to the position where that happens.

    Parameters
    ----------
    weights : callable, sequence or block source
        ``w(i) -> float``, anything indexable by position, or an object whose
        ``block(pos)`` method returns the weights from ``pos`` onward as an
        array. Weights must be non-negative; zero-weight positions are never
        returned.
    start, end : int
        Half-open range to sample from
    rng : numpy.random.Generator
        Random number generator

    Returns
    -------
    int
        Sampled position

    Raises
    ------
    OutOfRangeError
        If the range is empty or negative, or runs past the available weights
    DegenerateDistributionError
        If every weight in the range is zero
    InvalidDistributionError
        If a negative weight is encountered
    """
    _check_range(start, end)

    if end - start == 1:
        return start

    read = _block_reader(weights, end)

    # The reservoir starts at the first position that can be selected at all
    first = _jump(read, start, end, 0.0)
    if first is None:
        raise DegenerateDistributionError(f"total weight over [{start}, {end}) is zero")
    held, w = first

    key = _open_uniform(rng) ** (1.0 / w)

    c = held + 1
    while c < end:
        x = _skip_weight(_open_uniform(rng), key)
        if x == math.inf:
            break

        hit = _jump(read, c, end, x)
        if hit is None:
            break

        # New key, conditioned on beating the old one
        held, wi = hit
        t = key ** wi
        key = rng.uniform(t, 1.0) ** (1.0 / wi)
        c = held + 1

    return held


def brute_force_location(
    weights: WeightSource,
    start: int,
    end: int,
    rng: np.random.Generator,
) -> int:
    """
    O(n) inverse-CDF sampler over ``[start, end)``.

    Builds the full cumulative weight array. Only meant as a reference to
    check :func:`weighted_reservoir` against.
    """
    _check_range(start, end)

    read = _block_reader(weights, end)
    blocks = []
    pos = start
    while pos < end:
        blocks.append(read(pos))
        pos += blocks[-1].size

    cum = np.cumsum(np.concatenate(blocks))
    total = cum[-1]
    if total <= 0:
        raise DegenerateDistributionError(
            f"total weight over [{start}, {end}) is zero"
        )

    idx = int(np.searchsorted(cum, rng.random() * total, side="right"))
    return start + min(idx, end - start - 1)
