"""
Rate heterogeneity among sites.

The sequence is split into contiguous chunks and every chunk carries one
positive multiplier that scales the per-nucleotide mutation rate of all
positions in it. Chunk boundaries are kept in variant coordinates and move
with insertions and deletions, so a multiplier stays attached to its bases.
"""

import math
from bisect import bisect_right
from typing import Optional, Sequence

import numpy as np

from ..exceptions import InvalidInputError, OutOfRangeError


def _chunk_ends(size: int, chunk_size: int) -> list[int]:
    if size < 1:
        raise InvalidInputError(f"size must be positive, got {size}")
    if chunk_size < 1:
        raise InvalidInputError(f"chunk_size must be positive, got {chunk_size}")
    n_chunks = -(-size // chunk_size)
    return [min((i + 1) * chunk_size, size) for i in range(n_chunks)]


def discrete_gamma_rates(
    shape: float, n_categories: int, scale: Optional[float] = None
) -> np.ndarray:
    """
    Rates of a K-category discrete gamma distribution.

    Uses gamma distribution quantiles at median points of K equal bins.

    Parameters
    ----------
    shape : float
        Gamma shape parameter
    n_categories : int
        Number of categories K
    scale : float, optional
        Gamma scale; defaults to ``1 / shape`` (mean rate 1)

    Returns
    -------
    np.ndarray, shape (K,)
        Positive, increasing category rates
    """
    from scipy.stats import gamma

    if not shape > 0:
        raise InvalidInputError(f"gamma shape must be positive, got {shape}")
    if scale is None:
        scale = 1.0 / shape
    K = n_categories
    p = (np.arange(K) * 2.0 + 1) / (2.0 * K)
    rates = gamma.ppf(p, shape, scale=scale)
    return np.maximum(rates, np.finfo(np.float64).tiny)


class SiteRateMultipliers:
    """
    Per-chunk rate multipliers.

    Parameters
    ----------
    ends : sequence of int
        Exclusive end position of each chunk, strictly increasing. The last
        end is the sequence size.
    values : sequence of float
        Positive multiplier for each chunk

    Examples
    --------
    >>> sm = SiteRateMultipliers([5, 10], [0.5, 2.0])
    >>> sm.multiplier_at(4), sm.multiplier_at(5)
    (0.5, 2.0)
    """

    def __init__(self, ends: Sequence[int], values: Sequence[float]):
        ends = [int(e) for e in ends]
        values = [float(v) for v in values]

        if not ends:
            raise InvalidInputError("at least one chunk is required")
        if len(ends) != len(values):
            raise InvalidInputError(
                f"got {len(ends)} chunk ends but {len(values)} multipliers"
            )
        prev = 0
        for e in ends:
            if e <= prev:
                raise InvalidInputError("chunk ends must be positive and strictly increasing")
            prev = e
        for v in values:
            if not math.isfinite(v) or v <= 0:
                raise InvalidInputError(f"multipliers must be positive, got {v}")

        self.ends = ends
        self.values = values

    @classmethod
    def uniform(cls, size: int) -> "SiteRateMultipliers":
        """A single chunk with multiplier 1 (no heterogeneity)."""
        return cls([size], [1.0])

    @classmethod
    def from_gamma(
        cls,
        size: int,
        shape: float,
        chunk_size: int,
        rng: np.random.Generator,
        scale: Optional[float] = None,
    ) -> "SiteRateMultipliers":
        """
        Draw one Gamma(shape, scale) multiplier per chunk of ``chunk_size`` sites.

        Parameters
        ----------
        size : int
            Sequence size
        shape : float
            Gamma shape parameter
        chunk_size : int
            Number of sites per chunk (the last chunk may be shorter)
        rng : numpy.random.Generator
            Random number generator
        scale : float, optional
            Gamma scale; defaults to ``1 / shape`` so multipliers average 1
        """
        if not shape > 0:
            raise InvalidInputError(f"gamma shape must be positive, got {shape}")
        if scale is None:
            scale = 1.0 / shape
        if not scale > 0:
            raise InvalidInputError(f"gamma scale must be positive, got {scale}")

        ends = _chunk_ends(size, chunk_size)
        values = rng.gamma(shape, scale, size=len(ends))
        # Extremely small shapes can underflow to exactly zero
        values = np.maximum(values, np.finfo(np.float64).tiny)
        return cls(ends, values.tolist())

    @classmethod
    def from_discrete_gamma(
        cls,
        size: int,
        shape: float,
        n_categories: int,
        chunk_size: int,
        rng: np.random.Generator,
        scale: Optional[float] = None,
    ) -> "SiteRateMultipliers":
        """
        Assign each chunk one of ``n_categories`` equally likely gamma rates.

        Category rates are the gamma quantiles at the midpoints of K equal
        probability bins (the median method).
        """
        if n_categories < 1:
            raise InvalidInputError(f"n_categories must be positive, got {n_categories}")
        rates = discrete_gamma_rates(shape, n_categories, scale)

        ends = _chunk_ends(size, chunk_size)
        categories = rng.integers(0, n_categories, size=len(ends))
        return cls(ends, [float(rates[c]) for c in categories])

    @property
    def size(self) -> int:
        return self.ends[-1] if self.ends else 0

    @property
    def n_chunks(self) -> int:
        return len(self.ends)

    def chunk_index(self, pos: int) -> int:
        i = bisect_right(self.ends, pos)
        if pos < 0 or i >= len(self.ends):
            raise OutOfRangeError(f"position {pos} outside multiplier chunks (size {self.size})")
        return i

    def multiplier_at(self, pos: int) -> float:
        return self.values[self.chunk_index(pos)]

    def expand(self, start: int, end: int) -> np.ndarray:
        """Multiplier of every position in ``[start, end)`` as an array."""
        if start < 0 or end > self.size or end < start:
            raise OutOfRangeError(f"invalid range [{start}, {end}) for size {self.size}")
        out = np.empty(end - start, dtype=np.float64)
        pos = start
        i = bisect_right(self.ends, start)
        while pos < end:
            stop = min(self.ends[i], end)
            out[pos - start:stop - start] = self.values[i]
            pos = stop
            i += 1
        return out

    def insertion(self, pos: int, length: int) -> None:
        """Shift chunk ends for ``length`` bases inserted after position ``pos``."""
        for i in range(bisect_right(self.ends, pos), len(self.ends)):
            self.ends[i] += length

    def deletion(self, pos: int, length: int) -> None:
        """Shift chunk ends for the deletion of ``[pos, pos + length)``; drop emptied chunks."""
        if length == 0:
            return
        del_end = pos + length
        ends = []
        values = []
        prev = 0
        for e, v in zip(self.ends, self.values):
            if e > del_end:
                e -= length
            elif e > pos:
                e = pos
            if e > prev:
                ends.append(e)
                values.append(v)
                prev = e
        self.ends = ends
        self.values = values

    def copy(self) -> "SiteRateMultipliers":
        new = object.__new__(SiteRateMultipliers)
        new.ends = list(self.ends)
        new.values = list(self.values)
        return new

    def __repr__(self) -> str:
        return f"SiteRateMultipliers(n_chunks={self.n_chunks}, size={self.size})"
