"""
Sampling where on a variant the next mutation happens.
"""

from typing import Optional

import numpy as np

from ..core.reservoir import weighted_reservoir
from ..exceptions import InvalidInputError, OutOfRangeError
from ..models.rates import RateTable
from ..models.site_rates import SiteRateMultipliers
from ..sequences.variant import VariantSequence


class _RateGetter:
    """
    Lazily evaluated per-position mutation rate of a variant.

    Rates are computed one block of positions at a time, so a scan over a long
    range only ever holds ``block_size`` rates in memory.
    """

    def __init__(self, location: "LocationSampler", block_size: int):
        self.location = location
        self.block_size = block_size
        self._lo = 0
        self._block = np.empty(0)

    def _fill(self, pos: int) -> None:
        n = min(self.block_size, self.location.variant.size() - pos)
        self._block = self.location.rates(pos, pos + n)
        self._lo = pos

    def block(self, pos: int) -> np.ndarray:
        """Rates from ``pos`` to the end of the block holding it."""
        offset = pos - self._lo
        if offset < 0 or offset >= self._block.size:
            self._fill(pos)
            offset = 0
        return self._block[offset:]


class LocationSampler:
    """
    Mutation-location sampler bound to a live variant.

    The rate at a position is the total mutation rate of the nucleotide there
    times the site-rate multiplier of its chunk.

    Parameters
    ----------
    variant : VariantSequence
        Variant being mutated (read live, never copied)
    rate_table : RateTable
        Per-nucleotide rates
    site_rates : SiteRateMultipliers, optional
        Rate multipliers; uniform when omitted. Must cover the variant exactly.
    chunk_size : int, optional
        If set, each draw searches only a random window of this many
        positions instead of the whole range, trading exactness of the
        location distribution for bounded scan cost on long sequences.
    block_size : int
        Number of positions whose rates are evaluated together during a scan
    """

    def __init__(
        self,
        variant: VariantSequence,
        rate_table: RateTable,
        site_rates: Optional[SiteRateMultipliers] = None,
        chunk_size: Optional[int] = None,
        block_size: int = 4096,
    ):
        if site_rates is None:
            site_rates = SiteRateMultipliers.uniform(variant.size())
        if site_rates.size != variant.size():
            raise InvalidInputError(
                f"site rate chunks cover {site_rates.size} positions but the variant "
                f"has {variant.size()}"
            )
        if chunk_size is not None and chunk_size < 1:
            raise InvalidInputError(f"chunk_size must be positive, got {chunk_size}")
        if block_size < 1:
            raise InvalidInputError(f"block_size must be positive, got {block_size}")

        self.variant = variant
        self.rate_table = rate_table
        self.site_rates = site_rates
        self.chunk_size = chunk_size
        self.block_size = block_size

    def _resolve_range(self, start: int, end: Optional[int]) -> tuple[int, int]:
        if end is None:
            end = self.variant.size()
        if start < 0 or end > self.variant.size() or end <= start:
            raise OutOfRangeError(
                f"invalid range [{start}, {end}) for variant of size {self.variant.size()}"
            )
        return start, end

    def rate_at(self, pos: int) -> float:
        """Mutation rate at one variant position."""
        nt = self.variant.character_at(pos)
        return self.rate_table.rate_of(nt) * self.site_rates.multiplier_at(pos)

    def rates(self, start: int, end: int) -> np.ndarray:
        """Mutation rate of every position in ``[start, end)``."""
        seq = self.variant.materialize(start, end - start)
        return self.rate_table.sequence_rates(seq) * self.site_rates.expand(start, end)

    def total_rate(self, start: int = 0, end: Optional[int] = None) -> float:
        """
        Sum of mutation rates over ``[start, end)`` (the whole variant by default).

        This is the quantity an event scheduler needs to draw waiting times.
        """
        if self.variant.size() == 0:
            return 0.0
        start, end = self._resolve_range(start, end)
        total = 0.0
        for lo in range(start, end, self.block_size):
            hi = min(lo + self.block_size, end)
            total += float(self.rates(lo, hi).sum())
        return total

    def sample(
        self, rng: np.random.Generator, start: int = 0, end: Optional[int] = None
    ) -> int:
        """
        Sample a variant position in ``[start, end)`` proportionally to its rate.

        Raises
        ------
        DegenerateDistributionError
            If every position in the searched range has rate zero
        """
        start, end = self._resolve_range(start, end)

        if self.chunk_size is not None and self.chunk_size < end - start:
            offset = int(rng.random() * (end - start - self.chunk_size + 1))
            start = start + offset
            end = start + self.chunk_size

        return weighted_reservoir(_RateGetter(self, self.block_size), start, end, rng)
