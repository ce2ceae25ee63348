"""
Mutation sampler: location, type and insertion content combined into one
atomic mutation applied to a variant.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.alias import StringSampler
from ..exceptions import DegenerateDistributionError
from ..models.rates import NUCLEOTIDES, RateTable
from ..models.site_rates import SiteRateMultipliers
from ..sequences.variant import VariantSequence
from .location import LocationSampler
from .types import MutationEvent, MutationTypeSampler


@dataclass(frozen=True)
class RangedMutation:
    """
    Result of :meth:`MutationSampler.mutate_range`.

    Attributes
    ----------
    rate_delta : float
        Change in the variant's total mutation rate
    start : int
        Start of the active range (unchanged)
    end : int
        Exclusive end of the active range after the mutation; shifted by the
        size change of an indel
    """

    rate_delta: float
    start: int
    end: int

    @property
    def empty(self) -> bool:
        """True when an indel left nothing in the active range."""
        return self.end <= self.start


class MutationSampler:
    """
    Sample and apply mutations to one variant.

    Parameters
    ----------
    variant : VariantSequence
        Variant to mutate (exclusively owned by the caller while mutating)
    rate_table : RateTable
        Per-nucleotide rates and event probabilities
    site_rates : SiteRateMultipliers, optional
        Rate heterogeneity; uniform when omitted. The sampler updates the
        chunks in place as indels happen.
    chunk_size : int, optional
        Window size for location sampling (see :class:`LocationSampler`)

    Examples
    --------
    >>> from varevo.core.matrix import uniform_Q
    >>> from varevo.sequences.reference import ReferenceSequence
    >>> var = VariantSequence(ReferenceSequence("TCAGTCAGTCAG"))
    >>> sampler = MutationSampler(var, RateTable.from_model(uniform_Q(), 0.2, 1.0))
    >>> rng = np.random.default_rng(3)
    >>> delta = sampler.mutate(rng)
    >>> len(var.mutations)
    1
    """

    def __init__(
        self,
        variant: VariantSequence,
        rate_table: RateTable,
        site_rates: Optional[SiteRateMultipliers] = None,
        chunk_size: Optional[int] = None,
    ):
        self.variant = variant
        self.rate_table = rate_table
        self.location = LocationSampler(variant, rate_table, site_rates, chunk_size)
        self.types = MutationTypeSampler(rate_table)
        self.insertions = StringSampler(NUCLEOTIDES, rate_table.pi)

    @property
    def site_rates(self) -> SiteRateMultipliers:
        return self.location.site_rates

    def total_rate(self, start: int = 0, end: Optional[int] = None) -> float:
        """Total mutation rate over ``[start, end)``."""
        return self.location.total_rate(start, end)

    def mutate(self, rng: np.random.Generator) -> float:
        """
        Add one mutation anywhere on the variant.

        Returns
        -------
        float
            Change in the variant's total mutation rate
        """
        if self.variant.size() == 0:
            raise DegenerateDistributionError("variant has no bases left to mutate")
        rate_delta, _ = self._mutate(rng, 0, self.variant.size())
        return rate_delta

    def mutate_range(
        self, rng: np.random.Generator, start: int, end: int
    ) -> RangedMutation:
        """
        Add one mutation inside ``[start, end)``.

        Deletions are truncated at ``end``. The returned range end follows the
        size change; check :attr:`RangedMutation.empty` before mutating the
        range again.
        """
        rate_delta, size_change = self._mutate(rng, start, end)
        return RangedMutation(rate_delta, start, end + size_change)

    def _mutate(self, rng: np.random.Generator, start: int, end: int) -> tuple[float, int]:
        pos = self.location.sample(rng, start, end)
        event = self.types.sample(self.variant.character_at(pos), rng)
        return self.apply(event, pos, rng, limit=end)

    def apply(
        self,
        event: MutationEvent,
        pos: int,
        rng: np.random.Generator,
        limit: Optional[int] = None,
    ) -> tuple[float, int]:
        """
        Apply one event at variant position ``pos``.

        Parameters
        ----------
        event : MutationEvent
            Event to apply
        pos : int
            Variant position
        rng : numpy.random.Generator
            Used to draw inserted nucleotides
        limit : int, optional
            Deletions are truncated so they do not reach past this position
            (defaults to the variant size)

        Returns
        -------
        tuple
            ``(rate_delta, size_change)``
        """
        variant = self.variant
        table = self.rate_table
        site_rates = self.location.site_rates

        if event.length == 0:
            old = variant.character_at(pos)
            rate_delta = (
                (table.rate_of(event.nucleotide) - table.rate_of(old))
                * site_rates.multiplier_at(pos)
            )
            variant.add_substitution(pos, event.nucleotide)
            return rate_delta, 0

        if event.length > 0:
            content = self.insertions.sample(rng, event.length)
            rate_delta = float(table.sequence_rates(content).sum()) * site_rates.multiplier_at(pos)
            variant.add_insertion(pos, content)
            site_rates.insertion(pos, event.length)
            return rate_delta, event.length

        if limit is None:
            limit = variant.size()
        length = min(-event.length, limit - pos)
        rate_delta = -float(self.location.rates(pos, pos + length).sum())
        variant.add_deletion(pos, length)
        site_rates.deletion(pos, length)
        return rate_delta, -length
