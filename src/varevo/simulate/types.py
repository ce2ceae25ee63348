"""
Sampling which kind of mutation happens at a chosen position.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.alias import CategoricalSampler
from ..exceptions import DegenerateDistributionError, InvalidInputError
from ..models.rates import INDEX_TO_NUCLEOTIDE, NUCLEOTIDES, RateTable


@dataclass(frozen=True)
class MutationEvent:
    """
    One sampled mutation type.

    Attributes
    ----------
    length : int
        0 for a substitution, +k for an insertion of k bases, -k for a
        deletion of k bases
    nucleotide : str
        Target nucleotide of a substitution (empty for indels)
    """

    length: int
    nucleotide: str = ""

    @property
    def kind(self) -> str:
        if self.length < 0:
            return "deletion"
        if self.length > 0:
            return "insertion"
        return "substitution"


class MutationTypeSampler:
    """
    One categorical sampler over event types per nucleotide.

    Parameters
    ----------
    rate_table : RateTable
        Source of the conditional event probabilities
    """

    def __init__(self, rate_table: RateTable):
        self.event_lengths = rate_table.event_lengths.tolist()
        self.samplers: dict[str, Optional[CategoricalSampler]] = {}
        for i, nt in enumerate(NUCLEOTIDES):
            # Nucleotides with zero total rate are never chosen as a location
            if rate_table.q[i] > 0:
                self.samplers[nt] = CategoricalSampler(rate_table.probs[i])
            else:
                self.samplers[nt] = None

    def sample(self, nucleotide: str, rng: np.random.Generator) -> MutationEvent:
        """Draw the event type for a mutation hitting ``nucleotide``."""
        try:
            sampler = self.samplers[nucleotide]
        except KeyError:
            raise InvalidInputError(f"unknown nucleotide '{nucleotide}'") from None
        if sampler is None:
            raise DegenerateDistributionError(
                f"nucleotide '{nucleotide}' has a total mutation rate of zero"
            )

        j = sampler.sample(rng)
        if j < 4:
            return MutationEvent(0, INDEX_TO_NUCLEOTIDE[j])
        return MutationEvent(self.event_lengths[j])
