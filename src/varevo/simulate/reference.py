"""
Random reference sequences.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..core.alias import StringSampler
from ..core.rng import Seed, spawn_generators
from ..exceptions import InvalidInputError
from ..models.rates import NUCLEOTIDES, equilibrium_frequencies
from ..sequences.reference import ReferenceSequence


@dataclass(frozen=True)
class FixedLength:
    """Every sequence has exactly ``length`` bases."""

    length: int

    def __post_init__(self):
        if self.length < 1:
            raise InvalidInputError(f"sequence length must be positive, got {self.length}")

    def draw(self, rng: np.random.Generator) -> int:
        return self.length


@dataclass(frozen=True)
class GammaLength:
    """
    Sequence lengths drawn from a gamma distribution with the given mean and
    standard deviation (never shorter than one base).
    """

    mean: float
    sd: float

    def __post_init__(self):
        if not self.mean > 0 or not self.sd > 0:
            raise InvalidInputError(
                f"gamma length needs positive mean and sd, got mean={self.mean}, sd={self.sd}"
            )

    @property
    def shape(self) -> float:
        return (self.mean * self.mean) / (self.sd * self.sd)

    @property
    def scale(self) -> float:
        return (self.sd * self.sd) / self.mean

    def draw(self, rng: np.random.Generator) -> int:
        return max(1, int(rng.gamma(self.shape, self.scale)))


LengthDistribution = Union[FixedLength, GammaLength]


def length_distribution(mean: float, sd: float = 0.0) -> LengthDistribution:
    """Pick the length distribution once: fixed when ``sd <= 0``, gamma otherwise."""
    if sd <= 0:
        return FixedLength(int(mean))
    return GammaLength(float(mean), float(sd))


def create_references(
    n_sequences: int,
    length: LengthDistribution,
    equil_freqs: Optional[Sequence[float]] = None,
    seed: Seed = None,
    n_workers: int = 1,
    prefix: str = "seq",
) -> list[ReferenceSequence]:
    """
    Generate random reference sequences.

    Parameters
    ----------
    n_sequences : int
        Number of sequences
    length : FixedLength or GammaLength
        Length distribution
    equil_freqs : array-like, optional
        Nucleotide frequencies for T, C, A, G (uniform when omitted)
    seed : int or numpy.random.SeedSequence, optional
        Master seed; results do not depend on ``n_workers``
    n_workers : int
        Number of worker threads
    prefix : str
        Sequences are named ``{prefix}0``, ``{prefix}1``, ...

    Returns
    -------
    list of ReferenceSequence
        Generated sequences (never empty)

    Examples
    --------
    >>> refs = create_references(3, FixedLength(50), seed=1)
    >>> [len(r) for r in refs]
    [50, 50, 50]
    """
    if n_sequences < 0:
        raise InvalidInputError(f"n_sequences must be non-negative, got {n_sequences}")
    if n_workers < 1:
        raise InvalidInputError(f"n_workers must be at least 1, got {n_workers}")

    sampler = StringSampler(NUCLEOTIDES, equilibrium_frequencies(equil_freqs))
    rngs = spawn_generators(seed, n_sequences)

    def make_one(i: int) -> ReferenceSequence:
        rng = rngs[i]
        return ReferenceSequence(sampler.sample(rng, length.draw(rng)), name=f"{prefix}{i}")

    if n_workers == 1:
        return [make_one(i) for i in range(n_sequences)]
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        return list(executor.map(make_one, range(n_sequences)))
