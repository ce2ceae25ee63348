"""
varevo: molecular evolution of variant sequences.

Variants are stored as a shared reference plus a compact, ordered list of
edits, so mutating a sequence never copies it. Mutation locations are drawn
with single-pass weighted reservoir sampling and mutation types with exact
alias-method sampling.

Quick Start
-----------
>>> import numpy as np
>>> from varevo import ReferenceSequence, VariantSet, RateTable, evolve_variants
>>> from varevo.core.matrix import uniform_Q
>>> ref = ReferenceSequence("TCAGTCAGTCAGTCAG", name="chr1")
>>> variants = VariantSet(ref, n_variants=3)
>>> table = RateTable.from_model(uniform_Q(), xi=0.1, psi=0.5)
>>> summary = evolve_variants(variants, table, n_mutations=5, seed=42)
>>> summary.n_mutations
15
"""

__version__ = "0.1.0"

from .exceptions import (
    VarevoError,
    InvalidInputError,
    InvalidDistributionError,
    OutOfRangeError,
    DegenerateDistributionError,
    InvariantViolationError,
)
from .core.alias import CategoricalSampler, StringSampler
from .core.reservoir import weighted_reservoir
from .models.rates import RateModel, RateTable
from .models.site_rates import SiteRateMultipliers
from .sequences.reference import ReferenceSequence
from .sequences.variant import MutationRecord, VariantSequence
from .sequences.variant_set import VariantSet
from .simulate.mutator import MutationSampler, RangedMutation
from .simulate.runner import evolve_variants, EvolutionSummary
from .simulate.reference import create_references, FixedLength, GammaLength
from .io.fasta import read_fasta

__all__ = [
    # Sequences
    "ReferenceSequence",
    "VariantSequence",
    "MutationRecord",
    "VariantSet",

    # Rates
    "RateModel",
    "RateTable",
    "SiteRateMultipliers",

    # Sampling
    "CategoricalSampler",
    "StringSampler",
    "weighted_reservoir",
    "MutationSampler",
    "RangedMutation",

    # Running simulations
    "evolve_variants",
    "EvolutionSummary",
    "create_references",
    "FixedLength",
    "GammaLength",

    # I/O
    "read_fasta",

    # Errors
    "VarevoError",
    "InvalidInputError",
    "InvalidDistributionError",
    "OutOfRangeError",
    "DegenerateDistributionError",
    "InvariantViolationError",

    "__version__",
]
