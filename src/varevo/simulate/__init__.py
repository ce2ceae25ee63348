"""
Sequence simulation module for varevo.

Available tools:
- LocationSampler: where the next mutation happens
- MutationTypeSampler: which kind of mutation happens
- MutationSampler: both of the above, applied to a variant
- evolve_variants: mutate a whole variant set, optionally in parallel
- create_references: random reference sequences
"""

from .location import LocationSampler
from .types import MutationEvent, MutationTypeSampler
from .mutator import MutationSampler, RangedMutation
from .runner import evolve_variant, evolve_variants, EvolutionSummary, VariantOutcome
from .reference import create_references, FixedLength, GammaLength, length_distribution
from .output import SimulationOutput

__all__ = [
    'LocationSampler',
    'MutationEvent',
    'MutationTypeSampler',
    'MutationSampler',
    'RangedMutation',
    'evolve_variant',
    'evolve_variants',
    'EvolutionSummary',
    'VariantOutcome',
    'create_references',
    'FixedLength',
    'GammaLength',
    'length_distribution',
    'SimulationOutput',
]
