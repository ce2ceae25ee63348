"""
Low-level sampling routines.

- **Categorical sampling**: alias method over small outcome sets
- **Location sampling**: single-pass weighted reservoir sampling
- **Seeding**: one independent generator per unit of work
"""

from varevo.core.alias import CategoricalSampler, StringSampler
from varevo.core.reservoir import weighted_reservoir, brute_force_location
from varevo.core.rng import spawn_generators

__all__ = [
    "CategoricalSampler",
    "StringSampler",
    "weighted_reservoir",
    "brute_force_location",
    "spawn_generators",
]
