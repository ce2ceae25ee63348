"""
Evolving every variant of a set, optionally on several worker threads.

Each variant is an independent unit of work: it gets its own generator
(spawned from the master seed before any work starts), its own copy of the
site-rate chunks and its own mutation sampler. No state is shared between
tasks apart from the read-only reference and rate table, so no locking is
needed and the result does not depend on the number of workers.
"""

import threading
import warnings
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np

from ..core.rng import Seed, spawn_generators
from ..exceptions import DegenerateDistributionError, InvalidInputError, OutOfRangeError
from ..models.rates import RateTable
from ..models.site_rates import SiteRateMultipliers
from ..sequences.variant import VariantSequence
from ..sequences.variant_set import VariantSet
from .mutator import MutationSampler


@dataclass
class VariantOutcome:
    """What happened to one variant during a run."""

    name: str
    n_requested: int
    n_applied: int = 0
    rate_delta: float = 0.0
    cancelled: bool = False
    error: Optional[str] = None
    site_rates: Optional[SiteRateMultipliers] = None

    @property
    def completed(self) -> bool:
        return not self.cancelled and self.error is None


@dataclass
class EvolutionSummary:
    """Per-variant outcomes of :func:`evolve_variants`, in variant order."""

    outcomes: list[VariantOutcome] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return any(o.cancelled for o in self.outcomes)

    @property
    def failed(self) -> list[VariantOutcome]:
        return [o for o in self.outcomes if o.error is not None]

    @property
    def n_mutations(self) -> int:
        return sum(o.n_applied for o in self.outcomes)

    @property
    def site_rates(self) -> list[Optional[SiteRateMultipliers]]:
        """Each variant's multipliers after the run, ready to pass to the next one."""
        return [o.site_rates for o in self.outcomes]


def evolve_variant(
    variant: VariantSequence,
    rate_table: RateTable,
    n_mutations: int,
    rng: np.random.Generator,
    site_rates: Optional[SiteRateMultipliers] = None,
    chunk_size: Optional[int] = None,
    check_invariants: bool = False,
) -> VariantOutcome:
    """
    Apply ``n_mutations`` sampled mutations to one variant.

    Errors from sampling (e.g. every base deleted) stop this variant only and
    are recorded in the returned outcome. Each mutation is applied completely
    or not at all. ``site_rates`` is updated in place and returned on the
    outcome so a later run can continue from it.
    """
    outcome = VariantOutcome(name=variant.name, n_requested=n_mutations, site_rates=site_rates)
    if variant.size() == 0:
        if n_mutations > 0:
            outcome.error = "variant has no bases left to mutate"
        return outcome

    sampler = MutationSampler(variant, rate_table, site_rates, chunk_size)
    outcome.site_rates = sampler.site_rates

    try:
        for _ in range(n_mutations):
            outcome.rate_delta += sampler.mutate(rng)
            outcome.n_applied += 1
            if check_invariants:
                variant.check_invariants()
    except (DegenerateDistributionError, OutOfRangeError) as e:
        outcome.error = str(e)

    return outcome


def _per_variant_site_rates(
    variant_set: VariantSet,
    site_rates: Union[None, SiteRateMultipliers, Sequence[Optional[SiteRateMultipliers]]],
) -> list[Optional[SiteRateMultipliers]]:
    """One private copy of the multipliers per variant, checked against its size."""
    n_variants = len(variant_set)
    if site_rates is None:
        return [None] * n_variants
    if isinstance(site_rates, SiteRateMultipliers):
        per_variant = [site_rates] * n_variants
    else:
        per_variant = list(site_rates)
        if len(per_variant) != n_variants:
            raise InvalidInputError(
                f"got {len(per_variant)} site rate multipliers for {n_variants} variants"
            )

    for var, sr in zip(variant_set, per_variant):
        if sr is not None and sr.size != var.size():
            raise InvalidInputError(
                f"site rate chunks cover {sr.size} positions but variant {var.name} "
                f"has {var.size()}"
            )
    return [sr.copy() if sr is not None else None for sr in per_variant]


def evolve_variants(
    variant_set: VariantSet,
    rate_table: RateTable,
    n_mutations: Union[int, Sequence[int]],
    *,
    site_rates: Union[None, SiteRateMultipliers, Sequence[Optional[SiteRateMultipliers]]] = None,
    chunk_size: Optional[int] = None,
    seed: Seed = None,
    n_workers: int = 1,
    cancel: Optional[threading.Event] = None,
    check_invariants: bool = False,
) -> EvolutionSummary:
    """
    Mutate every variant of a set.

    Parameters
    ----------
    variant_set : VariantSet
        Variants to mutate (modified in place)
    rate_table : RateTable
        Rates shared by all variants
    n_mutations : int or sequence of int
        Mutations per variant (one value for all, or one per variant)
    site_rates : SiteRateMultipliers or sequence of them, optional
        Chunk multipliers matching each variant's current size: one object
        shared as the starting point of every variant, or one per variant
        (e.g. ``summary.site_rates`` of a previous run). Inputs are never
        modified; each variant mutates its own copy, returned in
        ``EvolutionSummary.site_rates``.
    chunk_size : int, optional
        Window size for location sampling
    seed : int or numpy.random.SeedSequence, optional
        Master seed. The same seed gives the same variants for any
        ``n_workers``.
    n_workers : int
        Number of worker threads (1 runs everything in the calling thread)
    cancel : threading.Event, optional
        Checked before each variant starts; variants not yet started when it
        is set are left untouched and reported as cancelled
    check_invariants : bool
        Verify the edit-list invariants after every mutation (slow)

    Returns
    -------
    EvolutionSummary
        One outcome per variant, in the order of ``variant_set``

    Raises
    ------
    InvalidInputError
        If the arguments are inconsistent with the variant set. Raised before
        any variant is mutated.
    """
    n_variants = len(variant_set)
    if isinstance(n_mutations, (int, np.integer)):
        counts = [int(n_mutations)] * n_variants
    else:
        counts = [int(n) for n in n_mutations]
        if len(counts) != n_variants:
            raise InvalidInputError(
                f"got {len(counts)} mutation counts for {n_variants} variants"
            )
    if any(n < 0 for n in counts):
        raise InvalidInputError("mutation counts must be non-negative")
    if n_workers < 1:
        raise InvalidInputError(f"n_workers must be at least 1, got {n_workers}")
    if chunk_size is not None and chunk_size < 1:
        raise InvalidInputError(f"chunk_size must be positive, got {chunk_size}")

    variant_rates = _per_variant_site_rates(variant_set, site_rates)

    # One generator per variant, created up front
    rngs = spawn_generators(seed, n_variants)

    def run_one(i: int) -> VariantOutcome:
        variant = variant_set[i]
        if cancel is not None and cancel.is_set():
            return VariantOutcome(
                name=variant.name,
                n_requested=counts[i],
                cancelled=True,
                site_rates=variant_rates[i],
            )
        return evolve_variant(
            variant,
            rate_table,
            counts[i],
            rngs[i],
            site_rates=variant_rates[i],
            chunk_size=chunk_size,
            check_invariants=check_invariants,
        )

    outcomes: list[Optional[VariantOutcome]] = [None] * n_variants

    if n_workers == 1 or n_variants <= 1:
        for i in range(n_variants):
            outcomes[i] = run_one(i)
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            futures = {executor.submit(run_one, i): i for i in range(n_variants)}
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()

    summary = EvolutionSummary(outcomes=outcomes)

    for o in summary.failed:
        warnings.warn(
            f"Variant {o.name} stopped after {o.n_applied}/{o.n_requested} mutations: {o.error}",
            RuntimeWarning,
        )
    if summary.cancelled:
        n_cancelled = sum(o.cancelled for o in summary.outcomes)
        warnings.warn(f"Run cancelled; {n_cancelled} variant(s) were not mutated", RuntimeWarning)

    return summary
