"""Tests for evolving whole variant sets."""

import threading

import pytest
import numpy as np

from varevo.exceptions import InvalidInputError
from varevo.models.rates import RateTable
from varevo.models.site_rates import SiteRateMultipliers
from varevo.sequences.variant import VariantSequence
from varevo.sequences.variant_set import VariantSet
from varevo.simulate.runner import evolve_variant, evolve_variants


class TestEvolveVariants:
    """Test suite for evolve_variants."""

    def test_all_mutations_applied(self, long_ref, indel_table):
        vs = VariantSet(long_ref, n_variants=4)
        summary = evolve_variants(vs, indel_table, 25, seed=1)

        assert summary.n_mutations == 100
        assert not summary.cancelled
        assert summary.failed == []
        assert [o.name for o in summary.outcomes] == vs.names
        assert all(o.completed for o in summary.outcomes)
        for var in vs:
            var.check_invariants()
            assert var.mutations

    def test_independent_of_worker_count(self, long_ref, indel_table):
        """The same seed gives the same variants for any number of workers."""
        results = []
        for n_workers in (1, 2, 5):
            vs = VariantSet(long_ref, n_variants=6)
            site_rates = SiteRateMultipliers.from_gamma(
                len(long_ref), 0.8, 100, np.random.default_rng(3)
            )
            summary = evolve_variants(
                vs, indel_table, 30, site_rates=site_rates, seed=42, n_workers=n_workers
            )
            results.append(([str(v) for v in vs], [o.rate_delta for o in summary.outcomes]))

        assert results[0] == results[1] == results[2]

    def test_variants_differ(self, long_ref, indel_table):
        vs = VariantSet(long_ref, n_variants=2)
        evolve_variants(vs, indel_table, 20, seed=9)
        assert str(vs[0]) != str(vs[1])

    def test_shared_site_rates_untouched(self, long_ref, indel_table):
        site_rates = SiteRateMultipliers.uniform(len(long_ref))
        vs = VariantSet(long_ref, n_variants=3)
        evolve_variants(vs, indel_table, 20, site_rates=site_rates, seed=5, n_workers=3)
        assert site_rates.ends == [len(long_ref)]

    def test_continue_run_with_site_rates(self, long_ref, indel_table):
        """Multipliers returned by one run carry the next one."""
        vs = VariantSet(long_ref, n_variants=4)
        site_rates = SiteRateMultipliers.from_gamma(
            len(long_ref), 0.5, 50, np.random.default_rng(1)
        )
        first = evolve_variants(vs, indel_table, 20, site_rates=site_rates, seed=1)
        assert [sr.size for sr in first.site_rates] == vs.sizes()
        assert vs.sizes() != [len(long_ref)] * 4

        second = evolve_variants(
            vs, indel_table, 20, site_rates=first.site_rates, seed=2, n_workers=2
        )

        assert second.failed == []
        assert second.n_mutations == 80
        assert [sr.size for sr in second.site_rates] == vs.sizes()
        # Inputs are copied, not mutated
        assert second.site_rates[0] is not first.site_rates[0]

    def test_continue_run_without_site_rates(self, long_ref, indel_table):
        vs = VariantSet(long_ref, n_variants=2)
        first = evolve_variants(vs, indel_table, 10, seed=1)
        second = evolve_variants(vs, indel_table, 10, seed=2)
        assert second.n_mutations == 20
        assert [sr.size for sr in second.site_rates] == vs.sizes()
        assert first.site_rates[0] is not None

    def test_mismatched_site_rates_rejected_up_front(self, long_ref, indel_table):
        """No variant is touched when any variant's multipliers do not fit."""
        vs = VariantSet(long_ref, n_variants=3)
        vs[2].add_insertion(5, "A")

        with pytest.raises(InvalidInputError, match="var2"):
            evolve_variants(
                vs, indel_table, 5, site_rates=SiteRateMultipliers.uniform(len(long_ref)), seed=1
            )
        assert vs[0].mutations == [] and vs[1].mutations == []

    def test_site_rates_per_variant_length(self, short_ref, substitution_table):
        vs = VariantSet(short_ref, n_variants=2)
        with pytest.raises(InvalidInputError):
            evolve_variants(
                vs, substitution_table, 1, site_rates=[SiteRateMultipliers.uniform(10)]
            )

    def test_exhausted_variant_in_later_run(self, short_ref):
        deletions = RateTable(np.zeros((4, 4)), [0.0], [1.0])
        vs = VariantSet(short_ref, n_variants=1)
        with pytest.warns(RuntimeWarning):
            first = evolve_variants(vs, deletions, 15, seed=3)
        assert vs[0].size() == 0

        with pytest.warns(RuntimeWarning, match="no bases left"):
            second = evolve_variants(vs, deletions, 2, site_rates=first.site_rates, seed=4)
        assert second.outcomes[0].n_applied == 0
        assert second.failed == second.outcomes

    def test_per_variant_counts(self, short_ref, substitution_table):
        vs = VariantSet(short_ref, n_variants=3)
        summary = evolve_variants(vs, substitution_table, [0, 1, 4], seed=2)
        assert [o.n_applied for o in summary.outcomes] == [0, 1, 4]
        assert vs[0].mutations == []

    def test_failure_isolated(self, short_ref):
        """A variant that runs out of bases stops without affecting the others."""
        deletions = RateTable(np.zeros((4, 4)), [0.0], [1.0])
        vs = VariantSet(short_ref, n_variants=2)

        with pytest.warns(RuntimeWarning, match="stopped after"):
            summary = evolve_variants(vs, deletions, [3, 20], seed=4, n_workers=2)

        ok, failed = summary.outcomes
        assert ok.completed and ok.n_applied == 3
        assert vs[0].size() == 7
        assert failed.error is not None
        assert failed.n_applied == 10
        assert vs[1].size() == 0
        assert summary.failed == [failed]

    def test_cancelled_before_start(self, long_ref, indel_table):
        cancel = threading.Event()
        cancel.set()
        vs = VariantSet(long_ref, n_variants=3)

        with pytest.warns(RuntimeWarning, match="cancelled"):
            summary = evolve_variants(vs, indel_table, 10, seed=1, cancel=cancel)

        assert summary.cancelled
        assert summary.n_mutations == 0
        assert all(o.cancelled and not o.completed for o in summary.outcomes)
        assert all(v.mutations == [] for v in vs)

    def test_check_invariants(self, long_ref, indel_table):
        vs = VariantSet(long_ref, n_variants=2)
        summary = evolve_variants(vs, indel_table, 30, seed=6, check_invariants=True)
        assert summary.n_mutations == 60

    @pytest.mark.parametrize("kwargs", [
        {"n_mutations": -1},
        {"n_mutations": [1, 2]},
        {"n_mutations": 5, "n_workers": 0},
        {"n_mutations": 5, "chunk_size": 0},
    ])
    def test_invalid_arguments(self, short_ref, substitution_table, kwargs):
        vs = VariantSet(short_ref, n_variants=3)
        with pytest.raises(InvalidInputError):
            evolve_variants(vs, substitution_table, **kwargs)


class TestEvolveVariant:
    """Single-variant evolution."""

    def test_outcome(self, long_ref, indel_table, rng):
        var = VariantSequence(long_ref, name="solo")
        outcome = evolve_variant(var, indel_table, 15, rng)

        assert outcome.name == "solo"
        assert outcome.n_requested == outcome.n_applied == 15
        assert outcome.completed
        assert isinstance(outcome.rate_delta, float)
