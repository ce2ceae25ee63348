"""Tests for alias-method categorical sampling."""

import pytest
import numpy as np

from varevo.core.alias import CategoricalSampler, StringSampler
from varevo.exceptions import InvalidDistributionError, InvalidInputError


class TestCategoricalSampler:
    """Test suite for CategoricalSampler."""

    def test_normalises_weights(self):
        sampler = CategoricalSampler([1, 1, 2])
        np.testing.assert_allclose(sampler.probabilities, [0.25, 0.25, 0.5])
        assert len(sampler) == 3

    def test_zero_weights_never_sampled(self, rng):
        """Outcomes with weight zero are never drawn."""
        sampler = CategoricalSampler([0, 1, 0, 3])
        draws = [sampler.sample(rng) for _ in range(20000)]
        assert set(draws) <= {1, 3}

        freq3 = draws.count(3) / len(draws)
        assert abs(freq3 - 0.75) < 0.02

    def test_sample_many_matches_probabilities(self, rng):
        weights = np.array([0.1, 0.2, 0.3, 0.4])
        sampler = CategoricalSampler(weights)
        draws = sampler.sample_many(rng, 100000)

        observed = np.bincount(draws, minlength=4) / draws.size
        assert np.allclose(observed, weights, atol=0.01)

    def test_sample_many_zero_weights(self, rng):
        sampler = CategoricalSampler([0, 0, 5, 0, 1e-9])
        draws = sampler.sample_many(rng, 50000)
        assert set(np.unique(draws).tolist()) <= {2, 4}

    def test_single_outcome(self, rng):
        sampler = CategoricalSampler([2.5])
        assert all(sampler.sample(rng) == 0 for _ in range(100))

    @pytest.mark.parametrize("weights", [
        [],
        [0, 0, 0],
        [1, -1, 2],
        [1, np.nan],
        [np.inf, 1],
    ])
    def test_invalid_weights(self, weights):
        with pytest.raises(InvalidDistributionError):
            CategoricalSampler(weights)

    def test_invalid_is_value_error(self):
        """Distribution errors are also input errors and ValueErrors."""
        with pytest.raises(InvalidInputError):
            CategoricalSampler([0, 0])
        with pytest.raises(ValueError):
            CategoricalSampler([0, 0])

    def test_reproducible(self):
        sampler = CategoricalSampler([1, 2, 3, 4])
        a = [sampler.sample(np.random.default_rng(5)) for _ in range(10)]
        b = [sampler.sample(np.random.default_rng(5)) for _ in range(10)]
        assert a == b


class TestStringSampler:
    """Test suite for StringSampler."""

    def test_uniform_default(self, rng):
        sampler = StringSampler("TCAG")
        s = sampler.sample(rng, 40000)
        assert len(s) == 40000
        for nt in "TCAG":
            assert abs(s.count(nt) / len(s) - 0.25) < 0.01

    def test_weighted(self, rng):
        sampler = StringSampler("TCAG", [0, 0, 1, 0])
        assert sampler.sample(rng, 50) == "A" * 50
        assert sampler.sample(rng, 1) == "A"

    def test_empty_weights_mean_uniform(self, rng):
        sampler = StringSampler("TCAG", [])
        np.testing.assert_allclose(sampler.sampler.probabilities, 0.25)

    def test_zero_length(self, rng):
        assert StringSampler("TCAG").sample(rng, 0) == ""

    def test_weight_length_mismatch(self):
        with pytest.raises(InvalidDistributionError, match="expected 4 weights"):
            StringSampler("TCAG", [1, 2, 3])

    def test_empty_alphabet(self):
        with pytest.raises(InvalidDistributionError):
            StringSampler("")
