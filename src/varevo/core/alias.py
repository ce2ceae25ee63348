"""
Exact discrete sampling over small outcome sets.

Uses Vose's alias method: O(k) preprocessing of the weight vector, then each
draw costs one uniform variate and one table lookup.
"""

from typing import Sequence

import numpy as np

from ..exceptions import InvalidDistributionError


class CategoricalSampler:
    """
    Weighted sampler over the outcomes ``0 .. k-1``.

    Parameters
    ----------
    weights : array-like, shape (k,)
        Non-negative weights. They do not need to sum to one.

    Raises
    ------
    InvalidDistributionError
        If ``weights`` is empty, contains negative or non-finite values, or
        sums to zero.

    Examples
    --------
    >>> rng = np.random.default_rng(1)
    >>> sampler = CategoricalSampler([0, 1, 0, 3])
    >>> sampler.sample(rng) in (1, 3)
    True
    """

    def __init__(self, weights: Sequence[float]):
        w = np.asarray(weights, dtype=np.float64).ravel()

        if w.size == 0:
            raise InvalidDistributionError("weights must contain at least one value")
        if not np.all(np.isfinite(w)):
            raise InvalidDistributionError("weights must be finite")
        if np.any(w < 0):
            raise InvalidDistributionError("weights must be non-negative")
        total = w.sum()
        if total <= 0:
            raise InvalidDistributionError("weights must not all be zero")

        self.n_outcomes = int(w.size)
        self.probabilities = w / total

        self._prob, self._alias = self._build_tables(self.probabilities)
        # Plain lists are faster than numpy scalars for single draws
        self._prob_list = self._prob.tolist()
        self._alias_list = self._alias.tolist()

    @staticmethod
    def _build_tables(p: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Build Vose alias tables.

        Each column ``i`` keeps outcome ``i`` with probability ``prob[i]`` and
        otherwise yields ``alias[i]``.
        """
        k = p.size
        scaled = p * k
        prob = np.zeros(k, dtype=np.float64)
        alias = np.arange(k, dtype=np.int64)

        small = [i for i in range(k) if scaled[i] < 1.0]
        large = [i for i in range(k) if scaled[i] >= 1.0]

        while small and large:
            s = small.pop()
            l = large.pop()
            prob[s] = scaled[s]
            alias[s] = l
            scaled[l] = (scaled[l] + scaled[s]) - 1.0
            if scaled[l] < 1.0:
                small.append(l)
            else:
                large.append(l)

        # Leftovers are 1 up to rounding error
        for i in large:
            prob[i] = 1.0
        for i in small:
            prob[i] = 1.0

        # Zero-weight outcomes must never be returned, even via rounding
        zero = p == 0
        prob[zero] = 0.0
        alias[zero & (alias == np.arange(k))] = int(np.argmax(p))

        return prob, alias

    def sample(self, rng: np.random.Generator) -> int:
        """Draw one outcome index."""
        u = rng.random() * self.n_outcomes
        i = int(u)
        if i >= self.n_outcomes:  # guard against u rounding up to k
            i = self.n_outcomes - 1
        if u - i < self._prob_list[i]:
            return i
        return self._alias_list[i]

    def sample_many(self, rng: np.random.Generator, n: int) -> np.ndarray:
        """
        Draw ``n`` outcome indices at once.

        Parameters
        ----------
        rng : numpy.random.Generator
            Random number generator
        n : int
            Number of draws

        Returns
        -------
        np.ndarray, shape (n,), dtype=int64
            Sampled outcome indices
        """
        u = rng.random(n) * self.n_outcomes
        cols = np.minimum(u.astype(np.int64), self.n_outcomes - 1)
        keep = (u - cols) < self._prob[cols]
        return np.where(keep, cols, self._alias[cols])

    def __len__(self) -> int:
        return self.n_outcomes

    def __repr__(self) -> str:
        return f"CategoricalSampler(n_outcomes={self.n_outcomes})"


class StringSampler:
    """
    Sample strings whose characters are drawn from a weighted alphabet.

    Parameters
    ----------
    alphabet : str
        Characters to draw from (e.g. ``"TCAG"``)
    weights : array-like, optional
        One weight per character; uniform when omitted or empty
    """

    def __init__(self, alphabet: str, weights: Sequence[float] | None = None):
        if not alphabet:
            raise InvalidDistributionError("alphabet must not be empty")
        if weights is None or len(weights) == 0:
            weights = np.ones(len(alphabet))
        if len(weights) != len(alphabet):
            raise InvalidDistributionError(
                f"expected {len(alphabet)} weights for alphabet '{alphabet}', got {len(weights)}"
            )
        self.alphabet = alphabet
        self.sampler = CategoricalSampler(weights)
        self._codes = np.frombuffer(alphabet.encode("ascii"), dtype=np.uint8)

    def sample(self, rng: np.random.Generator, length: int) -> str:
        """Draw a string of ``length`` characters."""
        if length == 1:
            return self.alphabet[self.sampler.sample(rng)]
        idx = self.sampler.sample_many(rng, length)
        return self._codes[idx].tobytes().decode("ascii")
