"""
Per-nucleotide mutation rates and event-type probabilities.

A :class:`RateTable` is derived once from the rate model and then shared,
read-only, by every sampler in a run.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np

from ..exceptions import InvalidInputError

# Nucleotide order used for every matrix and vector in the package
NUCLEOTIDES = "TCAG"
NUCLEOTIDE_TO_INDEX = {'T': 0, 'C': 1, 'A': 2, 'G': 3}
INDEX_TO_NUCLEOTIDE = {0: 'T', 1: 'C', 2: 'A', 3: 'G'}


def _as_weights(values: Sequence[float], name: str) -> np.ndarray:
    w = np.asarray(values, dtype=np.float64).ravel()
    if w.size == 0:
        raise InvalidInputError(f"{name} must contain at least one value")
    if not np.all(np.isfinite(w)) or np.any(w < 0):
        raise InvalidInputError(f"{name} must be finite and non-negative")
    if w.sum() <= 0:
        raise InvalidInputError(f"{name} must sum to a positive value")
    return w


def equilibrium_frequencies(pi: Optional[Sequence[float]]) -> np.ndarray:
    """
    Validate and normalise nucleotide equilibrium frequencies.

    An empty or missing vector means uniform frequencies (0.25 each).
    """
    if pi is None or len(pi) == 0:
        return np.full(4, 0.25)
    pi = _as_weights(pi, "pi")
    if pi.size != 4:
        raise InvalidInputError(f"pi must have length 4, got {pi.size}")
    return pi / pi.sum()


class RateTable:
    """
    Total mutation rate per nucleotide plus conditional event probabilities.

    Events are laid out in one vector per nucleotide: the four substitution
    targets (T, C, A, G, with the self-substitution slot forced to zero),
    then insertions of length 1..n_ins, then deletions of length 1..n_del.

    Parameters
    ----------
    Q : ndarray, shape (4, 4)
        Substitution rates, rows are the current nucleotide. The diagonal is
        ignored.
    insertion_rates : array-like
        Absolute per-site rate of insertions of length 1, 2, ...
    deletion_rates : array-like
        Absolute per-site rate of deletions of length 1, 2, ...
    pi : array-like, optional
        Equilibrium frequencies (used for inserted nucleotides)

    Attributes
    ----------
    q : np.ndarray, shape (4,)
        Total mutation rate of each nucleotide
    probs : np.ndarray, shape (4, n_events)
        Probability of each event given that a mutation hits the nucleotide
    event_lengths : np.ndarray, shape (n_events,)
        0 for substitutions, +k for insertions, -k for deletions
    pi : np.ndarray, shape (4,)
        Normalised equilibrium frequencies
    """

    def __init__(
        self,
        Q: np.ndarray,
        insertion_rates: Sequence[float],
        deletion_rates: Sequence[float],
        pi: Optional[Sequence[float]] = None,
    ):
        Q = np.array(Q, dtype=np.float64)
        if Q.shape != (4, 4):
            raise InvalidInputError(f"Q must have shape (4, 4), got {Q.shape}")
        np.fill_diagonal(Q, 0.0)
        if not np.all(np.isfinite(Q)) or np.any(Q < 0):
            raise InvalidInputError("off-diagonal entries of Q must be finite and non-negative")

        ins = np.asarray(insertion_rates, dtype=np.float64).ravel()
        dels = np.asarray(deletion_rates, dtype=np.float64).ravel()
        for name, arr in (("insertion_rates", ins), ("deletion_rates", dels)):
            if arr.size == 0:
                raise InvalidInputError(f"{name} must contain at least one value")
            if not np.all(np.isfinite(arr)) or np.any(arr < 0):
                raise InvalidInputError(f"{name} must be finite and non-negative")

        self.n_insertions = int(ins.size)
        self.n_deletions = int(dels.size)
        self.pi = equilibrium_frequencies(pi)

        indel = np.concatenate([ins, dels])
        event_rates = np.hstack([Q, np.tile(indel, (4, 1))])

        self.q = event_rates.sum(axis=1)
        if self.q.sum() <= 0:
            raise InvalidInputError("all mutation rates are zero")

        # A nucleotide that never mutates keeps an all-zero row
        with np.errstate(invalid="ignore", divide="ignore"):
            probs = event_rates / self.q[:, np.newaxis]
        probs[self.q == 0] = 0.0
        self.probs = probs

        self.event_lengths = np.concatenate([
            np.zeros(4, dtype=np.int64),
            np.arange(1, self.n_insertions + 1, dtype=np.int64),
            -np.arange(1, self.n_deletions + 1, dtype=np.int64),
        ])

        # Byte -> rate lookup for vectorised rate sums over sequence strings
        self.rate_lookup = np.zeros(256, dtype=np.float64)
        for nt, i in NUCLEOTIDE_TO_INDEX.items():
            self.rate_lookup[ord(nt)] = self.q[i]

    @classmethod
    def from_model(
        cls,
        Q: np.ndarray,
        xi: float,
        psi: float,
        pi: Optional[Sequence[float]] = None,
        rel_insertion_rates: Sequence[float] = (1.0,),
        rel_deletion_rates: Sequence[float] = (1.0,),
    ) -> "RateTable":
        """
        Build a rate table from an overall indel rate and its split.

        Parameters
        ----------
        Q : ndarray, shape (4, 4)
            Substitution rate matrix
        xi : float
            Overall indel rate per site
        psi : float
            Ratio of insertion to deletion rate
        pi : array-like, optional
            Equilibrium frequencies
        rel_insertion_rates, rel_deletion_rates : array-like
            Relative rates of indels of length 1, 2, ...; rescaled to sum to
            the insertion and deletion rate respectively

        Examples
        --------
        >>> from varevo.core.matrix import uniform_Q
        >>> table = RateTable.from_model(uniform_Q(), xi=0.1, psi=1.0)
        >>> table.event_lengths.tolist()
        [0, 0, 0, 0, 1, -1]
        """
        if not np.isfinite(xi) or xi < 0:
            raise InvalidInputError(f"xi must be non-negative, got {xi}")
        if not np.isfinite(psi) or psi < 0:
            raise InvalidInputError(f"psi must be non-negative, got {psi}")

        rel_ins = _as_weights(rel_insertion_rates, "rel_insertion_rates")
        rel_del = _as_weights(rel_deletion_rates, "rel_deletion_rates")

        xi_i = xi * psi / (1.0 + psi)   # overall insertion rate
        xi_d = xi / (1.0 + psi)         # overall deletion rate

        return cls(
            Q,
            rel_ins / rel_ins.sum() * xi_i,
            rel_del / rel_del.sum() * xi_d,
            pi=pi,
        )

    @property
    def n_events(self) -> int:
        return self.event_lengths.size

    def rate_of(self, nucleotide: str) -> float:
        """Total mutation rate of one nucleotide character."""
        return float(self.rate_lookup[ord(nucleotide)])

    def sequence_rates(self, seq: str) -> np.ndarray:
        """Per-position mutation rates for a nucleotide string."""
        codes = np.frombuffer(seq.encode("ascii"), dtype=np.uint8)
        return self.rate_lookup[codes]

    def __repr__(self) -> str:
        return (
            f"RateTable(q={np.round(self.q, 6).tolist()}, "
            f"n_insertions={self.n_insertions}, n_deletions={self.n_deletions})"
        )


@dataclass
class RateModel:
    """
    Rate-model configuration, as read from the command line or a JSON file.

    Attributes
    ----------
    Q : list of list of float
        4x4 substitution rate matrix (rows/cols T, C, A, G)
    xi : float
        Overall indel rate
    psi : float
        Insertion:deletion ratio
    pi : list of float
        Equilibrium frequencies (empty means uniform)
    rel_insertion_rates, rel_deletion_rates : list of float
        Relative weights of indel lengths 1, 2, ...
    """

    Q: list
    xi: float = 0.0
    psi: float = 1.0
    pi: list = field(default_factory=list)
    rel_insertion_rates: list = field(default_factory=lambda: [1.0])
    rel_deletion_rates: list = field(default_factory=lambda: [1.0])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateModel":
        if "Q" not in data:
            raise InvalidInputError("rate model is missing 'Q'")
        unknown = set(data) - {f for f in cls.__dataclass_fields__}
        if unknown:
            raise InvalidInputError(f"unknown rate model fields: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path | str) -> "RateModel":
        """Load a rate model from a JSON file."""
        with open(Path(path)) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'Q': np.asarray(self.Q, dtype=float).tolist(),
            'xi': float(self.xi),
            'psi': float(self.psi),
            'pi': [float(p) for p in self.pi],
            'rel_insertion_rates': [float(r) for r in self.rel_insertion_rates],
            'rel_deletion_rates': [float(r) for r in self.rel_deletion_rates],
        }

    def rate_table(self) -> RateTable:
        return RateTable.from_model(
            np.asarray(self.Q, dtype=np.float64),
            self.xi,
            self.psi,
            pi=self.pi,
            rel_insertion_rates=self.rel_insertion_rates,
            rel_deletion_rates=self.rel_deletion_rates,
        )
