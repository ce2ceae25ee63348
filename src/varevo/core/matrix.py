"""
Nucleotide rate-matrix helpers.

Rows and columns are ordered T, C, A, G throughout the package.
"""

from typing import Optional

import numpy as np

from ..exceptions import InvalidInputError


def create_reversible_Q(
    rates: np.ndarray, pi: np.ndarray, normalize: bool = True
) -> np.ndarray:
    """
    Create a reversible rate matrix from exchangeability rates and stationary distribution.

    Parameters
    ----------
    rates : ndarray, shape (4, 4)
        Symmetric exchangeability matrix (r[i,j] = r[j,i])
    pi : ndarray, shape (4,)
        Stationary distribution (equilibrium frequencies)
    normalize : bool, default=True
        If True, scale Q so that expected rate is 1 substitution per time unit

    Returns
    -------
    Q : ndarray, shape (4, 4)
        Reversible rate matrix satisfying detailed balance

    Notes
    -----
    The rate matrix is constructed as Q[i,j] = r[i,j] * pi[j] for i != j,
    and Q[i,i] = -sum(Q[i,j] for j != i).

    Examples
    --------
    >>> # Equal exchangeabilities
    >>> rates = np.ones((4, 4)) - np.eye(4)
    >>> pi = np.ones(4) / 4
    >>> Q = create_reversible_Q(rates, pi)
    """
    rates = np.asarray(rates, dtype=np.float64)
    pi = np.asarray(pi, dtype=np.float64)
    if rates.shape != (4, 4):
        raise InvalidInputError(f"rates must have shape (4, 4), got {rates.shape}")
    if pi.shape != (4,):
        raise InvalidInputError(f"pi must have length 4, got {pi.shape}")

    # Q[i,j] = r[i,j] * pi_j (broadcast pi across columns)
    Q = rates * pi[np.newaxis, :]

    np.fill_diagonal(Q, 0.0)
    row_sums = np.sum(Q, axis=1)
    np.fill_diagonal(Q, -row_sums)

    if normalize:
        # Expected rate = -sum(pi_i * Q[i,i])
        expected_rate = -np.dot(pi, Q.diagonal())
        if expected_rate <= 0:
            raise InvalidInputError("rate matrix has zero expected substitution rate")
        Q /= expected_rate

    return Q


def uniform_Q(mu: float = 1.0, pi: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Rate matrix with equal exchangeabilities, scaled to ``mu`` substitutions
    per site per time unit.

    Used as the default substitution model by the command line.
    """
    if pi is None or len(pi) == 0:
        pi = np.full(4, 0.25)
    rates = np.ones((4, 4)) - np.eye(4)
    return create_reversible_Q(rates, np.asarray(pi, dtype=np.float64)) * mu
