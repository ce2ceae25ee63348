"""
Pytest configuration and shared fixtures.
"""

import pytest
import numpy as np
from typer.testing import CliRunner

from varevo.core.matrix import uniform_Q
from varevo.models.rates import RateTable
from varevo.sequences.reference import ReferenceSequence


@pytest.fixture
def cli_runner():
    """CLI test runner for Typer apps."""
    return CliRunner()


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return np.random.default_rng(12345)


@pytest.fixture
def short_ref():
    """Ten-base reference."""
    return ReferenceSequence("TCAGTCAGTC", name="short")


@pytest.fixture
def long_ref():
    """Random 2,000-base reference."""
    seq_rng = np.random.default_rng(7)
    seq = "".join(seq_rng.choice(list("TCAG"), size=2000))
    return ReferenceSequence(seq, name="long")


@pytest.fixture
def substitution_table():
    """Equal-rates substitution model without indels."""
    return RateTable.from_model(uniform_Q(), xi=0.0, psi=1.0)


@pytest.fixture
def indel_table():
    """Equal-rates model with indels of length 1-3."""
    return RateTable.from_model(
        uniform_Q(),
        xi=0.5,
        psi=1.0,
        rel_insertion_rates=[3.0, 2.0, 1.0],
        rel_deletion_rates=[3.0, 2.0, 1.0],
    )


@pytest.fixture
def fasta_file(tmp_path):
    """FASTA file with two wrapped sequences."""
    content = (
        ">chr1 first test sequence\n"
        "TCAGTCAGTC\n"
        "AGTCAGTCAG\n"
        ">chr2\n"
        "ggccaattgg\n"
        "CCAATT\n"
    )
    path = tmp_path / "ref.fasta"
    path.write_text(content)
    return path
