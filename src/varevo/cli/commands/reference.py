"""Reference command for varevo CLI."""

import typer
from pathlib import Path
from typing import List, Optional

from ...exceptions import VarevoError
from ...simulate.output import SimulationOutput
from ...simulate.reference import create_references, length_distribution


def create_reference(
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Output FASTA file",
    ),
    count: int = typer.Option(
        1,
        "--count", "-n",
        help="Number of sequences",
    ),
    length: float = typer.Option(
        ...,
        "--length", "-l",
        help="Sequence length (mean length when --length-sd > 0)",
    ),
    length_sd: float = typer.Option(
        0.0,
        "--length-sd",
        help="Standard deviation of gamma-distributed lengths (0 = fixed length)",
    ),
    freqs: Optional[List[float]] = typer.Option(
        None,
        "--freq",
        help="Nucleotide frequency, given four times in T C A G order (default: uniform)",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducibility",
    ),
    workers: int = typer.Option(
        1,
        "--workers", "-j",
        help="Number of worker threads",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress messages",
    ),
):
    """
    Generate random reference sequences.

    Examples:

        \b
        # Three sequences of 10,000 bases
        varevo reference -o ref.fasta -n 3 -l 10000

        \b
        # GC-rich sequences with gamma-distributed lengths
        varevo reference -o ref.fasta -n 10 -l 5000 --length-sd 500 \\
            --freq 0.2 --freq 0.3 --freq 0.2 --freq 0.3
    """
    if freqs and len(freqs) != 4:
        typer.echo(f"Error: Expected 4 nucleotide frequencies, got {len(freqs)}", err=True)
        raise typer.Exit(code=1)

    try:
        dist = length_distribution(length, length_sd)
        refs = create_references(count, dist, equil_freqs=freqs, seed=seed, n_workers=workers)
    except VarevoError as e:
        typer.echo(f"Error creating sequences: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        SimulationOutput.write_fasta({r.name: r.sequence for r in refs}, output)
    except OSError as e:
        typer.echo(f"Error writing output: {e}", err=True)
        raise typer.Exit(code=1)

    if not quiet:
        typer.echo(f"Wrote {len(refs)} sequence(s) -> {output}")
