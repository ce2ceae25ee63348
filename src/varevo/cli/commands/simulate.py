"""Simulate command for varevo CLI."""

import typer
from pathlib import Path
from typing import Optional
import numpy as np

from ...core.matrix import uniform_Q
from ...exceptions import VarevoError
from ...io.fasta import read_fasta
from ...models.rates import RateModel
from ...models.site_rates import SiteRateMultipliers
from ...sequences.variant_set import VariantSet
from ...simulate.output import SimulationOutput
from ...simulate.runner import evolve_variants


def simulate_variants(
    reference: Path = typer.Option(
        ...,
        "--reference", "-r",
        help="Reference FASTA file",
        exists=True,
    ),
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Output FASTA file for the variants",
    ),
    variants: int = typer.Option(
        1,
        "--variants", "-n",
        help="Number of variants per reference sequence",
    ),
    mutations: int = typer.Option(
        ...,
        "--mutations", "-m",
        help="Number of mutations per variant",
    ),
    model: Optional[Path] = typer.Option(
        None,
        "--model",
        help="Rate model JSON file (Q, xi, psi, pi, rel_insertion_rates, rel_deletion_rates)",
        exists=True,
    ),
    mu: float = typer.Option(
        1.0,
        "--mu",
        help="Substitution rate of the default equal-rates model (ignored with --model)",
    ),
    xi: float = typer.Option(
        0.0,
        "--xi",
        help="Overall indel rate (ignored with --model)",
    ),
    psi: float = typer.Option(
        1.0,
        "--psi",
        help="Insertion:deletion ratio (ignored with --model)",
    ),
    gamma_shape: Optional[float] = typer.Option(
        None,
        "--gamma-shape",
        help="Shape of gamma-distributed site rates (default: no heterogeneity)",
    ),
    gamma_scale: Optional[float] = typer.Option(
        None,
        "--gamma-scale",
        help="Scale of gamma-distributed site rates (default: 1/shape)",
    ),
    gamma_chunk: int = typer.Option(
        100,
        "--gamma-chunk",
        help="Number of sites sharing one gamma rate",
    ),
    gamma_categories: int = typer.Option(
        0,
        "--gamma-categories",
        help="Use a discrete gamma with this many rate categories (0 = continuous)",
    ),
    chunk_size: Optional[int] = typer.Option(
        None,
        "--chunk-size",
        help="Search only a random window of this many sites per mutation",
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
    mutations_table: Optional[Path] = typer.Option(
        None,
        "--mutations-table",
        help="Write all mutation records to this TSV file",
    ),
    output_params: bool = typer.Option(
        True,
        "--output-params/--no-output-params",
        help="Write parameters to JSON file",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Verify edit-list invariants after every mutation (slow)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress messages",
    ),
):
    """
    Mutate variants of reference sequences.

    Every sequence in the reference FASTA gets its own set of variants, each
    receiving the requested number of mutations.

    Examples:

        \b
        # 5 variants with 100 substitutions each
        varevo simulate -r ref.fasta -o variants.fasta -n 5 -m 100

        \b
        # Add indels and gamma rate heterogeneity
        varevo simulate -r ref.fasta -o variants.fasta -n 5 -m 100 --xi 0.2 --gamma-shape 0.5

        \b
        # Custom rate model, reproducible, 4 threads
        varevo simulate -r ref.fasta -o variants.fasta -m 100 --model model.json --seed 42 -j 4
    """
    if not quiet:
        typer.echo("varevo Variant Simulator")
        typer.echo("=" * 50)

    # Load references
    if not quiet:
        typer.echo(f"Loading references from {reference}...")
    try:
        refs = read_fasta(reference)
    except (VarevoError, OSError) as e:
        typer.echo(f"Error reading reference: {e}", err=True)
        raise typer.Exit(code=1)

    # Load or build rate model
    try:
        if model is not None:
            if not quiet:
                typer.echo(f"Loading rate model from {model}...")
            rate_model = RateModel.from_json(model)
        else:
            rate_model = RateModel(Q=uniform_Q(mu).tolist(), xi=xi, psi=psi)
        rate_table = rate_model.rate_table()
    except (VarevoError, OSError, ValueError, TypeError) as e:
        typer.echo(f"Error in rate model: {e}", err=True)
        raise typer.Exit(code=1)

    if variants < 1 or mutations < 0 or workers < 1:
        typer.echo("Error: need --variants >= 1, --mutations >= 0 and --workers >= 1", err=True)
        raise typer.Exit(code=1)

    if not quiet:
        typer.echo(f"\nSimulation parameters:")
        typer.echo(f"  References: {len(refs)}")
        typer.echo(f"  Variants per reference: {variants}")
        typer.echo(f"  Mutations per variant: {mutations}")
        typer.echo(f"  Indel rate (xi): {rate_model.xi:.4f}")
        if gamma_shape is not None:
            typer.echo(f"  Gamma shape: {gamma_shape:.4f} ({gamma_chunk} sites per chunk)")
        if seed is not None:
            typer.echo(f"  Seed: {seed}")

    master = np.random.SeedSequence(seed)
    ref_seeds = master.spawn(len(refs))

    variant_sets = []
    failures = 0
    for i, (ref, ref_seed) in enumerate(zip(refs, ref_seeds)):
        gamma_seed, evolve_seed = ref_seed.spawn(2)

        try:
            site_rates = None
            if gamma_shape is not None and gamma_categories > 0:
                site_rates = SiteRateMultipliers.from_discrete_gamma(
                    len(ref),
                    gamma_shape,
                    gamma_categories,
                    gamma_chunk,
                    np.random.default_rng(gamma_seed),
                    scale=gamma_scale,
                )
            elif gamma_shape is not None:
                site_rates = SiteRateMultipliers.from_gamma(
                    len(ref),
                    gamma_shape,
                    gamma_chunk,
                    np.random.default_rng(gamma_seed),
                    scale=gamma_scale,
                )

            variant_set = VariantSet(ref, n_variants=variants)
            summary = evolve_variants(
                variant_set,
                rate_table,
                mutations,
                site_rates=site_rates,
                chunk_size=chunk_size,
                seed=evolve_seed,
                n_workers=workers,
                check_invariants=check,
            )
        except VarevoError as e:
            typer.echo(f"Error simulating {ref.name}: {e}", err=True)
            raise typer.Exit(code=1)

        for outcome in summary.failed:
            failures += 1
            typer.echo(
                f"Warning: {ref.name}/{outcome.name} stopped after "
                f"{outcome.n_applied} mutations: {outcome.error}",
                err=True,
            )

        try:
            SimulationOutput.write_fasta(
                SimulationOutput.variant_sequences(variant_set, prefix=ref.name),
                output,
                append=i > 0,
            )
        except OSError as e:
            typer.echo(f"Error writing output: {e}", err=True)
            raise typer.Exit(code=1)

        variant_sets.append(variant_set)
        if not quiet:
            typer.echo(
                f"  {ref.name}: {summary.n_mutations} mutations, "
                f"sizes {min(variant_set.sizes())}-{max(variant_set.sizes())} -> {output}"
            )

    if mutations_table is not None:
        try:
            SimulationOutput.write_mutations(variant_sets, mutations_table)
            if not quiet:
                typer.echo(f"\nMutations -> {mutations_table}")
        except OSError as e:
            typer.echo(f"Error writing mutation table: {e}", err=True)
            raise typer.Exit(code=1)

    # Write parameters
    if output_params:
        params_path = output.parent / f"{output.stem}.params.json"
        try:
            params = {
                'model': rate_model.to_dict(),
                'seed': seed,
                'entropy': str(master.entropy),
                'variants': variants,
                'mutations': mutations,
                'gamma_shape': gamma_shape,
                'gamma_scale': gamma_scale,
                'gamma_chunk': gamma_chunk if gamma_shape is not None else None,
                'gamma_categories': gamma_categories,
                'chunk_size': chunk_size,
                'references': {
                    vs.reference.name: {
                        'size': len(vs.reference),
                        'variant_sizes': dict(zip(vs.names, vs.sizes())),
                    }
                    for vs in variant_sets
                },
            }
            SimulationOutput.write_parameters(params, params_path)
            if not quiet:
                typer.echo(f"\nParameters -> {params_path}")
        except OSError as e:
            typer.echo(f"Warning: Could not write parameters: {e}", err=True)

    if not quiet:
        if failures:
            typer.echo(f"\nSimulation complete ({failures} variant(s) stopped early)")
        else:
            typer.echo("\nSimulation complete!")
