"""
Output formatting for simulated variants.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..sequences.variant_set import VariantSet


class SimulationOutput:
    """
    Handle output formatting for simulated sequences.

    Provides methods to write:
    - Sequences in FASTA format
    - Mutation tables (one row per mutation record)
    - Parameters in JSON format
    """

    @staticmethod
    def write_fasta(
        sequences: Dict[str, str],
        output_path: Path,
        line_width: int = 60,
        append: bool = False,
    ):
        """
        Write sequences to FASTA format.

        Parameters
        ----------
        sequences : dict
            Mapping from sequence name to sequence string
        output_path : Path
            Output file path
        line_width : int
            Number of nucleotides per line (default 60)
        append : bool
            Append to an existing file instead of overwriting it
        """
        output_path = Path(output_path)

        with open(output_path, 'a' if append else 'w') as f:
            for name, seq in sequences.items():
                f.write(f">{name}\n")
                for i in range(0, len(seq), line_width):
                    f.write(seq[i:i+line_width] + '\n')

    @staticmethod
    def variant_sequences(variant_set: VariantSet, prefix: Optional[str] = None) -> Dict[str, str]:
        """
        Materialize every variant of a set.

        Names are ``{prefix}_{variant}`` when ``prefix`` is given.
        """
        out = {}
        for var in variant_set:
            name = f"{prefix}_{var.name}" if prefix else var.name
            out[name] = var.materialize()
        return out

    @staticmethod
    def write_mutations(
        variant_sets: Iterable[VariantSet],
        output_path: Path,
    ):
        """
        Write every mutation record to a tab-separated table.

        Output Format
        -------------
        chrom  variant  kind          ref_pos  var_pos  ref  alt
        seq0   var0     substitution  12       12       A    G
        seq0   var0     insertion     40       40       T    TGA
        seq0   var1     deletion      7        7        CAG  -

        Positions are 1-indexed; ``ref_pos`` is on the reference and
        ``var_pos`` on the variant.
        """
        output_path = Path(output_path)

        with open(output_path, 'w') as f:
            f.write("chrom\tvariant\tkind\tref_pos\tvar_pos\tref\talt\n")
            for vs in variant_sets:
                ref = vs.reference.sequence
                for var in vs:
                    for m in var.mutations:
                        ref_allele = ref[m.old_pos:m.ref_end]
                        alt_allele = m.content if m.content else "-"
                        f.write(
                            f"{vs.reference.name}\t{var.name}\t{m.kind}\t"
                            f"{m.old_pos+1}\t{m.new_pos+1}\t{ref_allele}\t{alt_allele}\n"
                        )

    @staticmethod
    def write_parameters(
        params: Dict,
        output_path: Path,
        indent: int = 2
    ):
        """
        Write simulation parameters to JSON file.

        Parameters
        ----------
        params : dict
            Simulation parameters
        output_path : Path
            Output file path
        indent : int
            JSON indentation level
        """
        output_path = Path(output_path)

        with open(output_path, 'w') as f:
            json.dump(params, f, indent=indent)
