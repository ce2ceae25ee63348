"""
FASTA parsing for reference sequences.
"""

import re
from pathlib import Path

from ..exceptions import InvalidInputError
from ..sequences.reference import ReferenceSequence


def read_fasta(filepath: Path | str) -> list[ReferenceSequence]:
    """
    Parse a FASTA file into reference sequences.

    Sequence names are the first word of each header line. Sequences may be
    wrapped over any number of lines and are upper-cased.

    Parameters
    ----------
    filepath : Path or str
        Path to FASTA file

    Returns
    -------
    list of ReferenceSequence
        One reference per record, in file order

    Examples
    --------
    >>> refs = read_fasta("genome.fasta")
    >>> refs[0].name
    'chr1'
    """
    filepath = Path(filepath)

    names = []
    sequences_raw = []

    with open(filepath, 'r') as f:
        current_name = None
        current_seq = []

        for line in f:
            line = line.strip()

            if not line:
                continue

            if line.startswith('>'):
                # Save previous sequence if exists
                if current_name is not None:
                    names.append(current_name)
                    sequences_raw.append(''.join(current_seq))

                header = line[1:].split()
                current_name = header[0] if header else f"seq{len(names)}"
                current_seq = []
            else:
                if current_name is None:
                    raise InvalidInputError(f"{filepath}: sequence data before first header")
                current_seq.append(line.upper())

        # Don't forget last sequence
        if current_name is not None:
            names.append(current_name)
            sequences_raw.append(''.join(current_seq))

    if not names:
        raise InvalidInputError(f"No sequences found in FASTA file {filepath}")

    return [
        ReferenceSequence(re.sub(r'\s', '', seq), name=name)
        for name, seq in zip(names, sequences_raw)
    ]
