"""
Reference sequences.
"""

import re
from dataclasses import dataclass

from ..exceptions import InvalidInputError

_INVALID = re.compile(r'[^TCAG]')


def check_nucleotides(seq: str, what: str = "sequence") -> None:
    """Raise :class:`InvalidInputError` if ``seq`` has characters outside T, C, A, G."""
    bad = _INVALID.search(seq)
    if bad:
        raise InvalidInputError(
            f"invalid nucleotide '{bad.group()}' at position {bad.start()} in {what}"
        )


@dataclass(frozen=True)
class ReferenceSequence:
    """
    Immutable nucleotide sequence that variants are derived from.

    Attributes
    ----------
    sequence : str
        Upper-case string over T, C, A, G (at least one character)
    name : str
        Sequence name (FASTA header)
    """

    sequence: str
    name: str = "ref"

    def __post_init__(self):
        seq = self.sequence.upper()
        if not seq:
            raise InvalidInputError("reference sequence must not be empty")
        check_nucleotides(seq, self.name)
        object.__setattr__(self, "sequence", seq)

    def size(self) -> int:
        return len(self.sequence)

    def __len__(self) -> int:
        return len(self.sequence)

    def __getitem__(self, idx):
        return self.sequence[idx]

    def __str__(self) -> str:
        return self.sequence

    def __repr__(self) -> str:
        return f"ReferenceSequence(name='{self.name}', size={len(self.sequence)})"
