"""
Collections of variants derived from one reference.
"""

from typing import Iterator, Optional, Sequence

from ..exceptions import InvalidInputError, OutOfRangeError
from .reference import ReferenceSequence
from .variant import VariantSequence


class VariantSet:
    """
    Variant sequences sharing one reference, each with its own history.

    Parameters
    ----------
    reference : ReferenceSequence
        Shared reference
    n_variants : int, optional
        Number of variants to create, named ``var0``, ``var1``, ...
    names : sequence of str, optional
        Explicit variant names (overrides ``n_variants``)

    Examples
    --------
    >>> vs = VariantSet(ReferenceSequence("TCAGTCAG"), n_variants=2)
    >>> [v.name for v in vs]
    ['var0', 'var1']
    """

    def __init__(
        self,
        reference: ReferenceSequence,
        n_variants: int = 0,
        names: Optional[Sequence[str]] = None,
    ):
        self.reference = reference
        if names is None:
            if n_variants < 0:
                raise InvalidInputError(f"n_variants must be non-negative, got {n_variants}")
            names = [f"var{i}" for i in range(n_variants)]
        if len(set(names)) != len(names):
            raise InvalidInputError("variant names must be unique")
        self.variants: list[VariantSequence] = [
            VariantSequence(reference, name) for name in names
        ]

    def add_variant(self, name: Optional[str] = None) -> VariantSequence:
        """Append a new unmutated variant and return it."""
        if name is None:
            name = f"var{len(self.variants)}"
        if name in self.names:
            raise InvalidInputError(f"variant '{name}' already exists")
        var = VariantSequence(self.reference, name)
        self.variants.append(var)
        return var

    @property
    def names(self) -> list[str]:
        return [v.name for v in self.variants]

    def sizes(self) -> list[int]:
        return [v.size() for v in self.variants]

    def min_size(self) -> int:
        """Size of the shortest variant."""
        if not self.variants:
            raise OutOfRangeError("variant set is empty")
        return min(self.sizes())

    def __getitem__(self, idx: int) -> VariantSequence:
        return self.variants[idx]

    def __len__(self) -> int:
        return len(self.variants)

    def __iter__(self) -> Iterator[VariantSequence]:
        return iter(self.variants)

    def __repr__(self) -> str:
        return f"VariantSet(reference='{self.reference.name}', n_variants={len(self.variants)})"
