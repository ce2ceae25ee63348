"""
Reference and variant sequences.
"""

from varevo.sequences.reference import ReferenceSequence
from varevo.sequences.variant import MutationRecord, VariantSequence
from varevo.sequences.variant_set import VariantSet

__all__ = ["ReferenceSequence", "MutationRecord", "VariantSequence", "VariantSet"]
