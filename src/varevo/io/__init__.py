"""
Input/Output for reference sequences (FASTA).
"""

from varevo.io.fasta import read_fasta

__all__ = ["read_fasta"]
