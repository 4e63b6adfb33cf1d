"""
Input/output for protein alignments.
"""

from .sequences import Alignment, AMINO_ACIDS

__all__ = ["Alignment", "AMINO_ACIDS"]
