"""
Protein alignment parsing and composition statistics.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from ..analysis.criteria import count_branches
from ..exceptions import AlignmentFormatError


# Amino acid encoding
AMINO_ACIDS = 'ARNDCQEGHILKMFPSTWYV'
AA_TO_INDEX = {aa: i for i, aa in enumerate(AMINO_ACIDS)}

# Gaps, ambiguity codes (B, Z, X) and anything else non-standard
UNKNOWN_CODE = -1

_HEADER_RE = re.compile(r'^\s*(\d+)\s+(\d+)\s*$')


@dataclass
class Alignment:
    """
    Aligned protein sequences.

    Attributes
    ----------
    names : list[str]
        Sequence identifiers
    sequences : ndarray, shape (n_species, n_sites)
        Residues encoded as indices into ``AMINO_ACIDS``, ``UNKNOWN_CODE``
        for gaps and ambiguous residues
    n_species : int
        Number of sequences
    n_sites : int
        Number of alignment columns
    path : Path or None
        File the alignment was read from
    """

    names: list[str]
    sequences: np.ndarray
    n_species: int
    n_sites: int
    path: Optional[Path] = None

    @classmethod
    def from_phylip(cls, filepath: Path | str) -> "Alignment":
        """
        Parse an interleaved PHYLIP protein alignment.

        The first line holds the number of sequences and the number of
        sites. The first block has one line per sequence: an identifier
        followed by residues. Each later block has one unnamed line per
        sequence, in the same order. This is the layout PhyML reads by
        default; a file with every sequence on a single line is the
        one-block case.

        Parameters
        ----------
        filepath : Path or str
            Path to PHYLIP file

        Returns
        -------
        Alignment

        Raises
        ------
        AlignmentFormatError
            If the header is not two integers or the records do not match it

        Examples
        --------
        >>> aln = Alignment.from_phylip("globins.phy")
        >>> aln.n_species, aln.n_sites
        (12, 154)
        """
        filepath = Path(filepath)

        with open(filepath, 'r') as f:
            lines = [line.rstrip() for line in f if line.strip()]

        if not lines:
            raise AlignmentFormatError(f"{filepath} is empty")

        header = _HEADER_RE.match(lines[0])
        if header is None:
            raise AlignmentFormatError(
                f"{filepath} does not look like a PHYLIP alignment: "
                f"first line must hold two integers, got '{lines[0].strip()}'"
            )
        n_species = int(header.group(1))
        n_sites = int(header.group(2))
        if n_species == 0:
            raise AlignmentFormatError(f"{filepath} declares no sequences")

        names = []
        sequences_raw = []

        # First block: one named record per sequence
        for line in lines[1:n_species + 1]:
            fields = line.split()
            names.append(fields[0])
            sequences_raw.append(''.join(fields[1:]).upper())

        if len(names) != n_species:
            raise AlignmentFormatError(
                f"Expected {n_species} sequences, found {len(names)}"
            )

        # Later blocks carry no names and cycle through the sequences in order
        for i, line in enumerate(lines[n_species + 1:]):
            if i % n_species == 0 and all(len(seq) >= n_sites for seq in sequences_raw):
                raise AlignmentFormatError(
                    f"Found more than the {n_species} sequences of {n_sites} sites "
                    f"declared in the header"
                )
            sequences_raw[i % n_species] += re.sub(r'\s', '', line).upper()

        for name, seq in zip(names, sequences_raw):
            if len(seq) != n_sites:
                raise AlignmentFormatError(
                    f"Sequence {name} has length {len(seq)}, expected {n_sites}"
                )

        return cls(
            names=names,
            sequences=cls._encode_amino_acids(sequences_raw),
            n_species=n_species,
            n_sites=n_sites,
            path=filepath,
        )

    @staticmethod
    def _encode_amino_acids(sequences: list[str]) -> np.ndarray:
        """Encode amino acid sequences as integer arrays."""
        n_sequences = len(sequences)
        n_sites = len(sequences[0]) if sequences else 0

        encoded = np.full((n_sequences, n_sites), UNKNOWN_CODE, dtype=np.int8)

        for i, seq in enumerate(sequences):
            for j, aa in enumerate(seq):
                if aa in AA_TO_INDEX:
                    encoded[i, j] = AA_TO_INDEX[aa]

        return encoded

    @property
    def n_branches(self) -> int:
        """Branches of an unrooted bifurcating tree on these sequences."""
        return count_branches(self.n_species)

    def residue_counts(self) -> np.ndarray:
        """Counts of each standard residue, in ``AMINO_ACIDS`` order."""
        observed = self.sequences[self.sequences != UNKNOWN_CODE]
        return np.bincount(observed.astype(np.int64), minlength=len(AMINO_ACIDS))

    def amino_acid_frequencies(self) -> Dict[str, float]:
        """
        Observed relative frequency of each standard amino acid.

        Only the 20 standard residues are counted; gaps and ambiguity codes
        are ignored.

        Returns
        -------
        dict
            Residue letter -> frequency, in ``AMINO_ACIDS`` order. All zeros
            if the alignment holds no standard residue.
        """
        counts = self.residue_counts()
        total = counts.sum()
        if total == 0:
            return {aa: 0.0 for aa in AMINO_ACIDS}
        return {aa: float(c) / total for aa, c in zip(AMINO_ACIDS, counts)}

    def __repr__(self) -> str:
        return f"Alignment(n_species={self.n_species}, n_sites={self.n_sites})"
