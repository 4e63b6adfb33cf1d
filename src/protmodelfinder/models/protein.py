"""
Empirical amino-acid substitution models and the candidate search space.

Each model set (``ModelGroup``) names an ordered list of empirical
matrices. Every matrix is evaluated under four parameter augmentations
(``Variant``), giving ``4 * len(matrices)`` candidates per run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from ..exceptions import InvalidModelGroup
from ..io.sequences import AMINO_ACIDS


# 20 equilibrium frequencies constrained to sum to one
FREQUENCY_PARAMS = len(AMINO_ACIDS) - 1

# Shape parameter of the discrete gamma distribution
GAMMA_SHAPE_PARAMS = 1

# Number of discrete gamma rate categories used for +G variants
GAMMA_CATEGORIES = 4


NUCLEAR_MATRICES = ("AB", "BLOSUM62", "DAYHOFF", "DCMut", "JTT", "LG", "VT", "WAG")
ORGANELLAR_MATRICES = ("CpREV", "MTMAM", "MtREV", "MtArt")
VIRAL_MATRICES = ("HIVw", "HIVb", "RtREV")
TEST_MATRICES = ("JTT", "LG")


class ModelGroup(str, Enum):
    """Named set of empirical matrices to evaluate."""
    NUCLEAR = "nuclear"
    ORGANELLAR = "organellar"
    NUCLEAR_ORGANELLAR = "nuclear-organellar"
    VIRAL = "viral"
    ALL = "all"
    TEST = "test"

    @property
    def code(self) -> int:
        """Numeric code of the model set (1-6)."""
        return _GROUP_CODES[self]

    @property
    def matrices(self) -> Tuple[str, ...]:
        """Ordered base matrix names belonging to this set."""
        return _GROUP_MATRICES[self]

    @classmethod
    def parse(cls, value: Union[str, int, "ModelGroup"]) -> "ModelGroup":
        """
        Resolve a model set from its value, name or numeric code.

        Parameters
        ----------
        value : str, int or ModelGroup
            e.g. ``"nuclear"``, ``"NUCLEAR_ORGANELLAR"``, ``"3"`` or ``6``

        Returns
        -------
        ModelGroup

        Raises
        ------
        InvalidModelGroup
            If the value matches no model set
        """
        if isinstance(value, cls):
            return value

        text = str(value).strip()
        if text.isdigit():
            for group, code in _GROUP_CODES.items():
                if code == int(text):
                    return group
        else:
            lowered = text.lower()
            for group in cls:
                if lowered in (group.value, group.name.lower()):
                    return group

        valid = [f"{g.value} ({g.code})" for g in cls]
        raise InvalidModelGroup(value, valid)


_GROUP_CODES = {
    ModelGroup.NUCLEAR: 1,
    ModelGroup.ORGANELLAR: 2,
    ModelGroup.NUCLEAR_ORGANELLAR: 3,
    ModelGroup.VIRAL: 4,
    ModelGroup.ALL: 5,
    ModelGroup.TEST: 6,
}

_GROUP_MATRICES = {
    ModelGroup.NUCLEAR: NUCLEAR_MATRICES,
    ModelGroup.ORGANELLAR: ORGANELLAR_MATRICES,
    ModelGroup.NUCLEAR_ORGANELLAR: NUCLEAR_MATRICES + ORGANELLAR_MATRICES,
    ModelGroup.VIRAL: VIRAL_MATRICES,
    ModelGroup.ALL: NUCLEAR_MATRICES + ORGANELLAR_MATRICES + VIRAL_MATRICES,
    ModelGroup.TEST: TEST_MATRICES,
}


class Variant(Enum):
    """
    Parameter augmentation applied to a base matrix.

    The value is the suffix appended to the matrix name in candidate ids.
    """
    PLAIN = ""
    GAMMA = "+G"
    FREQ = "+F"
    FREQ_GAMMA = "+F+G"

    @property
    def label(self) -> str:
        return self.value or "plain"

    @property
    def uses_frequencies(self) -> bool:
        return self in (Variant.FREQ, Variant.FREQ_GAMMA)

    @property
    def uses_gamma(self) -> bool:
        return self in (Variant.GAMMA, Variant.FREQ_GAMMA)

    @property
    def extra_params(self) -> int:
        """Free parameters added on top of the branch lengths."""
        extra = 0
        if self.uses_frequencies:
            extra += FREQUENCY_PARAMS
        if self.uses_gamma:
            extra += GAMMA_SHAPE_PARAMS
        return extra

    @property
    def oracle_flags(self) -> Tuple[str, ...]:
        """PhyML flags selecting empirical frequencies and rate categories."""
        flags = []
        if self.uses_frequencies:
            flags += ["-f", "e"]
        if self.uses_gamma:
            flags += ["-c", str(GAMMA_CATEGORIES), "-a", "e"]
        else:
            flags += ["-c", "1"]
        return tuple(flags)


# Expansion order; ties in BIC are resolved by this order
VARIANT_ORDER = (Variant.PLAIN, Variant.GAMMA, Variant.FREQ, Variant.FREQ_GAMMA)


@dataclass(frozen=True)
class Candidate:
    """
    One base matrix combined with one variant.

    Attributes
    ----------
    matrix : str
        Base matrix name (e.g. "LG")
    variant : Variant
        Parameter augmentation
    """

    matrix: str
    variant: Variant

    @property
    def id(self) -> str:
        """Candidate label, e.g. ``"LG+F+G"``."""
        return f"{self.matrix}{self.variant.value}"

    @property
    def extra_params(self) -> int:
        return self.variant.extra_params

    @property
    def oracle_args(self) -> Tuple[str, ...]:
        """Model arguments handed to the oracle, matrix included."""
        return ("-m", self.matrix) + self.variant.oracle_flags

    def __str__(self) -> str:
        return self.id


def base_matrices(group: Union[str, int, ModelGroup]) -> List[str]:
    """Return the ordered base matrices of a model set."""
    return list(ModelGroup.parse(group).matrices)


def enumerate_candidates(group: Union[str, int, ModelGroup]) -> List[Candidate]:
    """
    Expand a model set into its candidate configurations.

    Parameters
    ----------
    group : str, int or ModelGroup
        Model set to expand

    Returns
    -------
    list of Candidate
        Matrices in set order, each expanded as plain, +G, +F, +F+G

    Raises
    ------
    InvalidModelGroup
        If ``group`` is not a known model set

    Examples
    --------
    >>> [c.id for c in enumerate_candidates("test")][:4]
    ['JTT', 'JTT+G', 'JTT+F', 'JTT+F+G']
    """
    group = ModelGroup.parse(group)
    return [
        Candidate(matrix=matrix, variant=variant)
        for matrix in group.matrices
        for variant in VARIANT_ORDER
    ]
