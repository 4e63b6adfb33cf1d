"""
BIC ranking and model weights.

Candidates are ordered by BIC (stable, so equal BIC keeps enumeration
order). For each candidate i:

    delta_i = BIC_i - min(BIC)
    w_i     = exp(-delta_i / 2) / sum_j exp(-delta_j / 2)

Weights of poorly supported candidates underflow to exactly 0; this is
expected and not an error.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from scipy.special import logsumexp

from .criteria import FitRecord
from ..exceptions import NoCandidatesScored, UnscorableCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedRecord:
    """
    A FitRecord with its BIC-derived support.

    Attributes
    ----------
    fit : FitRecord
        Underlying criteria
    rank : int
        Position in ascending-BIC order (1 = best)
    delta_bic : float
        BIC minus the lowest BIC of the run
    bic_weight : float
        Normalised BIC weight
    cumulative_bic_weight : float
        Running sum of weights in ascending-BIC order
    """

    fit: FitRecord
    rank: int
    delta_bic: float
    bic_weight: float
    cumulative_bic_weight: float

    @property
    def model(self) -> str:
        return self.fit.model

    @property
    def bic(self) -> float:
        return self.fit.bic


@dataclass(frozen=True)
class SelectionResult:
    """
    The BIC-selected candidate.

    Attributes
    ----------
    model : str
        Winning candidate id
    record : RankedRecord
        Ranked record of the winner
    oracle_args : tuple of str
        Arguments to pass verbatim to the final tree search
    """

    model: str
    record: RankedRecord
    oracle_args: Tuple[str, ...]


@dataclass
class ModelRanking:
    """Ranked candidates, the selected model and the excluded candidates."""

    records: List[RankedRecord]
    best: SelectionResult
    excluded: List[UnscorableCandidate] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, model: str) -> RankedRecord:
        for record in self.records:
            if record.model == model:
                return record
        raise KeyError(model)


def bic_weights(bic_values: Sequence[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    BIC differences, weights and cumulative weights.

    Parameters
    ----------
    bic_values : sequence of float
        Finite BIC values, already in ascending order

    Returns
    -------
    delta : ndarray
        BIC - min(BIC)
    weights : ndarray
        Normalised weights (sum to 1)
    cumulative : ndarray
        Running sum of ``weights``
    """
    bic = np.asarray(bic_values, dtype=float)
    if bic.size == 0:
        raise NoCandidatesScored("No BIC values to weight")

    delta = bic - bic.min()
    log_raw = -0.5 * delta

    with np.errstate(under='ignore'):
        weights = np.exp(log_raw - logsumexp(log_raw))

    cumulative = np.cumsum(weights)
    return delta, weights, cumulative


def rank_models(records: Sequence[FitRecord]) -> ModelRanking:
    """
    Rank scored candidates by BIC and select the best one.

    Parameters
    ----------
    records : sequence of FitRecord
        Records in enumeration order

    Returns
    -------
    ModelRanking
        Ranked records (ascending BIC), the selection, and any records
        excluded for a non-finite BIC

    Raises
    ------
    NoCandidatesScored
        If no record has a finite BIC

    Examples
    --------
    >>> ranking = rank_models(fits)
    >>> ranking.best.model
    'LG+G'
    """
    if not records:
        raise NoCandidatesScored("No candidates were scored; nothing to rank")

    excluded = []
    rankable = []
    for record in records:
        if math.isfinite(record.bic):
            rankable.append(record)
        else:
            problem = UnscorableCandidate(record.model, record.bic)
            logger.warning(str(problem))
            excluded.append(problem)

    if not rankable:
        raise NoCandidatesScored(
            f"None of the {len(records)} scored candidates has a finite BIC"
        )

    # sorted() is stable: equal BIC keeps enumeration order
    ordered = sorted(rankable, key=lambda r: r.bic)
    delta, weights, cumulative = bic_weights([r.bic for r in ordered])

    ranked = [
        RankedRecord(
            fit=fit,
            rank=i + 1,
            delta_bic=float(delta[i]),
            bic_weight=float(weights[i]),
            cumulative_bic_weight=float(cumulative[i]),
        )
        for i, fit in enumerate(ordered)
    ]

    top = ranked[0]
    best = SelectionResult(model=top.model, record=top, oracle_args=top.fit.oracle_args)
    return ModelRanking(records=ranked, best=best, excluded=excluded)
