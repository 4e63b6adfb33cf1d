"""
Information criteria, BIC ranking and result reporting.
"""

from .criteria import (
    FitRecord,
    compute_aic,
    compute_aicc,
    compute_bic,
    compute_fit,
    count_branches,
)
from .ranking import (
    ModelRanking,
    RankedRecord,
    SelectionResult,
    bic_weights,
    rank_models,
)
from .results import CandidateFailure, ModelSelectionResult

__all__ = [
    "FitRecord",
    "compute_aic",
    "compute_aicc",
    "compute_bic",
    "compute_fit",
    "count_branches",
    "ModelRanking",
    "RankedRecord",
    "SelectionResult",
    "bic_weights",
    "rank_models",
    "CandidateFailure",
    "ModelSelectionResult",
]
