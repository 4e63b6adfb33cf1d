"""
Information criteria for scored candidate models.

For a model with log-likelihood lnL, K free parameters and n sites:

    AIC  = -2 lnL + 2K
    AICc = AIC + 2K(K + 1) / (n - K - 1)
    BIC  = -2 lnL + K ln(n)

K counts the branch lengths of the guide topology plus the parameters
added by the model variant. Values are never rounded here.
"""

import math
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

from ..exceptions import DegenerateAICc


# Below this many sites per parameter AICc should be preferred to AIC
AICC_SITES_PER_PARAM_THRESHOLD = 40


def count_branches(n_sequences: int) -> int:
    """
    Number of branches in an unrooted bifurcating tree.

    Parameters
    ----------
    n_sequences : int
        Number of leaves (must be >= 3)

    Returns
    -------
    int
        2 * n_sequences - 3
    """
    if n_sequences < 3:
        raise ValueError(f"Need at least 3 sequences for an unrooted tree, got {n_sequences}")
    return 2 * n_sequences - 3


def compute_aic(log_likelihood: float, total_params: int) -> float:
    """Akaike information criterion."""
    return -2.0 * log_likelihood + 2.0 * total_params


def compute_aicc(log_likelihood: float, total_params: int, n_sites: int) -> float:
    """
    Small-sample corrected AIC.

    Raises
    ------
    DegenerateAICc
        If ``n_sites - total_params - 1 <= 0``
    """
    denominator = n_sites - total_params - 1
    if denominator <= 0:
        raise DegenerateAICc(total_params, n_sites)
    aic = compute_aic(log_likelihood, total_params)
    return aic + 2.0 * total_params * (total_params + 1) / denominator


def compute_bic(log_likelihood: float, total_params: int, n_sites: int) -> float:
    """Bayesian information criterion."""
    return -2.0 * log_likelihood + total_params * math.log(n_sites)


@dataclass(frozen=True)
class FitRecord:
    """
    Information criteria for one scored candidate.

    Attributes
    ----------
    model : str
        Candidate id (e.g. "LG+G")
    total_params : int
        Free parameters K (branch lengths + variant parameters)
    sites_per_param : float
        n_sites / K
    log_likelihood : float
        Log-likelihood returned by the oracle
    aic : float
    aicc : float or None
        None when AICc is undefined for this K and n
    bic : float
    oracle_args : tuple of str
        Model arguments to re-invoke the oracle with this configuration
    """

    model: str
    total_params: int
    sites_per_param: float
    log_likelihood: float
    aic: float
    aicc: Optional[float]
    bic: float
    oracle_args: Tuple[str, ...] = ()

    @property
    def aicc_defined(self) -> bool:
        return self.aicc is not None

    @property
    def prefer_aicc(self) -> bool:
        """True when there are too few sites per parameter to trust AIC."""
        return self.sites_per_param < AICC_SITES_PER_PARAM_THRESHOLD


def compute_fit(
    log_likelihood: float,
    n_branches: int,
    extra_params: int,
    n_sites: int,
    model: str = "",
    oracle_args: Tuple[str, ...] = (),
) -> FitRecord:
    """
    Compute AIC, AICc and BIC for one candidate.

    Parameters
    ----------
    log_likelihood : float
        Maximised log-likelihood of the candidate
    n_branches : int
        Number of branch lengths estimated on the guide topology
    extra_params : int
        Parameters added by the variant (0, 1, 19 or 20)
    n_sites : int
        Alignment length
    model : str, optional
        Candidate id stored on the record
    oracle_args : tuple of str, optional
        Oracle arguments stored on the record

    Returns
    -------
    FitRecord
        Record with ``aicc=None`` when AICc is undefined

    Raises
    ------
    ValueError
        If the parameter count or the number of sites is not positive

    Examples
    --------
    >>> fit = compute_fit(-1000.0, n_branches=5, extra_params=1, n_sites=100)
    >>> fit.total_params, fit.aic
    (6, 2012.0)
    """
    total_params = n_branches + extra_params
    if total_params <= 0:
        raise ValueError(f"Number of parameters must be positive, got {total_params}")
    if n_sites <= 0:
        raise ValueError(f"Number of sites must be positive, got {n_sites}")

    if log_likelihood > 0:
        warnings.warn(
            f"Positive log-likelihood reported for {model or 'candidate'} "
            f"(lnL={log_likelihood}). Check the oracle output.",
            UserWarning
        )

    try:
        aicc = compute_aicc(log_likelihood, total_params, n_sites)
    except DegenerateAICc:
        aicc = None

    return FitRecord(
        model=model,
        total_params=total_params,
        sites_per_param=n_sites / total_params,
        log_likelihood=log_likelihood,
        aic=compute_aic(log_likelihood, total_params),
        aicc=aicc,
        bic=compute_bic(log_likelihood, total_params, n_sites),
        oracle_args=tuple(oracle_args),
    )
