"""
High-level API for protein model selection.

This module ties the pieces together: expand a model set into
candidates, score each candidate on a guide topology, compute the
information criteria, rank by BIC and hand the winner to a final
maximum-likelihood tree search.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .analysis.criteria import FitRecord, compute_fit
from .analysis.ranking import rank_models
from .analysis.results import CandidateFailure, ModelSelectionResult
from .exceptions import OracleError
from .io.sequences import Alignment
from .models import Candidate, ModelGroup, enumerate_candidates
from .oracle import PhyMLRunner, ScoringOracle, TreeSearchResult

logger = logging.getLogger(__name__)


# Called after each candidate with (candidate, fit or None, error or None)
ProgressCallback = Callable[[Candidate, Optional[FitRecord], Optional[OracleError]], None]


def _load_alignment(alignment: Union[str, Path, Alignment]) -> Alignment:
    """
    Load a PHYLIP alignment unless an Alignment is given.

    Raises
    ------
    FileNotFoundError
        If the alignment file doesn't exist
    AlignmentFormatError
        If the file is not a valid PHYLIP alignment
    """
    if isinstance(alignment, Alignment):
        if alignment.path is None:
            raise ValueError("Alignment objects passed to the oracle must carry a file path")
        return alignment

    path = Path(alignment)
    if not path.exists():
        raise FileNotFoundError(f"Alignment file not found: {path}")
    return Alignment.from_phylip(path)


def default_report_path(alignment: Union[str, Path], model_group: Union[str, int, ModelGroup]) -> Path:
    """
    Default location of the TSV report.

    Examples
    --------
    >>> default_report_path("data/globins.phy", "test")
    PosixPath('data/globins.phy_sorted_model_set_6_fits.tsv')
    """
    path = Path(alignment)
    group = ModelGroup.parse(model_group)
    return path.with_name(f"{path.name}_sorted_model_set_{group.code}_fits.tsv")


def score_candidate(
    candidate: Candidate,
    alignment: Alignment,
    guide_tree: Path,
    oracle: ScoringOracle,
) -> FitRecord:
    """
    Score one candidate and compute its information criteria.

    Raises
    ------
    OracleError
        If the oracle fails for this candidate
    """
    score = oracle.score(candidate, alignment.path, guide_tree)
    return compute_fit(
        score.log_likelihood,
        n_branches=alignment.n_branches,
        extra_params=candidate.extra_params,
        n_sites=alignment.n_sites,
        model=candidate.id,
        oracle_args=candidate.oracle_args,
    )


def _score_safely(candidate, alignment, guide_tree, oracle) -> Tuple[Optional[FitRecord], Optional[OracleError]]:
    try:
        return score_candidate(candidate, alignment, guide_tree, oracle), None
    except OracleError as e:
        logger.warning("Candidate %s not scored: %s", candidate.id, e)
        return None, e


def select_model(
    alignment: Union[str, Path, Alignment],
    model_group: Union[str, int, ModelGroup],
    oracle: Optional[ScoringOracle] = None,
    guide_tree: Optional[Union[str, Path]] = None,
    output_dir: Optional[Union[str, Path]] = None,
    jobs: int = 1,
    progress: Optional[ProgressCallback] = None,
) -> ModelSelectionResult:
    """
    Select the best-fitting protein model of a model set by BIC.

    Parameters
    ----------
    alignment : str, Path, or Alignment
        Protein alignment in PHYLIP format
    model_group : str, int, or ModelGroup
        Model set to evaluate (name or numeric code 1-6)
    oracle : ScoringOracle, optional
        Likelihood engine; a ``PhyMLRunner`` on ``$PATH`` by default
    guide_tree : str or Path, optional
        Fixed topology for scoring. If omitted, a BioNJ tree under LG is
        computed and saved next to the report.
    output_dir : str or Path, optional
        Where the guide tree is written (alignment directory by default)
    jobs : int, default=1
        Number of candidates scored concurrently
    progress : callable, optional
        Called once per candidate as ``progress(candidate, fit, error)``

    Returns
    -------
    ModelSelectionResult
        Ranked table, selected model and failed candidates

    Raises
    ------
    InvalidModelGroup
        If the model set is unknown (raised before any oracle call)
    OracleError
        If the guide tree cannot be computed
    NoCandidatesScored
        If no candidate could be ranked

    Examples
    --------
    >>> from protmodelfinder import select_model
    >>> result = select_model("globins.phy", "nuclear")
    >>> print(result.summary())
    >>> result.best.oracle_args
    ('-m', 'LG', '-c', '4', '-a', 'e')

    Notes
    -----
    Ranking does not depend on the order in which candidates finish:
    records are always ranked in enumeration order, and ties in BIC are
    resolved in favour of the candidate enumerated first.
    """
    group = ModelGroup.parse(model_group)
    candidates = enumerate_candidates(group)

    align = _load_alignment(alignment)
    n_branches = align.n_branches

    if oracle is None:
        oracle = PhyMLRunner()

    output_dir = Path(output_dir) if output_dir is not None else align.path.parent

    if guide_tree is None:
        logger.info("Computing %s guide tree for %s", "LG-NJ", align.path)
        guide_tree = oracle.build_guide_tree(align.path, output_dir)
    guide_tree = Path(guide_tree)

    logger.info(
        "Evaluating %d candidates of model set %s (%d sequences, %d sites, %d branches)",
        len(candidates), group.value, align.n_species, align.n_sites, n_branches,
    )

    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = [
                executor.submit(_score_safely, candidate, align, guide_tree, oracle)
                for candidate in candidates
            ]
            outcomes = []
            for candidate, future in zip(candidates, futures):
                outcome = future.result()
                if progress is not None:
                    progress(candidate, *outcome)
                outcomes.append(outcome)
    else:
        outcomes = []
        for candidate in candidates:
            outcome = _score_safely(candidate, align, guide_tree, oracle)
            if progress is not None:
                progress(candidate, *outcome)
            outcomes.append(outcome)

    fits: List[FitRecord] = []
    failures: List[CandidateFailure] = []
    for candidate, (fit, error) in zip(candidates, outcomes):
        if fit is not None:
            fits.append(fit)
        else:
            failures.append(CandidateFailure(candidate.id, str(error)))

    ranking = rank_models(fits)

    return ModelSelectionResult(
        alignment=align.path.name,
        model_group=group.value,
        n_sequences=align.n_species,
        n_sites=align.n_sites,
        n_branches=n_branches,
        ranking=ranking,
        failures=failures,
        guide_tree=guide_tree,
    )


def run_tree_search(
    result: ModelSelectionResult,
    alignment: Union[str, Path, Alignment],
    oracle: Optional[ScoringOracle] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> TreeSearchResult:
    """
    Infer the ML tree under the BIC-selected model.

    Parameters
    ----------
    result : ModelSelectionResult
        Output of ``select_model``
    alignment : str, Path, or Alignment
        The alignment the selection was run on
    oracle : ScoringOracle, optional
        Likelihood engine; a ``PhyMLRunner`` on ``$PATH`` by default
    output_dir : str or Path, optional
        Destination of the stats and tree files (alignment directory by default)

    Returns
    -------
    TreeSearchResult
    """
    align = _load_alignment(alignment)
    if oracle is None:
        oracle = PhyMLRunner()
    output_dir = Path(output_dir) if output_dir is not None else align.path.parent

    logger.info("Estimating ML tree under %s", result.best_model)
    return oracle.search_tree(result.best.oracle_args, align.path, output_dir, result.best_model)
