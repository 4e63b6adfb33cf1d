"""
protmodelfinder: BIC-based selection of empirical protein substitution models.

Evaluates a set of empirical amino-acid matrices, each combined or not
with gamma rate heterogeneity (+G) and empirical frequencies (+F),
computes AIC, AICc, BIC, delta BIC and BIC weights, and estimates a
maximum-likelihood tree under the BIC-selected model with PhyML.

Quick Start
-----------
Select a model and infer the tree:

>>> from protmodelfinder import select_model, run_tree_search
>>> result = select_model("globins.phy", "nuclear")
>>> print(result.summary())
>>> tree = run_tree_search(result, "globins.phy")
>>> print(tree.newick)

Examples
--------
>>> # Inspect the candidate space of a model set
>>> from protmodelfinder import enumerate_candidates
>>> [c.id for c in enumerate_candidates("test")]
['JTT', 'JTT+G', 'JTT+F', 'JTT+F+G', 'LG', 'LG+G', 'LG+F', 'LG+F+G']

>>> # Rank externally computed fits
>>> from protmodelfinder import compute_fit, rank_models
>>> fits = [compute_fit(-2310.4, 21, 0, 300, model="LG"),
...         compute_fit(-2255.9, 21, 1, 300, model="LG+G")]
>>> rank_models(fits).best.model
'LG+G'
"""

__version__ = "0.5.0"

# High-level API
from .api import select_model, run_tree_search, default_report_path

# Model space
from .models import ModelGroup, Variant, Candidate, enumerate_candidates

# Criteria and ranking
from .analysis import (
    FitRecord,
    RankedRecord,
    SelectionResult,
    ModelRanking,
    ModelSelectionResult,
    compute_fit,
    rank_models,
)

# Oracle adapters
from .oracle import ScoringOracle, PhyMLRunner

# I/O
from .io.sequences import Alignment

from .exceptions import (
    ModelFinderError,
    InvalidModelGroup,
    AlignmentFormatError,
    DegenerateAICc,
    OracleError,
    OracleUnavailable,
    OracleNoOutput,
    OracleParseError,
    UnscorableCandidate,
    NoCandidatesScored,
)

__all__ = [
    # Simple API - Start here!
    "select_model",
    "run_tree_search",
    "default_report_path",

    # Model space
    "ModelGroup",
    "Variant",
    "Candidate",
    "enumerate_candidates",

    # Criteria and ranking
    "FitRecord",
    "RankedRecord",
    "SelectionResult",
    "ModelRanking",
    "ModelSelectionResult",
    "compute_fit",
    "rank_models",

    # Oracle
    "ScoringOracle",
    "PhyMLRunner",

    # I/O
    "Alignment",

    # Errors
    "ModelFinderError",
    "InvalidModelGroup",
    "AlignmentFormatError",
    "DegenerateAICc",
    "OracleError",
    "OracleUnavailable",
    "OracleNoOutput",
    "OracleParseError",
    "UnscorableCandidate",
    "NoCandidatesScored",

    # Version
    "__version__",
]
