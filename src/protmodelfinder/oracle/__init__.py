"""
Adapters for the external likelihood engine.
"""

from .base import OracleScore, ScoringOracle, TreeSearchResult
from .phyml import PhyMLRunner, parse_log_likelihood

__all__ = [
    "OracleScore",
    "ScoringOracle",
    "TreeSearchResult",
    "PhyMLRunner",
    "parse_log_likelihood",
]
