"""
Interface to the external likelihood engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Sequence

from ..models import Candidate


class OracleScore(NamedTuple):
    """Log-likelihood of one candidate and the stats text it was read from."""

    log_likelihood: float
    stats_text: str


@dataclass(frozen=True)
class TreeSearchResult:
    """Artifacts of the final maximum-likelihood search."""

    model: str
    log_likelihood: float
    stats_file: Path
    tree_file: Path

    @property
    def newick(self) -> str:
        return self.tree_file.read_text().strip()


class ScoringOracle(ABC):
    """
    Likelihood engine used to score candidates and to infer trees.

    Implementations must be safe to call concurrently when every call
    receives its own arguments; ``select_model`` relies on this for
    ``jobs > 1``.
    """

    @abstractmethod
    def score(self, candidate: Candidate, alignment: Path, guide_tree: Path) -> OracleScore:
        """
        Optimise branch lengths and model parameters on a fixed topology.

        Raises
        ------
        OracleUnavailable, OracleNoOutput, OracleParseError
        """

    @abstractmethod
    def build_guide_tree(self, alignment: Path, output_dir: Path) -> Path:
        """Infer the topology candidates are scored on and return its path."""

    @abstractmethod
    def search_tree(
        self,
        oracle_args: Sequence[str],
        alignment: Path,
        output_dir: Path,
        label: str,
    ) -> TreeSearchResult:
        """Run a full ML tree search under the given model arguments."""
