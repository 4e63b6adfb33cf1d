"""
Result object for a model selection run.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, List
import json

import pandas as pd

from .criteria import AICC_SITES_PER_PARAM_THRESHOLD
from .ranking import ModelRanking, RankedRecord, SelectionResult


TABLE_COLUMNS = [
    "model", "K", "sites/K", "lnL", "AIC", "AICc", "BIC", "deltaBIC", "BICw", "BICcumW",
]


@dataclass(frozen=True)
class CandidateFailure:
    """A candidate that could not be scored."""

    model: str
    error: str


@dataclass
class ModelSelectionResult:
    """
    Outcome of evaluating a model set on one alignment.

    Attributes
    ----------
    alignment : str
        Alignment file name
    model_group : str
        Model set that was evaluated
    n_sequences : int
    n_sites : int
    n_branches : int
    ranking : ModelRanking
        Candidates ranked by BIC
    failures : list of CandidateFailure
        Candidates the oracle could not score
    guide_tree : Path or None
        Topology the candidates were scored on

    Examples
    --------
    >>> result = select_model("globins.phy", "test")
    >>> print(result.summary())
    >>> result.write_tsv("globins_fits.tsv")
    """

    alignment: str
    model_group: str
    n_sequences: int
    n_sites: int
    n_branches: int
    ranking: ModelRanking
    failures: List[CandidateFailure] = field(default_factory=list)
    guide_tree: Optional[Path] = None

    @property
    def best(self) -> SelectionResult:
        return self.ranking.best

    @property
    def best_model(self) -> str:
        return self.ranking.best.model

    @property
    def records(self) -> List[RankedRecord]:
        return self.ranking.records

    @property
    def excluded(self) -> List[str]:
        """Ids of all candidates missing from the table."""
        return [f.model for f in self.failures] + [e.model for e in self.ranking.excluded]

    def rows(self) -> List[Dict[str, Any]]:
        """Unrounded table rows in ascending-BIC order."""
        rows = []
        for r in self.records:
            fit = r.fit
            rows.append({
                "model": fit.model,
                "K": fit.total_params,
                "sites/K": fit.sites_per_param,
                "lnL": fit.log_likelihood,
                "AIC": fit.aic,
                "AICc": fit.aicc,
                "BIC": fit.bic,
                "deltaBIC": r.delta_bic,
                "BICw": r.bic_weight,
                "BICcumW": r.cumulative_bic_weight,
            })
        return rows

    def summary(self) -> str:
        """
        Generate a formatted summary of the model fits.

        Returns
        -------
        str
            Multi-line table sorted by BIC, followed by notes
        """
        lines = []
        lines.append("=" * 100)
        lines.append(f"PROTEIN MODEL SELECTION: {self.alignment} (model set: {self.model_group})")
        lines.append("=" * 100)
        lines.append("")
        lines.append(f"Sequences: {self.n_sequences}")
        lines.append(f"Sites:     {self.n_sites}")
        lines.append(f"Branches:  {self.n_branches}")
        lines.append("")

        lines.append(
            f"{'model':<14} {'K':>4} {'sites/K':>8} {'lnL':>14} {'AIC':>13} {'AICc':>13} "
            f"{'BIC':>13} {'deltaBIC':>10} {'BICw':>6} {'BICcumW':>8}"
        )
        lines.append("-" * 100)
        for row in self.rows():
            aicc = f"{row['AICc']:>13.5f}" if row['AICc'] is not None else f"{'NA':>13}"
            lines.append(
                f"{row['model']:<14} "
                f"{row['K']:>4d} "
                f"{row['sites/K']:>8.2f} "
                f"{row['lnL']:>14.5f} "
                f"{row['AIC']:>13.5f} "
                f"{aicc} "
                f"{row['BIC']:>13.5f} "
                f"{row['deltaBIC']:>10.5f} "
                f"{row['BICw']:>6.2f} "
                f"{row['BICcumW']:>8.2f}"
            )
        lines.append("")

        if self.failures or self.ranking.excluded:
            lines.append("Candidates not ranked:")
            for failure in self.failures:
                lines.append(f"  - {failure.model}: {failure.error}")
            for problem in self.ranking.excluded:
                lines.append(f"  - {problem}")
            lines.append("")

        if any(r.fit.prefer_aicc for r in self.records):
            lines.append(
                f"* NOTE 1: sites/K < {AICC_SITES_PER_PARAM_THRESHOLD} for some models; "
                "AICc is recommended over AIC."
            )
        else:
            lines.append(
                f"* NOTE 1: when sites/K < {AICC_SITES_PER_PARAM_THRESHOLD}, "
                "the AICc is recommended over AIC."
            )
        lines.append(
            "* NOTE 2: Best model selected by BIC, because AIC is biased "
            "in favour of parameter-rich models."
        )
        lines.append("")
        lines.append(f"Best model (BIC): {self.best_model}")
        lines.append(f"Oracle arguments: {' '.join(self.best.oracle_args)}")
        lines.append("=" * 100)

        return "\n".join(lines)

    def to_tsv(self) -> str:
        """
        Tab-separated report, one row per ranked candidate.

        Undefined AICc values are written as ``NA``.
        """
        lines = ["\t".join(TABLE_COLUMNS)]
        for row in self.rows():
            aicc = f"{row['AICc']:.5f}" if row['AICc'] is not None else "NA"
            lines.append("\t".join([
                row['model'],
                str(row['K']),
                f"{row['sites/K']:.2f}",
                f"{row['lnL']:.5f}",
                f"{row['AIC']:.5f}",
                aicc,
                f"{row['BIC']:.5f}",
                f"{row['deltaBIC']:.5f}",
                f"{row['BICw']:.4f}",
                f"{row['BICcumW']:.4f}",
            ]))
        return "\n".join(lines) + "\n"

    def write_tsv(self, filepath: Path | str) -> Path:
        """Write the TSV report and return its path."""
        filepath = Path(filepath)
        with open(filepath, 'w') as f:
            f.write(self.to_tsv())
        return filepath

    def to_dict(self) -> Dict[str, Any]:
        """
        Export results as a dictionary.

        Returns
        -------
        dict
            JSON-serialisable dictionary of the run
        """
        return {
            'alignment': self.alignment,
            'model_group': self.model_group,
            'n_sequences': int(self.n_sequences),
            'n_sites': int(self.n_sites),
            'n_branches': int(self.n_branches),
            'best_model': self.best_model,
            'oracle_args': list(self.best.oracle_args),
            'models': self.rows(),
            'failures': [{'model': f.model, 'error': f.error} for f in self.failures],
            'unscorable': [e.model for e in self.ranking.excluded],
            'guide_tree': str(self.guide_tree) if self.guide_tree else None,
        }

    def to_json(self, filepath: Optional[str] = None, indent: int = 2) -> str:
        """
        Export results as JSON.

        Parameters
        ----------
        filepath : str, optional
            If provided, write JSON to this file
        indent : int, default=2
            Indentation level for pretty printing

        Returns
        -------
        str
            JSON string representation
        """
        json_str = json.dumps(self.to_dict(), indent=indent)

        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)

        return json_str

    def to_markdown_table(self) -> str:
        """Export the ranked models as a markdown table."""
        lines = []
        lines.append(f"### Model selection for {self.alignment}")
        lines.append("")
        lines.append("| " + " | ".join(TABLE_COLUMNS) + " |")
        lines.append("|" + "|".join("---" for _ in TABLE_COLUMNS) + "|")
        for row in self.rows():
            aicc = f"{row['AICc']:.3f}" if row['AICc'] is not None else "NA"
            lines.append(
                f"| {row['model']} | {row['K']} | {row['sites/K']:.2f} | {row['lnL']:.3f} | "
                f"{row['AIC']:.3f} | {aicc} | {row['BIC']:.3f} | {row['deltaBIC']:.3f} | "
                f"{row['BICw']:.4f} | {row['BICcumW']:.4f} |"
            )
        lines.append("")
        lines.append(f"**Best model (BIC):** {self.best_model}")
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Export the ranked models as a pandas DataFrame.

        Examples
        --------
        >>> df = result.to_dataframe()
        >>> df.to_csv('fits.csv', index=False)
        """
        return pd.DataFrame(self.rows(), columns=TABLE_COLUMNS)

    def __str__(self) -> str:
        return self.summary()
