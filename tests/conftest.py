"""
Pytest configuration and shared fixtures.
"""

import stat

import pytest
from pathlib import Path
from typer.testing import CliRunner

from protmodelfinder.oracle import OracleScore, ScoringOracle, TreeSearchResult


SMALL_PROTEIN_PHYLIP = """\
4 60
seqA      MKVLAAGIVALLLAAGCSSQPATTETPAPAEKAEAPKAEAPAEEKKAAPAEEKAEAPKAE
seqB      MKVLAAGIVGLLLAAGCSSQPATSETPAPAEKAEAPKAEAPAEDKKAAPAEEKAEAPKAE
seqC      MKILAAGLVALLLAAGCSNQPATTETPAPAEKAEAPKAEAPAEEKKAAPAEEKAEAPRAE
seqD      MKVLSAGIVALLLAAGCSSQPATTETPAPAEKAEAPKVEAPAEEKKAAPAEEKAEAPKAE
"""

# Fake PhyML: lnL depends on the model flags so that LG+G wins
FAKE_PHYML = """\
#!/bin/sh
infile=""
lnl=1000
while [ $# -gt 0 ]; do
  case "$1" in
    -i) infile="$2"; shift 2 ;;
    -a) lnl=$((lnl - 10)); shift 2 ;;
    -f) lnl=$((lnl - 5)); shift 2 ;;
    -m) if [ "$2" = "JTT" ]; then lnl=$((lnl + 3)); fi; shift 2 ;;
    *) shift ;;
  esac
done
printf '. Log-likelihood: \\t\\t\\t-%s.00000\\n' "$lnl" > "${infile}_phyml_stats.txt"
printf '((seqA:0.1,seqB:0.2):0.05,seqC:0.3,seqD:0.4);\\n' > "${infile}_phyml_tree.txt"
"""


@pytest.fixture
def cli_runner():
    """CLI test runner for Typer apps."""
    return CliRunner()


@pytest.fixture
def small_alignment_file(tmp_path):
    """Four-sequence, 60-site protein alignment."""
    path = tmp_path / "small.phy"
    path.write_text(SMALL_PROTEIN_PHYLIP)
    return path


@pytest.fixture
def guide_tree_file(tmp_path):
    path = tmp_path / "guide.nwk"
    path.write_text("((seqA:0.1,seqB:0.2):0.05,seqC:0.3,seqD:0.4);\n")
    return path


@pytest.fixture
def fake_phyml(tmp_path):
    """Executable shell script that mimics PhyML's output files."""
    path = tmp_path / "bin" / "phyml"
    path.parent.mkdir()
    path.write_text(FAKE_PHYML)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeOracle(ScoringOracle):
    """
    In-process oracle returning fixed log-likelihoods.

    Parameters
    ----------
    scores : dict
        Candidate id -> log-likelihood, or an exception instance to raise
    default : float, optional
        Log-likelihood for candidates missing from ``scores``
    """

    def __init__(self, scores=None, default=-1000.0):
        self.scores = scores or {}
        self.default = default
        self.calls = []
        self.guide_tree_calls = 0

    def score(self, candidate, alignment, guide_tree):
        self.calls.append(candidate.id)
        value = self.scores.get(candidate.id, self.default)
        if isinstance(value, Exception):
            raise value
        return OracleScore(value, f". Log-likelihood: \t\t\t{value}\n")

    def build_guide_tree(self, alignment, output_dir):
        self.guide_tree_calls += 1
        path = Path(output_dir) / f"{Path(alignment).name}_LG-NJ.nwk"
        path.write_text("((seqA:0.1,seqB:0.2):0.05,seqC:0.3,seqD:0.4);\n")
        return path

    def search_tree(self, oracle_args, alignment, output_dir, label):
        stats_file = Path(output_dir) / f"{Path(alignment).name}_{label}_phyml_stats.txt"
        tree_file = Path(output_dir) / f"{Path(alignment).name}_{label}_phyml_tree.txt"
        stats_file.write_text(". Log-likelihood: \t\t\t-990.0\n")
        tree_file.write_text("((seqA:0.1,seqB:0.2):0.05,seqC:0.3,seqD:0.4);\n")
        self.last_search_args = tuple(oracle_args)
        return TreeSearchResult(label, -990.0, stats_file, tree_file)


@pytest.fixture
def fake_oracle_factory():
    return FakeOracle
