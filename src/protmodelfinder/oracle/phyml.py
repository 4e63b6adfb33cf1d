"""PhyML execution and output parsing."""

import logging
import re
import shutil
import subprocess
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from .base import OracleScore, ScoringOracle, TreeSearchResult
from ..exceptions import OracleNoOutput, OracleParseError, OracleUnavailable
from ..models import Candidate

logger = logging.getLogger(__name__)


# PhyML names its outputs after the input file
STATS_SUFFIX = "_phyml_stats.txt"
TREE_SUFFIX = "_phyml_tree.txt"

# Distance matrix / model used for the starting topology
GUIDE_TREE_MODEL = "LG"

_LNL_RE = re.compile(r'Log-likelihood:\s*(\S+)')


def parse_log_likelihood(stats_text: str, model: Optional[str] = None) -> float:
    """
    Extract the log-likelihood from a PhyML stats file.

    Parameters
    ----------
    stats_text : str
        Contents of ``<alignment>_phyml_stats.txt``
    model : str, optional
        Candidate id used in error messages

    Returns
    -------
    float
        First ``Log-likelihood:`` value in the text

    Raises
    ------
    OracleParseError
        If no log-likelihood line is present or its value is not a number
    """
    match = _LNL_RE.search(stats_text)
    if match is None:
        raise OracleParseError("no 'Log-likelihood:' line in PhyML stats output", model)
    try:
        return float(match.group(1))
    except ValueError:
        raise OracleParseError(
            f"could not parse log-likelihood value '{match.group(1)}'", model
        )


class PhyMLRunner(ScoringOracle):
    """
    Run PhyML and parse results.

    Every invocation runs in a fresh scratch directory holding a copy of
    the alignment, so concurrent calls never share output files.

    Parameters
    ----------
    executable : str, default="phyml"
        PhyML binary name or path
    work_dir : Path, optional
        Parent directory for scratch directories (system temp by default)
    keep_files : bool, default=False
        Keep scratch directories after each call

    Raises
    ------
    OracleUnavailable
        If the executable cannot be found
    """

    def __init__(
        self,
        executable: str = "phyml",
        work_dir: Optional[Path] = None,
        keep_files: bool = False,
    ):
        resolved = shutil.which(str(executable))
        if resolved is None:
            raise OracleUnavailable(
                f"PhyML executable '{executable}' not found; install it or add it to $PATH"
            )
        self.executable = Path(resolved)
        self.work_dir = Path(work_dir) if work_dir is not None else None
        self.keep_files = keep_files

        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _scratch(self, label: str) -> Iterator[Path]:
        safe_label = re.sub(r'[^A-Za-z0-9_.-]', '_', label)
        path = Path(tempfile.mkdtemp(prefix=f"{safe_label}_", dir=self.work_dir))
        try:
            yield path
        finally:
            if self.keep_files:
                logger.info("Kept PhyML scratch directory %s", path)
            else:
                shutil.rmtree(path, ignore_errors=True)

    def build_command(self, alignment_name: str, args: Sequence[str]) -> List[str]:
        """
        Full PhyML command line for an amino-acid alignment.

        No ``-q`` flag: PhyML reads the input as interleaved PHYLIP, the
        layout accepted by ``Alignment.from_phylip``.
        """
        return [str(self.executable), "-i", alignment_name, "-d", "aa", *args]

    def run(
        self,
        alignment: Path,
        args: Sequence[str],
        scratch: Path,
        model: Optional[str] = None,
    ) -> Tuple[Path, Path]:
        """
        Run PhyML on a copy of ``alignment`` inside ``scratch``.

        Returns
        -------
        stats_file, tree_file : Path
            Output artifacts inside ``scratch``

        Raises
        ------
        OracleUnavailable
            If the process cannot be started
        OracleNoOutput
            If the stats artifact is missing or empty
        """
        alignment = Path(alignment)
        staged = scratch / alignment.name
        shutil.copyfile(alignment, staged)

        cmd = self.build_command(staged.name, args)
        logger.info("running: %s", " ".join(cmd))

        start_time = time.time()
        try:
            completed = subprocess.run(
                cmd,
                cwd=str(scratch),
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise OracleUnavailable(f"could not run {self.executable}: {e}", model)
        logger.debug("PhyML finished in %.1f s with status %d",
                     time.time() - start_time, completed.returncode)

        stats_file = scratch / f"{staged.name}{STATS_SUFFIX}"
        tree_file = scratch / f"{staged.name}{TREE_SUFFIX}"

        if not stats_file.exists() or stats_file.stat().st_size == 0:
            detail = (completed.stderr or completed.stdout or "").strip().splitlines()
            tail = detail[-1] if detail else "no output"
            raise OracleNoOutput(
                f"PhyML exited with status {completed.returncode} without writing "
                f"{stats_file.name} ({tail})",
                model,
            )

        return stats_file, tree_file

    def score(self, candidate: Candidate, alignment: Path, guide_tree: Path) -> OracleScore:
        """
        Score a candidate on the guide topology (branch lengths and rates optimised).

        Examples
        --------
        >>> runner = PhyMLRunner()
        >>> lnL, _ = runner.score(Candidate("LG", Variant.GAMMA), aln, tree)
        """
        args = [*candidate.oracle_args, "-u", str(Path(guide_tree).resolve()), "-o", "lr"]
        with self._scratch(candidate.id) as scratch:
            stats_file, _ = self.run(alignment, args, scratch, model=candidate.id)
            stats_text = stats_file.read_text()
        return OracleScore(parse_log_likelihood(stats_text, candidate.id), stats_text)

    def build_guide_tree(self, alignment: Path, output_dir: Path) -> Path:
        """
        Compute a BioNJ tree from LG distances and save it as ``<aln>_LG-NJ.nwk``.
        """
        alignment = Path(alignment)
        output_dir = Path(output_dir)
        args = ["-m", GUIDE_TREE_MODEL, "-c", "1", "-b", "0", "-o", "n"]

        with self._scratch("guide_tree") as scratch:
            _, tree_file = self.run(alignment, args, scratch, model=f"{GUIDE_TREE_MODEL}-NJ")
            if not tree_file.exists() or tree_file.stat().st_size == 0:
                raise OracleNoOutput(f"could not compute {tree_file.name}", f"{GUIDE_TREE_MODEL}-NJ")
            destination = output_dir / f"{alignment.name}_{GUIDE_TREE_MODEL}-NJ.nwk"
            shutil.copyfile(tree_file, destination)

        return destination

    def search_tree(
        self,
        oracle_args: Sequence[str],
        alignment: Path,
        output_dir: Path,
        label: str,
    ) -> TreeSearchResult:
        """
        Full ML search (topology, branch lengths, rates) with SPR+NNI moves.

        Outputs are saved as ``<aln>_<label>_phyml_stats.txt`` and
        ``<aln>_<label>_phyml_tree.txt`` in ``output_dir``.
        """
        alignment = Path(alignment)
        output_dir = Path(output_dir)
        args = [*oracle_args, "-o", "tlr", "-s", "BEST"]

        with self._scratch(label) as scratch:
            stats_file, tree_file = self.run(alignment, args, scratch, model=label)
            if not tree_file.exists() or tree_file.stat().st_size == 0:
                raise OracleNoOutput(f"{tree_file.name} was not generated", label)

            stats_dest = output_dir / f"{alignment.name}_{label}{STATS_SUFFIX}"
            tree_dest = output_dir / f"{alignment.name}_{label}{TREE_SUFFIX}"
            shutil.copyfile(stats_file, stats_dest)
            shutil.copyfile(tree_file, tree_dest)
            stats_text = stats_file.read_text()

        return TreeSearchResult(
            model=label,
            log_likelihood=parse_log_likelihood(stats_text, label),
            stats_file=stats_dest,
            tree_file=tree_dest,
        )
