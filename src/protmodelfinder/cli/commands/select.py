"""Select command implementation."""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from protmodelfinder import select_model, run_tree_search, default_report_path
from protmodelfinder.exceptions import (
    AlignmentFormatError,
    InvalidModelGroup,
    NoCandidatesScored,
    OracleError,
)
from protmodelfinder.io.sequences import Alignment
from protmodelfinder.models import ModelGroup
from protmodelfinder.oracle import PhyMLRunner

from .stats import echo_frequencies


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route library log records to stderr at the requested verbosity."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _fail(message: str, details: Optional[str] = None) -> None:
    typer.echo(f"Error: {message}", err=True)
    if details:
        typer.echo(f"Details: {details}", err=True)
    raise typer.Exit(code=1)


def run_select(
    alignment: Path,
    model_set: str,
    phyml: str,
    guide_tree: Optional[Path],
    output: Optional[Path],
    format: str,
    jobs: int,
    work_dir: Optional[Path],
    keep_files: bool,
    tree_search: bool,
    verbose: bool,
    quiet: bool,
):
    """Run model selection and the final tree search."""
    configure_logging(verbose, quiet)
    start_time = time.time()

    # Validate the model set before touching the oracle
    try:
        group = ModelGroup.parse(model_set)
    except InvalidModelGroup as e:
        _fail(str(e))

    try:
        aln = Alignment.from_phylip(alignment)
        n_branches = aln.n_branches
    except (AlignmentFormatError, ValueError, OSError) as e:
        _fail(f"Could not load alignment from {alignment}", str(e))

    if not quiet:
        typer.echo("Protein Model Selection", err=True)
        typer.echo("=" * 80, err=True)
        typer.echo(f"Alignment: {alignment}", err=True)
        typer.echo(f"Model set: {group.value} ({group.code}): {' '.join(group.matrices)}", err=True)
        typer.echo(f"- number of sequences: {aln.n_species}", err=True)
        typer.echo(f"- number of sites: {aln.n_sites}", err=True)
        typer.echo(f"- number of branches: {n_branches}", err=True)
        echo_frequencies(aln, err=True)
        typer.echo(err=True)

    try:
        runner = PhyMLRunner(executable=phyml, work_dir=work_dir, keep_files=keep_files)
    except OracleError as e:
        _fail(str(e))

    def report_progress(candidate, fit, error):
        if quiet:
            return
        if error is not None:
            typer.echo(f"[{_timestamp()}] {candidate.id:<14} FAILED: {error}", err=True)
        else:
            typer.echo(
                f"[{_timestamp()}] {candidate.id:<14} lnL = {fit.log_likelihood:.5f}  "
                f"K = {fit.total_params}",
                err=True,
            )

    try:
        result = select_model(
            aln,
            group,
            oracle=runner,
            guide_tree=guide_tree,
            jobs=jobs,
            progress=report_progress,
        )
    except OracleError as e:
        _fail("Could not compute the guide tree", str(e))
    except NoCandidatesScored as e:
        _fail("No candidate model could be scored", str(e))

    report_path = output if output is not None else default_report_path(alignment, group)
    try:
        result.write_tsv(report_path)
    except OSError as e:
        _fail(f"Could not write report to {report_path}", str(e))

    if format == "json":
        output_text = result.to_json()
    elif format == "tsv":
        output_text = result.to_tsv().rstrip("\n")
    elif format == "markdown":
        output_text = result.to_markdown_table()
    else:  # text
        output_text = result.summary()
    typer.echo(output_text)

    if not quiet:
        typer.echo(f"\nResults written to {report_path}", err=True)
        if result.failures:
            typer.echo(
                f"Warning: {len(result.failures)} candidate(s) could not be scored: "
                f"{', '.join(f.model for f in result.failures)}",
                err=True,
            )

    if tree_search:
        if not quiet:
            typer.echo(
                f"[{_timestamp()}] Estimating ML tree under best-fitting model "
                f"{result.best_model} selected by BIC",
                err=True,
            )
        try:
            tree = run_tree_search(result, aln, oracle=runner)
        except OracleError as e:
            _fail(f"ML tree search under {result.best_model} failed", str(e))

        if not quiet:
            typer.echo("# Your results:", err=True)
            typer.echo(f"  - {tree.stats_file}", err=True)
            typer.echo(f"  - {tree.tree_file}", err=True)
            typer.echo(f"  lnL = {tree.log_likelihood:.5f}", err=True)

    if not quiet:
        elapsed = int(time.time() - start_time)
        hours, rest = divmod(elapsed, 3600)
        minutes, seconds = divmod(rest, 60)
        typer.echo(f"Elapsed time: {hours:02d} hr, {minutes:02d} min, {seconds:02d} sec", err=True)
        typer.echo("Done!", err=True)
