"""Stats command implementation."""

from pathlib import Path

import typer

from protmodelfinder.exceptions import AlignmentFormatError
from protmodelfinder.io.sequences import Alignment


def echo_frequencies(aln: Alignment, err: bool = False):
    """Print the observed amino acid frequency table."""
    typer.echo("- observed amino acid frequencies:", err=err)
    typer.echo("idx\tAA\tobs_freq", err=err)
    for i, (aa, freq) in enumerate(aln.amino_acid_frequencies().items(), start=1):
        typer.echo(f"{i}\t{aa}\t{freq:.4f}", err=err)


def run_stats(alignment: Path):
    """Print alignment size and amino acid composition."""
    try:
        aln = Alignment.from_phylip(alignment)
        n_branches = aln.n_branches
    except (AlignmentFormatError, ValueError, OSError) as e:
        typer.echo(f"Error: Could not load alignment from {alignment}", err=True)
        typer.echo(f"Details: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"- number of sequences: {aln.n_species}")
    typer.echo(f"- number of sites: {aln.n_sites}")
    typer.echo(f"- number of branches: {n_branches}")
    echo_frequencies(aln)
