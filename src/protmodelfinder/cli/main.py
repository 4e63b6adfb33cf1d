"""Main CLI application for protmodelfinder."""

import typer
from pathlib import Path
from typing import Optional
from enum import Enum

app = typer.Typer(
    name="protmodelfinder",
    help="Select the best-fitting empirical protein model by BIC and infer its ML tree with PhyML",
    no_args_is_help=True,
)


class OutputFormat(str, Enum):
    """Output format."""
    TEXT = "text"
    TSV = "tsv"
    JSON = "json"
    MARKDOWN = "markdown"


@app.command()
def select(
    alignment: Path = typer.Option(
        ...,
        "--alignment", "-s",
        help="Protein alignment (PHYLIP)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    model_set: str = typer.Option(
        ...,
        "--model-set", "-m",
        help="Model set: nuclear (1), organellar (2), nuclear-organellar (3), "
             "viral (4), all (5), test (6)",
    ),
    phyml: str = typer.Option(
        "phyml",
        "--phyml",
        help="PhyML executable",
        envvar="PROTMODELFINDER_PHYML",
    ),
    guide_tree: Optional[Path] = typer.Option(
        None,
        "--guide-tree", "-u",
        help="Fixed topology for scoring (default: BioNJ tree under LG)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="TSV report (default: <alignment>_sorted_model_set_<N>_fits.tsv)",
        dir_okay=False,
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.TEXT,
        "--format",
        help="Format of the table printed to stdout",
    ),
    jobs: int = typer.Option(
        1,
        "--jobs", "-j",
        help="Candidates scored in parallel",
        min=1,
    ),
    work_dir: Optional[Path] = typer.Option(
        None,
        "--work-dir",
        help="Directory for PhyML scratch files (default: system temp)",
        file_okay=False,
    ),
    keep_files: bool = typer.Option(
        False,
        "--keep-files",
        help="Keep PhyML scratch directories",
    ),
    no_tree_search: bool = typer.Option(
        False,
        "--no-tree-search",
        help="Stop after model selection",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show every PhyML call",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Minimal output",
    ),
):
    """
    Select a protein substitution model by BIC and infer the ML tree under it.

    Every matrix of the model set is evaluated plain, +G, +F and +F+G on a
    fixed guide topology. The table is sorted by BIC with delta BIC and BIC
    weights.

    Example:
        protmodelfinder select -s globins.phy -m nuclear
        protmodelfinder select -s globins.phy -m 6 --jobs 4 --no-tree-search
    """
    from .commands.select import run_select

    run_select(
        alignment=alignment,
        model_set=model_set,
        phyml=phyml,
        guide_tree=guide_tree,
        output=output,
        format=format.value,
        jobs=jobs,
        work_dir=work_dir,
        keep_files=keep_files,
        tree_search=not no_tree_search,
        verbose=verbose,
        quiet=quiet,
    )


@app.command()
def stats(
    alignment: Path = typer.Option(
        ...,
        "--alignment", "-s",
        help="Protein alignment (PHYLIP)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """
    Show sequence, site and branch counts and observed amino acid frequencies.

    Example:
        protmodelfinder stats -s globins.phy
    """
    from .commands.stats import run_stats

    run_stats(alignment=alignment)


@app.command(name="list-sets")
def list_sets():
    """
    List the model sets and the matrices they contain.
    """
    from ..models import ModelGroup

    for group in ModelGroup:
        typer.echo(f"{group.code}  {group.value:<20} {' '.join(group.matrices)}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
