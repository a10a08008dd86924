"""
Command-line interface for linkweaver.

Reads a rendered HTML document and a destinations file, injects semantic
internal links and writes the enriched document.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .engine.config import LinkweaverError, load_config
from .engine.index import skip_summary
from .services import inject_internal_links, load_targets
from .settings import configure_logging

console = Console(stderr=True)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def main(verbose: bool) -> None:
    """Semantic, word-boundary-safe internal link injection."""
    configure_logging("DEBUG" if verbose else None)


@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--targets",
    "-t",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="YAML or JSON list of {url, title} destinations.",
)
@click.option(
    "--current-url",
    type=str,
    default="",
    help="URL of the page being edited (never linked to itself).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file overriding engine defaults.",
)
@click.option("--max-links", type=int, default=None, help="Hard cap on inserted links.")
@click.option("--min-links", type=int, default=None, help="Soft target; fewer links only warns.")
@click.option(
    "--min-distance",
    type=int,
    default=None,
    help="Minimum character distance between two inserted links.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the enriched document (default: stdout).",
)
def inject(
    document: Path,
    targets: Path,
    current_url: str,
    config_path: Optional[Path],
    max_links: Optional[int],
    min_links: Optional[int],
    min_distance: Optional[int],
    output: Optional[Path],
) -> None:
    """Inject internal links into DOCUMENT."""
    try:
        html = document.read_text(encoding="utf-8")
        links = load_targets(targets)
        config = load_config(config_path)
        result = inject_internal_links(
            html,
            links,
            current_url,
            {
                "max_links": max_links,
                "min_links": min_links,
                "min_distance_between_links": min_distance,
            },
            config=config,
        )
    except LinkweaverError as e:
        raise click.ClickException(str(e)) from e

    if output:
        output.write_text(result.document, encoding="utf-8")
    else:
        click.echo(result.document)

    _display_summary(result)


def _display_summary(result) -> None:
    """Display insertions and skip reasons."""
    table = Table(title=f"Inserted links ({result.links_added})", show_header=True)
    table.add_column("URL", style="cyan")
    table.add_column("Anchor", style="green")
    table.add_column("Match")
    table.add_column("Score", justify="right")
    table.add_column("Section", justify="right")
    for insertion in result.insertions:
        table.add_row(
            insertion.url,
            insertion.anchor_text,
            insertion.match_type,
            f"{insertion.relevance_score:.2f}",
            str(insertion.section),
        )
    console.print(table)

    if result.skipped:
        skipped = Table(title="Skipped destinations", show_header=True)
        skipped.add_column("Reason", style="yellow")
        skipped.add_column("Count", justify="right")
        for reason, urls in skip_summary(result).items():
            skipped.add_row(reason, str(len(urls)))
        console.print(skipped)

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


if __name__ == "__main__":
    main()
