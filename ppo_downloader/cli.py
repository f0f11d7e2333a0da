"""
Command-line interface for PPO Downloader.

Usage:
    ppo-data --genus Quercus --from-year 1979 --to-year 2004 -o quercus.csv
    ppo-data --bbox 44,-124,46,-122 --from-day 1 --to-day 60 --format geojson
    ppo-data --config my_search.yaml
"""

from __future__ import annotations

import sys

import click
import yaml
from rich.console import Console
from rich.table import Table

from ppo_downloader import __version__
from ppo_downloader.api import PPOClient
from ppo_downloader.config import Config, create_example_config, list_presets
from ppo_downloader.errors import PPOError, ValidationError
from ppo_downloader.exporters import get_exporter
from ppo_downloader.query import FilterSet
from ppo_downloader.utils import sanitize_filename, setup_logging

console = Console()


def print_banner():
    """Print the application banner."""
    console.print(
        "\n[bold green]PPO Downloader[/bold green] "
        f"[dim]v{__version__}[/dim]",
    )
    console.print(
        "[dim]Download plant phenology data from the PPO data portal[/dim]\n"
    )


@click.group(invoke_without_command=True)
@click.option(
    "--genus", "-g",
    help="Plant genus name (e.g., Quercus)",
)
@click.option(
    "--specific-epithet", "-s",
    help="Plant specific epithet (e.g., alba)",
)
@click.option(
    "--term-id", "-t",
    help="Plant Phenology Ontology stage (e.g., obo:PPO_0002324)",
)
@click.option("--from-year", type=int, help="First year to include")
@click.option("--to-year", type=int, help="Last year to include")
@click.option("--from-day", type=int, help="First day of year to include (1-366)")
@click.option("--to-day", type=int, help="Last day of year to include (1-366)")
@click.option(
    "--bbox", "-b",
    help="Bounding box as lat,long,lat,long (e.g., 44,-124,46,-122)",
)
@click.option(
    "--limit", "-l",
    type=int,
    help="Maximum number of records to return",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["csv", "excel", "geojson"]),
    default=None,
    help="Output format (default: csv)",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Output file path",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True),
    help="Load settings from YAML config file",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the query URL without downloading",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit",
)
@click.pass_context
def main(
    ctx,
    genus,
    specific_epithet,
    term_id,
    from_year,
    to_year,
    from_day,
    to_day,
    bbox,
    limit,
    output_format,
    output,
    config_file,
    dry_run,
    verbose,
    version,
):
    """
    Download plant phenology data from the PPO data portal.

    Examples:

    \b
    # Oak observations between 1979 and 2004
    ppo-data --genus Quercus --from-year 1979 --to-year 2004 -o quercus.csv

    \b
    # Everything in a bounding box during the first 60 days of the year
    ppo-data --bbox 44,-124,46,-122 --from-day 1 --to-day 60 --format geojson

    \b
    # Use a config file
    ppo-data --config my_search.yaml
    """
    if version:
        console.print(f"ppo-downloader version {__version__}")
        sys.exit(0)

    if ctx.invoked_subcommand is not None:
        return

    query_options = (
        genus, specific_epithet, term_id, from_year, to_year, from_day, to_day,
        bbox, limit,
    )
    if all(option is None for option in query_options) and not config_file:
        click.echo(ctx.get_help())
        sys.exit(0)

    setup_logging(verbose=verbose)

    print_banner()

    if config_file:
        try:
            config = Config.load(config_file)
            filter_set = config.get_filter_set()
            output_format = output_format or config.output_format
            if not output and config.output_path:
                output = config.output_path
            console.print(f"[green]Loaded config from: {config_file}[/green]\n")
        except (OSError, ValueError, yaml.YAMLError) as e:
            console.print(f"[red]Error loading config: {e}[/red]")
            sys.exit(1)
    else:
        try:
            filter_set = FilterSet(
                genus=genus,
                specific_epithet=specific_epithet,
                term_id=term_id,
                from_year=from_year,
                to_year=to_year,
                from_day=from_day,
                to_day=to_day,
                bbox=bbox,
                limit=limit,
            )
        except ValidationError as e:
            console.print(f"[red]Configuration error: {e}[/red]")
            sys.exit(1)

    output_format = str(output_format or "csv").strip().lower()

    try:
        get_exporter(output_format)
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    if not output:
        output = default_output_name(filter_set, output_format)

    run_download(filter_set, output_format, output, dry_run=dry_run)


def default_output_name(filter_set: FilterSet, output_format: str) -> str:
    """
    Derive an output file name from the filters.

    Raises:
        ValueError: If the format is not supported
    """
    name_parts = [p for p in (filter_set.genus, filter_set.specific_epithet) if p]
    base = "_".join(name_parts) if name_parts else "ppo_data"
    extension = get_exporter(output_format).FILE_EXTENSION
    return f"{sanitize_filename(base)}_PPO{extension}"


def run_download(
    filter_set: FilterSet,
    output_format: str,
    output_path: str,
    dry_run: bool = False,
):
    """
    Run the download process.

    Args:
        filter_set: Query filters
        output_format: Output format
        output_path: Output file path
        dry_run: Only print the query URL
    """
    show_config(filter_set)

    client = PPOClient()

    try:
        url = client.build_url(filter_set)

        if dry_run:
            console.print("[blue]Query URL:[/blue]")
            console.print(url, markup=False, emoji=False, soft_wrap=True)
            return

        with console.status("[bold green]Downloading from PPO data portal..."):
            df = client.download(filter_set)

        if df is None:
            console.print("[yellow]No results found.[/yellow]")
            sys.exit(0)

        console.print(f"[green]Records downloaded:[/green] {len(df):,}\n")

        with console.status(f"[bold green]Exporting to {output_format}..."):
            exporter = get_exporter(output_format)()
            output_file = exporter.export(df, output_path)

        console.print(f"\n[bold green]Success![/bold green] Saved to: {output_file}")

    except PPOError as e:
        console.print(f"\n[red]PPO data portal error: {e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Download interrupted by user.[/yellow]")
        sys.exit(130)
    finally:
        client.close()


def show_config(filter_set: FilterSet):
    """Display the current search settings."""
    table = Table(title="Search Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    if filter_set.genus:
        table.add_row("Genus", filter_set.genus)
    if filter_set.specific_epithet:
        table.add_row("Specific epithet", filter_set.specific_epithet)
    if filter_set.term_id:
        table.add_row("Phenology term", filter_set.term_id)
    if filter_set.from_year is not None or filter_set.to_year is not None:
        table.add_row(
            "Year range",
            f"{filter_set.from_year or '...'} - {filter_set.to_year or '...'}",
        )
    if filter_set.from_day is not None or filter_set.to_day is not None:
        table.add_row(
            "Day range",
            f"{filter_set.from_day or '...'} - {filter_set.to_day or '...'}",
        )
    if filter_set.bbox:
        box = filter_set.bbox
        table.add_row("Latitude", f"{box.min_lat} to {box.max_lat}")
        table.add_row("Longitude", f"{box.min_lng} to {box.max_lng}")
    if filter_set.limit is not None:
        table.add_row("Limit", f"{filter_set.limit:,}")

    console.print(table)
    console.print()


@main.command()
@click.argument("path", type=click.Path(), default="example_config.yaml")
def init(path):
    """Create an example configuration file."""
    print_banner()

    output_path = create_example_config(path)
    console.print(f"[green]Created example config:[/green] {output_path}")
    console.print(f"[dim]Edit this file and use with: ppo-data --config {path}[/dim]")


@main.command()
def presets():
    """List available preset configurations."""
    print_banner()

    preset_list = list_presets()

    if not preset_list:
        console.print("[yellow]No presets found.[/yellow]")
        console.print("[dim]Create one with: ppo-data init my_preset.yaml[/dim]")
        return

    console.print("[bold]Available presets:[/bold]\n")
    for preset in preset_list:
        console.print(f"  - {preset}")

    console.print("\n[dim]Use with: ppo-data --config ~/.ppo_downloader/PRESET.yaml[/dim]")


if __name__ == "__main__":
    main()
