"""
Command-line interface for model_discovery.

Provides discover and tables commands for generating model definitions
from an application data source.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from model_discovery import __version__
from model_discovery.config import DiscoveryConfig
from model_discovery.discoverer import Discoverer
from model_discovery.errors import DiscoveryError

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def fail(err: DiscoveryError) -> None:
    console.print(f"[red]Error ({err.code}): {err}[/red]", soft_wrap=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="model-discovery")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """
    Model Discovery - Model definitions from database schemas

    Discover tables of an application data source and write one model
    definition file per table.
    """
    setup_logging(verbose)


@cli.command()
@click.option(
    "--app",
    "app_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Application root directory",
)
@click.option(
    "--datasource",
    "data_source",
    type=str,
    default=None,
    help="Data source name (case-insensitive)",
)
@click.option(
    "--tables",
    type=str,
    default=None,
    help="Comma-separated list of table names to discover (all tables if omitted)",
)
@click.option(
    "--schema",
    type=str,
    default=None,
    help="Schema/database name (defaults to the data source database)",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Definition directory relative to the application root (default common/models)",
)
@click.option(
    "--overwrite/--no-overwrite",
    default=None,
    help="Refresh properties of existing definition files",
)
@click.option(
    "--update-registry/--no-update-registry",
    default=None,
    help="Register discovered models in server/model-config.json",
)
@click.option(
    "--public/--private",
    default=None,
    help="Visibility of registered models",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with discovery options (flags take precedence)",
)
def discover(
    app_path: Optional[Path],
    data_source: Optional[str],
    tables: Optional[str],
    schema: Optional[str],
    output_dir: Optional[Path],
    overwrite: Optional[bool],
    update_registry: Optional[bool],
    public: Optional[bool],
    config_file: Optional[Path],
) -> None:
    """
    Discover models and write their definition files.

    Examples:

        # Discover every table of the "db" data source
        model-discovery discover --app ./my-app --datasource db

        # Refresh two models and register them as public
        model-discovery discover --app ./my-app --datasource db \\
            --tables PaymentMethod,customer --overwrite \\
            --update-registry --public
    """
    overrides = dict(
        app_path=app_path,
        data_source=data_source,
        tables=tables,
        schema=schema,
        output_dir=output_dir,
        overwrite=overwrite,
        update_registry=update_registry,
        public=public,
    )
    try:
        if config_file:
            config = DiscoveryConfig.from_yaml(config_file, **overrides)
        else:
            config = DiscoveryConfig.from_dict({}, **overrides)
    except DiscoveryError as e:
        fail(e)

    if not config.app_path or not config.data_source:
        console.print("[red]Error: --app and --datasource are required (or set them in --config)[/red]")
        sys.exit(1)

    console.print("[bold blue]Model Discovery[/bold blue]")
    console.print(f"Application: {config.app_path}")
    console.print(f"Data source: {config.data_source}")

    discoverer = Discoverer()
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Discovering models...", total=None)
            models = discoverer.discover_models(config)
            progress.update(task, completed=True)

        if config.update_registry:
            path = discoverer.register_models(models, public=config.public)
            console.print(f"Registry updated: {path}")
    except DiscoveryError as e:
        fail(e)

    table = Table(title="Discovered Models")
    table.add_column("Model", style="cyan")
    table.add_column("Properties", style="green", justify="right")
    table.add_column("File", style="yellow")

    for model, result in zip(models, discoverer.results):
        table.add_row(model.name, str(len(model.properties)), result.status.value)

    console.print(table)
    console.print(f"\n[green]Discovered {len(models)} models[/green]")


@cli.command()
@click.option(
    "--app",
    "app_path",
    type=click.Path(path_type=Path),
    required=True,
    help="Application root directory",
)
@click.option(
    "--datasource",
    "data_source",
    type=str,
    required=True,
    help="Data source name (case-insensitive)",
)
@click.option(
    "--schema",
    type=str,
    default=None,
    help="Schema/database name (defaults to the data source database)",
)
def tables(app_path: Path, data_source: str, schema: Optional[str]) -> None:
    """List the tables a data source can discover."""
    discoverer = Discoverer()
    try:
        discoverer.set_app(app_path)
        discoverer.set_data_source(data_source)
        found = discoverer.discover_tables(schema)
    except DiscoveryError as e:
        fail(e)

    table = Table(title=f"Tables in {data_source}")
    table.add_column("Schema", style="cyan")
    table.add_column("Table", style="green")

    for ref in found:
        table.add_row(ref.schema or "-", ref.name)

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
