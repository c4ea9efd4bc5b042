"""Command-line interface for zae-docstore provisioning."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from .client import DocstoreClient
from .config import DocstoreOptions
from .exceptions import ConfigurationError
from .provisioner import CapacityProvisioner, ProvisionReport


def _load_options(config: Path) -> DocstoreOptions:
    options = DocstoreOptions.from_yaml(config.read_text())
    options.validate()
    return options


@click.group()
@click.version_option(package_name="zae-docstore")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """zae-docstore collection management CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


@cli.command()
@click.argument("config", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(config: Path) -> None:
    """Validate a configuration file without contacting the store."""
    try:
        options = _load_options(config)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Configuration OK: database '{options.database_name}'")
    for document in options.documents:
        mode = "autoscale" if document.enable_auto_scale else "manual"
        click.echo(
            f"  {document.name}: schema={document.document_schema}, "
            f"partition_key={document.partition_key_name}, "
            f"throughput={document.offered_throughput} ({mode})"
        )


@cli.command()
@click.argument("config", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--endpoint-url",
    help="Override the configured endpoint URI (e.g., http://localhost:8000 for DynamoDB Local)",
)
@click.option(
    "--region",
    help="Override the configured region",
)
def provision(config: Path, endpoint_url: str | None, region: str | None) -> None:
    """Create missing collections and reconcile their throughput."""
    try:
        options = _load_options(config)
        if endpoint_url:
            options.endpoint_uri = endpoint_url
        if region:
            options.region = region
        options.validate()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    async def _provision() -> ProvisionReport:
        async with DocstoreClient.from_options(options) as client:
            return await CapacityProvisioner(client, options).provision()

    report = asyncio.run(_provision())

    for name in report.succeeded:
        suffix = " (throughput updated)" if name in report.throughput_replaced else ""
        click.echo(f"✓ {name}{suffix}")
    for name in report.skipped:
        click.echo(f"- {name} (skipped)")
    for name, error in report.failed.items():
        click.echo(f"✗ {name}: {error.reason}", err=True)

    if not report.ok:
        sys.exit(1)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
