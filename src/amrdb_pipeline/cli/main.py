"""Main CLI entry point for amrdb-pipeline.

Provides command group with global options and subcommands for curation.
"""

import logging
from pathlib import Path

import click

from amrdb_pipeline import __version__
from amrdb_pipeline.cli.curate_cmd import curate
from amrdb_pipeline.curation import decode_header
from amrdb_pipeline.exceptions import EncodingError
from amrdb_pipeline.sources import ADAPTERS


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.version_option(__version__, prog_name="amrdb-pipeline")
@click.option(
    '--config',
    type=click.Path(path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file (optional)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """amrdb-pipeline: curate public resistance and virulence gene databases.

    Turns heterogeneous FASTA exports into one deduplicated collection with
    canonical headers, ready for indexing.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
def sources():
    """List the source databases that can be curated."""
    for source, adapter in sorted(ADAPTERS.items(), key=lambda item: item[0].value):
        coding = "" if adapter.coding else " (non-coding)"
        click.echo(f"{source.value:<15} {adapter.description}{coding}")


@cli.command()
@click.argument('identifier')
def decode(identifier):
    """Split a canonical FASTA identifier into its fields."""
    try:
        header = decode_header(identifier)
    except EncodingError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        raise SystemExit(1)

    click.echo(f"source: {header.source}")
    click.echo(f"id:     {header.id}")
    click.echo(f"acc:    {header.acc}")
    click.echo(f"abx:    {header.abx}")


cli.add_command(curate)


if __name__ == '__main__':
    cli()
