"""Curate command: build the canonical collection for one source.

Orchestrates:
1. Load config (optional YAML) and build the run configuration
2. Stage raw files (unless --no-fetch)
3. Run the curation pipeline
4. Optionally index the collection
5. Print a summary
"""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from amrdb_pipeline.collaborators import BlastIndexer, HttpSourceFetcher
from amrdb_pipeline.config import RunConfig, load_config
from amrdb_pipeline.exceptions import CurationError
from amrdb_pipeline.pipeline import CurationPipeline

logger = logging.getLogger(__name__)


@click.command('curate')
@click.argument('source')
@click.option(
    '--outdir',
    type=click.Path(path_type=Path),
    default=None,
    help='Existing output directory (default: output_dir from config)'
)
@click.option(
    '--datadir',
    type=click.Path(path_type=Path),
    default=None,
    help='Staging directory for raw downloads (default: data_dir from config)'
)
@click.option(
    '--force',
    is_flag=True,
    help='Re-download raw files even if already staged'
)
@click.option(
    '--no-fetch',
    is_flag=True,
    help='Use already staged files only; never download'
)
@click.option(
    '--index',
    is_flag=True,
    help='Build a makeblastdb index of the collection'
)
@click.pass_context
def curate(ctx, source, outdir, datadir, force, no_fetch, index):
    """Curate SOURCE into a deduplicated collection with canonical headers.

    Examples:

        # Download and curate ResFinder into db/resfinder/sequences
        amrdb-pipeline curate resfinder --outdir db

        # Re-curate from already staged files
        amrdb-pipeline curate ncbi --outdir db --datadir staging --no-fetch
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style(f"=== Curating {source} ===", bold=True))
    click.echo()

    try:
        config = None
        if config_path is not None and Path(config_path).exists():
            config = load_config(config_path)
            click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))

        if outdir is None and config is not None:
            outdir = config.output_dir
        if datadir is None and config is not None:
            datadir = config.data_dir
        if outdir is None or datadir is None:
            raise click.UsageError("--outdir and --datadir are required without a config file")

        run_config = RunConfig(
            source=source,
            outdir=outdir,
            datadir=datadir,
            force=force,
            debug=ctx.obj.get('verbose', False),
            index=index,
        )
        click.echo(f"  Staging: {run_config.staging_dir}")
        click.echo(f"  Output:  {run_config.collection_dir}")
        click.echo()

        fetcher = None
        if not no_fetch:
            fetcher = HttpSourceFetcher(
                config=config.fetch if config is not None else None,
                url_overrides=config.source_urls if config is not None else None,
            )

        pipeline = CurationPipeline(
            run_config,
            fetcher=fetcher,
            indexer=BlastIndexer() if index else None,
            config=config,
        )
        summary = pipeline.run()

    except click.UsageError:
        raise
    except (CurationError, FileNotFoundError, ValidationError) as e:
        click.echo(click.style(f"Curation failed: {e}", fg='red'), err=True)
        logger.debug("Curation failed", exc_info=True)
        sys.exit(1)

    click.echo(click.style("=== Summary ===", bold=True))
    click.echo(f"Raw entries:        {summary.entry_count}")
    click.echo(f"Adapted records:    {summary.adapted_count}")
    click.echo(f"Skipped entries:    {summary.skipped_count}")
    for status, count in sorted(summary.cds_counts.items()):
        click.echo(f"CDS {status + ':':<16}{count}")
    click.echo(f"Duplicates dropped: {summary.duplicate_count}")
    click.echo(f"Records written:    {summary.output_count}")
    click.echo(f"Collection: {summary.fasta_path}")
    click.echo(f"Manifest:   {summary.manifest_path}")
    click.echo(f"Provenance: {summary.provenance_path}")
    if summary.indexed:
        click.echo("Index built")
    click.echo()
    click.echo(click.style("Curation complete!", fg='green', bold=True))
