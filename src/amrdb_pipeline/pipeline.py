"""Curation pipeline orchestration.

Runs one source end to end:

1. stage raw files (fetch collaborator, optional)
2. repair + load sequence files, annotation tables and documents
3. adapt raw entries into canonical records
4. check coding sequences (informational, may repair strand)
5. drop records whose sequence was already seen
6. sort by ID and write the canonical collection, manifest and provenance
7. index the collection (index collaborator, optional)

Everything runs in memory on a single thread; any fatal error aborts the run
before the collection file is replaced.
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from amrdb_pipeline.collaborators import SequenceIndexer, SourceFetcher
from amrdb_pipeline.config.schema import PipelineConfig, RunConfig
from amrdb_pipeline.curation import CdsStatus, check_records, dedupe_records, sort_records
from amrdb_pipeline.output import write_collection, write_manifest
from amrdb_pipeline.persistence import ProvenanceTracker
from amrdb_pipeline.sequences import MoleculeType, Record
from amrdb_pipeline.sources import SourceAdapter, SourceInputs, get_adapter

logger = structlog.get_logger()

COLLECTION_FILENAME = "sequences"
MANIFEST_FILENAME = "manifest.tsv"


@dataclass
class CurationResult:
    """In-memory outcome of adapting, checking and deduplicating one source.

    Attributes:
        records: Final records, sorted by ID
        adapted_count: Records produced by the adapter (before dedupe)
        cds_status: Record object id -> CDS check status for checked records
        dropped: (dropped_id, kept_id) pairs from deduplication
    """
    records: list[Record] = field(default_factory=list)
    adapted_count: int = 0
    cds_status: dict[int, CdsStatus] = field(default_factory=dict)
    dropped: list[tuple[str, str]] = field(default_factory=list)

    def status_of(self, record: Record) -> Optional[str]:
        status = self.cds_status.get(id(record))
        return status.value if status is not None else None

    def cds_counts(self) -> dict[str, int]:
        return dict(Counter(status.value for status in self.cds_status.values()))


@dataclass
class RunSummary:
    """What a pipeline run produced."""
    source: str
    entry_count: int
    adapted_count: int
    cds_counts: dict[str, int]
    duplicate_count: int
    output_count: int
    fasta_path: Path
    manifest_path: Path
    provenance_path: Path
    indexed: bool = False

    @property
    def skipped_count(self) -> int:
        """Raw entries the adapter chose not to emit (fusions, SNP variants...)."""
        return max(self.entry_count - self.adapted_count, 0)


def curate(adapter: SourceAdapter, inputs: SourceInputs) -> CurationResult:
    """Adapt, check and deduplicate already-loaded inputs.

    Pure in-memory part of the pipeline; no files are read or written.
    """
    records = adapter.parse(inputs)
    result = CurationResult(adapted_count=len(records))

    if adapter.coding:
        coding = [r for r in records if r.molecule_type == MoleculeType.NUCLEOTIDE]
        for record, check in zip(coding, check_records(coding)):
            result.cds_status[id(record)] = check.status

    dedup = dedupe_records(records)
    result.dropped = dedup.dropped
    result.records = sort_records(dedup.records)
    return result


class CurationPipeline:
    """Run the curation steps for one source.

    Collaborators are injected so the core can run on pre-staged fixture
    files: without a fetcher the staging directory must already be
    populated, and without an indexer no index is built.
    """

    def __init__(
        self,
        run_config: RunConfig,
        fetcher: Optional[SourceFetcher] = None,
        indexer: Optional[SequenceIndexer] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.run_config = run_config
        self.fetcher = fetcher
        self.indexer = indexer
        self.config = config
        self.adapter = get_adapter(run_config.source)

    def run(self) -> RunSummary:
        run = self.run_config
        source = run.source.value
        provenance = ProvenanceTracker.from_config(run, self.config)
        log = logger.bind(source=source)

        log.info("pipeline_start", staging_dir=str(run.staging_dir), force=run.force)

        if self.fetcher is not None:
            self.fetcher.fetch(self.adapter, run.staging_dir, force=run.force)
            provenance.record_step("fetch", {"staging_dir": str(run.staging_dir)})

        inputs = self.adapter.load(run.staging_dir)
        provenance.record_step("load", {
            "sequence_files": [str(raw.path) for raw in inputs.sequences],
            "entry_count": inputs.entry_count,
            "tables": {name: len(table) for name, table in inputs.tables.items()},
            "documents": sorted(inputs.documents),
        })

        result = curate(self.adapter, inputs)
        provenance.record_step("adapt", {"record_count": result.adapted_count})
        provenance.record_step("validate", {"cds_status": result.cds_counts()})
        provenance.record_step("dedupe", {
            "dropped_count": len(result.dropped),
            "dropped": [{"dropped": d, "kept": k} for d, k in result.dropped],
        })

        collection_dir = run.collection_dir
        fasta_path = write_collection(result.records, source, collection_dir / COLLECTION_FILENAME)
        manifest_path = write_manifest(
            result.records,
            source,
            collection_dir / MANIFEST_FILENAME,
            cds_status=[result.status_of(r) for r in result.records],
        )
        provenance.record_step("write", {
            "fasta": str(fasta_path),
            "manifest": str(manifest_path),
            "record_count": len(result.records),
        })

        indexed = False
        if run.index and self.indexer is not None:
            molecule_type = (
                result.records[0].molecule_type if result.records else MoleculeType.NUCLEOTIDE
            )
            self.indexer.index(fasta_path, source, molecule_type)
            indexed = True
            provenance.record_step("index", {"molecule_type": molecule_type.value})

        provenance_path = provenance.save_sidecar(fasta_path)

        summary = RunSummary(
            source=source,
            entry_count=inputs.entry_count,
            adapted_count=result.adapted_count,
            cds_counts=result.cds_counts(),
            duplicate_count=len(result.dropped),
            output_count=len(result.records),
            fasta_path=fasta_path,
            manifest_path=manifest_path,
            provenance_path=provenance_path,
            indexed=indexed,
        )
        log.info(
            "pipeline_complete",
            output_count=summary.output_count,
            duplicate_count=summary.duplicate_count,
            skipped_count=summary.skipped_count,
        )
        return summary
