"""End-to-end tests for the curation pipeline on pre-staged fixture files."""

from pathlib import Path
from unittest.mock import MagicMock

import polars as pl
import pytest
from Bio.SeqIO.FastaIO import SimpleFastaParser

from amrdb_pipeline.config import RunConfig
from amrdb_pipeline.curation import decode_header
from amrdb_pipeline.exceptions import ConfigurationError, IndexingError, TableFormatError
from amrdb_pipeline.persistence import ProvenanceTracker
from amrdb_pipeline.pipeline import CurationPipeline, curate
from amrdb_pipeline.sequences import MoleculeType, parse_fasta_text
from amrdb_pipeline.sources import SourceInputs, get_adapter

ARGANNOT_FASTA = (
    # Reverse strand: repaired to TTATCAGGCCAT
    ">(AGly)Aac2-Ie:NC_011896:3039059-3039607:549\nATGGCCTGATAA\n"
    ">(Bla)blaZ:AB000001:1-12:12\nATGAAACCCTAA\n"
    ">(Bla)blaZ-dup:AB000002:1-12:12\nATGAAACCCTAA\n"
    ">(Tet)tetX:AB000003:1-10:10\nATGAAACCCT\n"
    ">brokenheader\nATGTTTTAA\n"
)


@pytest.fixture
def staged(tmp_path: Path):
    """Staging and output directories with an ARG-ANNOT file in place."""
    datadir = tmp_path / "staging"
    outdir = tmp_path / "db"
    (datadir / "argannot").mkdir(parents=True)
    outdir.mkdir()
    (datadir / "argannot" / "argannot.fasta").write_text(ARGANNOT_FASTA)
    return datadir, outdir


def run_config(staged, source="argannot", **kwargs) -> RunConfig:
    datadir, outdir = staged
    return RunConfig(source=source, outdir=outdir, datadir=datadir, **kwargs)


def test_curate_in_memory():
    adapter = get_adapter("argannot")
    inputs = SourceInputs(sequences=[parse_fasta_text(ARGANNOT_FASTA)])

    result = curate(adapter, inputs)

    assert result.adapted_count == 5
    assert [r.id for r in result.records] == [
        "(AGly)Aac2-Ie",
        "(Bla)blaZ",
        "(Tet)tetX",
        "brokenheader",
    ]
    assert result.dropped == [("(Bla)blaZ-dup", "(Bla)blaZ")]
    assert result.cds_counts() == {"revcom": 1, "ok": 3, "bad_length": 1}
    assert result.records[0].seq == "TTATCAGGCCAT"
    assert result.status_of(result.records[2]) == "bad_length"


def test_non_coding_source_skips_cds_checks():
    adapter = get_adapter("plasmidfinder")
    inputs = SourceInputs(sequences=[parse_fasta_text(">IncX_1_A\nATGGCCTGATAA\n")])

    result = curate(adapter, inputs)

    assert result.cds_status == {}
    assert result.records[0].seq == "ATGGCCTGATAA"


def test_pipeline_writes_collection(staged):
    summary = CurationPipeline(run_config(staged)).run()

    _, outdir = staged
    fasta_path = outdir / "argannot" / "sequences"
    assert summary.fasta_path == fasta_path
    assert summary.entry_count == 5
    assert summary.adapted_count == 5
    assert summary.skipped_count == 0
    assert summary.duplicate_count == 1
    assert summary.output_count == 4
    assert summary.indexed is False

    with open(fasta_path) as handle:
        parsed = list(SimpleFastaParser(handle))

    identifiers = [title.split(None, 1)[0] for title, _ in parsed]
    assert identifiers[0] == "argannot~~~(AGly)Aac2-Ie~~~NC_011896:3039059-3039607~~~"
    assert [decode_header(i).id for i in identifiers] == [
        "(AGly)Aac2-Ie",
        "(Bla)blaZ",
        "(Tet)tetX",
        "brokenheader",
    ]
    assert parsed[0][1] == "TTATCAGGCCAT"
    assert len({seq for _, seq in parsed}) == len(parsed)


def test_pipeline_manifest_and_provenance(staged):
    summary = CurationPipeline(run_config(staged)).run()

    manifest = pl.read_csv(summary.manifest_path, separator="\t")
    assert manifest["cds_status"].to_list() == ["revcom", "ok", "bad_length", "ok"]

    metadata = ProvenanceTracker.load_sidecar(summary.provenance_path)
    assert summary.provenance_path.name == "sequences.provenance.json"
    assert metadata["source"] == "argannot"
    assert [s["step_name"] for s in metadata["processing_steps"]] == [
        "load", "adapt", "validate", "dedupe", "write",
    ]


def test_pipeline_calls_collaborators(staged):
    fetcher = MagicMock()
    indexer = MagicMock()
    run = run_config(staged, force=True, index=True)

    summary = CurationPipeline(run, fetcher=fetcher, indexer=indexer).run()

    adapter = get_adapter("argannot")
    fetcher.fetch.assert_called_once_with(adapter, run.staging_dir, force=True)
    indexer.index.assert_called_once_with(summary.fasta_path, "argannot", MoleculeType.NUCLEOTIDE)
    assert summary.indexed is True


def test_indexer_not_called_without_flag(staged):
    indexer = MagicMock()

    summary = CurationPipeline(run_config(staged), indexer=indexer).run()

    indexer.index.assert_not_called()
    assert summary.indexed is False


def test_indexing_failure_propagates(staged):
    indexer = MagicMock()
    indexer.index.side_effect = IndexingError("makeblastdb failed", returncode=1)

    with pytest.raises(IndexingError):
        CurationPipeline(run_config(staged, index=True), indexer=indexer).run()


def test_rerun_is_deterministic(staged):
    first = CurationPipeline(run_config(staged)).run()
    content = first.fasta_path.read_text()

    second = CurationPipeline(run_config(staged)).run()

    assert second.fasta_path.read_text() == content


def test_fatal_table_error_writes_nothing(staged):
    datadir, outdir = staged
    resfinder_dir = datadir / "resfinder"
    resfinder_dir.mkdir()
    (resfinder_dir / "beta-lactam.fsa").write_text(">blaTEM-1B_1_JF910132\nATGAAATAA\n")
    (resfinder_dir / "phenotypes.txt").write_text("Gene\tClass\tPhenotype\nblaTEM-1B_1_JF910132\tBeta-lactam\n")

    with pytest.raises(TableFormatError):
        CurationPipeline(run_config(staged, source="resfinder")).run()

    assert not (outdir / "resfinder").exists()


def test_missing_staged_input(staged):
    with pytest.raises(FileNotFoundError):
        CurationPipeline(run_config(staged, source="megares")).run()


def test_missing_outdir(tmp_path):
    with pytest.raises(ConfigurationError):
        RunConfig(source="argannot", outdir=tmp_path / "nope", datadir=tmp_path)
