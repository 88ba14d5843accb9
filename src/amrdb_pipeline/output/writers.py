"""Write the curated sequence collection and its TSV manifest."""

from collections.abc import Sequence
from pathlib import Path

import polars as pl
import structlog
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from amrdb_pipeline.curation.encoding import encode_header, join_abx
from amrdb_pipeline.sequences import Record

logger = structlog.get_logger()

MANIFEST_COLUMNS = [
    "identifier",
    "id",
    "acc",
    "desc",
    "molecule_type",
    "abx",
    "length",
    "cds_status",
]


def write_collection(
    records: Sequence[Record],
    source: str,
    output_path: Path,
) -> Path:
    """Write records as FASTA with canonical headers.

    Headers are encoded before anything touches the disk, and the file is
    written to a temporary name and renamed, so an encoding error never
    leaves a partial collection behind.

    Args:
        records: Records in output order (already sorted)
        source: Source name used as the first identifier field
        output_path: Destination FASTA path

    Returns:
        Path to the written FASTA file

    Raises:
        EncodingError: If a record cannot be encoded
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    seq_records = []
    for record in records:
        identifier, description = encode_header(source, record)
        seq_records.append(SeqRecord(Seq(record.seq), id=identifier, description=description))

    temp_path = output_path.with_name(output_path.name + ".tmp")
    try:
        with open(temp_path, "w") as handle:
            SeqIO.write(seq_records, handle, "fasta")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()

    logger.info("collection_written", path=str(output_path), record_count=len(seq_records))
    return output_path


def write_manifest(
    records: Sequence[Record],
    source: str,
    output_path: Path,
    cds_status: Sequence[str | None] | None = None,
) -> Path:
    """Write a per-record TSV manifest alongside the collection.

    Args:
        records: Records in output order
        source: Source name used in the canonical identifier column
        output_path: Destination TSV path
        cds_status: Optional per-record CDS check outcome, aligned with records

    Returns:
        Path to the written TSV file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if cds_status is None:
        cds_status = [None] * len(records)

    df = pl.DataFrame(
        {
            "identifier": [encode_header(source, r)[0] for r in records],
            "id": [r.id for r in records],
            "acc": [r.acc for r in records],
            "desc": [r.description for r in records],
            "molecule_type": [r.molecule_type.value for r in records],
            "abx": [join_abx(r.abx) for r in records],
            "length": [len(r.seq) for r in records],
            "cds_status": list(cds_status),
        },
        schema={
            "identifier": pl.Utf8,
            "id": pl.Utf8,
            "acc": pl.Utf8,
            "desc": pl.Utf8,
            "molecule_type": pl.Utf8,
            "abx": pl.Utf8,
            "length": pl.Int64,
            "cds_status": pl.Utf8,
        },
    )
    df.write_csv(output_path, separator="\t", include_header=True)

    logger.info("manifest_written", path=str(output_path), row_count=df.height)
    return output_path
