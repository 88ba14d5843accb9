"""Coding sequence checks with reverse-complement repair.

A record is expected to hold a complete CDS: length divisible by three and
no stop codon before the final codon. Sequences submitted on the wrong
strand are repaired in place by replacing them with their reverse
complement. Results are informational; nothing here removes records.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum

import structlog
from Bio.Seq import Seq

from amrdb_pipeline.sequences import Record

logger = structlog.get_logger()

STANDARD_TABLE = 1
STOP = "*"
CANONICAL_BASES = set("ACGT")


class CdsStatus(str, Enum):
    """Outcome of a coding sequence check."""

    OK = "ok"
    BAD_LENGTH = "bad_length"
    REVCOM = "revcom"
    INTERNAL_STOP = "internal_stop"


@dataclass(frozen=True)
class CdsCheck:
    """Result of check_cds.

    Attributes:
        status: What the check found (and whether it repaired the record)
        protein_length: Translated length without the terminal stop (0 if
            not translated)
    """
    status: CdsStatus
    protein_length: int = 0

    @property
    def valid(self) -> bool:
        return self.status in (CdsStatus.OK, CdsStatus.REVCOM)


def translate(sequence: str) -> str:
    """Translate a nucleotide sequence with the standard genetic code."""
    return str(Seq(sequence).translate(table=STANDARD_TABLE))


def reverse_complement(sequence: str) -> str:
    return str(Seq(sequence).reverse_complement())


def has_internal_stop(protein: str) -> bool:
    """True when a stop symbol is followed by at least one more residue."""
    return STOP in protein[:-1]


def _protein_length(protein: str) -> int:
    return len(protein[:-1]) if protein.endswith(STOP) else len(protein)


def check_cds(record: Record) -> CdsCheck:
    """Check reading frame and stop codons, repairing reversed sequences.

    Args:
        record: Nucleotide record; seq may be replaced by its reverse complement

    Returns:
        CdsCheck describing the outcome
    """
    seq = record.seq

    if len(seq) % 3 != 0:
        logger.warning("cds_length_not_multiple_of_3", id=record.id, length=len(seq))
        return CdsCheck(CdsStatus.BAD_LENGTH)

    if not set(seq) <= CANONICAL_BASES:
        logger.warning(
            "cds_ambiguous_bases",
            id=record.id,
            symbols="".join(sorted(set(seq) - CANONICAL_BASES)),
        )

    protein = translate(seq)
    if not has_internal_stop(protein):
        return CdsCheck(CdsStatus.OK, _protein_length(protein))

    logger.warning("cds_internal_stop", id=record.id, strand="forward")
    revcom = reverse_complement(seq)
    protein = translate(revcom)

    if has_internal_stop(protein):
        logger.warning("cds_internal_stop", id=record.id, strand="reverse")
        return CdsCheck(CdsStatus.INTERNAL_STOP, _protein_length(protein))

    record.seq = revcom
    logger.info("cds_revcom_repaired", id=record.id)
    return CdsCheck(CdsStatus.REVCOM, _protein_length(protein))


def check_records(records: list[Record]) -> list[CdsCheck]:
    """Run check_cds over every record, returning results in input order.

    Records are kept regardless of the outcome.
    """
    checks = [check_cds(record) for record in records]

    counts = Counter(check.status.value for check in checks)
    logger.info("cds_check_complete", record_count=len(records), **counts)
    return checks
