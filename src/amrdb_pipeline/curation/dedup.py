"""Collapse records with identical sequences, keeping the first occurrence."""

from dataclasses import dataclass, field

import structlog

from amrdb_pipeline.sequences import Record

logger = structlog.get_logger()


@dataclass
class DedupResult:
    """Deduplicated records plus (dropped_id, kept_id) pairs."""
    records: list[Record] = field(default_factory=list)
    dropped: list[tuple[str, str]] = field(default_factory=list)


def dedupe_records(records: list[Record]) -> DedupResult:
    """Keep only the first record for each distinct sequence.

    Sequences are compared as exact, case-sensitive strings. Input order of
    the kept records is preserved. Every dropped record is logged with the
    ID of the record that was kept and all IDs seen for that sequence.

    Args:
        records: Records in pipeline order

    Returns:
        DedupResult with the surviving records and the dropped pairs
    """
    seen: dict[str, list[str]] = {}
    result = DedupResult()

    for record in records:
        ids = seen.get(record.seq)
        if ids is None:
            seen[record.seq] = [record.id]
            result.records.append(record)
            continue

        logger.warning(
            "duplicate_sequence",
            dropped=record.id,
            kept=ids[0],
            same_sequence_as=list(ids),
        )
        result.dropped.append((record.id, ids[0]))
        ids.append(record.id)

    logger.info(
        "dedupe_complete",
        input_count=len(records),
        kept_count=len(result.records),
        dropped_count=len(result.dropped),
    )
    return result
