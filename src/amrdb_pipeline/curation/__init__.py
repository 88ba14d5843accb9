"""Curation steps: CDS validation, deduplication and canonical encoding."""

from amrdb_pipeline.curation.cds import (
    CdsCheck,
    CdsStatus,
    check_cds,
    check_records,
    reverse_complement,
    translate,
)
from amrdb_pipeline.curation.dedup import DedupResult, dedupe_records
from amrdb_pipeline.curation.encoding import (
    DELIMITER,
    CanonicalHeader,
    decode_header,
    encode_header,
    encode_identifier,
    join_abx,
    sort_records,
)

__all__ = [
    "CdsCheck",
    "CdsStatus",
    "check_cds",
    "check_records",
    "reverse_complement",
    "translate",
    "DedupResult",
    "dedupe_records",
    "DELIMITER",
    "CanonicalHeader",
    "decode_header",
    "encode_header",
    "encode_identifier",
    "join_abx",
    "sort_records",
]
