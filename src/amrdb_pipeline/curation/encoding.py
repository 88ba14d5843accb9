"""Canonical FASTA header encoding for curated records.

Output identifiers have the form

    <source>~~~<ID>~~~<ACC>~~~<ABX>

where ABX is the sorted class set joined by ";" with whitespace replaced by
"_". The description field is DESC, or ID when DESC is empty. Encoded
fields may not contain the delimiter, nor start or end with "~" (which would
merge with a neighbouring delimiter), so decoding always round-trips.
"""

import re
from typing import NamedTuple

from amrdb_pipeline.exceptions import EncodingError
from amrdb_pipeline.sequences import Record

DELIMITER = "~~~"
TILDE = "~"
ABX_SEPARATOR = ";"
FIELD_COUNT = 4

_WHITESPACE = re.compile(r"\s")


class CanonicalHeader(NamedTuple):
    """Fields recovered from a canonical identifier."""
    source: str
    id: str
    acc: str
    abx: str

    @property
    def abx_set(self) -> set[str]:
        return {label for label in self.abx.split(ABX_SEPARATOR) if label}


def join_abx(abx: set[str]) -> str:
    """Sorted, ';'-joined class labels with whitespace replaced by '_'."""
    return _WHITESPACE.sub("_", ABX_SEPARATOR.join(sorted(abx)))


def encode_identifier(source: str, record: Record) -> str:
    """Build the canonical identifier for a record.

    Raises:
        EncodingError: If any field contains the ~~~ delimiter or starts or
            ends with "~"
    """
    fields = [source, record.id, record.acc, join_abx(record.abx)]
    for name, value in zip(("source", "ID", "ACC", "ABX"), fields):
        if DELIMITER in value:
            raise EncodingError(
                f"{name} of record '{record.id}' contains delimiter {DELIMITER!r}: {value!r}"
            )
        if value.startswith(TILDE) or value.endswith(TILDE):
            raise EncodingError(
                f"{name} of record '{record.id}' starts or ends with {TILDE!r}: {value!r}"
            )
    return DELIMITER.join(fields)


def encode_header(source: str, record: Record) -> tuple[str, str]:
    """Return the (identifier, description) pair written to the FASTA title."""
    return encode_identifier(source, record), record.description


def decode_header(identifier: str) -> CanonicalHeader:
    """Split a canonical identifier back into its four fields.

    Raises:
        EncodingError: If the identifier does not have exactly four fields
    """
    fields = identifier.split(DELIMITER)
    if len(fields) != FIELD_COUNT:
        raise EncodingError(
            f"Expected {FIELD_COUNT} '{DELIMITER}'-separated fields, got {len(fields)}: {identifier!r}"
        )
    return CanonicalHeader(*fields)


def sort_records(records: list[Record]) -> list[Record]:
    """Stable sort by ID in codepoint order."""
    return sorted(records, key=lambda record: record.id)
