"""Load delimited annotation tables into key -> fields mappings."""

from pathlib import Path

import structlog

from amrdb_pipeline.exceptions import TableFormatError
from amrdb_pipeline.sequences.models import AnnotationTable

logger = structlog.get_logger()


def load_table(
    path: Path | str,
    key_column: int = 0,
    delimiter: str = "\t",
    comment: str = "#",
) -> AnnotationTable:
    """Parse a header-driven delimited table.

    The first non-comment line is the header and fixes the column count.
    Every data row must have exactly that many fields. Blank lines and lines
    starting with the comment marker are skipped. When a key repeats, the
    first row wins and later rows are ignored.

    Args:
        path: Table file to read
        key_column: Index of the column whose value keys the result
        delimiter: Column separator (default: tab)
        comment: Comment line prefix (default: "#")

    Returns:
        Mapping of key column value -> {header name: cell value}

    Raises:
        FileNotFoundError: If the table has not been staged
        TableFormatError: On header/row column count mismatch, or when
            key_column is outside the header
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Annotation table not found: {path}")

    header: list[str] | None = None
    table: AnnotationTable = {}
    duplicate_keys = 0

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip() or (comment and line.startswith(comment)):
                continue

            fields = line.split(delimiter)

            if header is None:
                header = fields
                if not 0 <= key_column < len(header):
                    raise TableFormatError(
                        f"key column {key_column} outside header of {len(header)} columns",
                        filename=str(path),
                        line_number=line_number,
                    )
                continue

            if len(fields) != len(header):
                raise TableFormatError(
                    f"header/row column count mismatch: expected {len(header)}, "
                    f"got {len(fields)}",
                    filename=str(path),
                    line_number=line_number,
                )

            key = fields[key_column]
            if key in table:
                duplicate_keys += 1
                logger.debug("table_duplicate_key", file=str(path), key=key, line=line_number)
                continue
            table[key] = dict(zip(header, fields))

    logger.info(
        "table_loaded",
        file=str(path),
        row_count=len(table),
        column_count=len(header) if header else 0,
        duplicate_keys=duplicate_keys,
    )
    return table
