"""Exception types for fatal curation errors.

Per-record problems (odd headers, broken reading frames, duplicate
sequences) are logged as warnings and never raised. Everything defined here
aborts the whole run.
"""


class CurationError(Exception):
    """Base exception for all fatal pipeline errors."""


class ConfigurationError(CurationError):
    """Invalid run configuration (unknown source, missing output directory)."""


class TableFormatError(CurationError):
    """Malformed delimited annotation table."""

    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number

    def __str__(self):
        if self.filename and self.line_number:
            return f"{self.filename} line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"{self.filename}: {super().__str__()}"
        return super().__str__()


class SequenceFormatError(CurationError):
    """Malformed multi-sequence file."""

    def __init__(self, message: str, filename: str = "", record_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.record_number = record_number

    def __str__(self):
        if self.filename and self.record_number:
            return f"{self.filename} record {self.record_number}: {super().__str__()}"
        elif self.filename:
            return f"{self.filename}: {super().__str__()}"
        return super().__str__()


class MissingFieldError(CurationError):
    """Mandatory field empty in a structured source record."""

    def __init__(self, message: str, source: str = "", record_key: str = ""):
        super().__init__(message)
        self.source = source
        self.record_key = record_key

    def __str__(self):
        if self.source and self.record_key:
            return f"{self.source} record {self.record_key}: {super().__str__()}"
        return super().__str__()


class EncodingError(CurationError):
    """Record cannot be serialized to, or parsed from, a canonical header."""


class IndexingError(CurationError):
    """External sequence indexer failed."""

    def __init__(self, message: str, returncode: int = 0, log_tail: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.log_tail = log_tail

    def __str__(self):
        text = f"{super().__str__()} (exit status {self.returncode})"
        if self.log_tail:
            text += f"\n{self.log_tail}"
        return text
