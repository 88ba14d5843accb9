"""Per-source adapters that turn staged database exports into canonical records."""

from amrdb_pipeline.sources.base import (
    Download,
    HeaderRule,
    SourceAdapter,
    SourceInputs,
    TableSpec,
)
from amrdb_pipeline.sources.registry import (
    ADAPTERS,
    Source,
    available_sources,
    get_adapter,
    resolve_source,
)

__all__ = [
    "Download",
    "HeaderRule",
    "SourceAdapter",
    "SourceInputs",
    "TableSpec",
    "ADAPTERS",
    "Source",
    "available_sources",
    "get_adapter",
    "resolve_source",
]
