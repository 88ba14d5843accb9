"""External collaborators: staging downloads and sequence indexing."""

from amrdb_pipeline.collaborators.fetch import HttpSourceFetcher, SourceFetcher, extract_archive
from amrdb_pipeline.collaborators.index import BlastIndexer, SequenceIndexer

__all__ = [
    "HttpSourceFetcher",
    "SourceFetcher",
    "extract_archive",
    "BlastIndexer",
    "SequenceIndexer",
]
