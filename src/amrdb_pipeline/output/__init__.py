"""Output writers for curated collections."""

from amrdb_pipeline.output.writers import MANIFEST_COLUMNS, write_collection, write_manifest

__all__ = ["MANIFEST_COLUMNS", "write_collection", "write_manifest"]
