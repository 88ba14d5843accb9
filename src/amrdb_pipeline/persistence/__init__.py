"""Provenance tracking for curated collections."""

from amrdb_pipeline.persistence.provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
