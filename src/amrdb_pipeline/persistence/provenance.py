"""Provenance tracking for curation runs."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from amrdb_pipeline.config.schema import PipelineConfig, RunConfig


class ProvenanceTracker:
    """
    Tracks provenance metadata for a curation run.

    Records pipeline version, selected source, config hash and the
    processing steps so a collection can be traced back to its inputs.
    """

    def __init__(
        self,
        pipeline_version: str,
        run_config: RunConfig,
        config: Optional[PipelineConfig] = None,
    ):
        """
        Initialize provenance tracker.

        Args:
            pipeline_version: Pipeline version string (e.g., "0.1.0")
            run_config: RunConfig of this invocation
            config: Optional PipelineConfig the run was launched with
        """
        self.pipeline_version = pipeline_version
        self.source = run_config.source.value
        self.config_hash = config.config_hash() if config is not None else None
        self.processing_steps = []
        self.created_at = datetime.now(timezone.utc)

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Record a processing step.

        Args:
            step_name: Name of the processing step
            details: Optional dictionary of additional details
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def get_steps(self) -> list[dict]:
        return self.processing_steps

    def create_metadata(self) -> dict:
        """
        Create full provenance metadata dictionary.

        Returns:
            Dictionary with all provenance information
        """
        return {
            "pipeline_version": self.pipeline_version,
            "source": self.source,
            "config_hash": self.config_hash,
            "created_at": self.created_at.isoformat(),
            "processing_steps": self.processing_steps,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Save provenance metadata as a JSON sidecar file.

        Args:
            output_path: Path to the main output file.
                         Sidecar is saved as {path}.provenance.json

        Returns:
            Path to the sidecar file
        """
        output_path = Path(output_path)
        sidecar_path = output_path.with_name(output_path.name + ".provenance.json")
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)

        metadata = self.create_metadata()
        with open(sidecar_path, "w") as f:
            json.dump(metadata, f, indent=2, default=str)
        return sidecar_path

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        """Load provenance metadata from a sidecar file."""
        with open(sidecar_path) as f:
            return json.load(f)

    @classmethod
    def from_config(
        cls,
        run_config: RunConfig,
        config: Optional[PipelineConfig] = None,
        version: Optional[str] = None,
    ) -> "ProvenanceTracker":
        """
        Create ProvenanceTracker for a run.

        Args:
            run_config: RunConfig of this invocation
            config: Optional PipelineConfig
            version: Pipeline version string. If None, uses amrdb_pipeline.__version__

        Returns:
            ProvenanceTracker instance
        """
        if version is None:
            from amrdb_pipeline import __version__
            version = __version__

        return cls(version, run_config, config)
