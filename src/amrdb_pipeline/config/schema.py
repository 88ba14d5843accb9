"""Pydantic models for pipeline and per-run configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from amrdb_pipeline.exceptions import ConfigurationError
from amrdb_pipeline.sources.registry import Source, resolve_source


class FetchConfig(BaseModel):
    """Configuration for the download collaborator."""

    max_retries: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum retry attempts for failed downloads",
    )
    timeout_seconds: int = Field(
        default=120,
        ge=1,
        description="Download timeout in seconds",
    )


class PipelineConfig(BaseModel):
    """Main pipeline configuration, loaded from YAML."""

    data_dir: Path = Field(
        ...,
        description="Root directory for staged source downloads",
    )
    output_dir: Path = Field(
        ...,
        description="Default directory for curated collections (must exist at run time)",
    )
    source_urls: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Per-source download URL overrides: source -> filename -> URL",
    )
    fetch: FetchConfig = Field(
        default_factory=FetchConfig,
        description="Download configuration",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("source_urls")
    @classmethod
    def known_sources(cls, v: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        """URL overrides may only name registered sources."""
        for name in v:
            resolve_source(name)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        recorded in provenance sidecars.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()


class RunConfig(BaseModel):
    """Immutable settings for one pipeline invocation.

    Attributes:
        source: Registered source to curate
        outdir: Existing directory receiving <outdir>/<source>/sequences
        datadir: Staging root; inputs live under <datadir>/<source>
        force: Re-download staged inputs even if present
        debug: Keep verbose diagnostics
        index: Run the indexing collaborator after writing
    """

    model_config = ConfigDict(frozen=True)

    source: Source
    outdir: Path
    datadir: Path
    force: bool = False
    debug: bool = False
    index: bool = False

    @field_validator("source", mode="before")
    @classmethod
    def registered_source(cls, v) -> Source:
        return resolve_source(v)

    @field_validator("outdir")
    @classmethod
    def outdir_exists(cls, v: Path) -> Path:
        if not v.is_dir():
            raise ConfigurationError(f"Output directory does not exist: {v}")
        return v

    @property
    def staging_dir(self) -> Path:
        return self.datadir / self.source.value

    @property
    def collection_dir(self) -> Path:
        return self.outdir / self.source.value
