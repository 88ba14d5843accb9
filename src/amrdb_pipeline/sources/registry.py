"""Closed registry of supported source databases."""

from enum import Enum

from amrdb_pipeline.exceptions import ConfigurationError
from amrdb_pipeline.sources.argannot import ArgannotAdapter
from amrdb_pipeline.sources.base import SourceAdapter
from amrdb_pipeline.sources.card import CardAdapter
from amrdb_pipeline.sources.card_fasta import CardFastaAdapter
from amrdb_pipeline.sources.ecoh import EcohAdapter
from amrdb_pipeline.sources.megares import MegaresAdapter
from amrdb_pipeline.sources.ncbi import NcbiAdapter
from amrdb_pipeline.sources.plasmidfinder import PlasmidfinderAdapter
from amrdb_pipeline.sources.resfinder import ResfinderAdapter
from amrdb_pipeline.sources.vfdb import VfdbAdapter


class Source(str, Enum):
    """Supported source databases."""

    ARGANNOT = "argannot"
    CARD = "card"
    CARD_FASTA = "card_fasta"
    ECOH = "ecoh"
    MEGARES = "megares"
    NCBI = "ncbi"
    PLASMIDFINDER = "plasmidfinder"
    RESFINDER = "resfinder"
    VFDB = "vfdb"


ADAPTERS: dict[Source, SourceAdapter] = {
    Source.ARGANNOT: ArgannotAdapter(),
    Source.CARD: CardAdapter(),
    Source.CARD_FASTA: CardFastaAdapter(),
    Source.ECOH: EcohAdapter(),
    Source.MEGARES: MegaresAdapter(),
    Source.NCBI: NcbiAdapter(),
    Source.PLASMIDFINDER: PlasmidfinderAdapter(),
    Source.RESFINDER: ResfinderAdapter(),
    Source.VFDB: VfdbAdapter(),
}


def available_sources() -> list[str]:
    """Return sorted list of known source names."""
    return sorted(source.value for source in Source)


def resolve_source(name: str | Source) -> Source:
    """Map a source name to its enum member.

    Raises:
        ConfigurationError: If the name is not a registered source
    """
    if isinstance(name, Source):
        return name
    key = name.strip().lower()
    try:
        return Source(key)
    except ValueError:
        raise ConfigurationError(
            f"Unknown source '{name}'. Available: {', '.join(available_sources())}"
        ) from None


def get_adapter(name: str | Source) -> SourceAdapter:
    """Return the adapter registered for a source name."""
    return ADAPTERS[resolve_source(name)]
