"""Data models for raw and curated sequence entries."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class MoleculeType(str, Enum):
    """Residue alphabet of a sequence file."""

    NUCLEOTIDE = "nucleotide"
    PROTEIN = "protein"


@dataclass(frozen=True)
class RawEntry:
    """One FASTA record before any source-specific interpretation.

    Attributes:
        id: First whitespace-delimited token of the title line
        description: Remainder of the title line (may be empty)
        sequence: Uppercased residues, normalized to the file's alphabet
    """
    id: str
    description: str
    sequence: str


@dataclass
class RawSequenceFile:
    """All entries of one staged FASTA file plus its inferred molecule type."""
    path: Path
    molecule_type: MoleculeType
    entries: list[RawEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)


# Key column value -> header name -> cell value
AnnotationTable = dict[str, dict[str, str]]


class Record(BaseModel):
    """Canonical curated gene record.

    Attributes:
        id: Gene or allele symbol, never empty once produced by an adapter
        acc: Accession and/or coordinate locator (default empty)
        desc: Free text description; encoders fall back to id when empty
        seq: Normalized residues
        molecule_type: nucleotide or protein
        abx: Antibiotic / compound class tags (opaque labels)

    Records are mutated in place by the CDS validator (seq may become its
    reverse complement).
    """

    id: str = Field(min_length=1)
    acc: str = ""
    desc: str = ""
    seq: str
    molecule_type: MoleculeType = MoleculeType.NUCLEOTIDE
    abx: set[str] = Field(default_factory=set)

    @property
    def description(self) -> str:
        """Description used in output: desc if non-empty, else id."""
        return self.desc or self.id
