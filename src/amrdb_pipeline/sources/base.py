"""Base interface and header grammar rules for source adapters."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from amrdb_pipeline.sequences import (
    AnnotationTable,
    MoleculeType,
    RawEntry,
    RawSequenceFile,
    Record,
    load_fasta,
    load_table,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class HeaderRule:
    """Declarative FASTA header grammar.

    A rule is a regular expression with named groups plus format templates
    for the canonical ID, ACC and DESC fields. Optional groups that do not
    participate in a match format as empty strings.

    Attributes:
        name: Short grammar name used in log events
        pattern: Regex matched against the whole text (re.fullmatch)
        id: Template for the record ID, e.g. "{gene}_{copy}"
        acc: Template for the accession field
        desc: Template for the description field
    """
    name: str
    pattern: str
    id: str
    acc: str = ""
    desc: str = ""
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_regex", re.compile(self.pattern))

    def groups(self, text: str) -> dict[str, str] | None:
        """Return the named capture groups, or None when text does not match."""
        m = self._regex.fullmatch(text)
        if m is None:
            return None
        return m.groupdict(default="")

    def match(self, text: str) -> dict[str, str] | None:
        """Apply the rule, returning {"id", "acc", "desc"} or None on no match."""
        groups = self.groups(text)
        if groups is None:
            return None
        return {
            "id": self.id.format(**groups),
            "acc": self.acc.format(**groups),
            "desc": self.desc.format(**groups),
        }


@dataclass(frozen=True)
class TableSpec:
    """Staged annotation table belonging to a source."""
    filename: str
    key_column: int = 0
    delimiter: str = "\t"


@dataclass(frozen=True)
class Download:
    """Remote file the fetch collaborator stages for a source.

    Attributes:
        url: Remote location
        filename: Target name under the staging directory (archives are
            extracted into the staging directory instead)
        archive: True when the download is a tarball to extract
    """
    url: str
    filename: str
    archive: bool = False


@dataclass
class SourceInputs:
    """Everything an adapter parses, already loaded from the staging directory."""
    sequences: list[RawSequenceFile] = field(default_factory=list)
    tables: dict[str, AnnotationTable] = field(default_factory=dict)
    documents: dict[str, Any] = field(default_factory=dict)

    @property
    def entry_count(self) -> int:
        return sum(len(raw) for raw in self.sequences)


class SourceAdapter(ABC):
    """Adapter that converts one source database into canonical records.

    Subclasses declare where their staged files live and implement parse().
    parse() is a pure transformation over SourceInputs; the only text-level
    change allowed before loading is repair().
    """

    name: str
    description: str = ""
    fasta_files: tuple[str, ...] = ()
    table_files: dict[str, TableSpec] = {}
    downloads: tuple[Download, ...] = ()
    coding: bool = True

    def repair(self, text: str) -> str:
        """Fix source-specific breakage in raw FASTA text (identity by default)."""
        return text

    def sequence_paths(self, staging_dir: Path) -> list[Path]:
        """Resolve fasta_files (glob patterns) to staged paths in sorted order."""
        paths: list[Path] = []
        for pattern in self.fasta_files:
            matches = sorted(staging_dir.glob(pattern))
            if not matches:
                raise FileNotFoundError(
                    f"No staged files for {self.name} matching {staging_dir / pattern}"
                )
            paths.extend(matches)
        return paths

    def load(self, staging_dir: Path | str) -> SourceInputs:
        """Load the staged sequence files and annotation tables."""
        staging_dir = Path(staging_dir)
        inputs = SourceInputs()

        for path in self.sequence_paths(staging_dir):
            inputs.sequences.append(load_fasta(path, repair=self.repair))

        for table_name, spec in self.table_files.items():
            inputs.tables[table_name] = load_table(
                staging_dir / spec.filename,
                key_column=spec.key_column,
                delimiter=spec.delimiter,
            )

        return inputs

    @abstractmethod
    def parse(self, inputs: SourceInputs) -> list[Record]:
        """Convert loaded inputs into canonical records."""

    def unmatched(self, entry: RawEntry, rule: HeaderRule) -> dict[str, str]:
        """Fallback fields for an entry whose header does not fit the grammar.

        The record is kept with its raw identifier and description.
        """
        logger.warning(
            "header_unmatched",
            source=self.name,
            grammar=rule.name,
            header=entry.id,
        )
        return {"id": entry.id, "acc": "", "desc": entry.description}

    def make_record(
        self,
        entry: RawEntry,
        molecule_type: MoleculeType,
        fields: dict[str, str],
        abx: set[str] | None = None,
    ) -> Record:
        """Build a Record, falling back to the raw identifier for an empty ID."""
        record_id = fields.get("id") or entry.id
        return Record(
            id=record_id,
            acc=fields.get("acc", ""),
            desc=fields.get("desc", ""),
            seq=entry.sequence,
            molecule_type=molecule_type,
            abx=set(abx or ()),
        )


def title_of(entry: RawEntry) -> str:
    """Rebuild the full FASTA title line of an entry."""
    if entry.description:
        return f"{entry.id} {entry.description}"
    return entry.id


def split_labels(value: str, separator: str) -> set[str]:
    """Split a class list into a set of stripped, non-empty labels."""
    return {label.strip() for label in value.split(separator) if label.strip()}
