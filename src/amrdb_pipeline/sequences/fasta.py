"""Load staged multi-sequence FASTA files into raw entries."""

import io
import re
from collections.abc import Callable
from pathlib import Path

import structlog
from Bio.SeqIO.FastaIO import SimpleFastaParser

from amrdb_pipeline.exceptions import SequenceFormatError
from amrdb_pipeline.sequences.models import MoleculeType, RawEntry, RawSequenceFile

logger = structlog.get_logger()

NUCLEOTIDE_SYMBOLS = set("ACGTUN")
NUCLEOTIDE_FRACTION = 0.9
DUPLICATE_SUFFIX = "_dupe"

_NOT_NUCLEOTIDE = re.compile(r"[^ACGT]")
_NOT_PROTEIN = re.compile(r"[^A-Z]")


def infer_molecule_type(sequence: str) -> MoleculeType:
    """Guess the alphabet of a single sequence.

    Nucleotide when at least 90% of the non-gap symbols are A/C/G/T/U/N,
    protein otherwise. An empty sequence counts as nucleotide.
    """
    residues = sequence.upper().replace("-", "").replace(".", "")
    if not residues:
        return MoleculeType.NUCLEOTIDE

    nucleotide_count = sum(1 for c in residues if c in NUCLEOTIDE_SYMBOLS)
    if nucleotide_count >= NUCLEOTIDE_FRACTION * len(residues):
        return MoleculeType.NUCLEOTIDE
    return MoleculeType.PROTEIN


def normalize_residues(sequence: str, molecule_type: MoleculeType) -> str:
    """Uppercase a sequence and replace symbols outside the alphabet.

    Nucleotides keep only ACGT (anything else becomes N); proteins keep
    only A-Z (anything else becomes X).
    """
    sequence = sequence.upper()
    if molecule_type == MoleculeType.NUCLEOTIDE:
        return _NOT_NUCLEOTIDE.sub("N", sequence)
    return _NOT_PROTEIN.sub("X", sequence)


def _unique_id(seq_id: str, seen: set[str]) -> str:
    """Return seq_id, or the first free _dupe/_dupeN variant of it."""
    if seq_id not in seen:
        return seq_id
    candidate = f"{seq_id}{DUPLICATE_SUFFIX}"
    n = 2
    while candidate in seen:
        candidate = f"{seq_id}{DUPLICATE_SUFFIX}{n}"
        n += 1
    return candidate


def parse_fasta_text(text: str, source_name: str = "<memory>") -> RawSequenceFile:
    """Parse FASTA content into a RawSequenceFile.

    Args:
        text: Complete FASTA file content
        source_name: Name used in log events and error messages

    Returns:
        RawSequenceFile with normalized entries in file order

    Raises:
        SequenceFormatError: If any record has an empty identifier
    """
    molecule_type: MoleculeType | None = None
    entries: list[RawEntry] = []
    seen: set[str] = set()

    for number, (title, sequence) in enumerate(SimpleFastaParser(io.StringIO(text)), start=1):
        parts = title.strip().split(None, 1)
        if not parts:
            raise SequenceFormatError(
                "empty sequence identifier", filename=source_name, record_number=number
            )
        seq_id = parts[0]
        description = parts[1] if len(parts) > 1 else ""

        # Alphabet is decided by the first record and assumed for the file
        if molecule_type is None:
            molecule_type = infer_molecule_type(sequence)

        unique = _unique_id(seq_id, seen)
        if unique != seq_id:
            logger.warning(
                "duplicate_identifier",
                file=source_name,
                original=seq_id,
                renamed=unique,
            )
        seen.add(unique)

        entries.append(RawEntry(
            id=unique,
            description=description,
            sequence=normalize_residues(sequence, molecule_type),
        ))

    if molecule_type is None:
        logger.warning("fasta_empty", file=source_name)
        molecule_type = MoleculeType.NUCLEOTIDE

    return RawSequenceFile(
        path=Path(source_name),
        molecule_type=molecule_type,
        entries=entries,
    )


def load_fasta(
    path: Path | str,
    repair: Callable[[str], str] | None = None,
) -> RawSequenceFile:
    """Load a staged FASTA file, optionally repairing its text first.

    Args:
        path: FASTA file to read
        repair: Source-specific text fix applied once before parsing

    Returns:
        RawSequenceFile with entries and inferred molecule type

    Raises:
        FileNotFoundError: If the file has not been staged
        SequenceFormatError: If any record has an empty identifier
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sequence file not found: {path}")

    text = path.read_text(encoding="utf-8", errors="replace")
    if repair is not None:
        text = repair(text)

    raw = parse_fasta_text(text, source_name=str(path))
    raw.path = path

    logger.info(
        "fasta_loaded",
        file=str(path),
        entry_count=len(raw.entries),
        molecule_type=raw.molecule_type.value,
    )
    return raw
