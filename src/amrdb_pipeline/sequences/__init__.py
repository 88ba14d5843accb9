"""Raw sequence and annotation table loading."""

from amrdb_pipeline.sequences.models import (
    AnnotationTable,
    MoleculeType,
    RawEntry,
    RawSequenceFile,
    Record,
)
from amrdb_pipeline.sequences.fasta import (
    infer_molecule_type,
    load_fasta,
    normalize_residues,
    parse_fasta_text,
)
from amrdb_pipeline.sequences.tables import load_table

__all__ = [
    "AnnotationTable",
    "MoleculeType",
    "RawEntry",
    "RawSequenceFile",
    "Record",
    "infer_molecule_type",
    "load_fasta",
    "normalize_residues",
    "parse_fasta_text",
    "load_table",
]
