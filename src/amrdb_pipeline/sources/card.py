"""CARD adapter: protein homolog models from the card.json model graph."""

import json
import re
from pathlib import Path
from typing import Any

import structlog

from amrdb_pipeline.exceptions import MissingFieldError
from amrdb_pipeline.sequences import MoleculeType, Record, normalize_residues
from amrdb_pipeline.sources.base import Download, SourceAdapter, SourceInputs
from amrdb_pipeline.sources.card_fasta import CARD_DATA_URL

logger = structlog.get_logger()

CARD_DOCUMENT = "card.json"
PROTEIN_HOMOLOG_MODEL = "protein homolog model"
DRUG_CLASS = "Drug Class"
REVERSE_STRAND = "-"

_WHITESPACE = re.compile(r"\s+")


def first_child(mapping: dict[str, Any]) -> Any:
    """Value of the first key of a mapping (JSON object order), or None."""
    for value in mapping.values():
        return value
    return None


def drug_classes(model: dict[str, Any]) -> set[str]:
    """Names of ARO categories labelled as drug classes."""
    categories = model.get("ARO_category") or {}
    return {
        category["category_aro_name"]
        for category in categories.values()
        if category.get("category_aro_class_name") == DRUG_CLASS
        and category.get("category_aro_name")
    }


def locator(dna: dict[str, Any]) -> str:
    """accession:start-stop, with start/stop swapped on the reverse strand."""
    start, stop = dna.get("fmin", ""), dna.get("fmax", "")
    if dna.get("strand") == REVERSE_STRAND:
        start, stop = stop, start
    return f"{dna.get('accession', '')}:{start}-{stop}"


class CardAdapter(SourceAdapter):
    """Comprehensive Antibiotic Resistance Database, structured JSON export.

    Only protein homolog models are kept. Each model contributes the DNA
    sequence of the first entry under model_sequences/sequence.
    """

    name = "card"
    description = "CARD protein homolog models (card.json)"
    downloads = (Download(url=CARD_DATA_URL, filename="card-data.tar.bz2", archive=True),)

    def load(self, staging_dir: Path | str) -> SourceInputs:
        path = Path(staging_dir) / CARD_DOCUMENT
        if not path.exists():
            raise FileNotFoundError(f"CARD document not found: {path}")

        with open(path, "r") as f:
            document = json.load(f)

        logger.info("card_document_loaded", file=str(path), key_count=len(document))
        return SourceInputs(documents={CARD_DOCUMENT: document})

    def parse(self, inputs: SourceInputs) -> list[Record]:
        document = inputs.documents.get(CARD_DOCUMENT, {})
        records = []
        other_models = 0

        for key, model in document.items():
            # _version, _comment, _timestamp and friends
            if not isinstance(model, dict):
                continue
            if model.get("model_type") != PROTEIN_HOMOLOG_MODEL:
                other_models += 1
                continue

            name = (model.get("model_name") or "").strip()
            product = (model.get("ARO_description") or "").strip()
            if not name:
                raise MissingFieldError("empty model_name", source=self.name, record_key=key)
            if not product:
                raise MissingFieldError("empty ARO_description", source=self.name, record_key=key)

            sequences = (model.get("model_sequences") or {}).get("sequence") or {}
            entry = first_child(sequences)
            dna = (entry or {}).get("dna_sequence") or {}
            if not dna.get("sequence"):
                logger.warning("card_model_without_sequence", source=self.name, model=key, name=name)
                continue

            # Model names such as "Escherichia coli ampC" become one FASTA token
            records.append(Record(
                id=_WHITESPACE.sub("_", name),
                acc=locator(dna),
                desc=product,
                seq=normalize_residues(dna["sequence"], MoleculeType.NUCLEOTIDE),
                molecule_type=MoleculeType.NUCLEOTIDE,
                abx=drug_classes(model),
            ))

        logger.info("card_parsed", record_count=len(records), other_models_skipped=other_models)
        return records
