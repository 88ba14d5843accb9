"""Tests for the CARD JSON adapter."""

import json
from pathlib import Path

import pytest

from amrdb_pipeline.exceptions import MissingFieldError
from amrdb_pipeline.sources import SourceInputs
from amrdb_pipeline.sources.card import CARD_DOCUMENT, CardAdapter, drug_classes, locator


def homolog_model(name="vanO", description="vanO is a glycopeptide resistance gene", strand="-"):
    return {
        "model_id": "1",
        "model_name": name,
        "model_type": "protein homolog model",
        "ARO_description": description,
        "ARO_category": {
            "36220": {
                "category_aro_name": "glycopeptide antibiotic",
                "category_aro_class_name": "Drug Class",
            },
            "36221": {
                "category_aro_name": "antibiotic target alteration",
                "category_aro_class_name": "Resistance Mechanism",
            },
        },
        "model_sequences": {
            "sequence": {
                "3150": {
                    "dna_sequence": {
                        "accession": "KF478993.1",
                        "fmin": "10",
                        "fmax": "19",
                        "strand": strand,
                        "sequence": "atgaaataa",
                    },
                },
                "3151": {
                    "dna_sequence": {
                        "accession": "OTHER.1",
                        "fmin": "1",
                        "fmax": "9",
                        "strand": "+",
                        "sequence": "ATGCCCTAA",
                    },
                },
            },
        },
    }


@pytest.fixture
def card_document():
    return {
        "_version": "3.2.9",
        "_comment": "CARD export",
        "1": homolog_model(),
        "2": {
            "model_name": "gyrA conferring resistance",
            "model_type": "protein variant model",
            "ARO_description": "point mutations",
        },
        "3": homolog_model(name="Escherichia coli ampC", strand="+"),
        "4": {
            "model_name": "noSeq",
            "model_type": "protein homolog model",
            "ARO_description": "no sequence attached",
            "model_sequences": {"sequence": {}},
        },
    }


def test_parse_protein_homolog_models(card_document):
    records = CardAdapter().parse(SourceInputs(documents={CARD_DOCUMENT: card_document}))

    assert [r.id for r in records] == ["vanO", "Escherichia_coli_ampC"]

    vano = records[0]
    assert vano.acc == "KF478993.1:19-10"
    assert vano.desc == "vanO is a glycopeptide resistance gene"
    assert vano.seq == "ATGAAATAA"
    assert vano.abx == {"glycopeptide antibiotic"}

    assert records[1].acc == "KF478993.1:10-19"


def test_empty_model_name_is_fatal(card_document):
    card_document["5"] = homolog_model(name="  ")

    with pytest.raises(MissingFieldError) as exc_info:
        CardAdapter().parse(SourceInputs(documents={CARD_DOCUMENT: card_document}))

    assert exc_info.value.record_key == "5"


def test_empty_description_is_fatal(card_document):
    card_document["5"] = homolog_model(description="")

    with pytest.raises(MissingFieldError):
        CardAdapter().parse(SourceInputs(documents={CARD_DOCUMENT: card_document}))


def test_load_reads_json(tmp_path: Path, card_document):
    (tmp_path / CARD_DOCUMENT).write_text(json.dumps(card_document))

    adapter = CardAdapter()
    inputs = adapter.load(tmp_path)

    assert inputs.sequences == []
    assert len(adapter.parse(inputs)) == 2


def test_load_missing_document(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        CardAdapter().load(tmp_path)


def test_helpers():
    assert drug_classes({}) == set()
    assert locator({"accession": "A", "fmin": "1", "fmax": "5", "strand": "+"}) == "A:1-5"
    assert locator({"accession": "A", "fmin": "1", "fmax": "5", "strand": "-"}) == "A:5-1"
