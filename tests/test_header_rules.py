"""Tests for declarative header grammars."""

from structlog.testing import capture_logs

from amrdb_pipeline.sequences import parse_fasta_text
from amrdb_pipeline.sources import HeaderRule, SourceInputs
from amrdb_pipeline.sources.argannot import COLON_RULE, ArgannotAdapter
from amrdb_pipeline.sources.card_fasta import PIPE_RULE, CardFastaAdapter
from amrdb_pipeline.sources.resfinder import TRIPLET_RULE


def test_colon_rule():
    fields = COLON_RULE.match("(AGly)Aac2-Ie:NC_011896:3039059-3039607:549")

    assert fields == {
        "id": "(AGly)Aac2-Ie",
        "acc": "NC_011896:3039059-3039607",
        "desc": "",
    }


def test_colon_rule_rejects_other_shapes():
    assert COLON_RULE.match("noColonsHere") is None
    assert COLON_RULE.match("a:b:c:d:e") is None


def test_pipe_rule_drops_text_after_symbol():
    fields = PIPE_RULE.match("gb|HQ845196|+|0-861|ARO:3001109|SHV-52 [Klebsiella pneumoniae]")

    assert fields == {
        "id": "SHV-52",
        "acc": "HQ845196:0-861",
        "desc": "ARO:3001109",
    }


def test_triplet_rule_gene_with_underscores():
    fields = TRIPLET_RULE.match("aac(6')-Ib_cr_1_DQ303918")

    assert fields["id"] == "aac(6')-Ib_cr_1"
    assert fields["acc"] == "DQ303918"
    assert fields["desc"] == "aac(6')-Ib_cr"


def test_optional_group_formats_empty():
    rule = HeaderRule(
        name="optional",
        pattern=r"(?P<gene>[^|]+)(?:\|(?P<note>.*))?",
        id="{gene}",
        desc="{note}",
    )

    assert rule.match("tetA") == {"id": "tetA", "acc": "", "desc": ""}
    assert rule.match("tetA|efflux")["desc"] == "efflux"


def test_argannot_adapter_fields():
    raw = parse_fasta_text(">(AGly)Aac2-Ie:NC_011896:3039059-3039607:549\nATGAAATAA\n")

    records = ArgannotAdapter().parse(SourceInputs(sequences=[raw]))

    assert len(records) == 1
    record = records[0]
    assert record.id == "(AGly)Aac2-Ie"
    assert record.acc == "NC_011896:3039059-3039607"
    assert record.desc == ""
    assert record.description == "(AGly)Aac2-Ie"
    assert record.abx == set()
    assert record.seq == "ATGAAATAA"


def test_card_fasta_adapter_fields():
    raw = parse_fasta_text(
        ">gb|HQ845196|+|0-861|ARO:3001109|SHV-52 [Klebsiella pneumoniae]\nATGCGTTAA\n"
    )

    records = CardFastaAdapter().parse(SourceInputs(sequences=[raw]))

    assert records[0].id == "SHV-52"
    assert records[0].acc == "HQ845196:0-861"
    assert records[0].desc == "ARO:3001109"


def test_unmatched_header_kept_with_warning():
    raw = parse_fasta_text(">strange_header some words\nATGAAATAA\n")

    with capture_logs() as cap_logs:
        records = ArgannotAdapter().parse(SourceInputs(sequences=[raw]))

    assert len(records) == 1
    assert records[0].id == "strange_header"
    assert records[0].acc == ""
    assert records[0].desc == "some words"

    warnings = [log for log in cap_logs if log["event"] == "header_unmatched"]
    assert len(warnings) == 1
    assert warnings[0]["source"] == "argannot"
    assert warnings[0]["grammar"] == "colon"
