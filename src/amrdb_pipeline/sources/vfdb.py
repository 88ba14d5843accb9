"""VFDB adapter: SYMBOL(db|ACCESSION) headers."""

import re

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import Download, HeaderRule, SourceAdapter, SourceInputs

logger = structlog.get_logger()

VFDB_URL = "http://www.mgc.ac.cn/VFs/Down/VFDB_setA_nt.fas.gz"

# >VFG000676(gb|AAD32411) (lef) anthrax lethal factor endopeptidase precursor [...]
PAREN_RULE = HeaderRule(
    name="paren_accession",
    pattern=r"(?P<symbol>[^()\s]+)\((?P<db>[^|()]*)\|(?P<accession>[^()]*)\)",
    id="{symbol}",
    acc="{accession}",
)

LEADING_PARENTHETICAL = re.compile(r"^\(([^)]*)\)")
CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def strip_control_characters(text: str) -> str:
    """Remove control characters (keeps newlines and tabs)."""
    return CONTROL_CHARACTERS.sub("", text)


class VfdbAdapter(SourceAdapter):
    """VFDB core virulence factor set."""

    name = "vfdb"
    description = "VFDB virulence factor database (core set A)"
    fasta_files = ("vfdb.fasta",)
    downloads = (Download(url=VFDB_URL, filename="vfdb.fasta.gz"),)

    def repair(self, text: str) -> str:
        return strip_control_characters(text)

    def parse(self, inputs: SourceInputs) -> list[Record]:
        records = []
        for raw in inputs.sequences:
            for entry in raw.entries:
                fields = PAREN_RULE.match(entry.id)
                if fields is None:
                    fields = self.unmatched(entry, PAREN_RULE)
                else:
                    m = LEADING_PARENTHETICAL.match(entry.description)
                    fields["desc"] = m.group(1) if m else entry.description
                records.append(self.make_record(entry, raw.molecule_type, fields))

        logger.info("vfdb_parsed", record_count=len(records))
        return records
