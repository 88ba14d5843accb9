"""ARG-ANNOT adapter: colon-delimited NAME:ACCESSION:COORDS:LENGTH headers."""

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import Download, HeaderRule, SourceAdapter, SourceInputs

logger = structlog.get_logger()

ARGANNOT_URL = (
    "http://backup.mediterranee-infection.com/arkotheque/client/ihumed/"
    "_depot_arko/articles/2041/argannot-nt-v3-march2017_doc.fasta"
)

# >(AGly)Aac2-Ie:NC_011896:3039059-3039607:549
COLON_RULE = HeaderRule(
    name="colon",
    pattern=r"(?P<name>[^:]+):(?P<accession>[^:]+):(?P<coords>[^:]+):(?P<length>[^:]*)",
    id="{name}",
    acc="{accession}:{coords}",
    desc="",
)


class ArgannotAdapter(SourceAdapter):
    """ARG-ANNOT nucleotide database."""

    name = "argannot"
    description = "ARG-ANNOT antibiotic resistance gene database"
    fasta_files = ("argannot.fasta",)
    downloads = (Download(url=ARGANNOT_URL, filename="argannot.fasta"),)

    def parse(self, inputs: SourceInputs) -> list[Record]:
        records = []
        for raw in inputs.sequences:
            for entry in raw.entries:
                fields = COLON_RULE.match(entry.id) or self.unmatched(entry, COLON_RULE)
                records.append(self.make_record(entry, raw.molecule_type, fields))

        logger.info("argannot_parsed", record_count=len(records))
        return records
