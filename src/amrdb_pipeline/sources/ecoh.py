"""EcOH adapter: SRST2-style CLUSTER__GENE__ALLELE__SEQID headers."""

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import Download, HeaderRule, SourceAdapter, SourceInputs

logger = structlog.get_logger()

ECOH_URL = "https://raw.githubusercontent.com/katholt/srst2/master/data/EcOH.fasta"

# >1__fliC__fliC-H1__1 AB028471.1;flagellin;H1
SRST2_RULE = HeaderRule(
    name="double_underscore",
    pattern=r"(?P<cluster>.*?)__(?P<gene>.*?)__(?P<allele>.*?)__(?P<seqid>.*)",
    id="{allele}",
)

SRST2_DESCRIPTION_RULE = HeaderRule(
    name="semicolon_description",
    pattern=r"(?P<accession>[^;]*)(?:;(?P<rest>.*))?",
    id="{accession}",
    acc="{accession}",
    desc="{rest}",
)


class EcohAdapter(SourceAdapter):
    """EcOH E. coli O and H antigen serotyping genes (non-coding checks off)."""

    name = "ecoh"
    description = "EcOH E. coli serotyping genes"
    fasta_files = ("EcOH.fasta",)
    downloads = (Download(url=ECOH_URL, filename="EcOH.fasta"),)
    coding = False

    def parse(self, inputs: SourceInputs) -> list[Record]:
        records = []
        for raw in inputs.sequences:
            for entry in raw.entries:
                fields = SRST2_RULE.match(entry.id)
                if fields is None or not fields["id"]:
                    fields = self.unmatched(entry, SRST2_RULE)
                else:
                    extra = SRST2_DESCRIPTION_RULE.match(entry.description)
                    fields["acc"] = extra["acc"]
                    fields["desc"] = " ".join(
                        part for part in extra["desc"].split(";") if part
                    )
                records.append(self.make_record(entry, raw.molecule_type, fields))

        logger.info("ecoh_parsed", record_count=len(records))
        return records
