"""MEGARes adapter: pipe-delimited MEG_N|TYPE|CLASS|MECHANISM|GROUP headers."""

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import Download, HeaderRule, SourceAdapter, SourceInputs

logger = structlog.get_logger()

MEGARES_URL = "https://www.meglab.org/downloads/megares_v3.00/megares_database_v3.00.fasta"
SNP_CONFIRMATION_FLAG = "RequiresSNPConfirmation"

# >MEG_1|Drugs|Aminoglycosides|Aminoglycoside-resistant_16S_ribosomal_subunit_protein|A16S|RequiresSNPConfirmation
MEGARES_RULE = HeaderRule(
    name="megares",
    pattern=(
        r"(?P<accession>MEG_\d+)\|(?P<kind>[^|]*)\|(?P<drug_class>[^|]*)\|"
        r"(?P<mechanism>[^|]*)\|(?P<group>[^|]*)(?:\|(?P<flag>.*))?"
    ),
    id="{group}",
    acc="{accession}",
    desc="{mechanism}",
)


class MegaresAdapter(SourceAdapter):
    """MEGARes resistance database. Variants that need SNP confirmation are skipped."""

    name = "megares"
    description = "MEGARes antimicrobial resistance database"
    fasta_files = ("megares.fasta",)
    downloads = (Download(url=MEGARES_URL, filename="megares.fasta"),)

    def parse(self, inputs: SourceInputs) -> list[Record]:
        records = []
        skipped = 0

        for raw in inputs.sequences:
            for entry in raw.entries:
                groups = MEGARES_RULE.groups(entry.id)
                if groups is None:
                    fields = self.unmatched(entry, MEGARES_RULE)
                    records.append(self.make_record(entry, raw.molecule_type, fields))
                    continue

                if SNP_CONFIRMATION_FLAG in groups["flag"]:
                    skipped += 1
                    logger.debug("megares_snp_variant_skipped", header=entry.id)
                    continue

                fields = MEGARES_RULE.match(entry.id)
                fields["desc"] = fields["desc"].replace("_", " ")
                abx = {groups["drug_class"]} if groups["drug_class"] else set()
                records.append(self.make_record(entry, raw.molecule_type, fields, abx=abx))

        logger.info("megares_parsed", record_count=len(records), snp_variants_skipped=skipped)
        return records
