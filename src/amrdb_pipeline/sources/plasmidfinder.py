"""PlasmidFinder adapter: replicon sequences with ResFinder-style headers."""

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import Download, SourceAdapter, SourceInputs
from amrdb_pipeline.sources.resfinder import TRIPLET_RULE, repair_glued_headers

logger = structlog.get_logger()

PLASMIDFINDER_URL = "https://bitbucket.org/genomicepidemiology/plasmidfinder_db/get/master.tar.gz"


class PlasmidfinderAdapter(SourceAdapter):
    """PlasmidFinder replicon database (non-coding: no CDS checks)."""

    name = "plasmidfinder"
    description = "PlasmidFinder plasmid replicon sequences"
    fasta_files = ("*.fsa",)
    downloads = (
        Download(url=PLASMIDFINDER_URL, filename="plasmidfinder_db.tar.gz", archive=True),
    )
    coding = False

    def repair(self, text: str) -> str:
        return repair_glued_headers(text)

    def parse(self, inputs: SourceInputs) -> list[Record]:
        records = []
        for raw in inputs.sequences:
            for entry in raw.entries:
                fields = TRIPLET_RULE.match(entry.id) or self.unmatched(entry, TRIPLET_RULE)
                records.append(self.make_record(entry, raw.molecule_type, fields))

        logger.info("plasmidfinder_parsed", record_count=len(records))
        return records
