"""CARD FASTA adapter: six-field pipe-delimited headers."""

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import (
    Download,
    HeaderRule,
    SourceAdapter,
    SourceInputs,
    title_of,
)

logger = structlog.get_logger()

CARD_DATA_URL = "https://card.mcmaster.ca/latest/data"

# >gb|HQ845196|+|0-861|ARO:3001109|SHV-52 [Klebsiella pneumoniae]
# Only the first word of the last field is the gene symbol.
PIPE_RULE = HeaderRule(
    name="pipe6",
    pattern=(
        r"(?P<db>[^|]*)\|(?P<accession>[^|]*)\|(?P<strand>[^|]*)\|"
        r"(?P<coords>[^|]*)\|(?P<aro>[^|]*)\|(?P<symbol>[^\s|]+)(?:\s.*)?"
    ),
    id="{symbol}",
    acc="{accession}:{coords}",
    desc="{aro}",
)


class CardFastaAdapter(SourceAdapter):
    """CARD protein homolog models from the nucleotide FASTA export."""

    name = "card_fasta"
    description = "CARD protein homolog models (FASTA export)"
    fasta_files = ("nucleotide_fasta_protein_homolog_model.fasta",)
    downloads = (Download(url=CARD_DATA_URL, filename="card-data.tar.bz2", archive=True),)

    def parse(self, inputs: SourceInputs) -> list[Record]:
        records = []
        for raw in inputs.sequences:
            for entry in raw.entries:
                fields = PIPE_RULE.match(title_of(entry)) or self.unmatched(entry, PIPE_RULE)
                records.append(self.make_record(entry, raw.molecule_type, fields))

        logger.info("card_fasta_parsed", record_count=len(records))
        return records
