"""NCBI AMRFinderPlus adapter: pipe-delimited CDS headers joined to the gene catalog."""

import structlog

from amrdb_pipeline.sequences import Record
from amrdb_pipeline.sources.base import (
    Download,
    HeaderRule,
    SourceAdapter,
    SourceInputs,
    TableSpec,
    split_labels,
    title_of,
)

logger = structlog.get_logger()

AMRFINDER_DB_URL = (
    "https://ftp.ncbi.nlm.nih.gov/pathogen/Antimicrobial_resistance/"
    "AMRFinderPlus/database/latest"
)
POINT_MUTATION_SUBTYPE = "POINT"

# >1000909371|WP_061158039.1|1|1|cepA-44|cepA|hydrolase|2|BETA-LACTAM|BETA-LACTAM|class A beta-lactamase CepA-44
NCBI_RULE = HeaderRule(
    name="amrfinder",
    pattern=(
        r"(?P<gi>[^|]*)\|(?P<protein>[^|]*)\|(?P<fusion_part>\d+)\|(?P<fusion_total>\d+)\|"
        r"(?P<allele>[^|]*)\|(?P<family>[^|]*)\|(?P<kind>[^|]*)\|(?P<level>[^|]*)\|"
        r"(?P<drug_class>[^|]*)\|(?P<subclass>[^|]*)\|(?P<product>.*)"
    ),
    id="{allele}",
    acc="{protein}",
    desc="{product}",
)


def catalog_locator(row: dict[str, str]) -> str:
    """Nucleotide accession with coordinates from a catalog row, or ""."""
    accession = row.get("genbank_nucleotide_accession", "")
    start = row.get("genbank_start", "")
    stop = row.get("genbank_stop", "")
    if accession and start and stop:
        return f"{accession}:{start}-{stop}"
    return accession


class NcbiAdapter(SourceAdapter):
    """NCBI Bacterial Antimicrobial Resistance Reference Gene Database.

    Fusion genes (fusion_total > 1) and point-mutation entries (which only
    confer resistance with a specific SNP) are skipped.
    """

    name = "ncbi"
    description = "NCBI AMRFinderPlus reference gene database"
    fasta_files = ("AMR_CDS.fa",)
    table_files = {
        "catalog": TableSpec(filename="ReferenceGeneCatalog.txt", key_column=9),
    }
    downloads = (
        Download(url=f"{AMRFINDER_DB_URL}/AMR_CDS.fa", filename="AMR_CDS.fa"),
        Download(
            url=f"{AMRFINDER_DB_URL}/ReferenceGeneCatalog.txt",
            filename="ReferenceGeneCatalog.txt",
        ),
    )

    def parse(self, inputs: SourceInputs) -> list[Record]:
        catalog = inputs.tables.get("catalog", {})
        records = []
        fusions = 0
        point_mutations = 0

        for raw in inputs.sequences:
            for entry in raw.entries:
                groups = NCBI_RULE.groups(title_of(entry))
                if groups is None:
                    fields = self.unmatched(entry, NCBI_RULE)
                    records.append(self.make_record(entry, raw.molecule_type, fields))
                    continue

                if int(groups["fusion_total"]) > 1:
                    fusions += 1
                    logger.debug("ncbi_fusion_skipped", header=entry.id)
                    continue

                row = catalog.get(groups["protein"])
                if row is not None and row.get("subtype") == POINT_MUTATION_SUBTYPE:
                    point_mutations += 1
                    logger.debug("ncbi_point_mutation_skipped", header=entry.id)
                    continue

                fields = NCBI_RULE.match(title_of(entry))
                fields["id"] = groups["allele"] or groups["family"]
                drug_class = groups["drug_class"]

                if row is not None:
                    fields["id"] = row.get("allele") or row.get("gene_family") or fields["id"]
                    fields["acc"] = catalog_locator(row) or fields["acc"]
                    fields["desc"] = row.get("product_name") or fields["desc"]
                    drug_class = row.get("class") or drug_class

                records.append(self.make_record(
                    entry, raw.molecule_type, fields, abx=split_labels(drug_class, "/")
                ))

        logger.info(
            "ncbi_parsed",
            record_count=len(records),
            fusions_skipped=fusions,
            point_mutations_skipped=point_mutations,
            catalog_rows=len(catalog),
        )
        return records
