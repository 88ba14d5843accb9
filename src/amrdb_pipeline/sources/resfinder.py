"""ResFinder adapter: GENE_COPYNUM_ACCESSION headers joined to phenotypes.txt."""

import structlog

from amrdb_pipeline.sequences import AnnotationTable, Record
from amrdb_pipeline.sources.base import (
    Download,
    HeaderRule,
    SourceAdapter,
    SourceInputs,
    TableSpec,
    split_labels,
)

logger = structlog.get_logger()

RESFINDER_URL = "https://bitbucket.org/genomicepidemiology/resfinder_db/get/master.tar.gz"

# >blaTEM-1B_1_JF910132  (gene names may contain underscores, hence non-greedy)
TRIPLET_RULE = HeaderRule(
    name="underscore_triplet",
    pattern=r"(?P<gene>.+?)_(?P<copy>\d+)_(?P<accession>.+)",
    id="{gene}_{copy}",
    acc="{accession}",
    desc="{gene}",
)


def repair_glued_headers(text: str) -> str:
    """Move headers glued onto the end of a sequence line onto their own line.

    Some releases ship lines like "...ACGTAA>blaOXA-1_1_J02967".
    """
    fixed = []
    for line in text.splitlines():
        while not line.startswith(">") and ">" in line:
            head, _, rest = line.partition(">")
            fixed.append(head)
            line = ">" + rest
        fixed.append(line)
    return "\n".join(fixed) + "\n"


def index_by_gene(table: AnnotationTable) -> AnnotationTable:
    """Re-key a phenotype table from full allele IDs to gene stems.

    The first row seen for a gene wins.
    """
    by_gene: AnnotationTable = {}
    for key, row in table.items():
        groups = TRIPLET_RULE.groups(key)
        gene = groups["gene"] if groups else key
        by_gene.setdefault(gene, row)
    return by_gene


class ResfinderAdapter(SourceAdapter):
    """ResFinder acquired resistance gene database."""

    name = "resfinder"
    description = "ResFinder acquired antimicrobial resistance genes"
    fasta_files = ("*.fsa",)
    table_files = {"phenotypes": TableSpec(filename="phenotypes.txt")}
    downloads = (Download(url=RESFINDER_URL, filename="resfinder_db.tar.gz", archive=True),)

    def repair(self, text: str) -> str:
        return repair_glued_headers(text)

    def parse(self, inputs: SourceInputs) -> list[Record]:
        phenotypes = index_by_gene(inputs.tables.get("phenotypes", {}))
        records = []

        for raw in inputs.sequences:
            # Per-class files (beta-lactam.fsa, ...) name the class when no
            # phenotype row exists
            file_class = raw.path.stem

            for entry in raw.entries:
                groups = TRIPLET_RULE.groups(entry.id)
                if groups is None:
                    fields = self.unmatched(entry, TRIPLET_RULE)
                    records.append(self.make_record(
                        entry, raw.molecule_type, fields, abx={file_class}
                    ))
                    continue

                fields = TRIPLET_RULE.match(entry.id)
                row = phenotypes.get(groups["gene"])
                if row is None:
                    abx = {file_class}
                else:
                    fields["desc"] = row.get("Phenotype") or groups["gene"]
                    abx = split_labels(row.get("Class", ""), ",") or {file_class}

                records.append(self.make_record(entry, raw.molecule_type, fields, abx=abx))

        logger.info(
            "resfinder_parsed",
            record_count=len(records),
            phenotype_genes=len(phenotypes),
        )
        return records
