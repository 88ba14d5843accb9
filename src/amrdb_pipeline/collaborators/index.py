"""Build a sequence search index from a curated collection."""

import shutil
import subprocess
from pathlib import Path
from typing import Protocol

import structlog

from amrdb_pipeline.exceptions import IndexingError
from amrdb_pipeline.sequences import MoleculeType

logger = structlog.get_logger()

LOG_TAIL_LINES = 10


class SequenceIndexer(Protocol):
    """Anything that can index a written collection."""

    def index(self, fasta_path: Path, source: str, molecule_type: MoleculeType) -> None:
        ...


def log_tail(text: str, lines: int = LOG_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


class BlastIndexer:
    """Index a collection with makeblastdb."""

    def __init__(self, executable: str = "makeblastdb"):
        self.executable = executable

    def command(self, fasta_path: Path, source: str, molecule_type: MoleculeType) -> list[str]:
        dbtype = "nucl" if molecule_type == MoleculeType.NUCLEOTIDE else "prot"
        return [
            self.executable,
            "-hash_index",
            "-in", str(fasta_path),
            "-title", source,
            "-dbtype", dbtype,
        ]

    def index(self, fasta_path: Path, source: str, molecule_type: MoleculeType) -> None:
        if shutil.which(self.executable) is None:
            raise IndexingError(f"{self.executable} not found on PATH", returncode=127)

        cmd = self.command(fasta_path, source, molecule_type)
        logger.info("index_start", command=" ".join(cmd))
        result = subprocess.run(cmd, capture_output=True, text=True)

        if result.returncode != 0:
            raise IndexingError(
                f"{self.executable} failed for {fasta_path}",
                returncode=result.returncode,
                log_tail=log_tail(result.stdout + "\n" + result.stderr),
            )
        logger.info("index_complete", path=str(fasta_path), source=source)
