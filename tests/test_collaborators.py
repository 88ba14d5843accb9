"""Tests for the fetch and index collaborators with network and subprocess mocked."""

import gzip
import io
import subprocess
import tarfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from amrdb_pipeline.collaborators import BlastIndexer, HttpSourceFetcher, extract_archive
from amrdb_pipeline.collaborators.index import log_tail
from amrdb_pipeline.config.schema import FetchConfig
from amrdb_pipeline.exceptions import IndexingError
from amrdb_pipeline.sequences import MoleculeType
from amrdb_pipeline.sources import get_adapter


def make_tarball(path: Path, files: dict[str, str]) -> Path:
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


# --- archives ---


def test_extract_archive_strips_snapshot_directory(tmp_path):
    archive = make_tarball(tmp_path / "db.tar.gz", {
        "genomicepidemiology-resfinder_db-abc123/beta-lactam.fsa": ">a_1_X\nATG\n",
        "genomicepidemiology-resfinder_db-abc123/phenotypes.txt": "Gene\tClass\n",
    })

    names = extract_archive(archive, tmp_path / "staging")

    assert sorted(names) == ["beta-lactam.fsa", "phenotypes.txt"]
    assert (tmp_path / "staging" / "beta-lactam.fsa").read_text() == ">a_1_X\nATG\n"


def test_extract_archive_flat(tmp_path):
    archive = make_tarball(tmp_path / "card.tar.gz", {
        "card.json": "{}",
        "nucleotide_fasta_protein_homolog_model.fasta": "",
    })

    extract_archive(archive, tmp_path / "staging")

    assert (tmp_path / "staging" / "card.json").exists()


# --- HttpSourceFetcher ---


def test_fetch_skips_staged_files(tmp_path):
    (tmp_path / "argannot.fasta").write_text(">a\nATG\n")
    fetcher = HttpSourceFetcher()

    with patch.object(HttpSourceFetcher, "download") as mock_download:
        fetcher.fetch(get_adapter("argannot"), tmp_path)

    mock_download.assert_not_called()


def test_fetch_force_redownloads(tmp_path):
    (tmp_path / "argannot.fasta").write_text(">a\nATG\n")
    fetcher = HttpSourceFetcher()

    with patch.object(HttpSourceFetcher, "download") as mock_download:
        fetcher.fetch(get_adapter("argannot"), tmp_path, force=True)

    mock_download.assert_called_once()
    assert mock_download.call_args[0][1] == tmp_path / "argannot.fasta"


def test_fetch_decompresses_gz(tmp_path):
    def fake_download(url, output_path):
        with gzip.open(output_path, "wt") as f:
            f.write(">VFG1(gb|X1) (abc) toxin\nATG\n")
        return output_path

    fetcher = HttpSourceFetcher(url_overrides={"vfdb": {"vfdb.fasta.gz": "http://mirror/vfdb.gz"}})

    with patch.object(fetcher, "download", side_effect=fake_download) as mock_download:
        fetcher.fetch(get_adapter("vfdb"), tmp_path)

    assert mock_download.call_args[0][0] == "http://mirror/vfdb.gz"
    assert (tmp_path / "vfdb.fasta").read_text().startswith(">VFG1")
    assert not (tmp_path / "vfdb.fasta.gz").exists()


def test_fetch_extracts_archive_once(tmp_path):
    def fake_download(url, output_path):
        return make_tarball(output_path, {"snapshot/plasmid.fsa": ">IncX_1_A\nACGT\n"})

    fetcher = HttpSourceFetcher()
    adapter = get_adapter("plasmidfinder")

    with patch.object(fetcher, "download", side_effect=fake_download) as mock_download:
        fetcher.fetch(adapter, tmp_path)
        fetcher.fetch(adapter, tmp_path)

    assert mock_download.call_count == 1
    assert (tmp_path / "plasmid.fsa").exists()
    assert not (tmp_path / "plasmidfinder_db.tar.gz").exists()


def test_download_streams_to_file(tmp_path):
    response = MagicMock()
    response.iter_bytes.return_value = [b">a\n", b"ATG\n"]
    stream = MagicMock()
    stream.__enter__.return_value = response

    fetcher = HttpSourceFetcher(FetchConfig(max_retries=1, timeout_seconds=5))

    with patch("amrdb_pipeline.collaborators.fetch.httpx.stream", return_value=stream) as mock_stream:
        path = fetcher.download("http://example.org/a.fa", tmp_path / "a.fa")

    assert path.read_text() == ">a\nATG\n"
    assert mock_stream.call_args[1]["timeout"] == 5.0
    response.raise_for_status.assert_called_once()


def test_download_gives_up_after_retries(tmp_path):
    fetcher = HttpSourceFetcher(FetchConfig(max_retries=1))

    with patch(
        "amrdb_pipeline.collaborators.fetch.httpx.stream",
        side_effect=httpx.ConnectError("refused"),
    ):
        with pytest.raises(httpx.ConnectError):
            fetcher.download("http://example.org/a.fa", tmp_path / "a.fa")

    assert not (tmp_path / "a.fa").exists()


# --- BlastIndexer ---


def test_indexer_command():
    cmd = BlastIndexer().command(Path("db/ncbi/sequences"), "ncbi", MoleculeType.NUCLEOTIDE)

    assert cmd == [
        "makeblastdb", "-hash_index",
        "-in", "db/ncbi/sequences",
        "-title", "ncbi",
        "-dbtype", "nucl",
    ]
    assert BlastIndexer().command(Path("x"), "s", MoleculeType.PROTEIN)[-1] == "prot"


def test_indexer_missing_executable(tmp_path):
    with patch("amrdb_pipeline.collaborators.index.shutil.which", return_value=None):
        with pytest.raises(IndexingError) as exc_info:
            BlastIndexer().index(tmp_path / "sequences", "ncbi", MoleculeType.NUCLEOTIDE)

    assert exc_info.value.returncode == 127


def test_indexer_failure_reports_log_tail(tmp_path):
    failed = subprocess.CompletedProcess(
        args=[], returncode=2, stdout="line\n" * 20, stderr="BLAST Database error: bad input\n"
    )

    with patch("amrdb_pipeline.collaborators.index.shutil.which", return_value="/usr/bin/makeblastdb"), \
         patch("amrdb_pipeline.collaborators.index.subprocess.run", return_value=failed):
        with pytest.raises(IndexingError) as exc_info:
            BlastIndexer().index(tmp_path / "sequences", "ncbi", MoleculeType.NUCLEOTIDE)

    error = exc_info.value
    assert error.returncode == 2
    assert error.log_tail.endswith("BLAST Database error: bad input")
    assert len(error.log_tail.splitlines()) == 10
    assert "(exit status 2)" in str(error)


def test_indexer_success(tmp_path):
    ok = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("amrdb_pipeline.collaborators.index.shutil.which", return_value="/usr/bin/makeblastdb"), \
         patch("amrdb_pipeline.collaborators.index.subprocess.run", return_value=ok) as mock_run:
        BlastIndexer().index(tmp_path / "sequences", "vfdb", MoleculeType.PROTEIN)

    assert mock_run.call_args[0][0][-1] == "prot"


def test_log_tail():
    assert log_tail("a\nb\nc\n", lines=2) == "b\nc"
