"""Stage raw source files on disk before curation.

The curation core only reads files that are already staged; this module is
the default collaborator that puts them there.
"""

import gzip
import shutil
import tarfile
from pathlib import Path
from typing import Protocol

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from amrdb_pipeline.config.schema import FetchConfig
from amrdb_pipeline.sources.base import Download, SourceAdapter

logger = structlog.get_logger()


class SourceFetcher(Protocol):
    """Anything that can stage an adapter's raw files into a directory."""

    def fetch(self, adapter: SourceAdapter, staging_dir: Path, force: bool = False) -> None:
        ...


def _strip_top_level(members: list[tarfile.TarInfo]) -> list[tarfile.TarInfo]:
    """Drop a single shared top-level directory (repository snapshot tarballs)."""
    roots = {Path(m.name).parts[0] for m in members if Path(m.name).parts}
    if len(roots) != 1 or all(len(Path(m.name).parts) == 1 for m in members):
        return members

    stripped = []
    for member in members:
        parts = Path(member.name).parts[1:]
        if not parts:
            continue
        member.name = str(Path(*parts))
        stripped.append(member)
    return stripped


def extract_archive(archive_path: Path, target_dir: Path) -> list[str]:
    """Extract a (compressed) tarball into target_dir, returning member names."""
    target_dir.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive_path, "r:*") as tar:
        members = _strip_top_level(tar.getmembers())
        tar.extractall(target_dir, members=members, filter="data")
    return [m.name for m in members]


class HttpSourceFetcher:
    """Download source files over HTTP with retry.

    Files already present are skipped unless force is set. ".gz" downloads
    are decompressed; archives are extracted into the staging directory.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        url_overrides: dict[str, dict[str, str]] | None = None,
    ):
        self.config = config or FetchConfig()
        self.url_overrides = url_overrides or {}

    def _create_retry_decorator(self):
        """Create retry decorator with exponential backoff."""
        return retry(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, min=4, max=60),
            retry=retry_if_exception_type(
                (httpx.HTTPStatusError, httpx.ConnectError, httpx.TimeoutException)
            ),
            reraise=True,
        )

    def download(self, url: str, output_path: Path) -> Path:
        """Stream url to output_path (via a .tmp file)."""
        temp_path = output_path.with_name(output_path.name + ".tmp")

        @self._create_retry_decorator()
        def _download_with_retry():
            with httpx.stream(
                "GET", url, timeout=float(self.config.timeout_seconds), follow_redirects=True
            ) as response:
                response.raise_for_status()
                with open(temp_path, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=8192):
                        f.write(chunk)

        logger.info("download_start", url=url)
        _download_with_retry()
        temp_path.replace(output_path)
        logger.info(
            "download_complete",
            path=str(output_path),
            size_mb=round(output_path.stat().st_size / 1024 / 1024, 2),
        )
        return output_path

    def url_for(self, adapter: SourceAdapter, download: Download) -> str:
        return self.url_overrides.get(adapter.name, {}).get(download.filename, download.url)

    def fetch(self, adapter: SourceAdapter, staging_dir: Path, force: bool = False) -> None:
        staging_dir = Path(staging_dir)
        staging_dir.mkdir(parents=True, exist_ok=True)

        for download in adapter.downloads:
            url = self.url_for(adapter, download)

            if download.archive:
                marker = staging_dir / f".{download.filename}.extracted"
                if marker.exists() and not force:
                    logger.info("archive_already_staged", source=adapter.name, archive=download.filename)
                    continue
                archive_path = self.download(url, staging_dir / download.filename)
                names = extract_archive(archive_path, staging_dir)
                archive_path.unlink()
                marker.write_text("\n".join(names) + "\n")
                logger.info("archive_extracted", source=adapter.name, member_count=len(names))
                continue

            is_compressed = download.filename.endswith(".gz")
            target = staging_dir / (download.filename[:-3] if is_compressed else download.filename)

            # Checkpoint pattern: skip if already staged
            if target.exists() and not force:
                logger.info("file_already_staged", source=adapter.name, path=str(target))
                continue

            if is_compressed:
                compressed = self.download(url, staging_dir / download.filename)
                with gzip.open(compressed, "rb") as f_in, open(target, "wb") as f_out:
                    shutil.copyfileobj(f_in, f_out)
                compressed.unlink()
            else:
                self.download(url, target)
