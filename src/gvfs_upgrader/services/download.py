"""Download service for release installer assets."""

import logging
import shutil
from pathlib import Path
from typing import Optional

import httpx

from gvfs_upgrader.models.release import Release, ReleaseAsset
from gvfs_upgrader.models.result import Result


class DownloadService:
    """Downloads release assets into a scratch directory and cleans it up."""

    def __init__(
        self,
        download_dir: Path,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        """Initialize download service.

        Args:
            download_dir: Directory receiving downloaded assets
            client: HTTP client (a new one per download if None)
            timeout: Request timeout in seconds
        """
        self.logger = logging.getLogger("gvfs_upgrader.download")
        self.download_dir = Path(download_dir)
        self.client = client
        self.timeout = timeout
        self.chunk_size = 64 * 1024  # 64KB chunks

    def asset_path(self, asset: ReleaseAsset) -> Path:
        return self.download_dir / asset.name

    def download_release(self, release: Release) -> Result[list[Path]]:
        """Download the GVFS and Git installers of ``release``.

        Returns:
            Result carrying the downloaded file paths
        """
        assets = [release.dependency_installer, release.product_installer]
        if any(asset is None for asset in assets):
            return Result.failure(
                f"Release {release.tag_name} is missing a GVFS or Git installer"
            )

        self.logger.info(
            f"Starting download: version={release.tag_name}, assets={len(assets)}"
        )
        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create {self.download_dir}: {e}")
            return Result.failure(f"Failed to create download directory: {e}")

        paths = []
        for asset in assets:
            downloaded = self.download_asset(asset)
            if not downloaded.ok:
                return Result.failure(downloaded.error)
            paths.append(downloaded.value)

        return Result.success(paths)

    def download_asset(self, asset: ReleaseAsset) -> Result[Path]:
        """Download one asset and verify its size.

        Data goes to ``<name>.tmp`` and is renamed once complete, so a
        partial file is never mistaken for an installer.
        """
        target_path = self.asset_path(asset)
        tmp_path = target_path.with_name(f"{target_path.name}.tmp")
        self.logger.info(
            f"Downloading {asset.name} ({asset.size} bytes) from {asset.browser_download_url}"
        )

        try:
            bytes_downloaded = self._stream_to_file(asset.browser_download_url, tmp_path)
            if bytes_downloaded != asset.size:
                raise ValueError(
                    f"SIZE_MISMATCH: expected {asset.size} bytes, got {bytes_downloaded}"
                )
            tmp_path.replace(target_path)
        except (httpx.HTTPError, OSError, ValueError) as e:
            self.logger.error(f"Download of {asset.name} failed: {e}", exc_info=True)
            tmp_path.unlink(missing_ok=True)
            return Result.failure(f"Failed to download {asset.name}: {e}")

        self.logger.info(f"Downloaded {asset.name} to {target_path}")
        return Result.success(target_path)

    def _stream_to_file(self, url: str, target_path: Path) -> int:
        if self.client is not None:
            return self._write_stream(self.client, url, target_path)

        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            return self._write_stream(client, url, target_path)

    def _write_stream(self, client: httpx.Client, url: str, target_path: Path) -> int:
        bytes_downloaded = 0
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(target_path, "wb") as f:
                for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                    f.write(chunk)
                    bytes_downloaded += len(chunk)
        self.logger.debug(f"Wrote {bytes_downloaded} bytes to {target_path}")
        return bytes_downloaded

    def cleanup(self) -> Result[None]:
        """Delete the download directory. Safe to call repeatedly."""
        if not self.download_dir.exists():
            return Result.success()

        try:
            shutil.rmtree(self.download_dir)
        except OSError as e:
            self.logger.error(f"Failed to delete {self.download_dir}: {e}")
            return Result.failure(f"Failed to delete {self.download_dir}: {e}")

        self.logger.info(f"Deleted downloaded assets in {self.download_dir}")
        return Result.success()
