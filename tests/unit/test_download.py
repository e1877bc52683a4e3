"""Unit tests for DownloadService."""

import httpx
import pytest

from gvfs_upgrader.models.release import Release
from gvfs_upgrader.services.download import DownloadService

CONTENT = {
    "https://downloads.example.com/git-30.exe": b"git-data",
    "https://downloads.example.com/gvfs-30.exe": b"gvfs-data",
}


@pytest.mark.unit
class TestDownloadService:
    """Test DownloadService with a mocked HTTP transport."""

    @pytest.fixture
    def release(self, releases_payload):
        return Release(**releases_payload[1])

    @pytest.fixture
    def download_dir(self, tmp_path):
        return tmp_path / "downloads"

    def make_service(self, download_dir, handler=None):
        def default_handler(request):
            return httpx.Response(200, content=CONTENT[str(request.url)])

        transport = httpx.MockTransport(handler or default_handler)
        return DownloadService(download_dir, client=httpx.Client(transport=transport))

    def test_download_release_success(self, release, download_dir):
        service = self.make_service(download_dir)

        result = service.download_release(release)

        assert result.ok
        assert [p.name for p in result.value] == [
            "Git-2.20.1.vfs.1.1.102.g8a0ff2a-64-bit.exe",
            "SetupGVFS.1.0.19030.2.exe",
        ]
        assert result.value[1].read_bytes() == b"gvfs-data"
        assert not list(download_dir.glob("*.tmp"))

    def test_size_mismatch_removes_partial_file(self, release, download_dir):
        service = self.make_service(
            download_dir, lambda request: httpx.Response(200, content=b"short")
        )

        result = service.download_release(release)

        assert not result.ok
        assert "SIZE_MISMATCH" in result.error
        assert list(download_dir.iterdir()) == []

    def test_http_error_fails(self, release, download_dir):
        service = self.make_service(download_dir, lambda request: httpx.Response(404))

        result = service.download_release(release)

        assert not result.ok
        assert "Failed to download" in result.error

    def test_release_without_installers_fails(self, releases_payload, download_dir):
        service = self.make_service(download_dir)

        result = service.download_release(Release(**releases_payload[2]))

        assert not result.ok
        assert "missing a GVFS or Git installer" in result.error

    def test_cleanup_deletes_directory(self, release, download_dir):
        service = self.make_service(download_dir)
        service.download_release(release)

        result = service.cleanup()

        assert result.ok
        assert not download_dir.exists()

    def test_cleanup_is_idempotent(self, download_dir):
        service = self.make_service(download_dir)

        assert service.cleanup().ok
        assert service.cleanup().ok

    def test_cleanup_failure_returns_error(self, download_dir, monkeypatch):
        download_dir.mkdir()
        service = self.make_service(download_dir)

        def fail(path):
            raise PermissionError("Access denied")

        monkeypatch.setattr("gvfs_upgrader.services.download.shutil.rmtree", fail)

        result = service.cleanup()

        assert not result.ok
        assert "Access denied" in result.error
