"""Global pytest fixtures and configuration."""

import json
import sys
from pathlib import Path

import pytest

# Add src and the test helpers to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from gvfs_upgrader.config import UpgraderConfig  # noqa: E402


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for test files."""
    yield tmp_path


@pytest.fixture
def upgrader_config(tmp_path):
    """Configuration pointing every directory into tmp_path."""
    return UpgraderConfig(
        releases_url="https://releases.example.com/releases",
        current_version="1.0.19010.1",
        download_dir=tmp_path / "downloads",
        log_dir=tmp_path / "logs",
        ring_config_path=tmp_path / "gvfs.config",
    )


@pytest.fixture
def releases_payload():
    """Releases list as returned by the GitHub API."""
    return [
        {
            "tag_name": "v1.0.19050.1",
            "name": "GVFS 1.0.19050.1",
            "prerelease": True,
            "draft": False,
            "assets": [
                {
                    "name": "Git-2.21.0.vfs.1.1.50.gabcdef-64-bit.exe",
                    "size": 8,
                    "browser_download_url": "https://downloads.example.com/git-50.exe",
                },
                {
                    "name": "SetupGVFS.1.0.19050.1.exe",
                    "size": 9,
                    "browser_download_url": "https://downloads.example.com/gvfs-50.exe",
                },
            ],
        },
        {
            "tag_name": "v1.0.19030.2",
            "name": "GVFS 1.0.19030.2",
            "prerelease": False,
            "draft": False,
            "assets": [
                {
                    "name": "Git-2.20.1.vfs.1.1.102.g8a0ff2a-64-bit.exe",
                    "size": 8,
                    "browser_download_url": "https://downloads.example.com/git-30.exe",
                },
                {
                    "name": "SetupGVFS.1.0.19030.2.exe",
                    "size": 9,
                    "browser_download_url": "https://downloads.example.com/gvfs-30.exe",
                },
            ],
        },
        {
            "tag_name": "v1.0.19000.1",
            "prerelease": False,
            "draft": False,
            "assets": [],
        },
        {
            "tag_name": "v1.0.19100.1",
            "prerelease": False,
            "draft": True,
            "assets": [],
        },
    ]


@pytest.fixture
def ring_config_file(upgrader_config):
    """Write a ring config file and return a writer for other rings."""

    def write(ring):
        upgrader_config.ring_config_path.write_text(json.dumps({"upgrade.ring": ring}))
        return upgrader_config.ring_config_path

    return write
