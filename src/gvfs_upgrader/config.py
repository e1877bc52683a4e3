"""Configuration for the GVFS upgrader."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

__version__ = "1.0.0"

DEFAULT_RELEASES_URL = "https://api.github.com/repos/microsoft/VFSForGit/releases"
DEFAULT_DATA_DIR = Path(os.environ.get("PROGRAMDATA", Path.home() / ".gvfs")) / "GVFS"


class UpgraderConfig(BaseModel):
    """All tunables for one upgrade run.

    Defaults can be overridden with ``GVFS_UPGRADER_*`` environment variables
    (see ``from_env``) and then with command-line arguments (``from_args``).
    """

    releases_url: str = Field(DEFAULT_RELEASES_URL, description="Releases list endpoint")
    request_timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    current_version: Optional[str] = Field(
        None, description="Installed GVFS version; read from `gvfs version` when unset"
    )
    download_dir: Path = Field(DEFAULT_DATA_DIR / "ProductUpgrader" / "Downloads")
    log_dir: Path = Field(DEFAULT_DATA_DIR / "ProductUpgrader" / "Logs")
    ring_config_path: Path = Field(DEFAULT_DATA_DIR / "gvfs.config")
    command_to_rerun: str = "gvfs upgrade --confirm"
    gvfs_executable: str = "gvfs"
    git_executable: str = "git"
    installer_args: list[str] = Field(
        default_factory=lambda: [
            "/VERYSILENT",
            "/CLOSEAPPLICATIONS",
            "/SUPPRESSMSGBOXES",
            "/NORESTART",
        ]
    )
    verbose: bool = False

    @property
    def unmount_args(self) -> list[str]:
        return ["service", "--unmount-all"]

    @property
    def mount_args(self) -> list[str]:
        return ["service", "--mount-all"]

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "UpgraderConfig":
        """Create configuration with environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides = {}
        if environ.get("GVFS_UPGRADER_RELEASES_URL"):
            overrides["releases_url"] = environ["GVFS_UPGRADER_RELEASES_URL"]
        if environ.get("GVFS_UPGRADER_DOWNLOAD_DIR"):
            overrides["download_dir"] = Path(environ["GVFS_UPGRADER_DOWNLOAD_DIR"])
        if environ.get("GVFS_UPGRADER_LOG_DIR"):
            overrides["log_dir"] = Path(environ["GVFS_UPGRADER_LOG_DIR"])
        if environ.get("GVFS_UPGRADER_CURRENT_VERSION"):
            overrides["current_version"] = environ["GVFS_UPGRADER_CURRENT_VERSION"]
        return cls(**overrides)

    @classmethod
    def from_args(cls, args, environ: Optional[dict] = None) -> "UpgraderConfig":
        """Create configuration from command-line arguments.

        Args:
            args: Parsed argparse arguments (unset options are None)
            environ: Environment mapping (defaults to os.environ)

        Returns:
            UpgraderConfig instance
        """
        config = cls.from_env(environ)
        overrides = {"verbose": bool(getattr(args, "verbose", False))}
        if getattr(args, "releases_url", None):
            overrides["releases_url"] = args.releases_url
        if getattr(args, "download_dir", None):
            overrides["download_dir"] = Path(args.download_dir)
        if getattr(args, "log_dir", None):
            overrides["log_dir"] = Path(args.log_dir)
        if getattr(args, "ring_config", None):
            overrides["ring_config_path"] = Path(args.ring_config)
        if getattr(args, "current_version", None):
            overrides["current_version"] = args.current_version
        return config.model_copy(update=overrides)
