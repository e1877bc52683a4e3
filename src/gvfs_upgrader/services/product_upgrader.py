"""Release lookup, download and install operations for one upgrade run."""

import logging
from pathlib import Path
from typing import Optional

import httpx

from gvfs_upgrader.config import UpgraderConfig
from gvfs_upgrader.models.release import (
    DependencyVersion,
    ProductVersion,
    Release,
    parse_product_version,
)
from gvfs_upgrader.models.result import Result
from gvfs_upgrader.models.ring import RingType
from gvfs_upgrader.services.download import DownloadService
from gvfs_upgrader.services.installer import InstallerRunner
from gvfs_upgrader.services.process import ProcessLauncher, run_command
from gvfs_upgrader.services.release_resolver import ReleaseResolver
from gvfs_upgrader.services.ring_config import RingConfigLoader


class ProductUpgrader:
    """Collaborator facade used by the upgrade orchestrator.

    Every operation returns a ``Result``; none of them raise for expected
    failures. The newest release found by ``get_newer_version`` is
    remembered for the later download and install calls.
    """

    def __init__(
        self,
        config: UpgraderConfig,
        ring_loader: RingConfigLoader,
        resolver: ReleaseResolver,
        downloader: DownloadService,
        installer: InstallerRunner,
        launcher: Optional[ProcessLauncher] = None,
    ):
        self.logger = logging.getLogger("gvfs_upgrader.product_upgrader")
        self.config = config
        self.ring_loader = ring_loader
        self.resolver = resolver
        self.downloader = downloader
        self.installer = installer
        self.launcher = launcher or ProcessLauncher()
        self.ring = RingType.INVALID
        self.installed_version: Optional[str] = None
        self._newest_release: Optional[Release] = None

    @classmethod
    def from_config(
        cls, config: UpgraderConfig, client: Optional[httpx.Client] = None
    ) -> "ProductUpgrader":
        """Wire the real collaborators from configuration."""
        return cls(
            config=config,
            ring_loader=RingConfigLoader(config.ring_config_path),
            resolver=ReleaseResolver(
                config.releases_url,
                client=client,
                timeout=config.request_timeout,
            ),
            downloader=DownloadService(
                config.download_dir, client=client, timeout=config.request_timeout
            ),
            installer=InstallerRunner(
                ProcessLauncher(), config.installer_args, log_dir=config.log_dir
            ),
        )

    def load_ring_config(self) -> Result[RingType]:
        result = self.ring_loader.load()
        self.ring = result.value if result.ok else RingType.INVALID
        return result

    def get_newer_version(self) -> Result[Optional[ProductVersion]]:
        """Return the newest version available in the loaded ring, or None."""
        installed = self.get_installed_version()
        if not installed.ok:
            return Result.failure(installed.error)

        result = self.resolver.get_newer_release(self.ring, installed.value)
        if not result.ok:
            return Result.failure(result.error)

        self._newest_release = result.value
        if self._newest_release is None:
            return Result.success(None)
        return Result.success(self._newest_release.version)

    def get_installed_version(self) -> Result[ProductVersion]:
        """Version of the GVFS being upgraded.

        Uses the configured override when set, otherwise asks `gvfs version`,
        which prints e.g. ``GVFS 1.0.19030.2``.
        """
        text = self.config.current_version
        if not text:
            result = run_command(self.launcher, self.config.gvfs_executable, ["version"])
            if not result.ok:
                return Result.failure(f"Failed to read installed GVFS version. {result.error}")
            tokens = result.value.split()
            text = tokens[-1] if tokens else ""

        version = parse_product_version(text)
        if version is None:
            return Result.failure(f"Unrecognized GVFS version: {text!r}")

        self.installed_version = str(version)
        self.logger.info(f"Installed GVFS version: {self.installed_version}")
        return Result.success(version)

    def get_dependency_version(self) -> Result[DependencyVersion]:
        if self._newest_release is None:
            return Result.failure("No newer release has been resolved")
        return self.resolver.get_dependency_version(self._newest_release)

    def get_installed_dependency_version(self) -> Result[DependencyVersion]:
        """Ask the installed Git for its version."""
        result = run_command(self.launcher, self.config.git_executable, ["--version"])
        if not result.ok:
            return Result.failure(result.error)

        version = DependencyVersion.parse(result.value)
        if version is None:
            return Result.failure(f"Unrecognized Git version: {result.value.strip()}")
        return Result.success(version)

    def download_newest_version(self) -> Result[list[Path]]:
        if self._newest_release is None:
            return Result.failure("No newer release has been resolved")
        return self.downloader.download_release(self._newest_release)

    def run_dependency_installer(self) -> Result[bool]:
        return self._run_installer(
            "Git", lambda release: release.dependency_installer
        )

    def run_product_installer(self) -> Result[bool]:
        return self._run_installer(
            "GVFS", lambda release: release.product_installer
        )

    def _run_installer(self, label: str, select_asset) -> Result[bool]:
        if self._newest_release is None:
            return Result.failure("No newer release has been resolved")

        asset = select_asset(self._newest_release)
        if asset is None:
            return Result.failure(
                f"Release {self._newest_release.tag_name} has no {label} installer"
            )
        return self.installer.run(self.downloader.asset_path(asset), label)

    def cleanup(self) -> Result[None]:
        return self.downloader.cleanup()
