"""Checks run before any destructive upgrade step, plus unmount/remount."""

import ctypes
import logging
import os
from typing import Callable, Mapping, Optional

from gvfs_upgrader.config import UpgraderConfig
from gvfs_upgrader.models.result import Result
from gvfs_upgrader.services.process import ProcessLauncher, run_command

# Version stamped on locally built (developer) binaries
DEVELOPER_BUILD_VERSION = "0.2.173.2"
UNATTENDED_ENV_VAR = "GVFS_UNATTENDED"


def is_process_elevated() -> bool:
    """True when running as Administrator (Windows) or root."""
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0


class InstallerPreRunChecker:
    """Validates the machine can be upgraded and (un)mounts repositories."""

    def __init__(
        self,
        config: UpgraderConfig,
        launcher: Optional[ProcessLauncher] = None,
        is_elevated: Callable[[], bool] = is_process_elevated,
        environ: Optional[Mapping[str, str]] = None,
        installed_version: Optional[Callable[[], Optional[str]]] = None,
    ):
        """Initialize pre-run checker.

        Args:
            config: Upgrader configuration
            launcher: Launcher for gvfs service commands
            is_elevated: Returns whether the process has admin rights
            environ: Environment mapping (defaults to os.environ)
            installed_version: Returns the installed GVFS version (defaults to
                the configured one)
        """
        self.logger = logging.getLogger("gvfs_upgrader.preflight")
        self.config = config
        self.launcher = launcher or ProcessLauncher()
        self.is_elevated = is_elevated
        self.environ = os.environ if environ is None else environ
        self.installed_version = installed_version or (lambda: config.current_version)
        self.command_to_rerun = config.command_to_rerun

    def run_pre_upgrade_checks(self) -> Result[None]:
        """Check the process may upgrade GVFS right now."""
        if self.installed_version() == DEVELOPER_BUILD_VERSION:
            self.logger.error("Upgrade is not supported on developer builds")
            return Result.failure(
                "Cannot upgrade GVFS on this machine. "
                "This is a developer build of GVFS; install a release build first."
            )

        if self.environ.get(UNATTENDED_ENV_VAR) == "1":
            self.logger.error("Upgrade blocked: running unattended")
            return Result.failure(
                "Cannot upgrade GVFS on this machine. "
                "GVFS upgrade is not supported in unattended mode."
            )

        if not self.is_elevated():
            self.logger.error("Upgrade blocked: process is not elevated")
            return Result.failure(
                "The installer needs to be run from an elevated command prompt. "
                f"Run `{self.command_to_rerun}` again from an elevated command prompt."
            )

        self.logger.info("Pre-upgrade checks passed")
        return Result.success()

    def unmount_all_repos(self) -> Result[None]:
        return self._run_service_command(self.config.unmount_args, "unmount")

    def mount_all_repos(self) -> Result[None]:
        return self._run_service_command(self.config.mount_args, "mount")

    def _run_service_command(self, args: list[str], action: str) -> Result[None]:
        self.logger.info(f"Running gvfs service to {action} all repositories")
        result = run_command(self.launcher, self.config.gvfs_executable, args)
        if not result.ok:
            self.logger.error(f"Failed to {action} repositories: {result.error}")
            return Result.failure(f"Failed to {action} GVFS repositories. {result.error}")
        return Result.success()
