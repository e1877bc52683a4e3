"""Runs downloaded installers silently."""

import logging
from pathlib import Path
from typing import Optional, Sequence

from gvfs_upgrader.models.result import Result
from gvfs_upgrader.services.process import ProcessLauncher
from gvfs_upgrader.utils.logging import new_log_file_name


class InstallerRunner:
    """Launches an installer executable and reports whether it succeeded."""

    def __init__(
        self,
        launcher: ProcessLauncher,
        installer_args: Sequence[str],
        log_dir: Optional[Path] = None,
    ):
        """Initialize installer runner.

        Args:
            launcher: Process launcher used to start installers
            installer_args: Arguments passed to every installer
            log_dir: Directory for installer logs (no /Log argument if None)
        """
        self.logger = logging.getLogger("gvfs_upgrader.installer")
        self.launcher = launcher
        self.installer_args = list(installer_args)
        self.log_dir = Path(log_dir) if log_dir is not None else None

    def build_args(self, label: str) -> list[str]:
        args = list(self.installer_args)
        if self.log_dir is not None:
            log_file = new_log_file_name(self.log_dir, f"{label.lower()}_installer")
            args.append(f'/Log="{log_file}"')
        return args

    def run(self, installer_path: Path, label: str) -> Result[bool]:
        """Run an installer to completion.

        Returns:
            Failure if the installer could not be launched. Otherwise
            success carrying whether it exited with code 0.
        """
        if not Path(installer_path).exists():
            return Result.failure(f"{label} installer not found at {installer_path}")

        args = self.build_args(label)
        self.logger.info(f"Running {label} installer: {installer_path}")
        if not self.launcher.start(str(installer_path), args):
            return Result.failure(f"Could not launch {label} installer {installer_path}")

        if not self.launcher.has_exited:
            self.logger.error(f"{label} installer did not exit")
            return Result.success(False)

        if self.launcher.exit_code != 0:
            self.logger.error(
                f"{label} installer exited with code {self.launcher.exit_code}"
            )
            return Result.success(False)

        self.logger.info(f"{label} installer completed")
        return Result.success(True)
