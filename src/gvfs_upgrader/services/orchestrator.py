"""Upgrade orchestrator: sequences one GVFS upgrade run.

Stages run strictly in order:

    load ring → check available → resolve Git version → pre-upgrade checks
    → download → unmount → install Git → install GVFS

The first failing stage aborts the rest. Once a named ring is loaded, the
tail (remount if unmounted, then delete downloads) runs exactly once no
matter how the install sequence ended. A remount failure only adds a
warning, a cleanup failure is only logged.
"""

import logging
import sys
from typing import Any, Callable, Optional, TextIO, TypeVar

from gvfs_upgrader.config import UpgraderConfig
from gvfs_upgrader.models.release import DependencyVersion, ProductVersion
from gvfs_upgrader.models.result import OutcomeKind, Result, StageError, UpgradeOutcome
from gvfs_upgrader.models.ring import RingType
from gvfs_upgrader.services.preflight import InstallerPreRunChecker
from gvfs_upgrader.services.product_upgrader import ProductUpgrader
from gvfs_upgrader.utils.console import is_interactive, show_status_while_running
from gvfs_upgrader.utils.logging import log_activity, new_log_file_name, setup_logger

T = TypeVar("T")

UPGRADE_PROCESS_LOG_TYPE = "upgrade_process"
COMMAND_TO_RERUN = "gvfs upgrade --confirm"

NONE_RING_MESSAGE = 'Upgrade ring set to "None". No upgrade check was performed.'
INVALID_RING_MESSAGE = "Upgrade ring is not set. No upgrade check was performed."
SET_RING_MESSAGE = (
    'To set or change upgrade ring, run `gvfs config upgrade.ring ["Fast"|"Slow"|"None"]` '
    "from an elevated command prompt."
)
SUCCESS_MESSAGE = "Upgrade completed successfully!"
PRESS_ENTER_MESSAGE = "Press Enter to exit."
REMOUNT_MANUALLY_MESSAGE = "Run `gvfs mount` in each of your enlistments to remount them."


def run_with_tail(body: Callable[[], T], tail: Callable[[], None]) -> T:
    """Run ``body`` then ``tail``; ``tail`` runs exactly once on every exit path.

    Exceptions from ``body`` propagate after ``tail`` has run.
    """
    try:
        return body()
    finally:
        tail()


class UpgradeOrchestrator:
    """Runs one upgrade transaction and reports the outcome to the operator.

    ``input``/``output`` are injected so tests can drive a run with string
    buffers. Only when they are the process console does the run wait for
    Enter, and only with ``should_exit`` does it end the process.
    """

    def __init__(
        self,
        upgrader: ProductUpgrader,
        preflight: InstallerPreRunChecker,
        input: TextIO,
        output: TextIO,
        logger: Optional[logging.Logger] = None,
        should_exit: bool = False,
    ):
        """Initialize upgrade orchestrator.

        Args:
            upgrader: Ring/release/download/install collaborator
            preflight: Pre-upgrade checks and repository (un)mounting
            input: Stream read for the final acknowledgement
            output: Stream receiving operator-facing messages
            logger: Logger for diagnostics (module logger if None)
            should_exit: Exit the process with the outcome's code when done
        """
        self.upgrader = upgrader
        self.preflight = preflight
        self.input = input
        self.output = output
        self.logger = logger or logging.getLogger("gvfs_upgrader.orchestrator")
        self.should_exit = should_exit

        self.outcome = UpgradeOutcome()
        self.remount_required = False
        self._new_version: Optional[ProductVersion] = None
        self._new_git_version: Optional[DependencyVersion] = None

    @classmethod
    def from_console(
        cls, config: Optional[UpgraderConfig] = None, should_exit: bool = True
    ) -> "UpgradeOrchestrator":
        """Wire real collaborators, the process console and a fresh log file."""
        config = config or UpgraderConfig.from_env()
        log_file = new_log_file_name(config.log_dir, UPGRADE_PROCESS_LOG_TYPE)
        setup_logger(
            "gvfs_upgrader",
            str(log_file),
            level=logging.DEBUG if config.verbose else logging.INFO,
        )
        upgrader = ProductUpgrader.from_config(config)
        return cls(
            upgrader=upgrader,
            preflight=InstallerPreRunChecker(
                config, installed_version=lambda: upgrader.installed_version
            ),
            input=sys.stdin,
            output=sys.stdout,
            should_exit=should_exit,
        )

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code

    @property
    def is_console(self) -> bool:
        return self.input is sys.stdin and self.output is sys.stdout

    def execute(self) -> UpgradeOutcome:
        """Run the upgrade and report the result.

        Returns:
            Outcome of this run (also kept on ``self.outcome``)
        """
        self.logger.info("Upgrade process starting")

        ring = self._load_upgrade_ring()
        if ring == RingType.NONE:
            self.outcome.kind = OutcomeKind.NO_RING_CONFIGURED
            self._write_line(NONE_RING_MESSAGE)
            self._write_line(SET_RING_MESSAGE)
        elif ring == RingType.INVALID:
            self.outcome.kind = OutcomeKind.INVALID_RING_CONFIGURED
            self._write_line(INVALID_RING_MESSAGE)
        elif ring is not None:
            run_with_tail(self._install_sequence, self._run_tail)

        self._report()
        return self.outcome

    # --- stages ---

    def _load_upgrade_ring(self) -> Optional[RingType]:
        """Load the configured ring; None when the config could not be read."""
        result = self._call("LoadUpgradeRing", self.upgrader.load_ring_config)
        if not result.ok:
            self._record_failure(
                self._stage_failed("LoadUpgradeRing", result.error, load_error=result.error)
            )
            return None

        self.logger.info(f"Upgrade ring: {result.value}")
        return result.value

    def _install_sequence(self) -> None:
        error = self._run_upgrade_install()
        if error is not None:
            self._record_failure(error)
        else:
            self.outcome.kind = OutcomeKind.SUCCESS

    def _run_upgrade_install(self) -> Optional[StageError]:
        error = self._launch_inside_spinner("Downloading", self._prepare_and_download)
        if error is not None:
            return error

        error = self._launch_inside_spinner(
            "Unmounting repositories", self._unmount_repositories
        )
        if error is not None:
            return error

        error = self._launch_inside_spinner(
            f"Installing Git version: {self._new_git_version}", self._install_git_upgrade
        )
        if error is not None:
            return error

        error = self._launch_inside_spinner(
            f"Installing GVFS version: {self._new_version}", self._install_gvfs_upgrade
        )
        if error is not None:
            return error

        self._log_version_info("Newly Installed Version")
        return None

    def _prepare_and_download(self) -> Optional[StageError]:
        error = self._check_if_upgrade_available()
        if error is not None:
            return error

        error = self._get_new_git_version()
        if error is not None:
            return error

        self._log_installed_version_info()
        self._log_version_info("Available Version")

        error = self._run_pre_upgrade_checks()
        if error is not None:
            return error

        return self._download_upgrade()

    def _check_if_upgrade_available(self) -> Optional[StageError]:
        stage = "CheckUpgradeAvailable"
        result = self._call(stage, self.upgrader.get_newer_version)
        if not result.ok:
            return self._stage_failed(stage, result.error)

        if result.value is None:
            error = StageError(stage, f"No upgrades available in ring: {self.upgrader.ring}")
            self.logger.info("No new upgrade releases available", extra=error.log_fields())
            return error

        self._new_version = result.value
        self.logger.info(f"Successfully checked for new release. {self._new_version}")
        return None

    def _get_new_git_version(self) -> Optional[StageError]:
        stage = "GetNewGitVersion"
        result = self._call(stage, self.upgrader.get_dependency_version)
        if not result.ok:
            return self._stage_failed(stage, result.error)

        self._new_git_version = result.value
        self.logger.info(f"Successfully read Git version {self._new_git_version}")
        return None

    def _run_pre_upgrade_checks(self) -> Optional[StageError]:
        stage = "RunPreUpgradeChecks"
        self.preflight.command_to_rerun = COMMAND_TO_RERUN
        result = self._call(stage, self.preflight.run_pre_upgrade_checks)
        if not result.ok:
            return self._stage_failed(stage, result.error)
        return None

    def _download_upgrade(self) -> Optional[StageError]:
        stage = f"DownloadUpgrade({self._new_version})"
        result = self._call(stage, self.upgrader.download_newest_version)
        if not result.ok:
            return self._stage_failed(stage, result.error)

        self.logger.info(f"Successfully downloaded version: {self._new_version}")
        return None

    def _unmount_repositories(self) -> Optional[StageError]:
        stage = "UnmountRepositories"
        result = self._call(stage, self.preflight.unmount_all_repos)
        if not result.ok:
            return self._stage_failed(stage, result.error)

        self.remount_required = True
        return None

    def _install_git_upgrade(self) -> Optional[StageError]:
        return self._run_installer(
            f"InstallGitUpgrade({self._new_git_version})",
            self.upgrader.run_dependency_installer,
            "Git",
            self._new_git_version,
        )

    def _install_gvfs_upgrade(self) -> Optional[StageError]:
        return self._run_installer(
            f"InstallGVFSUpgrade({self._new_version})",
            self.upgrader.run_product_installer,
            "GVFS",
            self._new_version,
        )

    def _run_installer(
        self, stage: str, run: Callable[[], Result[bool]], label: str, version: Any
    ) -> Optional[StageError]:
        result = self._call(stage, run)
        if not result.ok:
            return self._stage_failed(stage, result.error)

        if not result.value:
            return self._stage_failed(
                stage, f"{label} installer failed to install version {version}."
            )

        self.logger.info(f"Successfully installed {label} version: {version}")
        return None

    # --- tail ---

    def _run_tail(self) -> None:
        remount_error = self._remount_repositories()
        if remount_error is not None:
            self.outcome.warnings.append(remount_error.message)
            self._write_line(f"\nWARNING: {remount_error.message}")
            self._write_line(REMOUNT_MANUALLY_MESSAGE)

        self.delete_downloaded_assets()

    def _remount_repositories(self) -> Optional[StageError]:
        if not self.remount_required:
            return None

        return self._launch_inside_spinner("Mounting repositories", self._mount_repositories)

    def _mount_repositories(self) -> Optional[StageError]:
        stage = "RemountRepositories"
        result = self._call(stage, self.preflight.mount_all_repos)
        if not result.ok:
            return self._stage_failed(stage, result.error, remount_error=result.error)
        return None

    def delete_downloaded_assets(self) -> None:
        """Delete downloads; failures are logged and never reach the outcome."""
        stage = "DeleteDownloadedAssets"
        result = self._call(stage, self.upgrader.cleanup)
        if not result.ok:
            self._stage_failed(stage, result.error, download_cleanup_error=result.error)

    # --- reporting ---

    def _report(self) -> None:
        if self.outcome.kind == OutcomeKind.FAILED:
            self._write_line(f"\nERROR: {self.outcome.error.message}")
        elif self.outcome.succeeded:
            self._write_line(f"\n{SUCCESS_MESSAGE}")

        self.logger.info(
            f"Upgrade process finished: outcome={self.outcome.kind.value}, "
            f"exit_code={self.exit_code}"
        )

        if self.is_console:
            self._write_line(PRESS_ENTER_MESSAGE)
            self.input.readline()

        if self.should_exit:
            sys.exit(self.exit_code)

    def _log_version_info(self, message: str) -> None:
        self.logger.info(
            f"{message}: gvfs_version={self._new_version}, git_version={self._new_git_version}",
            extra={
                "gvfs_version": str(self._new_version),
                "git_version": str(self._new_git_version),
            },
        )

    def _log_installed_version_info(self) -> None:
        installed = {"installed_gvfs_version": self.upgrader.installed_version}
        result = self._call(
            "GetInstalledGitVersion", self.upgrader.get_installed_dependency_version
        )
        if result.ok:
            installed["installed_git_version"] = str(result.value)

        details = ", ".join(f"{key}={value}" for key, value in installed.items())
        self.logger.info(f"Installed Version: {details}", extra=installed)

    # --- helpers ---

    def _launch_inside_spinner(
        self, message: str, step: Callable[[], Optional[StageError]]
    ) -> Optional[StageError]:
        errors = []

        def action() -> bool:
            error = step()
            if error is not None:
                errors.append(error)
            return error is None

        show_status_while_running(
            action,
            message,
            self.output,
            self.output is sys.stdout and is_interactive(self.output),
        )
        return errors[0] if errors else None

    def _call(self, stage: str, call: Callable[[], Result[T]]) -> Result[T]:
        """Invoke a collaborator; an exception becomes a failed Result."""
        try:
            with log_activity(self.logger, stage):
                return call()
        except Exception as e:
            self.logger.error(f"{stage} raised unexpectedly", exc_info=True)
            return Result.failure(f"{stage} failed unexpectedly: {e}")

    def _stage_failed(self, stage: str, message: str, **metadata: Any) -> StageError:
        error = StageError(stage=stage, message=message, metadata=metadata)
        self.logger.error(f"{stage} failed. {message}", extra=error.log_fields())
        return error

    def _record_failure(self, error: StageError) -> None:
        self.outcome.kind = OutcomeKind.FAILED
        self.outcome.error = error

    def _write_line(self, text: str) -> None:
        self.output.write(f"{text}\n")
        self.output.flush()
