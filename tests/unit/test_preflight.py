"""Unit tests for InstallerPreRunChecker."""

import pytest

from gvfs_upgrader.services.preflight import DEVELOPER_BUILD_VERSION, InstallerPreRunChecker
from mocks import MockProcessLauncher


@pytest.mark.unit
class TestInstallerPreRunChecker:
    """Test pre-upgrade checks and repository (un)mounting."""

    def make_checker(self, config, launcher=None, elevated=True, environ=None):
        return InstallerPreRunChecker(
            config,
            launcher=launcher or MockProcessLauncher(),
            is_elevated=lambda: elevated,
            environ=environ or {},
        )

    def test_checks_pass(self, upgrader_config):
        assert self.make_checker(upgrader_config).run_pre_upgrade_checks().ok

    def test_not_elevated_suggests_rerun_command(self, upgrader_config):
        checker = self.make_checker(upgrader_config, elevated=False)
        checker.command_to_rerun = "gvfs upgrade --confirm"

        result = checker.run_pre_upgrade_checks()

        assert not result.ok
        assert "`gvfs upgrade --confirm`" in result.error
        assert "elevated" in result.error

    def test_unattended_blocked(self, upgrader_config):
        checker = self.make_checker(upgrader_config, environ={"GVFS_UNATTENDED": "1"})

        result = checker.run_pre_upgrade_checks()

        assert not result.ok
        assert "unattended" in result.error

    def test_developer_build_blocked(self, upgrader_config):
        config = upgrader_config.model_copy(update={"current_version": DEVELOPER_BUILD_VERSION})

        result = self.make_checker(config).run_pre_upgrade_checks()

        assert not result.ok
        assert "developer build" in result.error

    def test_developer_build_detected_from_installed_version(self, upgrader_config):
        checker = InstallerPreRunChecker(
            upgrader_config.model_copy(update={"current_version": None}),
            launcher=MockProcessLauncher(),
            is_elevated=lambda: True,
            environ={},
            installed_version=lambda: DEVELOPER_BUILD_VERSION,
        )

        result = checker.run_pre_upgrade_checks()

        assert not result.ok
        assert "developer build" in result.error

    def test_unmount_runs_service_command(self, upgrader_config):
        launcher = MockProcessLauncher()

        result = self.make_checker(upgrader_config, launcher=launcher).unmount_all_repos()

        assert result.ok
        assert launcher.launch_path == "gvfs"
        assert launcher.launch_args == ["service", "--unmount-all"]

    def test_mount_runs_service_command(self, upgrader_config):
        launcher = MockProcessLauncher()

        self.make_checker(upgrader_config, launcher=launcher).mount_all_repos()

        assert launcher.launch_args == ["service", "--mount-all"]

    def test_mount_failure_message(self, upgrader_config):
        launcher = MockProcessLauncher(exit_code=1, output="C:\\repo failed to mount")

        result = self.make_checker(upgrader_config, launcher=launcher).mount_all_repos()

        assert not result.ok
        assert result.error.startswith("Failed to mount GVFS repositories.")
        assert "C:\\repo failed to mount" in result.error
