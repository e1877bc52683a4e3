"""Unit tests for the console entry point."""

from unittest.mock import MagicMock, patch

import pytest

from gvfs_upgrader.main import build_parser, main
from gvfs_upgrader.models.result import OutcomeKind, UpgradeOutcome


@pytest.mark.unit
class TestMain:
    def test_parser_options(self):
        args = build_parser().parse_args(["--verbose", "--download-dir", "/tmp/dl"])

        assert args.verbose is True
        assert args.download_dir == "/tmp/dl"
        assert args.releases_url is None
        assert args.current_version is None

    def test_current_version_option(self):
        args = build_parser().parse_args(["--current-version", "1.0.19030.2"])

        assert args.current_version == "1.0.19030.2"

    @pytest.mark.parametrize(
        "kind, code",
        [
            (OutcomeKind.SUCCESS, 0),
            (OutcomeKind.NO_RING_CONFIGURED, 0),
            (OutcomeKind.INVALID_RING_CONFIGURED, 0),
            (OutcomeKind.FAILED, 1),
        ],
    )
    def test_main_returns_outcome_exit_code(self, tmp_path, kind, code):
        orchestrator = MagicMock()
        orchestrator.execute.return_value = UpgradeOutcome(kind=kind)

        with patch(
            "gvfs_upgrader.main.UpgradeOrchestrator.from_console", return_value=orchestrator
        ) as from_console:
            exit_code = main(["--log-dir", str(tmp_path)])

        assert exit_code == code
        config = from_console.call_args[0][0]
        assert config.log_dir == tmp_path
        assert from_console.call_args[1] == {"should_exit": False}
