"""Console entry point for the GVFS upgrader."""

import argparse
import sys
from typing import List, Optional

from gvfs_upgrader.config import UpgraderConfig, __version__
from gvfs_upgrader.services.orchestrator import UpgradeOrchestrator


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="gvfs-upgrader",
        description="Download and install the newest GVFS release for the configured ring",
    )
    parser.add_argument("--releases-url", help="Releases list endpoint")
    parser.add_argument("--download-dir", help="Directory for downloaded installers")
    parser.add_argument("--log-dir", help="Directory for upgrade logs")
    parser.add_argument("--ring-config", help="Path to the GVFS config file holding upgrade.ring")
    parser.add_argument(
        "--current-version", help="Installed GVFS version (default: ask `gvfs version`)"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point: run one upgrade against the process console.

    Returns:
        Process exit code (0 unless the upgrade failed)
    """
    args = build_parser().parse_args(args=argv)
    config = UpgraderConfig.from_args(args)

    orchestrator = UpgradeOrchestrator.from_console(config, should_exit=False)
    outcome = orchestrator.execute()
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
