"""Loads the upgrade ring from the local GVFS config file."""

import json
import logging
from pathlib import Path

from gvfs_upgrader.models.result import Result
from gvfs_upgrader.models.ring import RingType

RING_CONFIG_KEY = "upgrade.ring"


class RingConfigLoader:
    """Reads ``upgrade.ring`` from a JSON config file.

    A missing file or key means no ring was ever set (INVALID). Only an
    unreadable or corrupt file is a load failure.
    """

    def __init__(self, config_path: Path):
        self.logger = logging.getLogger("gvfs_upgrader.ring_config")
        self.config_path = Path(config_path)

    def load(self) -> Result[RingType]:
        if not self.config_path.exists():
            self.logger.info(f"No config file at {self.config_path}, ring not set")
            return Result.success(RingType.INVALID)

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self.logger.error(f"Corrupt config file {self.config_path}: {e}")
            return Result.failure(f"Failed to parse {self.config_path}: {e}")
        except OSError as e:
            self.logger.error(f"Failed to read config file {self.config_path}: {e}")
            return Result.failure(f"Failed to read {self.config_path}: {e}")

        if not isinstance(data, dict):
            return Result.failure(
                f"Failed to parse {self.config_path}: expected a JSON object"
            )

        raw_ring = data.get(RING_CONFIG_KEY)
        ring = RingType.parse(raw_ring if isinstance(raw_ring, str) else None)
        if raw_ring is not None and ring == RingType.INVALID:
            self.logger.warning(f"Unrecognized upgrade ring in config: {raw_ring!r}")

        self.logger.info(f"Loaded upgrade ring: {ring}")
        return Result.success(ring)
