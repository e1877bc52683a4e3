"""Unit tests for RingConfigLoader and RingType."""

import pytest

from gvfs_upgrader.models.ring import RingType
from gvfs_upgrader.services.ring_config import RingConfigLoader


@pytest.mark.unit
class TestRingType:
    """Test ring parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Fast", RingType.FAST),
            ("slow", RingType.SLOW),
            (" NONE ", RingType.NONE),
            ("Invalid", RingType.INVALID),
            ("Beta", RingType.INVALID),
            ("", RingType.INVALID),
            (None, RingType.INVALID),
        ],
    )
    def test_parse(self, text, expected):
        assert RingType.parse(text) == expected

    def test_named_channels(self):
        assert RingType.FAST.is_named_channel
        assert RingType.SLOW.is_named_channel
        assert not RingType.NONE.is_named_channel
        assert not RingType.INVALID.is_named_channel

    def test_str_is_ring_name(self):
        assert str(RingType.FAST) == "Fast"


@pytest.mark.unit
class TestRingConfigLoader:
    """Test RingConfigLoader against files in tmp_path."""

    def test_load_configured_ring(self, upgrader_config, ring_config_file):
        ring_config_file("Slow")

        result = RingConfigLoader(upgrader_config.ring_config_path).load()

        assert result.ok
        assert result.value == RingType.SLOW

    def test_missing_file_is_invalid_ring(self, tmp_path):
        result = RingConfigLoader(tmp_path / "missing.config").load()

        assert result.ok
        assert result.value == RingType.INVALID

    def test_missing_key_is_invalid_ring(self, tmp_path):
        path = tmp_path / "gvfs.config"
        path.write_text('{"usn.updateDirectoryTimestamp": "true"}')

        result = RingConfigLoader(path).load()

        assert result.value == RingType.INVALID

    def test_unknown_ring_is_invalid(self, upgrader_config, ring_config_file):
        ring_config_file("Nightly")

        result = RingConfigLoader(upgrader_config.ring_config_path).load()

        assert result.ok
        assert result.value == RingType.INVALID

    def test_corrupt_file_fails(self, tmp_path):
        path = tmp_path / "gvfs.config"
        path.write_text("{ not json")

        result = RingConfigLoader(path).load()

        assert not result.ok
        assert "Failed to parse" in result.error

    def test_non_object_fails(self, tmp_path):
        path = tmp_path / "gvfs.config"
        path.write_text('["Fast"]')

        result = RingConfigLoader(path).load()

        assert not result.ok
