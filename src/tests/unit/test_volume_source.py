"""Tests for volume source variants."""

import pytest

from flockervol.core.errors import ConfigurationError
from flockervol.core.volume_source import (
    InlineVolumeSource,
    PersistentVolumeSource,
    VolumeSourceView,
    parse_volume_source,
)


class TestNormalize:
    """Both variants project to the same view."""

    def test_inline(self) -> None:
        view = InlineVolumeSource(dataset_name="data").normalize()
        assert view == VolumeSourceView(dataset_name="data", read_only=False)

    def test_persistent(self) -> None:
        source = PersistentVolumeSource(volume_name="pv-data", dataset_name="data")
        assert source.normalize() == VolumeSourceView(dataset_name="data", read_only=False)


class TestParseVolumeSource:
    """Tests for parse_volume_source."""

    def test_inline(self) -> None:
        source = parse_volume_source({"kind": "inline", "dataset_name": "data"})
        assert isinstance(source, InlineVolumeSource)

    def test_persistent(self) -> None:
        source = parse_volume_source(
            {"kind": "persistent", "volume_name": "pv-data", "dataset_name": "data"}
        )
        assert isinstance(source, PersistentVolumeSource)
        assert source.volume_name == "pv-data"

    @pytest.mark.parametrize(
        "data",
        [
            {"kind": "nfs", "dataset_name": "data"},
            {"kind": "inline", "dataset_name": ""},
            {"kind": "persistent"},
            {"dataset_name": "data"},
        ],
    )
    def test_invalid(self, data: dict) -> None:
        with pytest.raises(ConfigurationError):
            parse_volume_source(data)
