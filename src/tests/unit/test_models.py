"""Tests for control service wire models."""

from flockervol.core.models import (
    CONFIGURATIONS_ADAPTER,
    STATES_ADAPTER,
    CreateConfigurationRequest,
    DatasetConfiguration,
    DatasetMetadata,
)


class TestDatasetConfiguration:
    """Tests for DatasetConfiguration decoding."""

    def test_full_payload(self) -> None:
        configuration = DatasetConfiguration.model_validate(
            {
                "primary": "1bc464e3-3354-4d2f-adf4-82f93ae0016f",
                "dataset_id": "123",
                "maximum_size": 107374182400,
                "metadata": {"name": "dir"},
                "deleted": False,
            }
        )

        assert configuration.dataset_id == "123"
        assert configuration.name == "dir"

    def test_missing_metadata(self) -> None:
        configuration = DatasetConfiguration.model_validate({"dataset_id": "123"})
        assert configuration.name == ""
        assert configuration.primary == ""

    def test_list_keeps_server_order(self) -> None:
        configurations = CONFIGURATIONS_ADAPTER.validate_python(
            [
                {"dataset_id": "1-2-3", "metadata": {"name": "test"}},
                {"dataset_id": "The-42-id", "metadata": {"name": "target"}},
            ]
        )
        assert [c.dataset_id for c in configurations] == ["1-2-3", "The-42-id"]


class TestCreateConfigurationRequest:
    """Tests for the creation body."""

    def test_dump(self) -> None:
        request = CreateConfigurationRequest(
            primary="pod-uid", maximum_size=1024, metadata=DatasetMetadata(name="dir")
        )
        assert request.model_dump() == {
            "primary": "pod-uid",
            "maximum_size": 1024,
            "metadata": {"name": "dir"},
        }


class TestDatasetState:
    """Tests for DatasetState decoding."""

    def test_is_live(self) -> None:
        states = STATES_ADAPTER.validate_python(
            [{"dataset_id": "a", "path": "/flocker/a"}, {"dataset_id": "b", "path": ""}]
        )
        assert states[0].is_live is True
        assert states[1].is_live is False
