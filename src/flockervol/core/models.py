"""Wire models for the Flocker control service API.

Payload shapes:
- GET/POST configuration/datasets: {primary, dataset_id, maximum_size, metadata: {name}}
- GET state/datasets: {dataset_id, path, ...}

Unknown fields are ignored; the service adds fields between releases.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class DatasetMetadata(BaseModel):
    """User-supplied dataset metadata. Only name is used."""

    name: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")


class DatasetConfiguration(BaseModel):
    """Desired configuration of a dataset.

    dataset_id is assigned by the control service on creation and is
    absent from the creation request.
    """

    primary: str = ""
    dataset_id: str | None = None
    maximum_size: int | None = None
    metadata: DatasetMetadata = Field(default_factory=DatasetMetadata)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def name(self) -> str:
        return self.metadata.name


class CreateConfigurationRequest(BaseModel):
    """Body of POST configuration/datasets."""

    primary: str
    maximum_size: int
    metadata: DatasetMetadata


class DatasetState(BaseModel):
    """Observed state of a dataset.

    path is only present once the dataset is live on its primary node.
    """

    dataset_id: str
    path: str | None = None
    primary: str = ""
    maximum_size: int | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def is_live(self) -> bool:
        return bool(self.path)


CONFIGURATIONS_ADAPTER = TypeAdapter(list[DatasetConfiguration])
STATES_ADAPTER = TypeAdapter(list[DatasetState])
