"""Volume sources a plugin can hand to the provisioner.

A volume can reference a Flocker dataset either inline in the workload
definition or through a persistent volume. Both variants normalize to
the same VolumeSourceView.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from flockervol.core.errors import ConfigurationError


class VolumeSourceView(BaseModel):
    """Normalized projection consumed by the provisioner."""

    dataset_name: str
    read_only: bool = False

    model_config = ConfigDict(frozen=True)


class InlineVolumeSource(BaseModel):
    """Dataset referenced directly in the workload's volume list."""

    kind: Literal["inline"] = "inline"
    dataset_name: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    def normalize(self) -> VolumeSourceView:
        # Flocker datasets are always mounted read/write
        return VolumeSourceView(dataset_name=self.dataset_name, read_only=False)


class PersistentVolumeSource(BaseModel):
    """Dataset referenced through a named persistent volume."""

    kind: Literal["persistent"] = "persistent"
    volume_name: str = ""
    dataset_name: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    def normalize(self) -> VolumeSourceView:
        return VolumeSourceView(dataset_name=self.dataset_name, read_only=False)


VolumeSource = Annotated[
    InlineVolumeSource | PersistentVolumeSource,
    Field(discriminator="kind"),
]


class _VolumeSourceEnvelope(BaseModel):
    source: VolumeSource


def parse_volume_source(data: dict[str, Any]) -> InlineVolumeSource | PersistentVolumeSource:
    """Validate a raw volume source mapping.

    Raises:
        ConfigurationError: Unknown kind or missing dataset name.
    """
    try:
        return _VolumeSourceEnvelope(source=data).source
    except ValidationError as e:
        raise ConfigurationError(f"Invalid volume source: {e}") from e
