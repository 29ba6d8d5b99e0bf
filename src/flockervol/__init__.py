"""Flocker dataset provisioning for volume plugins."""

from flockervol.control.client import ConnectionParams, ControlServiceClient
from flockervol.provisioner import ProvisionedVolume, VolumeProvisioner

__all__ = [
    "ConnectionParams",
    "ControlServiceClient",
    "ProvisionedVolume",
    "VolumeProvisioner",
]
