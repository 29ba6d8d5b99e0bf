"""Flocker control service access."""

from flockervol.control.client import ConnectionParams, ControlServiceClient
from flockervol.control.tls import build_ssl_context

__all__ = ["ConnectionParams", "ControlServiceClient", "build_ssl_context"]
