"""Flocker control service HTTP client.

Thin request layer over the control service REST API plus decoding of
its payloads. No retries or waiting happen here; see
flockervol.provisioner for the convergence wait.
"""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Literal

import httpx
from pydantic import ValidationError

from flockervol.config import ControlServiceConfig
from flockervol.control.tls import build_ssl_context
from flockervol.core.errors import (
    ConfigurationError,
    DecodeError,
    NotFoundError,
    RemoteRejectedError,
    TransportError,
)
from flockervol.core.logging_schema import LogEvent
from flockervol.core.models import (
    CONFIGURATIONS_ADAPTER,
    STATES_ADAPTER,
    CreateConfigurationRequest,
    DatasetConfiguration,
    DatasetMetadata,
    DatasetState,
)

logger = logging.getLogger(__name__)

CONFIGURATION_DATASETS_PATH = "configuration/datasets"
STATE_DATASETS_PATH = "state/datasets"
VERSION_PATH = "version"


@dataclass(frozen=True)
class ConnectionParams:
    """Control service location.

    port may be given as a string (e.g. straight from the environment);
    ControlServiceClient validates it.
    """

    host: str
    port: int | str
    api_version: str = "v1"
    scheme: Literal["http", "https"] = "https"


class ControlServiceClient:
    """HTTP client for the Flocker control service API.

    Safe to share between concurrent provisioning calls: the only state is
    the immutable connection parameters and the httpx connection pool.
    """

    def __init__(
        self,
        params: ConnectionParams,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        verify: ssl.SSLContext | bool = True,
        timeout: float = 30.0,
    ) -> None:
        self._params = params
        self._port = _validate_params(params)
        self._transport = transport
        self._verify = verify
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: ControlServiceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ControlServiceClient:
        """Create a client from settings, loading TLS material if enabled."""
        params = ConnectionParams(
            host=config.host,
            port=config.port,
            api_version=config.api_version,
            scheme="https" if config.use_tls else "http",
        )
        # Validate host/port before touching certificate files
        _validate_params(params)
        verify: ssl.SSLContext | bool = True
        if config.use_tls:
            verify = build_ssl_context(
                config.ca_file, config.client_cert_file, config.client_key_file
            )
        return cls(
            params, transport=transport, verify=verify, timeout=config.request_timeout
        )

    @property
    def params(self) -> ConnectionParams:
        return self._params

    @property
    def base_url(self) -> str:
        return f"{self._params.scheme}://{self._params.host}:{self._port}/{self._params.api_version}"

    def url(self, path: str) -> str:
        """Return the full URL of an API path."""
        return f"{self.base_url}/{path}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            kwargs: dict[str, Any] = {
                "headers": {"Content-Type": "application/json"},
                "timeout": self._timeout,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            else:
                kwargs["verify"] = self._verify
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def _request(
        self,
        method: Literal["get", "post"],
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make HTTP request, wrapping network failures.

        The body is read in full before returning, so the connection is
        released on every path.

        Raises:
            TransportError: Request could not be completed.
        """
        client = await self._get_client()
        try:
            return await getattr(client, method)(self.url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.warning(
                "Control service request failed: %s %s: %s",
                method.upper(),
                path,
                e,
                extra={"event": LogEvent.REQUEST_FAILED},
            )
            raise TransportError(f"{method.upper()} {path} failed: {e}") from e

    async def _get_json(self, path: str) -> Any:
        resp = await self._request("get", path)
        if not resp.is_success:
            raise TransportError(
                f"GET {path} returned {resp.status_code}",
                status_code=resp.status_code,
            )
        return _decode_json(resp)

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ControlServiceClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # Dataset configuration
    # =========================================================================

    async def list_configurations(self) -> list[DatasetConfiguration]:
        """List every dataset configuration, in server order."""
        data = await self._get_json(CONFIGURATION_DATASETS_PATH)
        try:
            return CONFIGURATIONS_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected configurations payload: {e}") from e

    async def find_configuration_id_by_name(self, name: str) -> str:
        """Find the dataset id of the first configuration named `name`.

        Raises:
            NotFoundError: No configuration carries that name.
            DecodeError: The first configuration with that name has no dataset_id.
        """
        for configuration in await self.list_configurations():
            if configuration.name == name:
                if not configuration.dataset_id:
                    raise DecodeError(f"Configuration {name} has no dataset_id")
                return configuration.dataset_id
        raise NotFoundError(f"Configuration not found by name: {name}")

    async def create_configuration(
        self, owner_identity: str, name: str, maximum_size: int
    ) -> str:
        """Create a dataset configuration and return its assigned id.

        Not idempotent: a second call with the same name may create a
        duplicate or be rejected with 409, depending on the service.

        Raises:
            RemoteRejectedError: Service answered outside 1xx-2xx.
            DecodeError: Success response without a usable dataset_id.
        """
        payload = CreateConfigurationRequest(
            primary=owner_identity,
            maximum_size=maximum_size,
            metadata=DatasetMetadata(name=name),
        )
        resp = await self._request(
            "post", CONFIGURATION_DATASETS_PATH, json=payload.model_dump()
        )
        if resp.status_code >= 300:
            raise RemoteRejectedError(resp.status_code, resp.text)

        try:
            created = DatasetConfiguration.model_validate(_decode_json(resp))
        except ValidationError as e:
            raise DecodeError(f"Unexpected configuration payload: {e}") from e
        if not created.dataset_id:
            raise DecodeError("Created configuration has no dataset_id")

        logger.info(
            "Created dataset configuration %s (%s)",
            name,
            created.dataset_id,
            extra={"dataset_id": created.dataset_id, "primary": owner_identity},
        )
        return created.dataset_id

    # =========================================================================
    # Dataset state
    # =========================================================================

    async def list_states(self) -> list[DatasetState]:
        """List the observed state of every dataset."""
        data = await self._get_json(STATE_DATASETS_PATH)
        try:
            return STATES_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected states payload: {e}") from e

    async def get_state(self, dataset_id: str) -> str:
        """Return the mount path of a live dataset.

        Raises:
            NotFoundError: Dataset has no state yet, or no path assigned.
        """
        for state in await self.list_states():
            if state.dataset_id == dataset_id and state.is_live:
                return state.path  # type: ignore[return-value]
        logger.debug("State not found by dataset id: %s", dataset_id)
        raise NotFoundError(f"State not found by dataset id: {dataset_id}")

    async def health_check(self) -> bool:
        """Check control service reachability."""
        try:
            resp = await self._request("get", VERSION_PATH)
            return resp.is_success
        except TransportError as e:
            logger.warning(
                "Control service health check failed: %s",
                e,
                extra={"event": LogEvent.HEALTH_CHECK_FAILED},
            )
            return False


def _validate_params(params: ConnectionParams) -> int:
    """Check host and port, returning the port as an integer.

    Raises:
        ConfigurationError: Empty host or non-numeric port.
    """
    if not params.host:
        raise ConfigurationError("Control service host can't be empty")
    try:
        return int(params.port)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Control service port must be a number, got {params.port!r}"
        ) from e


def _decode_json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise DecodeError(f"Response is not valid JSON: {e}") from e
