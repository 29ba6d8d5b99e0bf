"""Dataset provisioning for volume plugins.

Flow for provision(owner, name):

1) Look for an existing configuration with that name
2) If none exists, create one
3) Wait until the dataset is live (has a path) or the timeout is reached

An existing dataset always wins over creating a new one, which keeps
repeated calls for the same name idempotent. Concurrent first calls for
the same name are not serialized here: the control service arbitrates,
and a conflict comes back as RemoteRejectedError.
"""

import asyncio
import logging
from dataclasses import dataclass

from flockervol.config import ProvisionConfig
from flockervol.control.client import ControlServiceClient
from flockervol.core.errors import (
    NotFoundError,
    ProvisionTimeoutError,
    RemoteRejectedError,
)
from flockervol.core.logging_schema import ErrorClass, LogEvent
from flockervol.core.retryable import classify_error
from flockervol.core.volume_source import InlineVolumeSource, PersistentVolumeSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionedVolume:
    """Result of provisioning a volume source."""

    dataset_name: str
    path: str
    read_only: bool = False


class VolumeProvisioner:
    """Create-or-find-then-wait orchestration over ControlServiceClient.

    Args:
        client: Control service client (may be shared).
        config: Wait timing and default dataset size. Defaults to
            ProvisionConfig() read from the environment.
    """

    def __init__(
        self,
        client: ControlServiceClient,
        config: ProvisionConfig | None = None,
    ) -> None:
        self._client = client
        self._config = config or ProvisionConfig()

    @property
    def config(self) -> ProvisionConfig:
        return self._config

    async def provision(
        self,
        owner_identity: str,
        name: str,
        maximum_size: int | None = None,
    ) -> str:
        """Ensure a dataset named `name` exists and return its mount path.

        Raises:
            RemoteRejectedError: Creation refused; never retried.
            TransportError / DecodeError: Lookup by name failed.
            ProvisionTimeoutError: Dataset did not become live in time.
        """
        logger.info(
            "Provisioning dataset %s",
            name,
            extra={
                "event": LogEvent.PROVISION_STARTED,
                "dataset_name": name,
                "primary": owner_identity,
            },
        )

        try:
            dataset_id = await self._client.find_configuration_id_by_name(name)
        except NotFoundError:
            dataset_id = await self._create(owner_identity, name, maximum_size)
        else:
            logger.info(
                "Found existing dataset %s (%s)",
                name,
                dataset_id,
                extra={
                    "event": LogEvent.DATASET_FOUND,
                    "dataset_name": name,
                    "dataset_id": dataset_id,
                },
            )

        return await self.wait_for_path(dataset_id)

    async def provision_source(
        self,
        source: InlineVolumeSource | PersistentVolumeSource,
        owner_identity: str,
        maximum_size: int | None = None,
    ) -> ProvisionedVolume:
        """Provision the dataset referenced by either volume source variant."""
        view = source.normalize()
        path = await self.provision(owner_identity, view.dataset_name, maximum_size)
        return ProvisionedVolume(
            dataset_name=view.dataset_name,
            path=path,
            read_only=view.read_only,
        )

    async def _create(
        self, owner_identity: str, name: str, maximum_size: int | None
    ) -> str:
        size = maximum_size if maximum_size is not None else self._config.maximum_size
        try:
            dataset_id = await self._client.create_configuration(
                owner_identity, name, size
            )
        except RemoteRejectedError as e:
            logger.error(
                "Control service rejected dataset %s: %s",
                name,
                e,
                extra={
                    "event": LogEvent.CREATE_REJECTED,
                    "dataset_name": name,
                    "status_code": e.status_code,
                    "error_class": ErrorClass.PERMANENT,
                },
            )
            raise
        logger.info(
            "Created dataset %s (%s)",
            name,
            dataset_id,
            extra={
                "event": LogEvent.DATASET_CREATED,
                "dataset_name": name,
                "dataset_id": dataset_id,
            },
        )
        return dataset_id

    async def wait_for_path(self, dataset_id: str) -> str:
        """Poll the dataset state until it has a path.

        The first lookup happens immediately; later ones run on a fixed
        ticker every poll_interval seconds. Every lookup failure is
        swallowed and the last one is attached to the timeout error.
        Cancelling the calling task stops the wait at once.

        Raises:
            ProvisionTimeoutError: No path within wait_timeout seconds.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + self._config.wait_timeout
        next_tick = started
        attempt = 0
        last_error: Exception | None = None

        try:
            async with asyncio.timeout_at(deadline):
                while True:
                    attempt += 1
                    try:
                        path = await self._client.get_state(dataset_id)
                    except NotFoundError as e:
                        last_error = e
                        logger.debug(
                            "Dataset %s not ready yet",
                            dataset_id,
                            extra={
                                "event": LogEvent.DATASET_PENDING,
                                "dataset_id": dataset_id,
                                "attempt": attempt,
                            },
                        )
                    except Exception as e:
                        last_error = e
                        logger.warning(
                            "State lookup for dataset %s failed: %s",
                            dataset_id,
                            e,
                            extra={
                                "event": LogEvent.DATASET_PENDING,
                                "dataset_id": dataset_id,
                                "attempt": attempt,
                                "error_class": classify_error(e),
                            },
                        )
                    else:
                        logger.info(
                            "Dataset %s ready at %s",
                            dataset_id,
                            path,
                            extra={
                                "event": LogEvent.DATASET_READY,
                                "dataset_id": dataset_id,
                                "attempt": attempt,
                                "elapsed_s": round(loop.time() - started, 3),
                            },
                        )
                        return path

                    # Ticks missed during a slow lookup are dropped
                    now = loop.time()
                    while next_tick <= now:
                        next_tick += self._config.poll_interval
                    await asyncio.sleep(next_tick - now)
        except TimeoutError:
            logger.error(
                "Timed out waiting for dataset %s after %d attempts",
                dataset_id,
                attempt,
                extra={
                    "event": LogEvent.PROVISION_TIMEOUT,
                    "dataset_id": dataset_id,
                    "attempt": attempt,
                    "error_class": ErrorClass.TIMEOUT,
                },
            )
            raise ProvisionTimeoutError(
                dataset_id, self._config.wait_timeout, last_error
            ) from last_error
        except asyncio.CancelledError:
            logger.info(
                "Wait for dataset %s cancelled",
                dataset_id,
                extra={"event": LogEvent.PROVISION_CANCELLED, "dataset_id": dataset_id},
            )
            raise
