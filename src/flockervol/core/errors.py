"""Error handling module for flocker-volume.

Every failure the client or the provisioner reports is one of the
exception classes below, so callers branch on type instead of parsing
messages.

Usage:
    from flockervol.core.errors import NotFoundError, RemoteRejectedError

    try:
        dataset_id = await client.find_configuration_id_by_name(name)
    except NotFoundError:
        dataset_id = await client.create_configuration(owner, name, size)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes."""

    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    DECODE_FAILED = "DECODE_FAILED"
    NOT_FOUND = "NOT_FOUND"
    REMOTE_REJECTED = "REMOTE_REJECTED"
    PROVISION_TIMEOUT = "PROVISION_TIMEOUT"


class FlockerError(Exception):
    """Base exception for flocker-volume.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class ConfigurationError(FlockerError):
    """Connection parameters or TLS material are unusable."""

    def __init__(self, message: str = "Invalid control service configuration") -> None:
        super().__init__(ErrorCode.CONFIGURATION_INVALID, message)


class TransportError(FlockerError):
    """Network-level failure talking to the control service.

    status_code is set when the service answered a read with an
    unexpected HTTP status.
    """

    def __init__(
        self,
        message: str = "Control service request failed",
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(ErrorCode.TRANSPORT_FAILED, message)


class DecodeError(FlockerError):
    """Response body is not JSON or does not match the expected schema."""

    def __init__(self, message: str = "Malformed control service response") -> None:
        super().__init__(ErrorCode.DECODE_FAILED, message)


class NotFoundError(FlockerError):
    """Dataset configuration or state not (yet) present."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(ErrorCode.NOT_FOUND, message)


class RemoteRejectedError(FlockerError):
    """Control service refused to create a dataset (non-2xx status)."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            ErrorCode.REMOTE_REJECTED,
            f"Expected 1xx or 2xx creating the dataset, got {status_code}",
        )


class ProvisionTimeoutError(FlockerError):
    """Dataset did not become live within the wait bound.

    last_error is the failure observed by the final state lookup.
    """

    def __init__(
        self,
        dataset_id: str,
        timeout: float,
        last_error: Exception | None = None,
    ) -> None:
        self.dataset_id = dataset_id
        self.timeout = timeout
        self.last_error = last_error
        message = f"Dataset {dataset_id} not ready after {timeout:g}s"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(ErrorCode.PROVISION_TIMEOUT, message)
