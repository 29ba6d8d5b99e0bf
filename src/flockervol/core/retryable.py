"""Error classification for control service failures.

Classifies errors as transient (may clear up while waiting for a dataset
to converge) or permanent. The convergence wait swallows every lookup
failure regardless, so the class only feeds the 'error_class' log
field.

Usage:
    from flockervol.core.retryable import classify_error

    logger.warning("...", extra={"error_class": classify_error(exc)})
"""

import asyncio

import httpx

from flockervol.core.errors import (
    ConfigurationError,
    DecodeError,
    NotFoundError,
    ProvisionTimeoutError,
    RemoteRejectedError,
    TransportError,
)
from flockervol.core.logging_schema import ErrorClass

# =============================================================================
# httpx error classification
# =============================================================================

HTTPX_RETRYABLE = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
    httpx.RemoteProtocolError,
)


def is_status_retryable(status_code: int) -> bool:
    """Check if an HTTP status code is worth retrying."""
    # 429 Rate limit - retryable
    if status_code == 429:
        return True
    # 5xx server errors - retryable
    return status_code >= 500


# =============================================================================
# Unified classification
# =============================================================================


def classify_error(exc: BaseException) -> ErrorClass:
    """Classify error as transient, permanent, timeout or unknown.

    Args:
        exc: Exception to classify

    Returns:
        ErrorClass for the 'error_class' log field
    """
    if isinstance(exc, (ProvisionTimeoutError, asyncio.TimeoutError)):
        return ErrorClass.TIMEOUT

    # Not converged yet
    if isinstance(exc, NotFoundError):
        return ErrorClass.TRANSIENT

    if isinstance(exc, TransportError):
        if exc.status_code is None:
            cause = exc.__cause__
            if cause is None or isinstance(cause, HTTPX_RETRYABLE):
                return ErrorClass.TRANSIENT
            return ErrorClass.UNKNOWN
        return ErrorClass.TRANSIENT if is_status_retryable(exc.status_code) else ErrorClass.PERMANENT

    if isinstance(exc, (RemoteRejectedError, DecodeError, ConfigurationError)):
        return ErrorClass.PERMANENT

    if isinstance(exc, HTTPX_RETRYABLE):
        return ErrorClass.TRANSIENT

    return ErrorClass.UNKNOWN

