"""Logging field schema - v1.0

Structured fields passed through `extra`:
- event: Event type (see LogEvent)
- error_class: Failure classification (see ErrorClass)
- dataset_id / dataset_name / primary: Dataset identity
- attempt / elapsed_s: Convergence wait progress
- status_code: HTTP status of a rejected request
"""

from enum import StrEnum

SCHEMA_VERSION = "1.0"


class LogEvent(StrEnum):
    """Standard log event types.

    Use these event types in the 'event' extra field for consistent
    log filtering and analysis.
    """

    # Provisioning events
    PROVISION_STARTED = "provision_started"
    DATASET_FOUND = "dataset_found"
    DATASET_CREATED = "dataset_created"
    DATASET_PENDING = "dataset_pending"
    DATASET_READY = "dataset_ready"
    CREATE_REJECTED = "create_rejected"
    PROVISION_TIMEOUT = "provision_timeout"
    PROVISION_CANCELLED = "provision_cancelled"

    # Client events
    REQUEST_FAILED = "request_failed"
    HEALTH_CHECK_FAILED = "health_check_failed"


class LogField(StrEnum):
    """Structured fields every JSON log line carries (null when unset)."""

    EVENT = "event"
    ERROR_CLASS = "error_class"
    DATASET_ID = "dataset_id"
    DATASET_NAME = "dataset_name"
    PRIMARY = "primary"
    STATUS_CODE = "status_code"
    ATTEMPT = "attempt"
    ELAPSED_S = "elapsed_s"


# Events repeated on every poll tick; rate limited per dataset
POLL_EVENTS = frozenset({LogEvent.DATASET_PENDING, LogEvent.REQUEST_FAILED})


class ErrorClass(StrEnum):
    """Error classification for structured error logging."""

    TRANSIENT = "transient"  # Expected to clear up (network blip, not converged yet)
    PERMANENT = "permanent"  # Will not clear up by waiting (rejected, malformed)
    TIMEOUT = "timeout"  # Timeout error
    UNKNOWN = "unknown"
