"""Logging configuration for flocker-volume.

Handlers are attached to the "flockervol" logger only, so the volume
plugin hosting this library keeps control of the root logger.

Supports two formats:
- text: Human-readable, with schema fields appended as key=value
- json: One object per line with every LogField key present
"""

import logging
import sys
import time
from collections import OrderedDict
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pythonjsonlogger import json as jsonlogger

from flockervol.config import LoggingConfig
from flockervol.core.logging_schema import POLL_EVENTS, SCHEMA_VERSION, LogField

PACKAGE_LOGGER = "flockervol"


def _field_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def schema_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Extract the LogField values of a record, None when unset."""
    return {field.value: _field_value(getattr(record, field, None)) for field in LogField}


class PollEventFilter(logging.Filter):
    """Rate limit poll-tick events per dataset.

    The convergence wait emits DATASET_PENDING (and, on network trouble,
    REQUEST_FAILED) once per tick. Only the first of each
    (event, dataset_id) pair per window gets through. Other records,
    and anything at ERROR or above, always pass.

    Args:
        window_seconds: Minimum seconds between repeats of one pair.
        max_keys: Number of pairs remembered (least recently seen evicted).
    """

    def __init__(self, window_seconds: float = 5.0, max_keys: int = 1000) -> None:
        super().__init__()
        self._window = window_seconds
        self._max_keys = max_keys
        self._seen: OrderedDict[tuple[str, str | None], float] = OrderedDict()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return True
        event = getattr(record, LogField.EVENT, None)
        if event not in POLL_EVENTS:
            return True

        key = (str(event), getattr(record, LogField.DATASET_ID, None))
        now = time.monotonic()
        last = self._seen.get(key)
        if last is not None and now - last < self._window:
            return False

        self._seen[key] = now
        self._seen.move_to_end(key)
        while len(self._seen) > self._max_keys:
            self._seen.popitem(last=False)
        return True


class FlockerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with a fixed field set.

    Every line has timestamp, level, logger, service, schema_version,
    message and all LogField keys, so log queries never have to guess
    whether a field exists.
    """

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self._service
        log_record["schema_version"] = SCHEMA_VERSION
        log_record.update(schema_fields(record))

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


class FlockerTextFormatter(logging.Formatter):
    """Plain text with set schema fields appended, e.g. `[event=dataset_ready dataset_id=abc]`."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = " ".join(
            f"{key}={value}" for key, value in schema_fields(record).items() if value is not None
        )
        return f"{line} [{fields}]" if fields else line


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """Configure the package logger.

    Args:
        config: Logging configuration settings.

    Returns:
        The configured "flockervol" logger.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    if config.format == "json":
        formatter: logging.Formatter = FlockerJsonFormatter(config)
    else:
        formatter = FlockerTextFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(PollEventFilter(window_seconds=config.poll_log_window))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    # Request-level noise from the HTTP client during polling
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return logger
