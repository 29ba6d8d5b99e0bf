"""Tests for error handling classes."""

import pytest

from flockervol.core.errors import (
    ConfigurationError,
    DecodeError,
    ErrorCode,
    FlockerError,
    NotFoundError,
    ProvisionTimeoutError,
    RemoteRejectedError,
    TransportError,
)


class TestErrorCodes:
    """Tests for error code assignment."""

    @pytest.mark.parametrize(
        ("error_class", "expected_code"),
        [
            (ConfigurationError, ErrorCode.CONFIGURATION_INVALID),
            (TransportError, ErrorCode.TRANSPORT_FAILED),
            (DecodeError, ErrorCode.DECODE_FAILED),
            (NotFoundError, ErrorCode.NOT_FOUND),
        ],
    )
    def test_default_construction(self, error_class: type, expected_code: ErrorCode) -> None:
        """Each error carries its code and a default message."""
        exc = error_class()
        assert isinstance(exc, FlockerError)
        assert exc.code == expected_code
        assert exc.message

    def test_custom_message(self) -> None:
        """Custom message is kept and used as str()."""
        exc = NotFoundError("State not found by dataset id: abc")
        assert exc.message == "State not found by dataset id: abc"
        assert str(exc) == "State not found by dataset id: abc"

    def test_kinds_are_distinct(self) -> None:
        """Decode failures are never mistaken for not-found."""
        assert not issubclass(DecodeError, NotFoundError)
        assert not issubclass(NotFoundError, DecodeError)
        assert not issubclass(RemoteRejectedError, NotFoundError)


class TestRemoteRejectedError:
    """Tests for RemoteRejectedError."""

    def test_fields(self) -> None:
        """Status code and body are kept for diagnostics."""
        exc = RemoteRejectedError(409, '{"description": "conflict"}')
        assert exc.code == ErrorCode.REMOTE_REJECTED
        assert exc.status_code == 409
        assert exc.body == '{"description": "conflict"}'
        assert "409" in exc.message


class TestTransportError:
    """Tests for TransportError."""

    def test_status_code_optional(self) -> None:
        assert TransportError().status_code is None
        assert TransportError("GET x returned 503", status_code=503).status_code == 503


class TestProvisionTimeoutError:
    """Tests for ProvisionTimeoutError."""

    def test_with_last_error(self) -> None:
        """Last lookup error is attached and mentioned."""
        cause = NotFoundError("State not found by dataset id: abc")
        exc = ProvisionTimeoutError("abc", 120.0, cause)

        assert exc.code == ErrorCode.PROVISION_TIMEOUT
        assert exc.last_error is cause
        assert exc.message == (
            "Dataset abc not ready after 120s: State not found by dataset id: abc"
        )

    def test_without_last_error(self) -> None:
        exc = ProvisionTimeoutError("abc", 0.5)

        assert exc.last_error is None
        assert exc.message == "Dataset abc not ready after 0.5s"
