"""Unit tests for custom exception hierarchy"""
import asyncio
import pytest
from datetime import datetime

from nuvoria.exceptions import (
    ConfigurationError,
    NuvoriaError,
    RecordNotFoundError,
    StoreConnectionError,
    StoreError,
    StoreTimeoutError,
    ValidationError,
    wrap_store_exception,
)


class TestNuvoriaError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = NuvoriaError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        error = NuvoriaError(
            message="Refresh failed",
            user_id="user-1",
            operation="refresh_stats",
            context={"habit_id": "abc-123"},
            user_message="Could not load your stats"
        )
        assert error.user_id == "user-1"
        assert error.operation == "refresh_stats"
        assert error.context["habit_id"] == "abc-123"
        assert error.user_message == "Could not load your stats"

    def test_to_dict(self):
        error = NuvoriaError("Test error", request_id="req-1")
        data = error.to_dict()

        assert data["error"] == "NuvoriaError"
        assert data["message"] == "Test error"
        assert data["request_id"] == "req-1"
        assert "timestamp" in data

    def test_logs_on_creation(self, caplog):
        NuvoriaError("Logged error", operation="op")
        assert "NuvoriaError: Logged error" in caplog.text


class TestSubclasses:

    def test_validation_error(self):
        error = ValidationError("must be non-negative", field="xp_delta", value=-5)

        assert error.field == "xp_delta"
        assert error.value == -5
        assert error.context == {"field": "xp_delta", "value": -5}
        assert "xp_delta" in error.user_message

    def test_store_hierarchy(self):
        assert issubclass(StoreConnectionError, StoreError)
        assert issubclass(StoreTimeoutError, StoreError)
        assert issubclass(RecordNotFoundError, StoreError)
        assert issubclass(StoreError, NuvoriaError)

    def test_timeout_error_records_timeout(self):
        error = StoreTimeoutError(timeout=2.5, context={"op": "x"})
        assert error.timeout == 2.5
        assert error.context == {"op": "x", "timeout": 2.5}

    def test_record_not_found(self):
        error = RecordNotFoundError("habit", "h-1")
        assert error.message == "habit not found: h-1"
        assert error.context["record_id"] == "h-1"

    def test_configuration_error(self):
        assert ConfigurationError("bad", config_key="LOG_LEVEL").config_key == "LOG_LEVEL"


class TestWrapStoreException:

    def test_passes_through_nuvoria_errors(self):
        original = StoreError("already wrapped")
        assert wrap_store_exception(original, operation="op") is original

    def test_timeout(self):
        wrapped = wrap_store_exception(asyncio.TimeoutError(), operation="get_today_stats", user_id="u")
        assert isinstance(wrapped, StoreTimeoutError)
        assert wrapped.operation == "get_today_stats"
        assert wrapped.user_id == "u"

    def test_connection(self):
        wrapped = wrap_store_exception(ConnectionError("refused"), operation="get_global_streak")
        assert isinstance(wrapped, StoreConnectionError)
        assert "refused" in wrapped.message

    def test_missing_key(self):
        wrapped = wrap_store_exception(KeyError("total_xp"), operation="get_user_xp_stats")
        assert type(wrapped) is StoreError
        assert "incomplete data" in wrapped.message

    def test_other_errors(self):
        cause = RuntimeError("boom")
        wrapped = wrap_store_exception(cause, operation="toggle_task", context={"task_id": "t1"})
        assert type(wrapped) is StoreError
        assert wrapped.cause is cause
        assert wrapped.context == {"task_id": "t1"}
