"""
Standardized exception hierarchy for nuvoria
Provides rich context, consistent logging, and user-friendly error messages
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class NuvoriaError(Exception):
    """
    Base exception for all nuvoria errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise NuvoriaError(
            message="Failed to load stats",
            user_id="user-1",
            operation="refresh_stats",
            context={"habit_id": "abc-123"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for the presentation layer"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class ValidationError(NuvoriaError):
    """
    Raised when a caller passes an argument the core cannot accept

    Examples:
    - Negative XP delta for an optimistic update
    - Malformed ISO date for a task toggle

    Example:
        raise ValidationError(
            message="XP delta must be non-negative",
            field="xp_delta",
            value=-5
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Store Errors
# ==========================================

class StoreError(NuvoriaError):
    """
    Base class for habit/XP store failures
    """
    pass


class StoreConnectionError(StoreError):
    """Store could not be reached"""

    def __init__(self, message: str = "Store connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="We're having trouble syncing your progress. Please try again in a moment.",
            **kwargs
        )


class StoreTimeoutError(StoreError):
    """Store call did not resolve in time"""

    def __init__(
        self,
        message: str = "Store request timed out",
        timeout: Optional[float] = None,
        **kwargs
    ):
        self.timeout = timeout
        context = kwargs.pop("context", None) or {}
        context["timeout"] = timeout
        super().__init__(
            message=message,
            user_message="Syncing is taking longer than usual. Your progress is safe.",
            context=context,
            **kwargs
        )


class RecordNotFoundError(StoreError):
    """Requested record does not exist"""

    def __init__(
        self,
        record_type: str,
        record_id: str,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=f"{record_type} not found: {record_id}",
            user_message=f"The requested {record_type} could not be found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(NuvoriaError):
    """Invalid configuration value"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The app is misconfigured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_store_exception(
    error: BaseException,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> NuvoriaError:
    """
    Wrap a raw exception from a store call in the appropriate NuvoriaError

    Args:
        error: The original exception
        operation: Operation being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate NuvoriaError subclass

    Example:
        try:
            await store.get_today_stats(user_id)
        except Exception as e:
            raise wrap_store_exception(e, operation="get_today_stats", user_id=user_id)
    """
    if isinstance(error, NuvoriaError):
        return error

    if isinstance(error, asyncio.TimeoutError):
        return StoreTimeoutError(
            message=f"{operation} timed out",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, (ConnectionError, OSError)):
        return StoreConnectionError(
            message=f"Store connection failed during {operation}: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, KeyError):
        return StoreError(
            message=f"{operation} returned incomplete data: missing {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    else:
        return StoreError(
            message=f"{operation} failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
