"""
Standardized Error Handling - Consistent API Error Responses
Provides uniform error handling for the HTTP layer and the backing-store clients
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from functools import wraps
from fastapi import HTTPException, status
from utils.logger import logger
import traceback


# Backing-store Errors

class BackendUnavailableError(Exception):
    """A backing store could not be reached or did not answer in time"""

    service = "Backend"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class CacheUnavailableError(BackendUnavailableError):
    """The cache store failed or timed out"""

    service = "Cache"


class DatabaseUnavailableError(BackendUnavailableError):
    """The relational store failed or timed out"""

    service = "Database"


# API Errors

class APIError(HTTPException):
    """
    Standardized API Error with consistent response format

    Provides structured error responses with optional details,
    error codes, and automatic logging.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        log_error: bool = True
    ):
        """
        Initialize standardized API error

        Args:
            status_code: HTTP status code
            message: Human-readable error message
            details: Additional error details (optional)
            error_code: Machine-readable error code (optional)
            log_error: Whether to log the error (default: True)
        """

        error_detail = {
            "error": True,
            "message": message,
            "status_code": status_code
        }

        if error_code:
            error_detail["error_code"] = error_code

        if details:
            error_detail["details"] = details

        error_detail["timestamp"] = datetime.now(timezone.utc).isoformat()

        if log_error:
            self._log_error(status_code, message, details, error_code)

        super().__init__(status_code=status_code, detail=error_detail)

    def _log_error(
        self,
        status_code: int,
        message: str,
        details: Optional[Dict[str, Any]],
        error_code: Optional[str]
    ):
        """Log error with appropriate level based on status code"""

        if status_code >= 500:
            logger.error(f"Server Error: {message} [{error_code}] {details or ''}")
        elif status_code >= 400:
            logger.warning(f"Client Error: {message} [{error_code}] {details or ''}")
        else:
            logger.info(f"Error Response: {message}")


class ServerError(APIError):
    """Internal server error (500)"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
            details=details,
            error_code="SERVER_ERROR"
        )


class ServiceUnavailableError(APIError):
    """Service unavailable error (503)"""
    def __init__(self, service: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message=f"{service} service unavailable",
            details=details,
            error_code="SERVICE_UNAVAILABLE_ERROR"
        )


# Error Handler Decorators

def handle_api_errors(func):
    """
    Decorator to convert backing-store and unexpected exceptions into APIErrors

    Usage:
        @router.get("/")
        @handle_api_errors
        async def my_endpoint():
            # Your endpoint logic
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except APIError:
            raise
        except BackendUnavailableError as e:
            raise ServiceUnavailableError(e.service, {"reason": str(e)})
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {str(e)}")
            logger.error(traceback.format_exc())
            raise ServerError(
                "An unexpected error occurred",
                {"function": func.__name__, "error_type": type(e).__name__}
            )

    return wrapper


__all__ = [
    "BackendUnavailableError",
    "CacheUnavailableError",
    "DatabaseUnavailableError",
    "APIError",
    "ServerError",
    "ServiceUnavailableError",
    "handle_api_errors",
]
