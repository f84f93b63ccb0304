"""Exceptions raised by IAM directory service operations."""

from __future__ import annotations

from typing import Any


class IamdsError(Exception):
    """Base exception for all client errors."""


class OperationError(IamdsError):
    """An operation failed locally or remotely.

    Attributes:
        status_code: HTTP status code (400 for local validation, 0 when no response arrived)
        message: Human readable error message
        raw_response: TypedResponse received from the service, if any
    """

    def __init__(self, status_code: int, message: str, raw_response: Any = None):
        self.status_code = status_code
        self.message = message
        self.raw_response = raw_response
        super().__init__(f"[{status_code}] {message}")


class ValidationError(OperationError):
    """A required parameter was not supplied. Raised before any network call."""

    def __init__(self, parameter: str, operation: str, message: str | None = None):
        self.parameter = parameter
        self.operation = operation
        super().__init__(400, message or f"Missing required parameter '{parameter}' when calling {operation}")


class TransportError(OperationError):
    """The request never produced an HTTP response (timeout, refused connection, ...)."""

    def __init__(self, message: str):
        super().__init__(0, message)


class ServiceError(OperationError):
    """The service answered with a non-success status code."""


class DecodingError(OperationError):
    """A success response body does not match the declared response shape."""
