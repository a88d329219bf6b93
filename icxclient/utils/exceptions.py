"""
Exception hierarchy and error handling utilities for icxclient.

Provides:
- Custom exception classes with error codes
- Error categorization (retryable, fatal, validation, integrity)
- Safe error message formatting (no key material leak)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    MALFORMED = "malformed"
    INTEGRITY = "integrity"
    TIMEOUT = "timeout"


class IcxClientError(Exception):
    """Base exception for all icxclient errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class MalformedResponseError(IcxClientError):
    """Response tree does not have the shape the target type needs."""

    def __init__(self, message: str, key: str | None = None, code: str = "MALFORMED_RESPONSE"):
        details = {"key": key} if key else {}
        super().__init__(message, code=code, category=ErrorCategory.MALFORMED, details=details)


class TypeMismatchError(MalformedResponseError):
    """An RpcItem was narrowed to the wrong variant or scalar kind."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Expected {expected}, got {actual}", code="TYPE_MISMATCH")
        self.details = {"expected": expected, "actual": actual}


class NoConverterError(IcxClientError):
    """No registered or synthesizable converter exists for a type."""

    def __init__(self, target_type: Any):
        super().__init__(
            f"Could not locate response converter for: {target_type!r}",
            code="NO_CONVERTER",
            category=ErrorCategory.FATAL,
            details={"type": repr(target_type)},
        )
        self.target_type = target_type


class InvalidArgumentError(IcxClientError):
    """Caller input rejected before anything reaches the network."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="INVALID_ARGUMENT", category=ErrorCategory.VALIDATION, details=details)


class TransportError(IcxClientError):
    """Failure reported by the transport layer."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRANSPORT_ERROR",
        status_code: int | None = None,
        retryable: bool = False,
    ):
        category = ErrorCategory.RETRYABLE if retryable else ErrorCategory.FATAL
        super().__init__(
            message,
            code=code,
            category=category,
            details={"status_code": status_code, "retryable": retryable},
        )
        self.status_code = status_code
        self.retryable = retryable


class RpcError(TransportError):
    """JSON-RPC error object returned by the node."""

    def __init__(self, rpc_code: int, message: str, data: Any = None):
        super().__init__(f"RPC error {rpc_code}: {message}", code="RPC_ERROR")
        self.rpc_code = rpc_code
        self.rpc_message = message
        self.data = data
        self.details.update({"rpc_code": rpc_code, "data": data})


class IntegrityError(IcxClientError):
    """Keystore MAC mismatch: wrong password or corrupted file."""

    def __init__(self, message: str = "Keystore MAC mismatch (wrong password or corrupted file)"):
        super().__init__(message, code="INTEGRITY_ERROR", category=ErrorCategory.INTEGRITY)


class KeystoreError(IcxClientError):
    """Keystore file cannot be parsed or uses unsupported parameters."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="KEYSTORE_ERROR", category=ErrorCategory.VALIDATION, details=details)


class MonitorError(IcxClientError):
    """Subscription handshake rejected or channel failure."""

    def __init__(self, message: str, monitor_code: int | None = None):
        super().__init__(
            message,
            code="MONITOR_ERROR",
            category=ErrorCategory.FATAL,
            details={"monitor_code": monitor_code},
        )
        self.monitor_code = monitor_code


class MonitorDecodeError(MalformedResponseError):
    """One notification could not be decoded; the subscription stays open."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, code="MONITOR_DECODE_ERROR")
        self.cause = cause


_SENSITIVE_PATTERNS = [
    re.compile(r"(private[_-]?key|password|secret|token|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"\b(0x)?[0-9a-fA-F]{64}\b"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove key material and credentials from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    Returns:
        Tuple of (error_code, category, should_retry)
    """
    if isinstance(exc, IcxClientError):
        return exc.code, exc.category, exc.category == ErrorCategory.RETRYABLE

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.MALFORMED, False

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    exc_str = str(exc).lower()
    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if "connection" in exc_str or "network" in exc_str:
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False
