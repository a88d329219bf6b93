"""Utility functions for icxclient."""

from icxclient.utils.helpers import ensure_dir, next_request_id, strip_hex_prefix
from icxclient.utils.exceptions import (
    IcxClientError,
    MalformedResponseError,
    TypeMismatchError,
    NoConverterError,
    InvalidArgumentError,
    TransportError,
    RpcError,
    IntegrityError,
    KeystoreError,
    MonitorError,
    MonitorDecodeError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "ensure_dir",
    "next_request_id",
    "strip_hex_prefix",
    "IcxClientError",
    "MalformedResponseError",
    "TypeMismatchError",
    "NoConverterError",
    "InvalidArgumentError",
    "TransportError",
    "RpcError",
    "IntegrityError",
    "KeystoreError",
    "MonitorError",
    "MonitorDecodeError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
]
