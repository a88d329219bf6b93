"""Typed, re-executable RPC requests."""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Generic, Protocol, TypeVar

from loguru import logger

from icxclient.jsonrpc.converter import RpcConverter
from icxclient.jsonrpc.items import RpcObject
from icxclient.jsonrpc.transport import Transport
from icxclient.utils.exceptions import (
    IcxClientError,
    TransportError,
    classify_exception,
    sanitize_error_message,
)
from icxclient.utils.helpers import next_request_id

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)

_executor_lock = threading.Lock()
_default_executor: ThreadPoolExecutor | None = None


def _get_default_executor() -> ThreadPoolExecutor:
    global _default_executor
    with _executor_lock:
        if _default_executor is None:
            _default_executor = ThreadPoolExecutor(thread_name_prefix="icx-request")
        return _default_executor


class Callback(Protocol[T_contra]):
    def on_success(self, result: T_contra) -> None: ...

    def on_failure(self, exc: Exception) -> None: ...


class PendingCall(Generic[T]):
    """Handle for an in-flight asynchronous request.

    Exactly one of cancel() winning or the callback firing happens; once
    cancel() returns True the callback will never be invoked.
    """

    _PENDING = "pending"
    _DONE = "done"
    _CANCELLED = "cancelled"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = self._PENDING
        self._future: Future | None = None

    def cancel(self) -> bool:
        with self._lock:
            if self._state == self._PENDING:
                self._state = self._CANCELLED
                if self._future is not None:
                    self._future.cancel()
                return True
            return self._state == self._CANCELLED

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._state == self._CANCELLED

    @property
    def done(self) -> bool:
        with self._lock:
            return self._state != self._PENDING

    def _attach(self, future: Future) -> None:
        with self._lock:
            self._future = future
            if self._state == self._CANCELLED:
                future.cancel()

    def _claim(self) -> bool:
        """Move to done; False if the call was cancelled first."""
        with self._lock:
            if self._state != self._PENDING:
                return False
            self._state = self._DONE
            return True


class Request(Generic[T]):
    """One RPC call bound to the converter for its result type.

    A Request holds no result state: every execute() performs a fresh call.
    """

    def __init__(
        self,
        transport: Transport,
        method: str,
        params: RpcObject | None,
        converter: RpcConverter[T],
        request_id: int | None = None,
    ):
        self.id = request_id if request_id is not None else next_request_id()
        self.method = method
        self.params = params
        self._transport = transport
        self._converter = converter

    def execute(self) -> T:
        """Run the call on the current thread and decode the result."""
        try:
            raw = self._transport.call(self.method, self.params, self.id)
        except IcxClientError:
            raise
        except Exception as exc:
            code, _, retryable = classify_exception(exc)
            raise TransportError(
                f"transport failure in {self.method}: {sanitize_error_message(str(exc))}",
                code=code,
                retryable=retryable,
            ) from exc
        return self._converter.decode(raw)

    def execute_async(self, callback: Callback[T], executor: Executor | None = None) -> PendingCall[T]:
        """Run the call on an executor thread and report to ``callback``."""
        pending: PendingCall[T] = PendingCall()

        def run() -> None:
            if pending.cancelled:
                return
            try:
                result = self.execute()
            except Exception as exc:
                if pending._claim():
                    callback.on_failure(exc)
                else:
                    logger.debug(f"dropping failure of cancelled request {self.method} id={self.id}")
                return
            if pending._claim():
                callback.on_success(result)

        pending._attach((executor or _get_default_executor()).submit(run))
        return pending

    def __repr__(self) -> str:
        return f"Request(id={self.id}, method={self.method!r})"
