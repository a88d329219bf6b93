"""Transport port: the JSON-RPC call and the persistent monitor channel."""

from __future__ import annotations

import json
import threading
from typing import Any, Protocol

import httpx
import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from icxclient.jsonrpc.items import RpcItem, RpcObject, from_json, to_json
from icxclient.utils.exceptions import (
    MalformedResponseError,
    RpcError,
    TransportError,
    sanitize_error_message,
)


class ChannelHandle(Protocol):
    """A persistent, ordered, bidirectional message channel."""

    async def send(self, item: RpcItem) -> None: ...

    async def next_message(self) -> RpcItem | None:
        """Next inbound message, or None once the peer closed the channel."""
        ...

    async def close(self) -> None: ...


class Transport(Protocol):
    def call(self, method: str, params: RpcObject | None, request_id: int) -> RpcItem | None: ...

    async def open_channel(self, path: str) -> ChannelHandle: ...


def build_payload(method: str, params: RpcObject | None, request_id: int) -> dict[str, Any]:
    payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method, "id": request_id}
    if params is not None:
        payload["params"] = to_json(params)
    return payload


def build_ws_url(base_url: str, path: str) -> str:
    """Map an http(s) endpoint to the ws(s) URL of a monitor path."""
    base = base_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return f"{base}/{path.lstrip('/')}"


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in {408, 425, 429}


def parse_response(body: Any, status_code: int) -> RpcItem | None:
    """Extract ``result`` from a JSON-RPC response body or raise the matching error."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            code = error.get("code")
            raise RpcError(
                int(code) if isinstance(code, int) else -32000,
                str(error.get("message") or "unknown error"),
                error.get("data"),
            )
        if status_code < 400 and "result" in body:
            return from_json(body["result"])
    if status_code >= 400:
        raise TransportError(
            f"http error {status_code}",
            code="TRANSPORT_HTTP_ERROR",
            status_code=status_code,
            retryable=_is_retryable_status(status_code),
        )
    raise TransportError(
        "bad response: no result in JSON-RPC body",
        code="TRANSPORT_BAD_RESPONSE",
        status_code=status_code,
    )


class WebSocketChannel:
    """ChannelHandle over a websocket connection."""

    def __init__(self, ws: Any, url: str):
        self._ws = ws
        self.url = url
        self._closed = False

    @classmethod
    async def connect(
        cls,
        url: str,
        *,
        ping_interval: float | None = 20,
        ping_timeout: float | None = 20,
        open_timeout: float | None = 10,
    ) -> "WebSocketChannel":
        try:
            ws = await websockets.connect(
                url,
                ping_interval=ping_interval,
                ping_timeout=ping_timeout,
                open_timeout=open_timeout,
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise TransportError(
                f"websocket connect failed: {url}: {exc}",
                code="TRANSPORT_NETWORK_ERROR",
                retryable=True,
            ) from exc
        return cls(ws, url)

    async def send(self, item: RpcItem) -> None:
        try:
            await self._ws.send(json.dumps(to_json(item)))
        except ConnectionClosed as exc:
            raise TransportError(f"websocket closed while sending: {exc}", code="TRANSPORT_CLOSED") from exc

    async def next_message(self) -> RpcItem | None:
        try:
            raw = await self._ws.recv()
        except ConnectionClosedOK:
            return None
        except ConnectionClosed as exc:
            raise TransportError(
                f"websocket closed abnormally: {exc}",
                code="TRANSPORT_CLOSED",
                retryable=True,
            ) from exc
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(f"non-json monitor message: {exc}") from exc
        item = from_json(data)
        if item is None:
            raise MalformedResponseError("null monitor message")
        return item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._ws.close()


class HttpTransport:
    """JSON-RPC over HTTP POST (httpx) with websocket monitor channels.

    Args:
        url: Node endpoint, e.g. ``http://localhost:9000/api/v3``.
        timeout: Per-request timeout in seconds.
        client: Optional preconfigured ``httpx.Client`` (tests pass one
            built on ``httpx.MockTransport``).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 20.0,
        client: httpx.Client | None = None,
        ping_interval: float | None = 20,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.ping_interval = ping_interval
        self._client = client
        self._owns_client = client is None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(timeout=self.timeout)
            return self._client

    def call(self, method: str, params: RpcObject | None, request_id: int) -> RpcItem | None:
        payload = build_payload(method, params, request_id)
        logger.debug(f"rpc -> {method} id={request_id}")
        try:
            resp = self._get_client().post(self.url, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"timeout: {method}",
                code="TRANSPORT_TIMEOUT",
                retryable=True,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"network error: {method}: {sanitize_error_message(str(exc))}",
                code="TRANSPORT_NETWORK_ERROR",
                retryable=True,
            ) from exc

        try:
            body = resp.json()
        except ValueError:
            body = None
        result = parse_response(body, int(resp.status_code))
        logger.debug(f"rpc <- {method} id={request_id} status={resp.status_code}")
        return result

    async def open_channel(self, path: str) -> WebSocketChannel:
        url = build_ws_url(self.url, path)
        logger.debug(f"monitor channel -> {url}")
        return await WebSocketChannel.connect(url, ping_interval=self.ping_interval, ping_timeout=self.ping_interval)

    def close(self) -> None:
        with self._lock:
            if self._client is not None and self._owns_client:
                self._client.close()
            self._client = None

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
