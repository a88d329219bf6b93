"""Pytest fixtures: in-memory transport and monitor channel."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from icxclient.data.primitives import Address
from icxclient.jsonrpc.items import RpcItem, RpcObject, from_json, to_json

_CLOSED = object()


class StubChannel:
    """ChannelHandle fed by the test through push()/finish()."""

    def __init__(self) -> None:
        self.sent: list[Any] = []
        self.closed = False
        self.close_calls = 0
        self._inbox: asyncio.Queue = asyncio.Queue()

    def push(self, message: Any) -> None:
        """Queue a JSON message, or an exception to raise from next_message()."""
        self._inbox.put_nowait(message)

    def finish(self) -> None:
        """Simulate the peer closing the channel."""
        self._inbox.put_nowait(_CLOSED)

    async def send(self, item: RpcItem) -> None:
        self.sent.append(to_json(item))

    async def next_message(self) -> RpcItem | None:
        message = await self._inbox.get()
        if message is _CLOSED:
            return None
        if isinstance(message, Exception):
            raise message
        return from_json(message)

    async def close(self) -> None:
        self.close_calls += 1
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(_CLOSED)


class StubTransport:
    """Transport answering from a method -> response table.

    A response may be parsed JSON, an exception to raise, or a callable
    taking the params RpcObject.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, Any, int]] = []
        self.channel = StubChannel()
        self.opened_paths: list[str] = []

    def call(self, method: str, params: RpcObject | None, request_id: int) -> RpcItem | None:
        self.calls.append((method, to_json(params), request_id))
        response = self.responses[method]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)
        return from_json(response)

    async def open_channel(self, path: str) -> StubChannel:
        self.opened_paths.append(path)
        return self.channel


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def eoa_address() -> Address:
    return Address.parse("hx" + "4873b94352c8c1f3b2f09aaeccea31ce9e90bd31")


@pytest.fixture
def contract_address() -> Address:
    return Address.parse("cx" + "0000000000000000000000000000000000000001")
