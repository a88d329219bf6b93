import json

import httpx
import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from icxclient.jsonrpc.items import RpcObject, RpcValue
from icxclient.jsonrpc.transport import (
    HttpTransport,
    WebSocketChannel,
    build_payload,
    build_ws_url,
    parse_response,
)
from icxclient.utils.exceptions import MalformedResponseError, RpcError, TransportError

URL = "http://node.test/api/v3"


def _transport(handler) -> HttpTransport:
    return HttpTransport(URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_call_posts_json_rpc_envelope() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": seen["body"]["id"], "result": "0x10"})

    params = RpcObject.Builder().put("address", RpcValue("hx" + "00" * 20)).build()
    result = _transport(handler).call("icx_getBalance", params, 7)

    assert result == RpcValue("0x10")
    assert seen["url"] == URL
    assert seen["body"] == {
        "jsonrpc": "2.0",
        "method": "icx_getBalance",
        "id": 7,
        "params": {"address": "hx" + "00" * 20},
    }


def test_build_payload_omits_missing_params() -> None:
    assert build_payload("icx_getLastBlock", None, 1) == {"jsonrpc": "2.0", "method": "icx_getLastBlock", "id": 1}


def test_error_object_becomes_rpc_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad"}})

    with pytest.raises(RpcError) as exc_info:
        _transport(handler).call("icx_getBalance", None, 1)
    assert exc_info.value.rpc_code == -32602
    assert exc_info.value.rpc_message == "bad"


def test_server_error_without_body_is_retryable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(TransportError) as exc_info:
        _transport(handler).call("icx_getBalance", None, 1)
    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable


def test_network_failures_map_to_retryable_transport_errors() -> None:
    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError) as exc_info:
        _transport(refused).call("icx_getBalance", None, 1)
    assert exc_info.value.code == "TRANSPORT_NETWORK_ERROR"
    assert exc_info.value.retryable

    with pytest.raises(TransportError) as exc_info:
        _transport(slow).call("icx_getBalance", None, 1)
    assert exc_info.value.code == "TRANSPORT_TIMEOUT"


def test_parse_response_null_result() -> None:
    assert parse_response({"jsonrpc": "2.0", "id": 1, "result": None}, 200) is None
    with pytest.raises(TransportError):
        parse_response({"jsonrpc": "2.0", "id": 1}, 200)


def test_build_ws_url() -> None:
    assert build_ws_url("https://node.test/api/v3/", "block") == "wss://node.test/api/v3/block"
    assert build_ws_url("http://node.test/api/v3", "/event") == "ws://node.test/api/v3/event"


class FakeWebSocket:
    def __init__(self, inbound) -> None:
        self.inbound = list(inbound)
        self.sent: list[str] = []
        self.close_calls = 0

    async def send(self, text: str) -> None:
        self.sent.append(text)

    async def recv(self):
        message = self.inbound.pop(0)
        if isinstance(message, Exception):
            raise message
        return message

    async def close(self) -> None:
        self.close_calls += 1


@pytest.mark.asyncio
async def test_websocket_channel_messages() -> None:
    ws = FakeWebSocket(['{"code": 0}', b'{"height": 5}', "not json", ConnectionClosedOK(None, None)])
    channel = WebSocketChannel(ws, "ws://node.test/api/v3/block")

    await channel.send(RpcObject.Builder().put("height", RpcValue(5)).build())
    assert json.loads(ws.sent[0]) == {"height": "0x5"}

    assert (await channel.next_message()).as_object().get_item("code").as_integer() == 0
    assert (await channel.next_message()).as_object().get_item("height").as_integer() == 5
    with pytest.raises(MalformedResponseError):
        await channel.next_message()
    assert await channel.next_message() is None

    await channel.close()
    await channel.close()
    assert ws.close_calls == 1


@pytest.mark.asyncio
async def test_websocket_abnormal_close_is_transport_error() -> None:
    channel = WebSocketChannel(FakeWebSocket([ConnectionClosedError(None, None)]), "ws://x/block")
    with pytest.raises(TransportError) as exc_info:
        await channel.next_message()
    assert exc_info.value.retryable
