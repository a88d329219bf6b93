"""JSON-RPC value model, converters, requests and transport."""

from icxclient.jsonrpc.items import RpcArray, RpcItem, RpcObject, RpcValue, from_json, to_json
from icxclient.jsonrpc.converter import (
    ConverterRegistry,
    RpcConverter,
    RpcField,
    new_factory,
)
from icxclient.jsonrpc.transport import ChannelHandle, HttpTransport, Transport
from icxclient.jsonrpc.request import Callback, PendingCall, Request

__all__ = [
    "RpcArray",
    "RpcItem",
    "RpcObject",
    "RpcValue",
    "from_json",
    "to_json",
    "ConverterRegistry",
    "RpcConverter",
    "RpcField",
    "new_factory",
    "ChannelHandle",
    "HttpTransport",
    "Transport",
    "Callback",
    "PendingCall",
    "Request",
]
