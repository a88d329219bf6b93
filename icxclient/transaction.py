"""
Transactions: building, canonical serialization and signing.

A transaction is signed over the SHA3-256 hash of its serialized form::

    icx_sendTransaction.<key>.<value>.<key>.<value>...

Keys are sorted at every level, nested objects render as ``{...}``,
arrays as ``[...]`` and null as ``\\0``. The characters ``\\ . { } [ ]``
inside values are escaped with a backslash.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from icxclient.data.primitives import Address, Bytes
from icxclient.jsonrpc.items import RpcArray, RpcItem, RpcObject, RpcValue
from icxclient.utils.exceptions import InvalidArgumentError
from icxclient.wallet.keys import sha3_256
from icxclient.wallet.wallet import Wallet

T = TypeVar("T")

TX_VERSION = 3
SEND_TRANSACTION = "icx_sendTransaction"
DATA_TYPES = ("call", "deploy", "message", "deposit")

_ESCAPES = str.maketrans({c: "\\" + c for c in "\\.{}[]"})


def _now_us() -> int:
    return time.time_ns() // 1000


@dataclass(frozen=True)
class Transaction:
    """An unsigned ICX transaction."""
    to: Address
    nid: int
    from_: Optional[Address] = None
    value: Optional[int] = None
    step_limit: Optional[int] = None
    timestamp: Optional[int] = None
    nonce: Optional[int] = None
    data_type: Optional[str] = None
    data: Optional[RpcItem] = None
    version: int = TX_VERSION

    def __post_init__(self) -> None:
        if self.data_type is not None and self.data_type not in DATA_TYPES:
            raise InvalidArgumentError(f"Unknown data type: {self.data_type}", field="data_type")
        if self.data_type is not None and self.data is None:
            raise InvalidArgumentError(f"data is required for data type {self.data_type}", field="data")

    def get_properties(self) -> RpcObject:
        builder = RpcObject.Builder()
        builder.put("version", RpcValue(self.version))
        if self.from_ is not None:
            builder.put("from", RpcValue(self.from_))
        builder.put("to", RpcValue(self.to))
        if self.value is not None:
            builder.put("value", RpcValue(self.value))
        if self.step_limit is not None:
            builder.put("stepLimit", RpcValue(self.step_limit))
        builder.put("timestamp", RpcValue(self.timestamp if self.timestamp is not None else _now_us()))
        builder.put("nid", RpcValue(self.nid))
        if self.nonce is not None:
            builder.put("nonce", RpcValue(self.nonce))
        if self.data_type is not None:
            builder.put("dataType", RpcValue(self.data_type))
            builder.put("data", self.data)
        return builder.build()


class TransactionBuilder:
    """Fluent builder; ``timestamp`` defaults to the current time in microseconds."""

    def __init__(self) -> None:
        self._fields: dict[str, Any] = {}

    def from_(self, address: Address) -> "TransactionBuilder":
        self._fields["from_"] = address
        return self

    def to(self, address: Address) -> "TransactionBuilder":
        self._fields["to"] = address
        return self

    def value(self, value: int) -> "TransactionBuilder":
        self._fields["value"] = value
        return self

    def step_limit(self, step_limit: int) -> "TransactionBuilder":
        self._fields["step_limit"] = step_limit
        return self

    def nid(self, nid: int) -> "TransactionBuilder":
        self._fields["nid"] = nid
        return self

    def nonce(self, nonce: int) -> "TransactionBuilder":
        self._fields["nonce"] = nonce
        return self

    def timestamp(self, timestamp: int) -> "TransactionBuilder":
        self._fields["timestamp"] = timestamp
        return self

    def call(self, method: str, params: RpcObject | None = None) -> "TransactionBuilder":
        data = RpcObject.Builder().put("method", RpcValue(method)).put("params", params).build()
        return self._with_data("call", data)

    def deploy(
        self,
        content: bytes,
        params: RpcObject | None = None,
        content_type: str = "application/zip",
    ) -> "TransactionBuilder":
        data = (
            RpcObject.Builder()
            .put("contentType", RpcValue(content_type))
            .put("content", RpcValue(bytes(content)))
            .put("params", params)
            .build()
        )
        return self._with_data("deploy", data)

    def message(self, message: str) -> "TransactionBuilder":
        return self._with_data("message", RpcValue(message.encode("utf-8")))

    def _with_data(self, data_type: str, data: RpcItem) -> "TransactionBuilder":
        self._fields["data_type"] = data_type
        self._fields["data"] = data
        return self

    def build(self) -> Transaction:
        if "to" not in self._fields:
            raise InvalidArgumentError("to address is required", field="to")
        if "nid" not in self._fields:
            raise InvalidArgumentError("nid is required", field="nid")
        fields = dict(self._fields)
        fields.setdefault("timestamp", _now_us())
        return Transaction(**fields)


@dataclass(frozen=True)
class Call(Generic[T]):
    """A read-only ``icx_call`` against a contract with a declared result type."""
    to: Address
    method: str
    params: Optional[RpcObject] = None
    from_: Optional[Address] = None
    response_type: Any = RpcItem

    def __post_init__(self) -> None:
        if not self.to.is_contract:
            raise InvalidArgumentError("Only the contract address can be called.", field="to")

    def get_properties(self) -> RpcObject:
        data = RpcObject.Builder().put("method", RpcValue(self.method)).put("params", self.params).build()
        builder = RpcObject.Builder()
        if self.from_ is not None:
            builder.put("from", RpcValue(self.from_))
        builder.put("to", RpcValue(self.to))
        builder.put("dataType", RpcValue("call"))
        builder.put("data", data)
        return builder.build()


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


def _serialize_item(item: RpcItem | None) -> str:
    if item is None:
        return "\\0"
    if isinstance(item, RpcObject):
        return "{" + _serialize_object(item) + "}"
    if isinstance(item, RpcArray):
        return "[" + ".".join(_serialize_item(child) for child in item) + "]"
    return _escape(item.as_string())


def _serialize_object(obj: RpcObject) -> str:
    return ".".join(f"{key}.{_serialize_item(obj.get_item(key))}" for key in sorted(obj.keys()))


def serialize(properties: RpcObject) -> str:
    """Canonical text signed by the sender; ``signature`` and ``txHash`` are excluded."""
    builder = RpcObject.Builder()
    for key, item in properties.items():
        if key not in ("signature", "txHash"):
            builder.put(key, item)
    return f"{SEND_TRANSACTION}.{_serialize_object(builder.build())}"


def transaction_hash(properties: RpcObject) -> Bytes:
    return Bytes(sha3_256(serialize(properties).encode("utf-8")))


@dataclass(frozen=True)
class SignedTransaction:
    """A transaction plus its base64 signature, ready for ``icx_sendTransaction``."""
    transaction: Transaction
    wallet: Wallet = field(repr=False)
    _properties: RpcObject = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        properties = self.transaction.get_properties()
        if self.transaction.from_ is None:
            properties = _with_from(properties, self.wallet.get_address())
        elif self.transaction.from_ != self.wallet.get_address():
            raise InvalidArgumentError("from address does not match the signing wallet", field="from")
        signature = self.wallet.sign(bytes(transaction_hash(properties)))
        builder = RpcObject.Builder()
        for key, item in properties.items():
            builder.put(key, item)
        builder.put("signature", RpcValue(base64.b64encode(signature).decode("ascii")))
        object.__setattr__(self, "_properties", builder.build())

    @property
    def tx_hash(self) -> Bytes:
        return transaction_hash(self._properties)

    @property
    def signature(self) -> str:
        return self._properties.get_item("signature").as_string()

    def get_properties(self) -> RpcObject:
        return self._properties


def _with_from(properties: RpcObject, address: Address) -> RpcObject:
    builder = RpcObject.Builder()
    for key, item in properties.items():
        builder.put(key, item)
        if key == "version":
            builder.put("from", RpcValue(address))
    return builder.build()
