"""
Typed views of node responses.

Each model declares a static ``RPC_FIELDS`` table mapping attributes to
response keys; the registry uses it to decode and encode the model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from icxclient.data.primitives import Address, Bytes
from icxclient.jsonrpc.converter import RpcField
from icxclient.jsonrpc.items import RpcItem


@dataclass(frozen=True)
class ConfirmedTransaction:
    """A transaction included in a block."""
    tx_hash: Bytes
    version: Optional[int] = None
    from_: Optional[Address] = None
    to: Optional[Address] = None
    value: Optional[int] = None
    step_limit: Optional[int] = None
    fee: Optional[int] = None
    timestamp: Optional[int] = None
    nid: Optional[int] = None
    nonce: Optional[int] = None
    tx_index: Optional[int] = None
    block_height: Optional[int] = None
    block_hash: Optional[Bytes] = None
    signature: Optional[str] = None
    data_type: Optional[str] = None
    data: Optional[RpcItem] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("tx_hash", "txHash", Bytes, aliases=("tx_hash",)),
        RpcField("version", "version", int, required=False),
        RpcField("from_", "from", Address, required=False),
        RpcField("to", "to", Address, required=False),
        RpcField("value", "value", int, required=False),
        RpcField("step_limit", "stepLimit", int, required=False),
        RpcField("fee", "fee", int, required=False),
        RpcField("timestamp", "timestamp", int, required=False),
        RpcField("nid", "nid", int, required=False),
        RpcField("nonce", "nonce", int, required=False),
        RpcField("tx_index", "txIndex", int, required=False),
        RpcField("block_height", "blockHeight", int, required=False),
        RpcField("block_hash", "blockHash", Bytes, required=False),
        RpcField("signature", "signature", str, required=False),
        RpcField("data_type", "dataType", str, required=False),
        RpcField("data", "data", RpcItem, required=False),
    )


@dataclass(frozen=True)
class Block:
    """A block as returned by ``icx_getBlockBy*`` / ``icx_getLastBlock``."""
    block_hash: Bytes
    height: int
    confirmed_transaction_list: list[ConfirmedTransaction]
    version: Optional[str] = None
    prev_block_hash: Optional[Bytes] = None
    merkle_tree_root_hash: Optional[Bytes] = None
    time_stamp: Optional[int] = None
    peer_id: Optional[str] = None
    signature: Optional[str] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("block_hash", "block_hash", Bytes),
        RpcField("height", "height", int),
        RpcField("confirmed_transaction_list", "confirmed_transaction_list", list[ConfirmedTransaction]),
        RpcField("version", "version", str, required=False),
        RpcField("prev_block_hash", "prev_block_hash", Bytes, required=False),
        RpcField("merkle_tree_root_hash", "merkle_tree_root_hash", Bytes, required=False),
        RpcField("time_stamp", "time_stamp", int, required=False),
        RpcField("peer_id", "peer_id", str, required=False),
        RpcField("signature", "signature", str, required=False),
    )

    @property
    def transactions(self) -> list[ConfirmedTransaction]:
        return self.confirmed_transaction_list


@dataclass(frozen=True)
class EventLog:
    """One event emitted while executing a transaction."""
    score_address: Address
    indexed: list[Optional[RpcItem]]
    data: list[Optional[RpcItem]]

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("score_address", "scoreAddress", Address),
        RpcField("indexed", "indexed", list[Optional[RpcItem]]),
        RpcField("data", "data", list[Optional[RpcItem]], required=False),
    )

    def __post_init__(self) -> None:
        if self.data is None:
            object.__setattr__(self, "data", [])

    @property
    def signature(self) -> str:
        """Event signature, e.g. ``Transfer(Address,Address,int)``."""
        first = self.indexed[0] if self.indexed else None
        return first.as_string() if first is not None else ""


@dataclass(frozen=True)
class Failure:
    code: int
    message: str

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("code", "code", int),
        RpcField("message", "message", str),
    )


@dataclass(frozen=True)
class TransactionResult:
    """Receipt returned by ``icx_getTransactionResult``."""
    status: int
    tx_hash: Bytes
    to: Optional[str] = None
    tx_index: Optional[int] = None
    block_height: Optional[int] = None
    block_hash: Optional[Bytes] = None
    cumulative_step_used: Optional[int] = None
    step_used: Optional[int] = None
    step_price: Optional[int] = None
    score_address: Optional[Address] = None
    logs_bloom: Optional[Bytes] = None
    event_logs: Optional[list[EventLog]] = None
    failure: Optional[Failure] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("status", "status", int),
        RpcField("tx_hash", "txHash", Bytes),
        RpcField("to", "to", str, required=False),
        RpcField("tx_index", "txIndex", int, required=False),
        RpcField("block_height", "blockHeight", int, required=False),
        RpcField("block_hash", "blockHash", Bytes, required=False),
        RpcField("cumulative_step_used", "cumulativeStepUsed", int, required=False),
        RpcField("step_used", "stepUsed", int, required=False),
        RpcField("step_price", "stepPrice", int, required=False),
        RpcField("score_address", "scoreAddress", Address, required=False),
        RpcField("logs_bloom", "logsBloom", Bytes, required=False),
        RpcField("event_logs", "eventLogs", list[EventLog], required=False),
        RpcField("failure", "failure", Failure, required=False),
    )

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@dataclass(frozen=True)
class ScoreApiParam:
    type: str
    name: Optional[str] = None
    indexed: Optional[int] = None
    default: Optional[RpcItem] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("type", "type", str),
        RpcField("name", "name", str, required=False),
        RpcField("indexed", "indexed", int, required=False),
        RpcField("default", "default", RpcItem, required=False),
    )


@dataclass(frozen=True)
class ScoreApi:
    """One entry of a contract's API descriptor list."""
    type: str
    name: str
    inputs: Optional[list[ScoreApiParam]] = None
    outputs: Optional[list[ScoreApiParam]] = None
    readonly: Optional[bool] = None
    payable: Optional[bool] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("type", "type", str),
        RpcField("name", "name", str),
        RpcField("inputs", "inputs", list[ScoreApiParam], required=False),
        RpcField("outputs", "outputs", list[ScoreApiParam], required=False),
        RpcField("readonly", "readonly", bool, required=False),
        RpcField("payable", "payable", bool, required=False),
    )


@dataclass(frozen=True)
class BlockNotification:
    """Pushed by a block monitor for every new block at or after the start height."""
    hash: Bytes
    height: int
    indexes: Optional[list[list[int]]] = None
    events: Optional[list[list[list[int]]]] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("hash", "hash", Bytes),
        RpcField("height", "height", int),
        RpcField("indexes", "indexes", list[list[int]], required=False),
        RpcField("events", "events", list[list[list[int]]], required=False),
    )


@dataclass(frozen=True)
class EventNotification:
    """Pushed by an event monitor for every matching event log."""
    hash: Bytes
    height: int
    index: int
    events: Optional[list[int]] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("hash", "hash", Bytes),
        RpcField("height", "height", int),
        RpcField("index", "index", int),
        RpcField("events", "events", list[int], required=False),
    )


