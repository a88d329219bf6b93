"""IconService: typed requests and monitors for the node's JSON-RPC API."""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from loguru import logger

from icxclient.data.converters import BASE64_LIST, SCORE_API_LIST, create_default_registry
from icxclient.data.models import (
    Block,
    BlockNotification,
    ConfirmedTransaction,
    EventNotification,
    ScoreApi,
    TransactionResult,
)
from icxclient.data.primitives import Address, Base64, Bytes
from icxclient.jsonrpc.converter import ConverterFactory, ConverterRegistry
from icxclient.jsonrpc.items import RpcObject, RpcValue
from icxclient.jsonrpc.request import Request
from icxclient.jsonrpc.transport import HttpTransport, Transport
from icxclient.monitor.monitor import Monitor
from icxclient.monitor.spec import BlockMonitorSpec, EventMonitorSpec
from icxclient.transaction import Call, SignedTransaction, Transaction
from icxclient.utils.exceptions import InvalidArgumentError

T = TypeVar("T")


class IconService:
    """
    Entry point of the client.

    Every method returns an unexecuted :class:`Request` (or :class:`Monitor`);
    nothing touches the network until ``execute()`` / ``start()`` is called.

    Args:
        transport: The Transport Port used for calls and monitor channels.
        registry: Converter registry; defaults to the built-in one.
    """

    def __init__(self, transport: Transport, registry: ConverterRegistry | None = None):
        self.transport = transport
        self.registry = registry if registry is not None else create_default_registry()

    @classmethod
    def from_config(cls, config: Any = None) -> "IconService":
        """Build a service over HTTP from a ``ClientConfig`` (the cached one by default)."""
        if config is None:
            from icxclient.config.access import get_config

            config = get_config()
        endpoint = config.endpoint
        transport = HttpTransport(endpoint.url, timeout=endpoint.timeout, ping_interval=endpoint.ping_interval)
        logger.info(f"icon service bound to {endpoint.url}")
        return cls(transport)

    def add_converter_factory(self, factory: ConverterFactory) -> None:
        self.registry.register(factory)

    def _request(self, method: str, params: RpcObject | None, result_type: Any) -> Request:
        return Request(self.transport, method, params, self.registry.resolve(result_type))

    def get_total_supply(self) -> Request[int]:
        return self._request("icx_getTotalSupply", None, int)

    def get_balance(self, address: Address) -> Request[int]:
        params = RpcObject.Builder().put("address", RpcValue(address)).build()
        return self._request("icx_getBalance", params, int)

    def get_block(self, block: int | Bytes) -> Request[Block]:
        """Block by height (int) or by hash (Bytes)."""
        if isinstance(block, Bytes):
            params = RpcObject.Builder().put("hash", RpcValue(block)).build()
            return self._request("icx_getBlockByHash", params, Block)
        if isinstance(block, bool) or not isinstance(block, int):
            raise InvalidArgumentError(f"block must be a height or a hash, got {type(block).__name__}", field="block")
        params = RpcObject.Builder().put("height", RpcValue(block)).build()
        return self._request("icx_getBlockByHeight", params, Block)

    def get_last_block(self) -> Request[Block]:
        return self._request("icx_getLastBlock", None, Block)

    def get_score_api(self, score_address: Address) -> Request[list[ScoreApi]]:
        if not score_address.is_contract:
            raise InvalidArgumentError("Only the contract address can be called.", field="address")
        params = RpcObject.Builder().put("address", RpcValue(score_address)).build()
        return self._request("icx_getScoreApi", params, SCORE_API_LIST)

    def get_transaction(self, tx_hash: Bytes) -> Request[ConfirmedTransaction]:
        params = RpcObject.Builder().put("txHash", RpcValue(tx_hash)).build()
        return self._request("icx_getTransactionByHash", params, ConfirmedTransaction)

    def get_transaction_result(self, tx_hash: Bytes) -> Request[TransactionResult]:
        params = RpcObject.Builder().put("txHash", RpcValue(tx_hash)).build()
        return self._request("icx_getTransactionResult", params, TransactionResult)

    def call(self, call: Call[T]) -> Request[T]:
        return self._request("icx_call", call.get_properties(), call.response_type)

    def send_transaction(self, signed_transaction: SignedTransaction) -> Request[Bytes]:
        return self._request("icx_sendTransaction", signed_transaction.get_properties(), Bytes)

    def estimate_step(self, transaction: Transaction) -> Request[int]:
        return self._request("debug_estimateStep", transaction.get_properties(), int)

    def get_data_by_hash(self, data_hash: Bytes) -> Request[Base64]:
        params = RpcObject.Builder().put("hash", RpcValue(data_hash)).build()
        return self._request("icx_getDataByHash", params, Base64)

    def get_block_header_by_height(self, height: int) -> Request[Base64]:
        params = RpcObject.Builder().put("height", RpcValue(height)).build()
        return self._request("icx_getBlockHeaderByHeight", params, Base64)

    def get_votes_by_height(self, height: int) -> Request[Base64]:
        params = RpcObject.Builder().put("height", RpcValue(height)).build()
        return self._request("icx_getVotesByHeight", params, Base64)

    def get_proof_for_result(self, block_hash: Bytes, index: int) -> Request[list[Base64]]:
        params = (
            RpcObject.Builder()
            .put("hash", RpcValue(block_hash))
            .put("index", RpcValue(index))
            .build()
        )
        return self._request("icx_getProofForResult", params, BASE64_LIST)

    def monitor_blocks(self, height: int) -> Monitor[BlockNotification]:
        spec = BlockMonitorSpec(height)
        return Monitor(self.transport, spec, self.registry.resolve(BlockNotification))

    def monitor_events(
        self,
        height: int,
        event: str,
        address: Optional[Address] = None,
        indexed: Optional[list[Optional[str]]] = None,
        data: Optional[list[Optional[str]]] = None,
    ) -> Monitor[EventNotification]:
        spec = EventMonitorSpec(height, event, address, list(indexed or []), list(data or []))
        return Monitor(self.transport, spec, self.registry.resolve(EventNotification))
