import threading
from dataclasses import dataclass
from typing import ClassVar, Optional

import pytest

from icxclient.data.converters import SCORE_API_LIST, create_default_registry
from icxclient.data.models import Block, ScoreApi, TransactionResult
from icxclient.data.primitives import Address, Bytes
from icxclient.jsonrpc.converter import (
    ConverterRegistry,
    FunctionConverter,
    RpcField,
    StructuralConverter,
    new_factory,
)
from icxclient.jsonrpc.items import RpcItem, RpcValue, from_json
from icxclient.utils.exceptions import MalformedResponseError, NoConverterError


@dataclass(frozen=True)
class Pair:
    left: int
    right: Optional[str] = None

    RPC_FIELDS: ClassVar[tuple[RpcField, ...]] = (
        RpcField("left", "left", int),
        RpcField("right", "right", str, required=False),
    )


class Opaque:
    pass


def test_resolve_is_cached_and_deterministic() -> None:
    registry = create_default_registry()
    assert registry.resolve(int) is registry.resolve(int)
    assert registry.resolve(list[int]) is registry.resolve(list[int])


def test_resolve_concurrently_yields_equivalent_converters() -> None:
    registry = create_default_registry()
    results = []

    def worker() -> None:
        results.append(registry.resolve(Block))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 8
    assert all(isinstance(c, StructuralConverter) for c in results)
    assert registry.resolve(Block) is registry.resolve(Block)


def test_caller_factories_take_priority_over_builtins() -> None:
    doubled = FunctionConverter("int*2", lambda item: item.as_integer() * 2, RpcValue)
    registry = create_default_registry(new_factory(int, doubled))
    assert registry.resolve(int).decode(RpcValue("0x2")) == 4


def test_registered_factory_beats_structural_fallback() -> None:
    registry = create_default_registry()
    assert isinstance(registry.resolve(Pair), StructuralConverter)

    custom = FunctionConverter("pair", lambda item: Pair(item.as_integer()), lambda p: RpcValue(p.left))
    registry.register(new_factory(Pair, custom))
    assert registry.resolve(Pair) is custom


def test_scalar_round_trips() -> None:
    registry = create_default_registry()
    cases = [
        (int, 0, "0x0"),
        (int, 2**200, "0x" + format(2**200, "x")),
        (int, -1, "-0x1"),
        (bool, True, "0x1"),
        (str, "", ""),
        (Bytes, Bytes(b""), "0x"),
        (bytes, b"\x00\x01", "0x0001"),
        (Address, Address.parse("hx" + "12" * 20), "hx" + "12" * 20),
    ]
    for target, value, wire in cases:
        converter = registry.resolve(target)
        encoded = converter.encode(value)
        assert encoded == RpcValue(wire)
        assert converter.decode(encoded) == value


def test_rpc_item_converter_is_identity() -> None:
    registry = create_default_registry()
    item = from_json({"a": ["0x1"]})
    assert registry.resolve(RpcItem).decode(item) is item


def test_structural_fallback_decodes_and_encodes() -> None:
    registry = create_default_registry()
    converter = registry.resolve(Pair)
    pair = converter.decode(from_json({"left": "0x5"}))
    assert pair == Pair(5, None)
    assert converter.encode(Pair(1, "x")) == from_json({"left": "0x1", "right": "x"})


def test_missing_required_key_reports_key() -> None:
    registry = create_default_registry()
    with pytest.raises(MalformedResponseError) as exc_info:
        registry.resolve(Pair).decode(from_json({"right": "x"}))
    assert exc_info.value.details == {"key": "left"}


def test_unknown_type_raises_no_converter() -> None:
    registry = ConverterRegistry()
    with pytest.raises(NoConverterError):
        registry.resolve(int)
    with pytest.raises(NoConverterError):
        create_default_registry().resolve(Opaque)


def test_optional_and_nested_lists() -> None:
    registry = create_default_registry()
    assert registry.resolve(Optional[int]).decode(None) is None
    assert registry.resolve(list[Optional[int]]).decode(from_json(["0x1", None])) == [1, None]
    assert registry.resolve(list[list[int]]).decode(from_json([["0x1"], []])) == [[1], []]


def test_block_decodes_legacy_fields() -> None:
    registry = create_default_registry()
    raw = {
        "version": "0.1a",
        "prev_block_hash": "aa" * 32,
        "merkle_tree_root_hash": "bb" * 32,
        "time_stamp": 1516819217223222,
        "confirmed_transaction_list": [
            {
                "from": "hx" + "11" * 20,
                "to": "hx" + "22" * 20,
                "value": "0xde0b6b3a7640000",
                "tx_hash": "cc" * 32,
            }
        ],
        "block_hash": "dd" * 32,
        "height": 1,
        "peer_id": "hx" + "33" * 20,
        "signature": "",
    }
    block = registry.resolve(Block).decode(from_json(raw))
    assert block.height == 1
    assert block.block_hash == Bytes(b"\xdd" * 32)
    assert block.time_stamp == 1516819217223222
    tx = block.transactions[0]
    assert tx.tx_hash == Bytes(b"\xcc" * 32)
    assert tx.value == 10**18
    assert tx.from_ == Address.parse("hx" + "11" * 20)


def test_transaction_result_with_event_logs_and_failure() -> None:
    registry = create_default_registry()
    raw = {
        "status": "0x0",
        "txHash": "0x" + "ab" * 32,
        "eventLogs": [
            {
                "scoreAddress": "cx" + "01" * 20,
                "indexed": ["Transfer(Address,Address,int)", "hx" + "11" * 20, None],
                "data": ["0x1"],
            }
        ],
        "failure": {"code": "0x7d64", "message": "out of balance"},
    }
    result = registry.resolve(TransactionResult).decode(from_json(raw))
    assert not result.succeeded
    assert result.failure.code == 0x7D64
    log = result.event_logs[0]
    assert log.signature == "Transfer(Address,Address,int)"
    assert log.indexed[2] is None
    assert log.data[0].as_integer() == 1


def test_score_api_list() -> None:
    registry = create_default_registry()
    raw = [
        {
            "type": "function",
            "name": "balanceOf",
            "inputs": [{"type": "Address", "name": "_owner"}],
            "outputs": [{"type": "int"}],
            "readonly": "0x1",
        }
    ]
    apis = registry.resolve(SCORE_API_LIST).decode(from_json(raw))
    assert apis == [
        ScoreApi(
            type="function",
            name="balanceOf",
            inputs=[apis[0].inputs[0]],
            outputs=[apis[0].outputs[0]],
            readonly=True,
        )
    ]
    assert apis[0].inputs[0].name == "_owner"
    assert apis[0].payable is None
