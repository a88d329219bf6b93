import pytest

from icxclient.data.models import Block, BlockNotification, EventNotification, TransactionResult
from icxclient.data.primitives import Base64, Bytes
from icxclient.jsonrpc.converter import FunctionConverter, new_factory
from icxclient.jsonrpc.items import RpcObject, RpcValue
from icxclient.monitor import Monitor
from icxclient.service import IconService
from icxclient.transaction import Call, TransactionBuilder
from icxclient.utils.exceptions import InvalidArgumentError

HASH = Bytes(b"\xab" * 32)


def test_get_balance(stub_transport, eoa_address) -> None:
    stub_transport.responses["icx_getBalance"] = "0x2a"
    service = IconService(stub_transport)
    assert service.get_balance(eoa_address).execute() == 42
    assert stub_transport.calls[0][:2] == ("icx_getBalance", {"address": str(eoa_address)})


def test_get_total_supply_sends_no_params(stub_transport) -> None:
    stub_transport.responses["icx_getTotalSupply"] = "0x2961fff8ca4a62327800000"
    assert IconService(stub_transport).get_total_supply().execute() == 0x2961FFF8CA4A62327800000
    assert stub_transport.calls[0][1] is None


def test_requests_are_lazy(stub_transport, eoa_address) -> None:
    IconService(stub_transport).get_balance(eoa_address)
    assert stub_transport.calls == []


def test_get_score_api_rejects_eoa_before_transport(stub_transport, eoa_address) -> None:
    with pytest.raises(InvalidArgumentError, match="Only the contract address can be called."):
        IconService(stub_transport).get_score_api(eoa_address)
    assert stub_transport.calls == []


def test_get_score_api(stub_transport, contract_address) -> None:
    stub_transport.responses["icx_getScoreApi"] = [
        {"type": "function", "name": "name", "inputs": [], "outputs": [{"type": "str"}], "readonly": "0x1"},
        {"type": "eventlog", "name": "Transfer", "inputs": [{"type": "Address", "name": "_from", "indexed": "0x1"}]},
    ]
    apis = IconService(stub_transport).get_score_api(contract_address).execute()
    assert [api.name for api in apis] == ["name", "Transfer"]
    assert apis[1].inputs[0].indexed == 1


def test_get_block_by_height_and_hash(stub_transport) -> None:
    block = {"block_hash": "cd" * 32, "height": 100, "confirmed_transaction_list": []}
    stub_transport.responses["icx_getBlockByHeight"] = block
    stub_transport.responses["icx_getBlockByHash"] = block
    stub_transport.responses["icx_getLastBlock"] = block
    service = IconService(stub_transport)

    assert isinstance(service.get_block(100).execute(), Block)
    service.get_block(HASH).execute()
    assert service.get_last_block().execute().height == 100
    assert stub_transport.calls[0][:2] == ("icx_getBlockByHeight", {"height": "0x64"})
    assert stub_transport.calls[1][:2] == ("icx_getBlockByHash", {"hash": str(HASH)})


def test_get_block_rejects_other_types(stub_transport) -> None:
    with pytest.raises(InvalidArgumentError):
        IconService(stub_transport).get_block("100")


def test_get_transaction_result(stub_transport) -> None:
    stub_transport.responses["icx_getTransactionResult"] = {
        "status": "0x1",
        "txHash": str(HASH),
        "blockHeight": "0x10",
        "stepUsed": "0x1234",
        "eventLogs": [],
    }
    result = IconService(stub_transport).get_transaction_result(HASH).execute()
    assert isinstance(result, TransactionResult)
    assert result.succeeded
    assert result.event_logs == []
    assert stub_transport.calls[0][1] == {"txHash": str(HASH)}


def test_call_uses_declared_response_type(stub_transport, contract_address, eoa_address) -> None:
    stub_transport.responses["icx_call"] = "0x64"
    params = RpcObject.Builder().put("_owner", RpcValue(eoa_address)).build()
    call = Call(contract_address, "balanceOf", params, response_type=int)
    assert IconService(stub_transport).call(call).execute() == 100
    assert stub_transport.calls[0][1]["dataType"] == "call"


def test_custom_converter_factory(stub_transport, contract_address) -> None:
    class Token:
        def __init__(self, symbol: str) -> None:
            self.symbol = symbol

    def decode(item):
        return Token(item.as_object().get_item("symbol").as_string())

    def encode(token):
        return RpcObject.Builder().put("symbol", RpcValue(token.symbol)).build()

    converter = FunctionConverter("Token", decode, encode)
    service = IconService(stub_transport)
    service.add_converter_factory(new_factory(Token, converter))
    stub_transport.responses["icx_call"] = {"symbol": "ICX"}

    token = service.call(Call(contract_address, "info", response_type=Token)).execute()
    assert token.symbol == "ICX"


def test_estimate_step_and_send_transaction(stub_transport, eoa_address) -> None:
    from icxclient.transaction import SignedTransaction
    from icxclient.wallet import KeyWallet

    stub_transport.responses["debug_estimateStep"] = "0x186a0"
    stub_transport.responses["icx_sendTransaction"] = str(HASH)
    service = IconService(stub_transport)
    tx = TransactionBuilder().to(eoa_address).value(1).nid(1).timestamp(1).build()

    assert service.estimate_step(tx).execute() == 100000
    assert service.send_transaction(SignedTransaction(tx, KeyWallet.create())).execute() == HASH
    sent = stub_transport.calls[1][1]
    assert "signature" in sent and "from" in sent


def test_base64_endpoints(stub_transport) -> None:
    stub_transport.responses["icx_getDataByHash"] = "aGVsbG8="
    stub_transport.responses["icx_getBlockHeaderByHeight"] = "aGVhZGVy"
    stub_transport.responses["icx_getVotesByHeight"] = "dm90ZXM="
    stub_transport.responses["icx_getProofForResult"] = ["YQ==", "Yg=="]
    service = IconService(stub_transport)

    assert service.get_data_by_hash(HASH).execute() == Base64(b"hello")
    assert service.get_block_header_by_height(5).execute() == Base64(b"header")
    assert service.get_votes_by_height(5).execute() == Base64(b"votes")
    assert service.get_proof_for_result(HASH, 0).execute() == [Base64(b"a"), Base64(b"b")]
    assert stub_transport.calls[3][1] == {"hash": str(HASH), "index": "0x0"}


def test_monitor_factories(stub_transport, contract_address) -> None:
    service = IconService(stub_transport)
    blocks = service.monitor_blocks(10)
    events = service.monitor_events(10, "Transfer(Address,Address,int)", contract_address, indexed=[None])
    assert isinstance(blocks, Monitor) and isinstance(events, Monitor)
    assert blocks.spec.path == "block"
    assert events.spec.indexed == [None]
    assert isinstance(
        blocks._converter.decode(RpcObject.Builder().put("hash", RpcValue(HASH)).put("height", RpcValue(1)).build()),
        BlockNotification,
    )
    assert service.registry.resolve(EventNotification) is events._converter
