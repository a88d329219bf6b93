import pytest

from icxclient.data.primitives import Address, AddressPrefix, Base64, Bytes
from icxclient.jsonrpc.items import (
    RpcArray,
    RpcObject,
    RpcValue,
    from_json,
    hex_to_int,
    int_to_hex,
    to_json,
)
from icxclient.utils.exceptions import InvalidArgumentError, MalformedResponseError, TypeMismatchError


def test_int_to_hex_canonical_forms() -> None:
    assert int_to_hex(0) == "0x0"
    assert int_to_hex(255) == "0xff"
    assert int_to_hex(-255) == "-0xff"
    assert int_to_hex(10**30) == "0x" + format(10**30, "x")


def test_hex_to_int_accepts_hex_negative_and_decimal() -> None:
    assert hex_to_int("0x2a") == 42
    assert hex_to_int("-0x2a") == -42
    assert hex_to_int("0X2A") == 42
    assert hex_to_int("42") == 42
    with pytest.raises(ValueError):
        hex_to_int("0xzz")
    with pytest.raises(ValueError):
        hex_to_int("")


def test_rpc_value_normalises_scalars() -> None:
    assert RpcValue(True).value == "0x1"
    assert RpcValue(False).value == "0x0"
    assert RpcValue(16).value == "0x10"
    assert RpcValue(b"\x01\xff").value == "0x01ff"
    assert RpcValue(Bytes(b"\xab")).value == "0xab"
    assert RpcValue(Base64(b"hi")).value == "aGk="
    address = Address.parse("hx" + "ab" * 20)
    assert RpcValue(address).as_address() == address


def test_rpc_value_is_immutable() -> None:
    value = RpcValue("x")
    with pytest.raises(AttributeError):
        value._value = "y"


def test_accessors_raise_type_mismatch() -> None:
    obj = RpcObject.Builder().put("a", RpcValue(1)).build()
    with pytest.raises(TypeMismatchError):
        obj.as_integer()
    with pytest.raises(TypeMismatchError):
        obj.as_array()
    with pytest.raises(TypeMismatchError):
        RpcValue("0x2").as_boolean()
    with pytest.raises(TypeMismatchError):
        RpcValue("hello").as_integer()
    with pytest.raises(MalformedResponseError):
        RpcValue("").as_bytes()


@pytest.mark.parametrize("text", ["0xabc\n", "0xab\n", "abcd\n", "0x\n"])
def test_as_bytes_rejects_trailing_newline(text: str) -> None:
    with pytest.raises(TypeMismatchError):
        RpcValue(text).as_bytes()
    with pytest.raises(InvalidArgumentError):
        Bytes.from_hex(text)


def test_integer_and_address_reject_trailing_newline() -> None:
    with pytest.raises(ValueError):
        hex_to_int("0x1\n")
    with pytest.raises(ValueError):
        hex_to_int("12\n")
    with pytest.raises(TypeMismatchError):
        RpcValue("0x1\n").as_integer()
    text = "hx" + "0" * 39 + "\n"
    with pytest.raises(InvalidArgumentError):
        Address.parse(text)
    with pytest.raises(TypeMismatchError):
        RpcValue(text).as_address()


def test_as_bytes_accepts_unprefixed_legacy_hash() -> None:
    assert RpcValue("abcd").as_bytes() == Bytes(b"\xab\xcd")
    assert RpcValue("0x").as_bytes() == Bytes(b"")


def test_builder_keeps_first_position_on_overwrite_and_skips_none() -> None:
    obj = (
        RpcObject.Builder()
        .put("a", RpcValue(1))
        .put("b", RpcValue(2))
        .put("skip", None)
        .put("a", RpcValue(3))
        .build()
    )
    assert obj.keys() == ["a", "b"]
    assert obj.get_item("a") == RpcValue(3)
    assert "skip" not in obj


def test_from_json_null_handling() -> None:
    assert from_json(None) is None
    obj = from_json({"a": None, "b": [1, None]})
    assert obj.keys() == ["b"]
    array = obj.get_item("b").as_array()
    assert len(array) == 2
    assert array[1] is None


def test_from_json_numbers() -> None:
    assert from_json(100) == RpcValue("0x64")
    assert from_json(2.0) == RpcValue("0x2")
    with pytest.raises(TypeMismatchError):
        from_json(1.5)


def test_to_json_renders_nested_tree() -> None:
    tree = (
        RpcObject.Builder()
        .put("height", RpcValue(10))
        .put("list", RpcArray.Builder().add(RpcValue("x")).add(None).build())
        .build()
    )
    assert to_json(tree) == {"height": "0xa", "list": ["x", None]}


def test_address_parse_and_binary_form() -> None:
    address = Address.parse("cx" + "01" * 20)
    assert address.prefix is AddressPrefix.CONTRACT
    assert address.is_contract
    assert str(address) == "cx" + "01" * 20
    assert Address.from_bytes(address.to_bytes()) == address


@pytest.mark.parametrize(
    "text",
    ["hx1234", "zx" + "00" * 20, "hx" + "zz" * 20, "hx" + "00" * 21],
)
def test_address_parse_rejects_bad_input(text: str) -> None:
    with pytest.raises(InvalidArgumentError):
        Address.parse(text)


def test_bytes_hex_validation() -> None:
    assert Bytes.from_hex("0x00ff").data == b"\x00\xff"
    assert str(Bytes.from_int(0)) == "0x00"
    with pytest.raises(InvalidArgumentError):
        Bytes.from_hex("0xabc")
