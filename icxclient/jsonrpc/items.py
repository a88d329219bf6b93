"""
RPC value tree: the parser-independent form of every JSON-RPC payload.

Every payload is exactly one of RpcValue, RpcObject or RpcArray. Scalars are
kept in their wire text form (integers and byte strings as ``0x`` hex,
booleans as ``0x1``/``0x0``); the ``as_*`` accessors narrow a node and raise
TypeMismatchError when it has the wrong variant or scalar shape.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, Union

from icxclient.data.primitives import Address, Base64, Bytes
from icxclient.utils.exceptions import InvalidArgumentError, TypeMismatchError

_DECIMAL = re.compile(r"-?[0-9]+")
_HEX = re.compile(r"[0-9a-fA-F]+")

ScalarLike = Union[str, bool, int, bytes, Bytes, Address, Base64]


def int_to_hex(value: int) -> str:
    """Lowercase hex with no leading zeros; ``0x0`` for zero, ``-0x..`` for negatives."""
    if value < 0:
        return f"-0x{-value:x}"
    return f"0x{value:x}"


def hex_to_int(text: str) -> int:
    negative = text.startswith("-")
    body = text[1:] if negative else text
    if body.startswith(("0x", "0X")):
        digits = body[2:]
        if not _HEX.fullmatch(digits):
            raise ValueError(f"invalid hex integer: {text!r}")
        value = int(digits, 16)
    elif _DECIMAL.fullmatch(body):
        value = int(body)
    else:
        raise ValueError(f"invalid integer: {text!r}")
    return -value if negative else value


class RpcItem:
    """Base of the closed RpcValue / RpcObject / RpcArray set."""

    kind = "item"

    def as_object(self) -> "RpcObject":
        raise TypeMismatchError("object", self.kind)

    def as_array(self) -> "RpcArray":
        raise TypeMismatchError("array", self.kind)

    def as_value(self) -> "RpcValue":
        raise TypeMismatchError("value", self.kind)

    def as_string(self) -> str:
        return self.as_value().as_string()

    def as_integer(self) -> int:
        return self.as_value().as_integer()

    def as_boolean(self) -> bool:
        return self.as_value().as_boolean()

    def as_bytes(self) -> Bytes:
        return self.as_value().as_bytes()

    def as_address(self) -> Address:
        return self.as_value().as_address()

    def as_base64(self) -> Base64:
        return self.as_value().as_base64()


class RpcValue(RpcItem):
    kind = "value"
    __slots__ = ("_value",)

    def __init__(self, value: ScalarLike):
        if isinstance(value, bool):
            text = "0x1" if value else "0x0"
        elif isinstance(value, int):
            text = int_to_hex(value)
        elif isinstance(value, (bytes, bytearray)):
            text = f"0x{bytes(value).hex()}"
        elif isinstance(value, (Bytes, Address, Base64)):
            text = str(value)
        elif isinstance(value, str):
            text = value
        else:
            raise InvalidArgumentError(f"Unsupported RpcValue type: {type(value).__name__}")
        object.__setattr__(self, "_value", text)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("RpcValue is immutable")

    @property
    def value(self) -> str:
        return self._value

    def as_value(self) -> "RpcValue":
        return self

    def as_string(self) -> str:
        return self._value

    def as_integer(self) -> int:
        try:
            return hex_to_int(self._value)
        except ValueError:
            raise TypeMismatchError("integer", repr(self._value)) from None

    def as_boolean(self) -> bool:
        if self._value == "0x1":
            return True
        if self._value == "0x0":
            return False
        raise TypeMismatchError("boolean", repr(self._value))

    def as_bytes(self) -> Bytes:
        # Legacy block fields carry hashes without the 0x prefix.
        if not self._value:
            raise TypeMismatchError("hex bytes", repr(self._value))
        try:
            return Bytes.from_hex(self._value)
        except InvalidArgumentError:
            raise TypeMismatchError("hex bytes", repr(self._value)) from None

    def as_address(self) -> Address:
        try:
            return Address.parse(self._value)
        except InvalidArgumentError:
            raise TypeMismatchError("address", repr(self._value)) from None

    def as_base64(self) -> Base64:
        try:
            return Base64.decode_text(self._value)
        except InvalidArgumentError:
            raise TypeMismatchError("base64", repr(self._value)) from None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RpcValue) and other._value == self._value

    def __hash__(self) -> int:
        return hash(("value", self._value))

    def __repr__(self) -> str:
        return f"RpcValue({self._value!r})"


class RpcObject(RpcItem):
    """Ordered string-keyed mapping of RpcItems."""

    kind = "object"
    __slots__ = ("_items",)

    def __init__(self, items: dict[str, RpcItem] | None = None):
        object.__setattr__(self, "_items", dict(items or {}))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("RpcObject is immutable")

    class Builder:
        def __init__(self) -> None:
            self._items: dict[str, RpcItem] = {}

        def put(self, key: str, item: RpcItem | None) -> "RpcObject.Builder":
            # Re-putting a key keeps its original position.
            if item is not None:
                self._items[key] = item
            return self

        def build(self) -> "RpcObject":
            return RpcObject(self._items)

    def as_object(self) -> "RpcObject":
        return self

    def get_item(self, key: str) -> RpcItem | None:
        return self._items.get(key)

    def keys(self) -> list[str]:
        return list(self._items)

    def items(self) -> list[tuple[str, RpcItem]]:
        return list(self._items.items())

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RpcObject) and list(other._items.items()) == list(self._items.items())

    def __hash__(self) -> int:
        return hash(("object", tuple(self._items.items())))

    def __repr__(self) -> str:
        return f"RpcObject({self._items!r})"


class RpcArray(RpcItem):
    """Ordered sequence of RpcItems; JSON null entries are kept as None."""

    kind = "array"
    __slots__ = ("_items",)

    def __init__(self, items: list[RpcItem | None] | tuple[RpcItem | None, ...] = ()):
        object.__setattr__(self, "_items", tuple(items))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("RpcArray is immutable")

    class Builder:
        def __init__(self) -> None:
            self._items: list[RpcItem | None] = []

        def add(self, item: RpcItem | None) -> "RpcArray.Builder":
            self._items.append(item)
            return self

        def build(self) -> "RpcArray":
            return RpcArray(self._items)

    def as_array(self) -> "RpcArray":
        return self

    def __iter__(self) -> Iterator[RpcItem | None]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> RpcItem | None:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RpcArray) and other._items == self._items

    def __hash__(self) -> int:
        return hash(("array", self._items))

    def __repr__(self) -> str:
        return f"RpcArray({list(self._items)!r})"


def from_json(data: Any) -> RpcItem | None:
    """Build an RpcItem tree from parsed JSON (dict/list/str/bool/int/None)."""
    if data is None:
        return None
    if isinstance(data, dict):
        builder = RpcObject.Builder()
        for key, value in data.items():
            builder.put(str(key), from_json(value))
        return builder.build()
    if isinstance(data, (list, tuple)):
        return RpcArray([from_json(value) for value in data])
    if isinstance(data, (str, bool, int)):
        return RpcValue(data)
    if isinstance(data, float) and data.is_integer():
        return RpcValue(int(data))
    raise TypeMismatchError("JSON scalar", type(data).__name__)


def to_json(item: RpcItem | None) -> Any:
    """Render an RpcItem tree back to plain JSON-compatible Python objects."""
    if item is None:
        return None
    if isinstance(item, RpcValue):
        return item.value
    if isinstance(item, RpcObject):
        return {key: to_json(value) for key, value in item.items()}
    if isinstance(item, RpcArray):
        return [to_json(value) for value in item]
    raise TypeMismatchError("RpcItem", type(item).__name__)
