"""Scalar value types carried in RPC payloads: addresses, byte strings, base64 blobs."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum

from icxclient.utils.exceptions import InvalidArgumentError

_HEX_BODY = re.compile(r"[0-9a-fA-F]*")


def _unhex(value: str, text: str, field: str | None = None) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid hex string: {text!r}", field=field) from exc


class AddressPrefix(str, Enum):
    """Account type prefix. The byte value is used in the 21-byte binary form."""
    EOA = "hx"
    CONTRACT = "cx"

    @property
    def type_byte(self) -> int:
        return 0 if self is AddressPrefix.EOA else 1

    @classmethod
    def from_type_byte(cls, value: int) -> "AddressPrefix":
        if value == 0:
            return cls.EOA
        if value == 1:
            return cls.CONTRACT
        raise InvalidArgumentError(f"Unknown address type byte: {value}", field="address")


@dataclass(frozen=True)
class Address:
    """21-byte account identifier: type prefix + 20-byte body."""
    prefix: AddressPrefix
    body: bytes

    BODY_SIZE = 20

    def __post_init__(self) -> None:
        if len(self.body) != self.BODY_SIZE:
            raise InvalidArgumentError(
                f"Address body must be {self.BODY_SIZE} bytes, got {len(self.body)}",
                field="address",
            )

    @classmethod
    def parse(cls, text: str) -> "Address":
        """Parse the textual form, e.g. ``hx`` + 40 hex chars."""
        if not isinstance(text, str) or len(text) != 42:
            raise InvalidArgumentError(f"Invalid address: {text!r}", field="address")
        try:
            prefix = AddressPrefix(text[:2])
        except ValueError:
            raise InvalidArgumentError(f"Invalid address prefix: {text!r}", field="address") from None
        hex_body = text[2:]
        if not _HEX_BODY.fullmatch(hex_body):
            raise InvalidArgumentError(f"Invalid address body: {text!r}", field="address")
        return cls(prefix, _unhex(hex_body, text, "address"))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Address":
        """Build from the 21-byte binary form (type byte + body)."""
        if len(data) != cls.BODY_SIZE + 1:
            raise InvalidArgumentError(f"Binary address must be 21 bytes, got {len(data)}", field="address")
        return cls(AddressPrefix.from_type_byte(data[0]), bytes(data[1:]))

    def to_bytes(self) -> bytes:
        return bytes([self.prefix.type_byte]) + self.body

    @property
    def is_contract(self) -> bool:
        return self.prefix is AddressPrefix.CONTRACT

    def __str__(self) -> str:
        return f"{self.prefix.value}{self.body.hex()}"


@dataclass(frozen=True)
class Bytes:
    """Immutable big-endian byte string with a ``0x`` lowercase hex text form."""
    data: bytes

    @classmethod
    def from_hex(cls, text: str) -> "Bytes":
        value = text[2:] if text.startswith(("0x", "0X")) else text
        if len(value) % 2 != 0 or not _HEX_BODY.fullmatch(value):
            raise InvalidArgumentError(f"Invalid hex string: {text!r}")
        return cls(_unhex(value, text))

    @classmethod
    def from_int(cls, value: int, length: int | None = None) -> "Bytes":
        if value < 0:
            raise InvalidArgumentError("Bytes cannot hold a negative integer")
        size = length if length is not None else max(1, (value.bit_length() + 7) // 8)
        return cls(value.to_bytes(size, "big"))

    def to_int(self) -> int:
        return int.from_bytes(self.data, "big")

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return f"0x{self.data.hex()}"


@dataclass(frozen=True)
class Base64:
    """Opaque binary blob transported as base64 text."""
    data: bytes

    @classmethod
    def decode_text(cls, text: str) -> "Base64":
        try:
            return cls(base64.b64decode(text, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise InvalidArgumentError(f"Invalid base64 text: {exc}") from exc

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return base64.b64encode(self.data).decode("ascii")
