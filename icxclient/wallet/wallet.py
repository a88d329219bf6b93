"""Wallet capability and the key-pair backed implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod

from icxclient.data.primitives import Address, Bytes
from icxclient.utils.exceptions import InvalidArgumentError
from icxclient.wallet.keys import (
    address_from_public_key,
    generate_private_key,
    normalize_private_key,
    public_key_from_private_key,
    sign_recoverable,
)


class Wallet(ABC):
    """Anything that owns an address and can sign a 32-byte digest."""

    @abstractmethod
    def get_address(self) -> Address:
        ...

    @abstractmethod
    def sign(self, digest: bytes) -> bytes:
        """Return a 65-byte recoverable signature ``r || s || v`` over ``digest``."""


class KeyWallet(Wallet):
    """Wallet backed by an in-memory secp256k1 key pair."""

    def __init__(self, private_key: bytes, public_key: bytes):
        self._private_key = private_key
        self._public_key = public_key
        self._address: Address | None = None

    @classmethod
    def create(cls) -> "KeyWallet":
        return cls.load(generate_private_key())

    @classmethod
    def load(cls, private_key: bytes | Bytes | str) -> "KeyWallet":
        """Build a wallet from a 32-byte private key (raw, Bytes or hex text)."""
        raw = normalize_private_key(private_key)
        return cls(raw, public_key_from_private_key(raw))

    @property
    def private_key(self) -> Bytes:
        return Bytes(self._private_key)

    @property
    def public_key(self) -> Bytes:
        return Bytes(self._public_key)

    def get_address(self) -> Address:
        if self._address is None:
            self._address = address_from_public_key(self._public_key)
        return self._address

    def sign(self, digest: bytes) -> bytes:
        raw = bytes(digest) if digest is not None else b""
        if len(raw) != 32:
            raise InvalidArgumentError("hash not found or not 32 bytes", field="digest")
        return sign_recoverable(self._private_key, raw)

    def __repr__(self) -> str:
        return f"KeyWallet(address={self.get_address()})"
