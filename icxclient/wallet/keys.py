"""secp256k1 key handling, address derivation and recoverable signatures."""

from __future__ import annotations

import hashlib
import secrets

from Crypto.Hash import keccak
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string

from icxclient.data.primitives import Address, AddressPrefix, Bytes
from icxclient.utils.exceptions import InvalidArgumentError

SECP256K1_N = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141",
    16,
)
PRIVATE_KEY_SIZE = 32
PUBLIC_KEY_SIZE = 64
SIGNATURE_SIZE = 65


def sha3_256(data: bytes) -> bytes:
    return hashlib.sha3_256(data).digest()


def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def normalize_private_key(value: bytes | Bytes | str) -> bytes:
    """Accept raw bytes, Bytes or hex text; return the 32-byte scalar."""
    if isinstance(value, str):
        value = Bytes.from_hex(value.strip())
    raw = bytes(value)
    if len(raw) != PRIVATE_KEY_SIZE:
        raise InvalidArgumentError("Invalid private key length, expected 32 bytes", field="private_key")
    key_int = int.from_bytes(raw, "big")
    if not (0 < key_int < SECP256K1_N):
        raise InvalidArgumentError("Invalid private key range for secp256k1", field="private_key")
    return raw


def generate_private_key() -> bytes:
    while True:
        raw = secrets.token_bytes(PRIVATE_KEY_SIZE)
        key_int = int.from_bytes(raw, "big")
        if 0 < key_int < SECP256K1_N:
            return raw


def public_key_from_private_key(private_key: bytes) -> bytes:
    """64-byte uncompressed public point (x || y) without the 0x04 format byte."""
    key_int = int.from_bytes(normalize_private_key(private_key), "big")
    public_key = ec.derive_private_key(key_int, ec.SECP256K1()).public_key()
    uncompressed = public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
    return uncompressed[1:]


def address_from_public_key(public_key: bytes) -> Address:
    """EOA address: last 20 bytes of SHA3-256 over the 64-byte public key."""
    raw = bytes(public_key)
    if len(raw) == PUBLIC_KEY_SIZE + 1 and raw[0] == 0x04:
        raw = raw[1:]
    if len(raw) != PUBLIC_KEY_SIZE:
        raise InvalidArgumentError("Invalid public key length, expected 64 bytes", field="public_key")
    return Address(AddressPrefix.EOA, sha3_256(raw)[-20:])


def is_contract_address(address: Address) -> bool:
    return address.prefix is AddressPrefix.CONTRACT


def sign_recoverable(private_key: bytes, digest: bytes) -> bytes:
    """
    Deterministic (RFC 6979) ECDSA over a 32-byte digest.

    Returns ``r(32) || s(32) || v(1)`` with low-s normalisation and the
    recovery id ``v`` in {0, 1}.
    """
    if len(digest) != 32:
        raise InvalidArgumentError("Digest must be 32 bytes", field="digest")
    signing_key = SigningKey.from_string(normalize_private_key(private_key), curve=SECP256k1)
    raw_signature = signing_key.sign_digest_deterministic(digest, hashfunc=hashlib.sha256, sigencode=sigencode_string)
    r, s = sigdecode_string(raw_signature, SECP256K1_N)
    if s > SECP256K1_N // 2:
        s = SECP256K1_N - s
    compact = sigencode_string(r, s, SECP256K1_N)

    expected = signing_key.get_verifying_key().to_string()
    for recovery_id, candidate in enumerate(_recover_candidates(compact, digest)):
        if candidate.to_string() == expected:
            return compact + bytes([recovery_id])
    raise InvalidArgumentError("Could not determine recovery id for signature", field="digest")


def _recover_candidates(compact: bytes, digest: bytes) -> list[VerifyingKey]:
    return VerifyingKey.from_public_key_recovery_with_digest(
        compact,
        digest,
        SECP256k1,
        hashfunc=hashlib.sha256,
        sigdecode=sigdecode_string,
    )


def recover_public_key(digest: bytes, signature: bytes) -> bytes:
    """Recover the 64-byte public key from a 65-byte recoverable signature."""
    if len(signature) != SIGNATURE_SIZE:
        raise InvalidArgumentError("Signature must be 65 bytes", field="signature")
    recovery_id = signature[64]
    if recovery_id not in (0, 1):
        raise InvalidArgumentError(f"Invalid recovery id: {recovery_id}", field="signature")
    return _recover_candidates(signature[:64], digest)[recovery_id].to_string()
