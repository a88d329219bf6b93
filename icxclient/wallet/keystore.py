"""Version 3 password-encrypted keystore files.

Layout::

    {
      "version": 3, "id": "<uuid4>", "address": "hx...",
      "crypto": {
        "ciphertext": "<hex>", "cipherparams": {"iv": "<hex>"},
        "cipher": "aes-128-ctr", "kdf": "scrypt",
        "kdfparams": {"dklen": 32, "salt": "<hex>", "n": 16384, "r": 8, "p": 1},
        "mac": "<hex>"
      },
      "coinType": "icx"
    }

The derived key is split in two halves: ``key[0:16]`` encrypts the private
key and ``key[16:32]`` authenticates the ciphertext.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from Crypto.Cipher import AES
from Crypto.Protocol.KDF import scrypt
from Crypto.Random import get_random_bytes
from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from icxclient.utils.exceptions import IntegrityError, InvalidArgumentError, KeystoreError
from icxclient.utils.helpers import ensure_dir, strip_hex_prefix
from icxclient.wallet.keys import address_from_public_key, keccak256
from icxclient.wallet.wallet import KeyWallet

KEYSTORE_VERSION = 3
CIPHER = "aes-128-ctr"
DEFAULT_N = 1 << 14
DEFAULT_R = 8
DEFAULT_P = 1
DKLEN = 32
SALT_SIZE = 32
IV_SIZE = 16


class CipherParams(BaseModel):
    iv: str


class KdfParams(BaseModel):
    """scrypt uses n/r/p; pbkdf2 uses c/prf."""
    dklen: int = DKLEN
    salt: str
    n: int | None = None
    r: int | None = None
    p: int | None = None
    c: int | None = None
    prf: str | None = None


class CryptoSection(BaseModel):
    ciphertext: str
    cipherparams: CipherParams
    cipher: str = CIPHER
    kdf: str = "scrypt"
    kdfparams: KdfParams
    mac: str


class KeystoreFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: int = KEYSTORE_VERSION
    id: str
    address: str
    # Some older tools write "Crypto".
    crypto: CryptoSection = Field(validation_alias=AliasChoices("crypto", "Crypto"))
    coin_type: str = Field(default="icx", alias="coinType")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def _scrypt(password: str, salt: bytes, n: int, r: int, p: int, dklen: int) -> bytes:
    return scrypt(password.encode("utf-8"), salt, key_len=dklen, N=n, r=r, p=p)


def _derive_key(password: str, kdf: str, params: KdfParams) -> bytes:
    salt = _unhex(params.salt, "kdfparams.salt")
    if params.dklen < DKLEN:
        raise KeystoreError(f"Derived key too short: {params.dklen}", field="kdfparams.dklen")
    if kdf == "scrypt":
        if params.n is None or params.r is None or params.p is None:
            raise KeystoreError("scrypt requires n, r and p", field="kdfparams")
        try:
            return _scrypt(password, salt, params.n, params.r, params.p, params.dklen)
        except ValueError as exc:
            raise KeystoreError(f"Invalid scrypt parameters: {exc}", field="kdfparams") from exc
    if kdf == "pbkdf2":
        if params.prf != "hmac-sha256" or params.c is None:
            raise KeystoreError(f"Unsupported pbkdf2 parameters: prf={params.prf}", field="kdfparams")
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, params.c, dklen=params.dklen)
    raise KeystoreError(f"Unsupported kdf: {kdf}", field="kdf")


def _unhex(value: str, field: str) -> bytes:
    try:
        return bytes.fromhex(strip_hex_prefix(value))
    except ValueError as exc:
        raise KeystoreError(f"Invalid hex in {field}", field=field) from exc


def _aes_ctr(key: bytes, iv: bytes, data: bytes) -> bytes:
    cipher = AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv)
    return cipher.encrypt(data)


def store(
    wallet: KeyWallet,
    password: str,
    n: int = DEFAULT_N,
    r: int = DEFAULT_R,
    p: int = DEFAULT_P,
) -> KeystoreFile:
    """Encrypt ``wallet``'s private key into a keystore record."""
    if n < 2 or n & (n - 1):
        raise InvalidArgumentError(f"scrypt n must be a power of two, got {n}", field="n")
    if r < 1:
        raise InvalidArgumentError(f"scrypt r must be positive, got {r}", field="r")
    if p < 1:
        raise InvalidArgumentError(f"scrypt p must be positive, got {p}", field="p")
    salt = get_random_bytes(SALT_SIZE)
    iv = get_random_bytes(IV_SIZE)
    derived = _scrypt(password, salt, n, r, p, DKLEN)
    ciphertext = _aes_ctr(derived[:16], iv, bytes(wallet.private_key))
    mac = keccak256(derived[16:32] + ciphertext)
    return KeystoreFile(
        id=str(uuid.uuid4()),
        address=str(wallet.get_address()),
        crypto=CryptoSection(
            ciphertext=ciphertext.hex(),
            cipherparams=CipherParams(iv=iv.hex()),
            kdf="scrypt",
            kdfparams=KdfParams(dklen=DKLEN, salt=salt.hex(), n=n, r=r, p=p),
            mac=mac.hex(),
        ),
    )


def parse_keystore(data: KeystoreFile | dict[str, Any] | str | bytes) -> KeystoreFile:
    if isinstance(data, KeystoreFile):
        return data
    try:
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        return KeystoreFile.model_validate(data)
    except json.JSONDecodeError as exc:
        raise KeystoreError(f"Keystore is not valid JSON: {exc}") from exc
    except ValidationError as exc:
        raise KeystoreError(f"Invalid keystore layout: {exc.error_count()} error(s)") from exc


def load(password: str, data: KeystoreFile | dict[str, Any] | str | bytes) -> KeyWallet:
    """
    Decrypt a keystore record with ``password``.

    Raises:
        IntegrityError: the MAC does not verify (wrong password or corrupted file).
        KeystoreError: the record is unparseable or uses unsupported parameters.
    """
    keystore = parse_keystore(data)
    if keystore.version != KEYSTORE_VERSION:
        raise KeystoreError(f"Unsupported keystore version: {keystore.version}", field="version")
    section = keystore.crypto
    if section.cipher != CIPHER:
        raise KeystoreError(f"Unsupported cipher: {section.cipher}", field="cipher")

    derived = _derive_key(password, section.kdf, section.kdfparams)
    ciphertext = _unhex(section.ciphertext, "ciphertext")
    expected_mac = _unhex(section.mac, "mac")
    if not hmac.compare_digest(keccak256(derived[16:32] + ciphertext), expected_mac):
        raise IntegrityError()

    iv = _unhex(section.cipherparams.iv, "cipherparams.iv")
    if len(iv) != IV_SIZE:
        raise KeystoreError(f"Invalid iv length: {len(iv)}", field="cipherparams.iv")
    try:
        wallet = KeyWallet.load(_aes_ctr(derived[:16], iv, ciphertext))
    except InvalidArgumentError as exc:
        raise IntegrityError(f"Decrypted key is not a valid private key: {exc.message}") from exc

    derived_address = str(address_from_public_key(bytes(wallet.public_key)))
    if derived_address != keystore.address:
        logger.warning(
            f"keystore {keystore.id}: stored address {keystore.address} "
            f"does not match derived address {derived_address}"
        )
    return wallet


def keystore_file_name(address: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S.%fZ")
    return f"UTC--{stamp}--{address}"


def store_keystore(
    wallet: KeyWallet,
    password: str,
    directory: Path | None = None,
    n: int | None = None,
    r: int | None = None,
    p: int | None = None,
) -> str:
    """
    Write an encrypted keystore file into ``directory`` and return its file name.

    Unset arguments come from the ``keystore`` section of the client config.
    """
    from icxclient.config.access import get_config

    settings = get_config().keystore
    directory = directory if directory is not None else settings.path
    keystore = store(
        wallet,
        password,
        n=n if n is not None else settings.n,
        r=r if r is not None else settings.r,
        p=p if p is not None else settings.p,
    )
    name = keystore_file_name(keystore.address)
    path = ensure_dir(Path(directory)) / name
    path.write_text(keystore.to_json(), encoding="utf-8")
    try:
        path.chmod(0o600)
    except OSError:
        logger.debug(f"could not restrict permissions on {path}")
    logger.info(f"stored keystore for {keystore.address} at {path}")
    return name


def load_keystore(password: str, path: Path) -> KeyWallet:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise KeystoreError(f"Cannot read keystore file {path}: {exc}") from exc
    return load(password, text)
