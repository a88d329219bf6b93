"""Key material: wallets, signatures and encrypted keystores."""

from icxclient.wallet.keys import (
    address_from_public_key,
    is_contract_address,
    recover_public_key,
    sha3_256,
)
from icxclient.wallet.keystore import KeystoreFile, load, load_keystore, store, store_keystore
from icxclient.wallet.wallet import KeyWallet, Wallet

__all__ = [
    "KeyWallet",
    "KeystoreFile",
    "Wallet",
    "address_from_public_key",
    "is_contract_address",
    "load",
    "load_keystore",
    "recover_public_key",
    "sha3_256",
    "store",
    "store_keystore",
]
