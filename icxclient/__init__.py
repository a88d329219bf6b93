"""
icxclient - a JSON-RPC client for ICON ledger nodes.
"""

__version__ = "0.1.0"

from icxclient.data.primitives import Address, Base64, Bytes
from icxclient.jsonrpc.transport import HttpTransport
from icxclient.service import IconService
from icxclient.transaction import Call, SignedTransaction, Transaction, TransactionBuilder
from icxclient.wallet.wallet import KeyWallet, Wallet

__all__ = [
    "Address",
    "Base64",
    "Bytes",
    "Call",
    "HttpTransport",
    "IconService",
    "KeyWallet",
    "SignedTransaction",
    "Transaction",
    "TransactionBuilder",
    "Wallet",
]
