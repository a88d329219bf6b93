"""Typed data carried by RPC requests and responses.

Response models live in ``icxclient.data.models``; this package root only
exposes the scalar types so the RPC value model can import it cheaply.
"""

from icxclient.data.primitives import Address, AddressPrefix, Base64, Bytes

__all__ = ["Address", "AddressPrefix", "Base64", "Bytes"]
