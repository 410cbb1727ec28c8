"""
Permit2 signature handling for 0x permit2 quotes.

0x returns the EIP-712 document to sign; the signature is then appended to
the swap calldata as ``calldata || uint256(len(sig)) || sig``.
"""

from __future__ import annotations

from typing import Any, Dict

from eth_abi import encode as abi_encode
from eth_utils import decode_hex, encode_hex

DOMAIN_TYPE = "EIP712Domain"


def strip_domain(types: Dict[str, Any]) -> Dict[str, Any]:
    """Drop the domain type declaration; the struct comes from ``primaryType``."""
    return {name: fields for name, fields in types.items() if name != DOMAIN_TYPE}


async def sign_permit2(eip712: Dict[str, Any], wallet) -> str:
    """Ask the wallet for an EIP-712 signature over the 0x permit payload."""
    return await wallet.sign_typed_data(
        domain=eip712["domain"],
        types=strip_domain(eip712["types"]),
        primary_type=eip712["primaryType"],
        message=eip712["message"],
    )


def append_signature(calldata: str, signature: str) -> str:
    sig = decode_hex(signature)
    length = abi_encode(["uint256"], [len(sig)])
    return encode_hex(decode_hex(calldata) + length + sig)
