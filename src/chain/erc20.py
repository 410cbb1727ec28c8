"""ERC-20 ABI fragments, sentinel addresses and amount conversion."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
# Placeholder used by aggregators and token lists for the chain's native asset
NATIVE_PLACEHOLDER = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
MAX_UINT256 = 2**256 - 1
FULL_BPS = 10_000

ERC20_ABI = [
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


def same_address(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def to_base_units(amount: str, decimals: int, margin_bps: int = FULL_BPS) -> int:
    """
    Convert a display-unit decimal string to integer base units.

    Digits beyond ``decimals`` are truncated, then ``margin_bps`` of the
    result is kept (10_000 keeps everything).  Dust therefore converts to 0.
    """
    if not 0 < margin_bps <= FULL_BPS:
        raise ValueError(f"margin_bps must be in (0, {FULL_BPS}], got {margin_bps}")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid token amount: {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"invalid token amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        raw = int(value.scaleb(int(decimals)).to_integral_value(rounding=ROUND_DOWN))
    return raw * margin_bps // FULL_BPS
