from .allowance import AllowanceError, AllowanceManager
from .erc20 import (
    ERC20_ABI,
    MAX_UINT256,
    NATIVE_PLACEHOLDER,
    ZERO_ADDRESS,
    to_base_units,
)
from .submitter import (
    AllowanceHolderSubmitter,
    Permit2Submitter,
    SwapSubmitter,
    submitter_for,
)
from .wallet import TxReceipt, WalletSession, Web3WalletSession

__all__ = [
    "WalletSession",
    "Web3WalletSession",
    "TxReceipt",
    "AllowanceManager",
    "AllowanceError",
    "SwapSubmitter",
    "AllowanceHolderSubmitter",
    "Permit2Submitter",
    "submitter_for",
    "ERC20_ABI",
    "MAX_UINT256",
    "ZERO_ADDRESS",
    "NATIVE_PLACEHOLDER",
    "to_base_units",
]
