from .permit2 import append_signature, sign_permit2, strip_domain
from .zeroex_client import (
    NoLiquidityError,
    Quote,
    QuoteRequestError,
    SubmissionMode,
    SwapTransaction,
    ZeroExClient,
)

__all__ = [
    "ZeroExClient",
    "Quote",
    "SwapTransaction",
    "SubmissionMode",
    "QuoteRequestError",
    "NoLiquidityError",
    "sign_permit2",
    "append_signature",
    "strip_domain",
]
