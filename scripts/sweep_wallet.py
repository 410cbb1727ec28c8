"""
Sweep small ERC-20 balances of the configured wallet into one token.

Example::

    python scripts/sweep_wallet.py --target USDC \\
        --token 0x4200000000000000000000000000000000000006:0.0012 \\
        --token 0x940181a94A35A4569E4529A3CDfB74e38FD98631:3.5

Reads RPC_URL, WALLET_PRIVATE_KEY and ZERO_X_API_KEY from the environment
(or .env).  Tokens the aggregator cannot route are remembered in the
denylist file and skipped on later runs.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

# Ensure src/ is on sys.path
ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from chain.wallet import Web3WalletSession  # noqa: E402
from inventory.denylist import TokenDenylist  # noqa: E402
from inventory.holdings import HoldingsCache  # noqa: E402
from inventory.token_store import JsonFileTokenStore  # noqa: E402
from quotes.zeroex_client import SubmissionMode, ZeroExClient  # noqa: E402
from sweeper.engine import (  # noqa: E402
    TARGET_TOKENS,
    SweepConfig,
    SweepOrchestrator,
    resolve_target_token,
)
from sweeper.report import format_sweep_report  # noqa: E402
from sweeper.types import BatchState, BatchStatus, TokenStatus  # noqa: E402

logger = logging.getLogger(__name__)

DEFAULT_STORE = ROOT / "data" / "sweep_store.json"


def _parse_token(value: str) -> tuple[str, str]:
    address, sep, amount = value.partition(":")
    if not sep or not address or not amount:
        raise argparse.ArgumentTypeError(f"expected ADDRESS:AMOUNT, got {value!r}")
    return address.strip(), amount.strip()


def _print_progress(batch: BatchStatus) -> None:
    if not batch.processed_tokens:
        return
    last = batch.processed_tokens[-1]
    if last.status == TokenStatus.CONFIRMING:
        logger.info("Processing %s ...", last.symbol or last.address)


async def run(args: argparse.Namespace) -> BatchStatus:
    config = SweepConfig.from_env()
    if args.mode:
        config = replace(config, submission_mode=SubmissionMode(args.mode))
    if args.delay is not None:
        config = replace(config, request_delay_seconds=args.delay)

    store = JsonFileTokenStore(args.store)
    quotes = ZeroExClient.from_env(
        chain_id=config.chain_id,
        mode=config.submission_mode,
        slippage_bps=config.slippage_bps,
    )
    wallet = Web3WalletSession.from_env(
        chain_id=config.chain_id, receipt_timeout=config.receipt_timeout_seconds
    )
    orchestrator = SweepOrchestrator(
        quote_client=quotes,
        wallet=wallet,
        denylist=TokenDenylist(store),
        holdings=HoldingsCache(store),
        config=config,
        on_status=_print_progress,
    )
    tokens = [address for address, _ in args.token]
    amounts = [amount for _, amount in args.token]
    return await orchestrator.sweep(tokens, resolve_target_token(args.target), amounts)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Sweep ERC-20 dust into a single token via 0x",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--target",
        required=True,
        help=(
            f"Token to receive: one of {', '.join(TARGET_TOKENS)} "
            "or a token address"
        ),
    )
    parser.add_argument(
        "--token",
        action="append",
        type=_parse_token,
        required=True,
        metavar="ADDRESS:AMOUNT",
        help="Token to sell and the amount in display units (repeatable)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in SubmissionMode],
        default=None,
        help=(
            "allowance_holder : approve the 0x AllowanceHolder, send tx as-is\n"
            "permit2          : sign a Permit2 message per swap\n"
            "Default: SWEEP_SUBMISSION_MODE env var or allowance_holder"
        ),
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to pause between tokens (default 1.0)",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=DEFAULT_STORE,
        help=f"JSON file holding the denylist and holdings cache ({DEFAULT_STORE})",
    )
    args = parser.parse_args()

    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"sweep_{datetime.now():%Y%m%d}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s |%(levelname)s |%(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(),
        ],
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.WARNING)

    batch = asyncio.run(run(args))
    print(format_sweep_report(batch))
    return 1 if batch.status == BatchState.ERROR else 0


if __name__ == "__main__":
    sys.exit(main())
