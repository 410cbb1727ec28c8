"""
Environment access for the sweeper.

``.env`` is loaded once on first use.  Variables read by this project:

  RPC_URL, WALLET_PRIVATE_KEY          wallet session (chain.wallet)
  ZERO_X_API_KEY, ZERO_X_BASE_URL      quote client (quotes.zeroex_client)
  ZERO_X_FEE_RECIPIENT, ZERO_X_FEE_BPS optional integrator fee
  CHAIN_ID, SWEEP_SLIPPAGE_BPS, SWEEP_REQUEST_DELAY, SWEEP_SUBMISSION_MODE,
  SWEEP_AMOUNT_MARGIN_BPS, SWEEP_RECEIPT_TIMEOUT
                                       sweep settings (sweeper.engine)

Numeric getters exit with a readable message instead of a bare ValueError.
"""

import importlib
import os

_ENV_LOADED = False


def _load_env() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    try:
        dotenv = importlib.import_module("dotenv")
    except Exception as exc:  # pragma: no cover - defensive
        raise SystemExit("python-dotenv is required (pip install -e .)") from exc
    dotenv.load_dotenv()
    _ENV_LOADED = True


def get_env(
    name: str, default: str | None = None, required: bool = False
) -> str | None:
    _load_env()
    value = os.environ.get(name, default)
    if required and (value is None or value == ""):
        raise SystemExit(f"{name} env var is required")
    return value


def get_env_int(name: str, default: int) -> int:
    raw = get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise SystemExit(f"{name} must be an integer, got {raw!r}") from exc


def get_env_float(name: str, default: float) -> float:
    raw = get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise SystemExit(f"{name} must be a number, got {raw!r}") from exc
