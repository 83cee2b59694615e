"""
Environment variable loading and validation for the audit service.

- SOLANA_NETWORK: devnet | mainnet (default: mainnet)
- SOLANA_RPC_URL: RPC endpoint (read from .env)
- HELIUS_API_KEY: Helius API key (fallback for RPC URL when SOLANA_RPC_URL unset)
- SOLANA_COMMITMENT: processed | confirmed | finalized (default: confirmed)
- AUDIT_SIGNATURES_LIMIT: lookback window for recent signatures, 1-1000 (default: 1000)
- AUDIT_CONCURRENCY: worker threads for batch audits (default: 8)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_solaudit/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")
DEFAULT_COMMITMENT = "confirmed"
DEFAULT_SIGNATURES_LIMIT = 1000
MAX_SIGNATURES_LIMIT = 1000
DEFAULT_CONCURRENCY = 8


def load_audit_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """Return SOLANA_NETWORK from env: devnet | mainnet. Default: mainnet."""
    load_audit_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw == "devnet":
        return "devnet"
    return "mainnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY (network-specific) > devnet/mainnet default.
    """
    load_audit_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    network = get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        if network == "devnet":
            return HELIUS_DEVNET_URL_TEMPLATE.format(key=key)
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return DEVNET_RPC_URL if network == "devnet" else MAINNET_RPC_URL


def get_commitment() -> str:
    """Return SOLANA_COMMITMENT if it is a known level, else the default (confirmed)."""
    load_audit_env()
    raw = (os.getenv("SOLANA_COMMITMENT") or "").strip().lower()
    return raw if raw in COMMITMENT_LEVELS else DEFAULT_COMMITMENT


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_signatures_limit() -> int:
    """Return AUDIT_SIGNATURES_LIMIT clamped to the RPC range 1-1000."""
    load_audit_env()
    limit = _int_env("AUDIT_SIGNATURES_LIMIT", DEFAULT_SIGNATURES_LIMIT)
    return max(1, min(MAX_SIGNATURES_LIMIT, limit))


def get_concurrency() -> int:
    """Return AUDIT_CONCURRENCY (minimum 1)."""
    load_audit_env()
    return max(1, _int_env("AUDIT_CONCURRENCY", DEFAULT_CONCURRENCY))


def mask_rpc_url(rpc: str) -> str:
    """Mask API key in URL if present."""
    if "api-key=" in rpc:
        return rpc.split("api-key=")[0] + "api-key=***"
    return rpc
