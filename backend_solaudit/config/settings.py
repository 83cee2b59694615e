"""
Application settings.

Typed, immutable snapshot of the environment (RPC URL, commitment, signature
lookback, batch concurrency, API host/port) for the collector, CLI and API server.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from backend_solaudit.config.env import (
    get_commitment,
    get_concurrency,
    get_signatures_limit,
    get_solana_network,
    get_solana_rpc_url,
    load_audit_env,
)


@dataclass(frozen=True)
class Settings:
    solana_network: str
    solana_rpc_url: str
    commitment: str
    signatures_limit: int
    concurrency: int
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Build Settings from the current environment (.env loaded first)."""
    load_audit_env()
    port_raw = (os.getenv("API_PORT") or "8000").strip() or "8000"
    try:
        api_port = int(port_raw)
    except ValueError:
        api_port = 8000
    return Settings(
        solana_network=get_solana_network(),
        solana_rpc_url=get_solana_rpc_url(),
        commitment=get_commitment(),
        signatures_limit=get_signatures_limit(),
        concurrency=get_concurrency(),
        api_host=(os.getenv("API_HOST") or "0.0.0.0").strip(),
        api_port=api_port,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )
