"""
Pytest fixtures for audit tests. An in-memory collector stands in for Solana RPC.
"""

from __future__ import annotations

from typing import Any

import pytest

from backend_solaudit.evidence.models import AccountSnapshot, SignatureInfo, TransactionRecord

PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TX_SIGNATURE = "1" * 64
NOW_TS = 1_700_000_000


class FakeCollector:
    """
    EvidenceCollector returning canned snapshots. Set `fail` to an exception to make
    every call raise it; `calls` records the method names invoked.
    """

    def __init__(
        self,
        account: AccountSnapshot | None = None,
        block_time: int | None = NOW_TS,
        balance: int = 0,
        signature_count: int = 0,
        transaction: TransactionRecord | None = None,
        fail: Exception | None = None,
    ) -> None:
        self.account = account
        self.block_time = block_time
        self.balance = balance
        self.signature_count = signature_count
        self.transaction = transaction
        self.fail = fail
        self.calls: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail is not None:
            raise self.fail

    def fetch_account(self, identifier: str) -> AccountSnapshot | None:
        self._record("fetch_account")
        return self.account

    def fetch_block_time(self) -> int | None:
        self._record("fetch_block_time")
        return self.block_time

    def fetch_balance(self, identifier: str) -> int:
        self._record("fetch_balance")
        return self.balance

    def fetch_recent_signatures(self, identifier: str, limit: int = 1000) -> list[SignatureInfo]:
        self._record("fetch_recent_signatures")
        count = min(self.signature_count, limit)
        return [SignatureInfo(signature=f"sig{i}", slot=i, err=None, block_time=NOW_TS) for i in range(count)]

    def fetch_transaction(self, signature: str) -> TransactionRecord | None:
        self._record("fetch_transaction")
        return self.transaction


@pytest.fixture
def fake_collector_cls() -> type[FakeCollector]:
    return FakeCollector


@pytest.fixture
def healthy_program_collector() -> FakeCollector:
    """Program that fires no rule: large, executable, old, quiet, modest balance."""
    account = AccountSnapshot(
        data_length=4096,
        executable=True,
        lamports=1_141_440,
        rent_epoch=NOW_TS - 400 * 86400,
    )
    return FakeCollector(account=account, balance=account.lamports, signature_count=50)


@pytest.fixture
def env_clean(monkeypatch: pytest.MonkeyPatch) -> Any:
    """Remove audit-related env vars so config defaults apply."""
    for name in (
        "SOLANA_RPC_URL",
        "SOLANA_NETWORK",
        "SOLANA_CLUSTER",
        "HELIUS_API_KEY",
        "SOLANA_COMMITMENT",
        "AUDIT_SIGNATURES_LIMIT",
        "AUDIT_CONCURRENCY",
        "API_HOST",
        "API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
