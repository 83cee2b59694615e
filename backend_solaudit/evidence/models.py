"""
Data models for audit evidence.

Raw collector snapshots (AccountSnapshot, SignatureInfo, TransactionRecord)
and the evidence bundles the rule engine consumes (ProgramEvidence,
TransactionEvidence). All are immutable and scoped to a single audit call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from backend_solaudit.core.exceptions import InvalidSubjectType, PartialEvidenceUnavailable

SECONDS_PER_DAY = 86400
# rent_epoch reported for rent-exempt accounts (u64::MAX); carries no age information
RENT_EXEMPT_EPOCH = 2**64 - 1


class AuditSubjectType(str, Enum):
    PROGRAM = "program"
    TRANSACTION = "transaction"

    @classmethod
    def parse(cls, value: Any) -> "AuditSubjectType":
        """Accept an AuditSubjectType or a case-insensitive name; raise InvalidSubjectType otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            raw = value.strip().lower()
            for member in cls:
                if raw == member.value:
                    return member
        raise InvalidSubjectType(value)


@dataclass(frozen=True)
class AccountSnapshot:
    """Subset of getAccountInfo used for auditing a program account."""

    data_length: int
    executable: bool
    lamports: int
    rent_epoch: int | None
    owner: str | None = None


@dataclass(frozen=True)
class SignatureInfo:
    """
    Normalized transaction signature info from getSignaturesForAddress.

    Mirrors Solana RPC response fields.
    """

    signature: str
    slot: int | None
    err: Any  # None if success; dict/object from RPC if failed
    block_time: int | None  # Unix timestamp; None if not available

    @classmethod
    def from_rpc_item(cls, item: Any) -> "SignatureInfo":
        """Build from a getSignaturesForAddress item (solders object or JSON dict)."""
        if isinstance(item, dict):
            slot = item.get("slot")
            return cls(
                signature=str(item.get("signature") or ""),
                slot=int(slot) if slot is not None else None,
                err=item.get("err"),
                block_time=item.get("blockTime", item.get("block_time")),
            )
        slot = getattr(item, "slot", None)
        return cls(
            signature=str(getattr(item, "signature", "") or ""),
            slot=int(slot) if slot is not None else None,
            err=getattr(item, "err", None),
            block_time=getattr(item, "block_time", None),
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Subset of getTransaction used for auditing a transaction."""

    instruction_count: int
    signer_count: int
    pre_balances: tuple[int, ...] = ()
    post_balances: tuple[int, ...] = ()
    err: Any = None
    log_messages: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProgramEvidence:
    """
    Snapshot of one program account at query time.

    age_seconds is None when the clock evidence (block time or a meaningful
    rent epoch) was unavailable; rules depending on it are skipped.
    """

    exists: bool
    data_length: int = 0
    executable: bool = False
    age_seconds: int | None = None
    recent_signature_count: int = 0
    balance_lamports: int = 0

    @classmethod
    def not_found(cls) -> "ProgramEvidence":
        return cls(exists=False)

    def require_age_seconds(self) -> int:
        if self.age_seconds is None:
            raise PartialEvidenceUnavailable("program age")
        return self.age_seconds

    def require_age_days(self) -> float:
        return self.require_age_seconds() / SECONDS_PER_DAY


@dataclass(frozen=True)
class TransactionEvidence:
    """Snapshot of one transaction at query time."""

    found: bool
    instruction_count: int = 0
    signer_count: int = 0
    pre_balances: tuple[int, ...] = field(default_factory=tuple)
    post_balances: tuple[int, ...] = field(default_factory=tuple)
    execution_error: Any = None
    log_messages: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def not_found(cls) -> "TransactionEvidence":
        return cls(found=False)

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionEvidence":
        return cls(
            found=True,
            instruction_count=record.instruction_count,
            signer_count=record.signer_count,
            pre_balances=tuple(record.pre_balances),
            post_balances=tuple(record.post_balances),
            execution_error=record.err,
            log_messages=tuple(record.log_messages),
        )

    def balance_deltas(self) -> list[int]:
        """post[i] - pre[i] for every post-balance index; a missing pre entry counts as 0."""
        deltas: list[int] = []
        for i, post in enumerate(self.post_balances):
            pre = self.pre_balances[i] if i < len(self.pre_balances) else 0
            deltas.append(int(post or 0) - int(pre or 0))
        return deltas


def compute_age_seconds(block_time: int | None, rent_epoch: int | None) -> int | None:
    """
    Best-effort account age: block time of the current slot minus the account's rent epoch.

    Returns None when either input is missing or rent_epoch is the rent-exempt sentinel.
    """
    if block_time is None or rent_epoch is None or rent_epoch == RENT_EXEMPT_EPOCH:
        return None
    return int(block_time) - int(rent_epoch)
