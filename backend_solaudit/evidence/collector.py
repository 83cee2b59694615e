"""
Evidence collector: read-only Solana RPC queries for program and transaction audits.

SolanaEvidenceCollector wraps solana.rpc.api.Client (one client per collector,
no module-level connection). Responses are read defensively: solders objects
and JSON dicts are both accepted. RPC, network and identifier failures are
raised as EvidenceCollectionFailure; a missing clock only yields None so the
age rules can be skipped.

collect_program_evidence / collect_transaction_evidence assemble the evidence
bundles the rule engine consumes.
"""

from __future__ import annotations

import base64
from typing import Any, Callable, Protocol

from backend_solaudit.audit_logging import get_logger
from backend_solaudit.config.env import (
    DEFAULT_SIGNATURES_LIMIT,
    get_commitment,
    get_signatures_limit,
    get_solana_rpc_url,
    mask_rpc_url,
)
from backend_solaudit.core.exceptions import EvidenceCollectionFailure
from backend_solaudit.evidence.models import (
    AccountSnapshot,
    ProgramEvidence,
    SignatureInfo,
    TransactionEvidence,
    TransactionRecord,
    compute_age_seconds,
)

logger = get_logger(__name__)


class EvidenceCollector(Protocol):
    """Read-only query interface consumed by the audit pipeline."""

    def fetch_account(self, identifier: str) -> AccountSnapshot | None: ...

    def fetch_block_time(self) -> int | None: ...

    def fetch_balance(self, identifier: str) -> int: ...

    def fetch_recent_signatures(
        self, identifier: str, limit: int = DEFAULT_SIGNATURES_LIMIT
    ) -> list[SignatureInfo]: ...

    def fetch_transaction(self, signature: str) -> TransactionRecord | None: ...


def _field(obj: Any, *names: str) -> Any:
    """First non-None attribute (solders) or key (JSON dict) among names."""
    if obj is None:
        return None
    for name in names:
        value = getattr(obj, name, None)
        if value is None and isinstance(obj, dict):
            value = obj.get(name)
        if value is not None:
            return value
    return None


def _resp_value(resp: Any, operation: str, identifier: str) -> Any:
    """
    Return resp.value. A response without a value field (RPC error object) is a failure;
    value=None is a legitimate "not found".
    """
    if resp is None:
        raise EvidenceCollectionFailure(operation, identifier, "empty rpc response")
    if isinstance(resp, dict):
        if "error" in resp:
            raise EvidenceCollectionFailure(operation, identifier, str(resp["error"]))
        result = resp.get("result", resp)
        return result.get("value") if isinstance(result, dict) else result
    if not hasattr(resp, "value"):
        message = getattr(resp, "message", None) or type(resp).__name__
        raise EvidenceCollectionFailure(operation, identifier, str(message))
    return resp.value


def _len(value: Any) -> int:
    if value is None:
        return 0
    try:
        return len(value)
    except TypeError:
        return 0


def _int_tuple(values: Any) -> tuple[int, ...]:
    return tuple(int(v or 0) for v in (values or []))


def _account_snapshot(account: Any) -> AccountSnapshot:
    data = _field(account, "data")
    # jsonParsed / base64 dict payloads: ["<base64>", "base64"]
    if isinstance(data, (list, tuple)) and data and isinstance(data[0], str):
        data = base64.b64decode(data[0])
    rent_epoch = _field(account, "rent_epoch", "rentEpoch")
    owner = _field(account, "owner")
    return AccountSnapshot(
        data_length=_len(data),
        executable=bool(_field(account, "executable")),
        lamports=int(_field(account, "lamports") or 0),
        rent_epoch=int(rent_epoch) if rent_epoch is not None else None,
        owner=str(owner) if owner is not None else None,
    )


def _transaction_record(tx_value: Any) -> TransactionRecord:
    """Parse getTransaction value (transaction.message.instructions, signatures, meta)."""
    # EncodedConfirmedTransactionWithStatusMeta -> .transaction (with meta) -> .transaction (ui tx)
    with_meta = _field(tx_value, "transaction")
    meta = _field(with_meta, "meta") or _field(tx_value, "meta")
    ui_tx = _field(with_meta, "transaction") or with_meta
    message = _field(ui_tx, "message")
    return TransactionRecord(
        instruction_count=_len(_field(message, "instructions")),
        signer_count=_len(_field(ui_tx, "signatures")),
        pre_balances=_int_tuple(_field(meta, "pre_balances", "preBalances")),
        post_balances=_int_tuple(_field(meta, "post_balances", "postBalances")),
        err=_field(meta, "err"),
        log_messages=tuple(str(m) for m in (_field(meta, "log_messages", "logMessages") or [])),
    )


class SolanaEvidenceCollector:
    """
    EvidenceCollector backed by a solana-py HTTP client.

    One instance per caller (or per worker); instances share no state, so
    parallel audits each build or receive their own.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        *,
        commitment: str | None = None,
        client: Any = None,
    ) -> None:
        self._rpc_url = (rpc_url or get_solana_rpc_url()).strip()
        if not self._rpc_url:
            raise ValueError("rpc_url must be non-empty")
        self._commitment = commitment or get_commitment()
        if client is None:
            from solana.rpc.api import Client
            from solana.rpc.commitment import Commitment

            client = Client(self._rpc_url, commitment=Commitment(self._commitment))
        self._client = client
        logger.debug("collector_created", rpc=mask_rpc_url(self._rpc_url), commitment=self._commitment)

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    def _call(self, operation: str, identifier: str, fn: Callable[[], Any]) -> Any:
        try:
            resp = fn()
        except EvidenceCollectionFailure:
            raise
        except Exception as e:
            logger.warning("collector_rpc_failed", operation=operation, subject_id=identifier, error=str(e))
            raise EvidenceCollectionFailure(operation, identifier, str(e) or type(e).__name__) from e
        return _resp_value(resp, operation, identifier)

    @staticmethod
    def _pubkey(identifier: str) -> Any:
        from solders.pubkey import Pubkey

        try:
            return Pubkey.from_string((identifier or "").strip())
        except Exception as e:
            raise EvidenceCollectionFailure("parse_pubkey", identifier, f"invalid account key: {e}") from e

    @staticmethod
    def _signature(signature: str) -> Any:
        from solders.signature import Signature

        try:
            return Signature.from_string((signature or "").strip())
        except Exception as e:
            raise EvidenceCollectionFailure("parse_signature", signature, f"invalid signature: {e}") from e

    def fetch_account(self, identifier: str) -> AccountSnapshot | None:
        pubkey = self._pubkey(identifier)
        account = self._call("get_account_info", identifier, lambda: self._client.get_account_info(pubkey))
        if account is None:
            return None
        return _account_snapshot(account)

    def fetch_block_time(self) -> int | None:
        """Block time of the current slot; None when either clock source is unavailable."""
        try:
            slot = self._call("get_slot", "", self._client.get_slot)
            if slot is None:
                return None
            block_time = self._call("get_block_time", str(slot), lambda: self._client.get_block_time(slot))
        except EvidenceCollectionFailure as e:
            logger.warning("collector_clock_unavailable", error=str(e))
            return None
        return int(block_time) if block_time is not None else None

    def fetch_balance(self, identifier: str) -> int:
        pubkey = self._pubkey(identifier)
        balance = self._call("get_balance", identifier, lambda: self._client.get_balance(pubkey))
        return int(balance or 0)

    def fetch_recent_signatures(
        self, identifier: str, limit: int = DEFAULT_SIGNATURES_LIMIT
    ) -> list[SignatureInfo]:
        pubkey = self._pubkey(identifier)
        value = self._call(
            "get_signatures_for_address",
            identifier,
            lambda: self._client.get_signatures_for_address(pubkey, limit=limit),
        )
        return [SignatureInfo.from_rpc_item(item) for item in list(value or [])[:limit]]

    def fetch_transaction(self, signature: str) -> TransactionRecord | None:
        sig = self._signature(signature)
        tx_value = self._call(
            "get_transaction",
            signature,
            lambda: self._client.get_transaction(sig, encoding="json", max_supported_transaction_version=0),
        )
        if tx_value is None:
            return None
        try:
            return _transaction_record(tx_value)
        except (AttributeError, TypeError, ValueError) as e:
            raise EvidenceCollectionFailure("parse_transaction", signature, str(e)) from e


def collect_program_evidence(
    collector: EvidenceCollector,
    program_id: str,
    signatures_limit: int | None = None,
) -> ProgramEvidence:
    """
    Build ProgramEvidence: account info, clock-derived age, recent signature count, balance.

    A missing account returns ProgramEvidence(exists=False) without further queries.
    """
    account = collector.fetch_account(program_id)
    if account is None:
        logger.info("program_not_found", subject_id=program_id)
        return ProgramEvidence.not_found()

    block_time = collector.fetch_block_time()
    age_seconds = compute_age_seconds(block_time, account.rent_epoch)
    if age_seconds is None:
        logger.info(
            "program_age_unavailable",
            subject_id=program_id,
            block_time=block_time,
            rent_epoch=account.rent_epoch,
        )

    limit = signatures_limit or get_signatures_limit()
    signatures = collector.fetch_recent_signatures(program_id, limit=limit)
    balance = collector.fetch_balance(program_id)

    evidence = ProgramEvidence(
        exists=True,
        data_length=account.data_length,
        executable=account.executable,
        age_seconds=age_seconds,
        recent_signature_count=len(signatures),
        balance_lamports=balance,
    )
    logger.debug(
        "program_evidence_collected",
        subject_id=program_id,
        data_length=evidence.data_length,
        executable=evidence.executable,
        age_seconds=evidence.age_seconds,
        recent_signature_count=evidence.recent_signature_count,
        balance_lamports=evidence.balance_lamports,
    )
    return evidence


def collect_transaction_evidence(collector: EvidenceCollector, signature: str) -> TransactionEvidence:
    """Build TransactionEvidence from getTransaction; a missing transaction yields found=False."""
    record = collector.fetch_transaction(signature)
    if record is None:
        logger.info("transaction_not_found", subject_id=signature)
        return TransactionEvidence.not_found()
    evidence = TransactionEvidence.from_record(record)
    logger.debug(
        "transaction_evidence_collected",
        subject_id=signature,
        instruction_count=evidence.instruction_count,
        signer_count=evidence.signer_count,
        failed=evidence.execution_error is not None,
        log_lines=len(evidence.log_messages),
    )
    return evidence
