"""
Tests for the audit pipeline: dispatch, evidence assembly, escalation and batch audits.

A FakeCollector (conftest) stands in for Solana RPC.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from backend_solaudit.analytics.audit_pipeline import AuditResult, audit, audit_many
from backend_solaudit.analytics.risk_rules import (
    WARN_PROGRAM_NOT_FOUND,
    WARN_RECENT_PROGRAM,
    WARN_SMALL_PROGRAM,
    WARN_TRANSACTION_NOT_FOUND,
)
from backend_solaudit.core.exceptions import EvidenceCollectionFailure, InvalidSubjectType
from backend_solaudit.evidence.collector import collect_program_evidence
from backend_solaudit.evidence.models import (
    RENT_EXEMPT_EPOCH,
    AccountSnapshot,
    AuditSubjectType,
    TransactionRecord,
)

PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TX_SIGNATURE = "1" * 64
NOW_TS = 1_700_000_000


def test_program_example_small_program(fake_collector_cls):
    """50 bytes, executable, 200000s old, 10 sigs, 5 SOL -> size rule only -> trust 80."""
    account = AccountSnapshot(data_length=50, executable=True, lamports=5 * 10**9, rent_epoch=NOW_TS - 200_000)
    collector = fake_collector_cls(account=account, balance=5 * 10**9, signature_count=10)

    result = audit(AuditSubjectType.PROGRAM, PROGRAM_ID, collector=collector)

    assert result.risk_score == 2
    assert result.trust_score == 80
    assert result.risk_level == "Very Low Risk"
    assert result.warnings == [WARN_SMALL_PROGRAM]
    assert result.to_dict()["trustScore"] == "80"


def test_program_example_not_found(fake_collector_cls):
    collector = fake_collector_cls(account=None)

    result = audit("program", PROGRAM_ID, collector=collector)

    assert result.risk_score == 10
    assert result.trust_score == 0
    assert result.risk_level == "High Risk"
    assert result.warnings == [WARN_PROGRAM_NOT_FOUND]
    # existence failure: no further queries
    assert collector.calls == ["fetch_account"]


def test_transaction_example_many_signals(fake_collector_cls):
    record = TransactionRecord(
        instruction_count=6,
        signer_count=2,
        err={"InstructionError": [0, {"Custom": 6001}]},
        log_messages=("tx failed",),
    )
    result = audit("transaction", TX_SIGNATURE, collector=fake_collector_cls(transaction=record))

    assert result.risk_score == 9
    assert result.trust_score == 10
    assert result.risk_level == "High Risk"
    assert len(result.warnings) == 4


def test_transaction_not_found(fake_collector_cls):
    result = audit("transaction", TX_SIGNATURE, collector=fake_collector_cls(transaction=None))
    assert result.warnings == [WARN_TRANSACTION_NOT_FOUND]
    assert result.trust_score == 0


def test_healthy_program(healthy_program_collector):
    result = audit("PROGRAM", PROGRAM_ID, collector=healthy_program_collector)
    assert result.risk_score == 0
    assert result.trust_score == 100
    assert result.risk_level == "Very Low Risk"
    assert result.risk_desc == "Seems safe, but always verify."
    assert result.warnings == []


def test_id_echoed_verbatim(fake_collector_cls):
    identifier = "  not-even-a-key  "
    result = audit("program", identifier, collector=fake_collector_cls(account=None))
    assert result.id == identifier


def test_collection_failure_escalates(fake_collector_cls):
    """RPC failure -> High Risk, trust '0', warning naming the failure; nothing raised."""
    failure = EvidenceCollectionFailure("get_account_info", PROGRAM_ID, "429 Too Many Requests")
    result = audit("program", PROGRAM_ID, collector=fake_collector_cls(fail=failure))

    assert isinstance(result, AuditResult)
    assert result.risk_level == "High Risk"
    assert result.to_dict()["trustScore"] == "0"
    assert result.risk_score == 10
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("error auditing program:")
    assert "429 Too Many Requests" in result.warnings[0]


def test_unexpected_error_escalates(fake_collector_cls):
    result = audit("transaction", TX_SIGNATURE, collector=fake_collector_cls(fail=RuntimeError("boom")))
    assert result.trust_score == 0
    assert result.warnings == ["error auditing transaction: boom"]


def test_default_collector_construction_failure_escalates():
    with patch(
        "backend_solaudit.analytics.audit_pipeline.SolanaEvidenceCollector",
        side_effect=ValueError("rpc_url must be non-empty"),
    ):
        result = audit("program", PROGRAM_ID)
    assert result.risk_level == "High Risk"
    assert "rpc_url must be non-empty" in result.warnings[0]


@pytest.mark.parametrize("bad", ["contract", "", None, 3, "programs"])
def test_invalid_subject_type_raised_before_fetch(fake_collector_cls, bad):
    collector = fake_collector_cls(account=None)
    with pytest.raises(InvalidSubjectType):
        audit(bad, PROGRAM_ID, collector=collector)
    assert collector.calls == []


def test_clock_unavailable_degrades(fake_collector_cls):
    """No block time: age rules skipped, audit completes on remaining evidence."""
    account = AccountSnapshot(data_length=10, executable=True, lamports=0, rent_epoch=NOW_TS)
    collector = fake_collector_cls(account=account, block_time=None, signature_count=1000)

    result = audit("program", PROGRAM_ID, collector=collector)

    assert result.warnings == [WARN_SMALL_PROGRAM]
    assert result.risk_score == 2


def test_rent_exempt_epoch_has_no_age(fake_collector_cls):
    account = AccountSnapshot(data_length=4096, executable=True, lamports=0, rent_epoch=RENT_EXEMPT_EPOCH)
    evidence = collect_program_evidence(fake_collector_cls(account=account), PROGRAM_ID)
    assert evidence.exists
    assert evidence.age_seconds is None


def test_program_evidence_assembly(fake_collector_cls):
    account = AccountSnapshot(data_length=300, executable=False, lamports=7, rent_epoch=NOW_TS - 3600)
    collector = fake_collector_cls(account=account, balance=42, signature_count=25)

    evidence = collect_program_evidence(collector, PROGRAM_ID, signatures_limit=20)

    assert evidence.data_length == 300
    assert evidence.executable is False
    assert evidence.age_seconds == 3600
    assert evidence.recent_signature_count == 20
    assert evidence.balance_lamports == 42

    result = audit("program", PROGRAM_ID, collector=collector)
    assert WARN_RECENT_PROGRAM in result.warnings


def test_audit_many_preserves_order(fake_collector_cls, healthy_program_collector):
    subjects = [
        ("program", PROGRAM_ID),
        ("transaction", TX_SIGNATURE),
        (AuditSubjectType.PROGRAM, "other"),
    ]
    results = audit_many(subjects, collector=healthy_program_collector, concurrency=3)

    assert [r.id for r in results] == [PROGRAM_ID, TX_SIGNATURE, "other"]
    assert results[0].trust_score == 100
    # healthy_program_collector has no transaction record
    assert results[1].warnings == [WARN_TRANSACTION_NOT_FOUND]


def test_audit_many_invalid_type_fails_before_work(fake_collector_cls):
    collector = fake_collector_cls(account=None)
    with pytest.raises(InvalidSubjectType):
        audit_many([("program", PROGRAM_ID), ("wallet", PROGRAM_ID)], collector=collector)
    assert collector.calls == []


def test_audit_many_empty():
    assert audit_many([]) == []
