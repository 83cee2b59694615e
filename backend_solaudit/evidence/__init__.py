"""
Evidence collection: Solana RPC snapshots of program accounts and transactions.
"""

from backend_solaudit.evidence.collector import (
    EvidenceCollector,
    SolanaEvidenceCollector,
    collect_program_evidence,
    collect_transaction_evidence,
)
from backend_solaudit.evidence.models import (
    AccountSnapshot,
    AuditSubjectType,
    ProgramEvidence,
    SignatureInfo,
    TransactionEvidence,
    TransactionRecord,
)

__all__ = [
    "AccountSnapshot",
    "AuditSubjectType",
    "EvidenceCollector",
    "ProgramEvidence",
    "SignatureInfo",
    "SolanaEvidenceCollector",
    "TransactionEvidence",
    "TransactionRecord",
    "collect_program_evidence",
    "collect_transaction_evidence",
]
