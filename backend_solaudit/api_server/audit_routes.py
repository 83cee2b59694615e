"""
FastAPI router: GET /audit/{subject_type}/{identifier}, POST /audit/batch.

Runs the audit pipeline against live RPC through an injected collector
(get_collector dependency; overridden in tests).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend_solaudit.analytics.audit_pipeline import AuditResult, audit, audit_many
from backend_solaudit.audit_logging import get_logger
from backend_solaudit.config import get_settings
from backend_solaudit.core.exceptions import InvalidSubjectType
from backend_solaudit.evidence.collector import EvidenceCollector, SolanaEvidenceCollector

logger = get_logger(__name__)

router = APIRouter(prefix="/audit", tags=["audit"])

MAX_BATCH_SUBJECTS = 100


class AuditResponse(BaseModel):
    """Audit result as served to clients; trustScore is decimal text."""

    id: str = Field(..., description="Program account key or transaction signature, echoed verbatim")
    trustScore: str = Field(..., description="Trust percentage 0-100 as text")
    riskLevel: str = Field(..., description="Very Low Risk | Low Risk | Moderate Risk | High Risk")
    riskDesc: str = Field(..., description="Human-readable recommendation for the risk level")
    warnings: list[str] = Field(default_factory=list, description="Warnings in rule evaluation order")

    @classmethod
    def from_result(cls, result: AuditResult) -> "AuditResponse":
        return cls(**result.to_dict())


class AuditSubject(BaseModel):
    subject_type: str = Field(..., description="program | transaction")
    identifier: str = Field(..., min_length=1, max_length=128, description="Account key or signature (base58)")


class BatchAuditRequest(BaseModel):
    subjects: list[AuditSubject] = Field(..., min_length=1, max_length=MAX_BATCH_SUBJECTS)


class BatchAuditResponse(BaseModel):
    results: list[AuditResponse]


def get_collector() -> EvidenceCollector:
    """Dependency: RPC-backed collector built from current settings."""
    settings = get_settings()
    return SolanaEvidenceCollector(settings.solana_rpc_url, commitment=settings.commitment)


@router.get("/{subject_type}/{identifier}", response_model=AuditResponse)
def audit_subject(
    subject_type: str,
    identifier: str,
    collector: EvidenceCollector = Depends(get_collector),
) -> AuditResponse:
    """Audit one program (account key) or transaction (signature)."""
    if not identifier.strip():
        raise HTTPException(status_code=400, detail="identifier must be non-empty")
    try:
        result = audit(subject_type, identifier, collector=collector)
    except InvalidSubjectType as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return AuditResponse.from_result(result)


@router.post("/batch", response_model=BatchAuditResponse)
def audit_batch(
    body: BatchAuditRequest,
    collector: EvidenceCollector = Depends(get_collector),
) -> BatchAuditResponse:
    """Audit up to MAX_BATCH_SUBJECTS subjects concurrently; results keep request order."""
    subjects = [(s.subject_type, s.identifier) for s in body.subjects]
    try:
        results = audit_many(subjects, collector=collector, concurrency=get_settings().concurrency)
    except InvalidSubjectType as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    logger.info("audit_batch_done", count=len(results))
    return BatchAuditResponse(results=[AuditResponse.from_result(r) for r in results])
