"""
Audit pipeline: collect evidence -> apply rules -> translate score.

audit() is the single entrypoint for the CLI and API. It never raises for
evidence or rule failures: those are escalated to the maximum risk score with
a descriptive warning. Only an invalid subject type is raised, before any
evidence is fetched.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable

from backend_solaudit.analytics.risk_rules import RiskAssessment, assess_program, assess_transaction
from backend_solaudit.analytics.score_translator import TOTAL_RISK_SCORE, translate
from backend_solaudit.audit_logging import bind_subject
from backend_solaudit.evidence.collector import (
    EvidenceCollector,
    SolanaEvidenceCollector,
    collect_program_evidence,
    collect_transaction_evidence,
)
from backend_solaudit.evidence.models import AuditSubjectType


@dataclass(frozen=True)
class AuditResult:
    id: str
    trust_score: int
    risk_level: str
    risk_desc: str
    warnings: list[str] = field(default_factory=list)
    risk_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialized form; trustScore is decimal text."""
        return {
            "id": self.id,
            "trustScore": str(self.trust_score),
            "riskLevel": self.risk_level,
            "riskDesc": self.risk_desc,
            "warnings": list(self.warnings),
        }


def build_result(identifier: str, assessment: RiskAssessment) -> AuditResult:
    trust_score, level, desc = translate(assessment.risk_score)
    return AuditResult(
        id=identifier,
        trust_score=trust_score,
        risk_level=level,
        risk_desc=desc,
        warnings=list(assessment.warnings),
        risk_score=assessment.risk_score,
    )


def _assess(subject_type: AuditSubjectType, identifier: str, collector: EvidenceCollector) -> RiskAssessment:
    if subject_type is AuditSubjectType.PROGRAM:
        return assess_program(collect_program_evidence(collector, identifier))
    return assess_transaction(collect_transaction_evidence(collector, identifier))


def audit(
    subject_type: AuditSubjectType | str,
    identifier: str,
    collector: EvidenceCollector | None = None,
) -> AuditResult:
    """
    Audit one program account or transaction signature.

    Raises InvalidSubjectType for an unknown subject type. Any failure while
    collecting evidence or evaluating rules yields risk score TOTAL_RISK_SCORE
    (High Risk, trust 0) with a single "error auditing ..." warning.
    """
    kind = AuditSubjectType.parse(subject_type)
    log = bind_subject(identifier, kind.value)
    log.info("audit_start")

    try:
        if collector is None:
            collector = SolanaEvidenceCollector()
        assessment = _assess(kind, identifier, collector)
    except Exception as e:
        log.warning("audit_failed", error=str(e), error_type=type(e).__name__, exc_info=True)
        assessment = RiskAssessment(
            risk_score=TOTAL_RISK_SCORE,
            warnings=[f"error auditing {kind.value}: {e}"],
        )

    result = build_result(identifier, assessment)
    log.info(
        "audit_done",
        risk_score=result.risk_score,
        trust_score=result.trust_score,
        risk_level=result.risk_level,
        warnings=result.warnings,
        fired=assessment.fired,
        skipped=assessment.skipped,
    )
    return result


def audit_many(
    subjects: Iterable[tuple[AuditSubjectType | str, str]],
    collector: EvidenceCollector | None = None,
    concurrency: int = 8,
) -> list[AuditResult]:
    """
    Audit many (subject_type, identifier) pairs in a thread pool; results keep input order.

    Subject types are validated up front so a bad entry fails the batch before any RPC call.
    """
    parsed = [(AuditSubjectType.parse(kind), identifier) for kind, identifier in subjects]
    if not parsed:
        return []
    if collector is None:
        collector = SolanaEvidenceCollector()
    workers = max(1, min(concurrency, len(parsed)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(audit, kind, identifier, collector) for kind, identifier in parsed]
        return [fut.result() for fut in futures]
