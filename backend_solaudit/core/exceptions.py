"""
Application-level exceptions.

Domain exceptions with stable error codes for the API, CLI and the audit
dispatch boundary.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base class for audit errors."""

    code = "audit_error"


class InvalidSubjectType(AuditError, ValueError):
    """Subject type is neither program nor transaction. Caller usage error; never escalated."""

    code = "invalid_subject_type"

    def __init__(self, subject_type: object) -> None:
        self.subject_type = subject_type
        super().__init__(f"invalid subject type: {subject_type!r} (expected 'program' or 'transaction')")


class EvidenceCollectionFailure(AuditError):
    """RPC, network or identifier error while collecting evidence. Escalated to maximum risk."""

    code = "evidence_collection_failure"

    def __init__(self, operation: str, identifier: str, reason: str) -> None:
        self.operation = operation
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class PartialEvidenceUnavailable(AuditError):
    """A single piece of evidence (e.g. account age) is missing; the dependent rule is skipped."""

    code = "partial_evidence_unavailable"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} unavailable")
