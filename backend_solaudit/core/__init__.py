"""
Core utilities: domain exceptions shared by the collector, rule engine and API.
"""

from backend_solaudit.core.exceptions import (
    AuditError,
    EvidenceCollectionFailure,
    InvalidSubjectType,
    PartialEvidenceUnavailable,
)

__all__ = [
    "AuditError",
    "EvidenceCollectionFailure",
    "InvalidSubjectType",
    "PartialEvidenceUnavailable",
]
