"""
Audit analytics: risk rules, score translation and the audit pipeline.

Modules: risk_rules, score_translator, audit_pipeline.
"""

from backend_solaudit.analytics.audit_pipeline import AuditResult, audit, audit_many
from backend_solaudit.analytics.risk_rules import assess_program, assess_transaction
from backend_solaudit.analytics.score_translator import translate

__all__ = [
    "AuditResult",
    "assess_program",
    "assess_transaction",
    "audit",
    "audit_many",
    "translate",
]
