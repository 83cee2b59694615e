"""
Audit logging: structlog JSON records with timestamp, subject_id, event_type.
"""

from backend_solaudit.audit_logging.logger import bind_subject, configure_structlog, get_logger, short_id

__all__ = ["bind_subject", "configure_structlog", "get_logger", "short_id"]
