"""Audit logging package."""

from khata.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
