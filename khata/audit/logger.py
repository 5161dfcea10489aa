"""
Audit Logger

DESIGN DECISION: Every write to the khata is logged.
This provides:
1. Traceability of balance changes
2. Debugging capability when storage fails
3. A record of rejected entries

The audit logger is synchronous, like every khata operation, and only
writes to the structured log.
"""

import logging
from typing import Optional

import structlog

from khata.models.audit import AuditEvent, AuditEventBuilder


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog on top of stdlib logging."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """Central audit logging service."""

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("khata.audit")

    def log(self, event: AuditEvent) -> AuditEvent:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        return event

    def log_shop_set_up(self, shop_name: str, is_new: bool) -> None:
        self.log(AuditEventBuilder.shop_set_up(shop_name=shop_name, is_new=is_new))

    def log_preferences_updated(self, theme: str, sound_enabled: bool) -> None:
        self.log(AuditEventBuilder.preferences_updated(
            theme=theme,
            sound_enabled=sound_enabled,
        ))

    def log_customer_added(self, customer_id: str, name: str) -> None:
        self.log(AuditEventBuilder.customer_added(customer_id=customer_id, name=name))

    def log_customer_deleted(self, customer_id: str) -> None:
        self.log(AuditEventBuilder.customer_deleted(customer_id=customer_id))

    def log_customer_not_found(self, customer_id: str) -> None:
        self.log(AuditEventBuilder.customer_not_found(customer_id=customer_id))

    def log_transaction_recorded(
        self,
        transaction_id: str,
        customer_id: str,
        transaction_type: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_recorded(
            transaction_id=transaction_id,
            customer_id=customer_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    def log_transaction_deleted(self, transaction_id: str) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction_id=transaction_id))

    def log_expense_recorded(self, expense_id: str, category: str, amount: str) -> None:
        self.log(AuditEventBuilder.expense_recorded(
            expense_id=expense_id,
            category=category,
            amount=amount,
        ))

    def log_entry_rejected(self, entity_type: str, issues: list[dict]) -> None:
        """Log a form submission that failed validation."""
        self.log(AuditEventBuilder.entry_rejected(entity_type=entity_type, issues=issues))

    def log_report_exported(self, tab: str, path: str, row_count: int) -> None:
        self.log(AuditEventBuilder.report_exported(tab=tab, path=path, row_count=row_count))

    def log_storage_error(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an unexpected error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
