"""
Audit Models for Khata

Every write to the khata is logged as an audit event.
This provides:
1. Traceability of who-owes-what changes
2. Debugging information when storage misbehaves
3. A record of rejected entries

DESIGN DECISION: Audit events are emitted to the structured log only.
They are never edited after the fact.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Shop
    SHOP_SET_UP = "shop_set_up"
    PROFILE_UPDATED = "profile_updated"
    PREFERENCES_UPDATED = "preferences_updated"

    # Customers
    CUSTOMER_ADDED = "customer_added"
    CUSTOMER_DELETED = "customer_deleted"
    CUSTOMER_NOT_FOUND = "customer_not_found"

    # Ledger entries
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_DELETED = "transaction_deleted"
    EXPENSE_RECORDED = "expense_recorded"
    ENTRY_REJECTED = "entry_rejected"

    # Reports
    REPORT_EXPORTED = "report_exported"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'customer', 'transaction')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.customer_added(customer_id, name)
        event = AuditEventBuilder.transaction_recorded(tx_id, customer_id, "GIVE", "500")
    """

    @staticmethod
    def shop_set_up(shop_name: str, is_new: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.SHOP_SET_UP if is_new
                else AuditEventType.PROFILE_UPDATED
            ),
            entity_type="shop_profile",
            description=(
                f"Shop set up: {shop_name}" if is_new
                else f"Shop profile updated: {shop_name}"
            ),
            details={"shop_name": shop_name},
            is_user_action=True,
        )

    @staticmethod
    def preferences_updated(theme: str, sound_enabled: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_UPDATED,
            entity_type="app_settings",
            description="Preferences updated",
            details={"theme": theme, "sound_enabled": sound_enabled},
            is_user_action=True,
        )

    @staticmethod
    def customer_added(customer_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CUSTOMER_ADDED,
            entity_type="customer",
            entity_id=customer_id,
            description=f"Customer added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def customer_deleted(customer_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CUSTOMER_DELETED,
            entity_type="customer",
            entity_id=customer_id,
            description="Customer deleted",
            is_user_action=True,
        )

    @staticmethod
    def customer_not_found(customer_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CUSTOMER_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="customer",
            entity_id=customer_id,
            description="Customer not found, falling back to customer list",
        )

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        customer_id: str,
        transaction_type: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Entry recorded: {transaction_type} {amount}",
            details={
                "customer_id": customer_id,
                "type": transaction_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Entry deleted",
            is_user_action=True,
        )

    @staticmethod
    def expense_recorded(expense_id: str, category: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense recorded: {category} {amount}",
            details={"category": category, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def entry_rejected(entity_type: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"Entry rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def report_exported(tab: str, path: str, row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            entity_type="report",
            description=f"Report exported: {tab} ({row_count} rows)",
            details={"tab": tab, "path": path, "row_count": row_count},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
