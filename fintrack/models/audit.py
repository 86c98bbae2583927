"""
Audit Models for FinTrack

Every store operation emits an audit event. Events go to the structured
local log; they are never written into the snapshot storage.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Persistence
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_MISSING = "snapshot_missing"
    SNAPSHOT_CORRUPT = "snapshot_corrupt"
    SNAPSHOT_SAVED = "snapshot_saved"
    SNAPSHOT_ROWS_DROPPED = "snapshot_rows_dropped"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_SKIPPED = "transaction_skipped"
    TRANSACTION_REJECTED = "transaction_rejected"
    TRANSACTIONS_REPLACED = "transactions_replaced"

    # Goals and categories
    GOAL_SET = "goal_set"
    GOAL_CLEARED = "goal_cleared"
    CATEGORY_ADDED = "category_added"

    # Export
    EXPORT_WRITTEN = "export_written"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal', 'snapshot')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID or name of the entity this event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
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
        event = AuditEventBuilder.transaction_added(txn)
        event = AuditEventBuilder.goal_set("Food", "100")
    """

    @staticmethod
    def snapshot_loaded(
        key: str,
        transaction_count: int,
        category_count: int,
        goal_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            entity_type="snapshot",
            entity_id=key,
            description=f"Snapshot loaded with {transaction_count} transactions",
            details={
                "transactions": transaction_count,
                "categories": category_count,
                "goals": goal_count,
            },
        )

    @staticmethod
    def snapshot_missing(key: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_MISSING,
            entity_type="snapshot",
            entity_id=key,
            description="No snapshot found, starting from defaults",
        )

    @staticmethod
    def snapshot_corrupt(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_CORRUPT,
            severity=AuditSeverity.ERROR,
            entity_type="snapshot",
            entity_id=key,
            description="Stored snapshot could not be parsed",
            error_message=error_message,
        )

    @staticmethod
    def snapshot_rows_dropped(key: str, transaction_ids: list) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_ROWS_DROPPED,
            severity=AuditSeverity.WARNING,
            entity_type="snapshot",
            entity_id=key,
            description=f"Dropped {len(transaction_ids)} stored transactions without an amount",
            details={"transaction_ids": transaction_ids},
        )

    @staticmethod
    def snapshot_saved(key: str, size_bytes: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="snapshot",
            entity_id=key,
            description=f"Snapshot saved ({size_bytes} bytes)",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def transaction_added(
        transaction_id: int,
        kind: str,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Transaction added: {kind} {amount} in {category}",
            details={
                "kind": kind,
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_skipped(missing_fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            description="Transaction not added: required fields are empty",
            details={"missing_fields": missing_fields},
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(field: str, value: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            description=f"Transaction rejected: invalid {field}",
            details={"field": field, "value": value},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def transactions_replaced(previous_count: int, new_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_REPLACED,
            entity_type="transaction",
            description=f"Transaction log replaced ({previous_count} -> {new_count})",
            details={
                "previous_count": previous_count,
                "new_count": new_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_set(category: str, value: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_SET,
            entity_type="goal",
            entity_id=category,
            description=f"Goal for {category} set to {value}",
            details={"value": value},
            is_user_action=True,
        )

    @staticmethod
    def goal_cleared(category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CLEARED,
            entity_type="goal",
            entity_id=category,
            description=f"Goal for {category} cleared",
            is_user_action=True,
        )

    @staticmethod
    def category_added(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=name,
            description=f"Category added: {name}",
            is_user_action=True,
        )

    @staticmethod
    def export_written(row_count: int, month_key: str, target: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_WRITTEN,
            entity_type="export",
            entity_id=target,
            description=f"Exported {row_count} transactions",
            details={
                "row_count": row_count,
                "month_key": month_key,
            },
            is_user_action=True,
        )
