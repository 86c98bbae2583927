"""
Data Models Package

This package contains all Pydantic models used in FinTrack.
All data flowing through the store and derivation layers conforms to these schemas.
"""

from fintrack.models.transaction import (
    CategoryReportRow,
    FinanceView,
    Snapshot,
    Totals,
    Transaction,
    TransactionDraft,
    TransactionKind,
)
from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "CategoryReportRow",
    "FinanceView",
    "Snapshot",
    "Totals",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
