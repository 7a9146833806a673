"""
Service factory functions for dependency injection.

This module wires the SQLite stores to the core services. Use cases
should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from facturation.application.locks import InvoiceLockRegistry
from facturation.core.clock import Clock, get_clock
from facturation.core.services.status_history_ledger import StatusHistoryLedger
from facturation.core.services.status_workflow import StatusWorkflow

if TYPE_CHECKING:
    from facturation.core.interfaces import (
        IInvoiceStore,
        ILineItemStore,
        IStatusHistoryStore,
    )


# Singleton service instances
_status_history_ledger: StatusHistoryLedger | None = None
_status_workflow: StatusWorkflow | None = None
_invoice_locks: InvoiceLockRegistry | None = None


async def get_status_history_ledger(
    store: "IStatusHistoryStore | None" = None,
    clock: Clock | None = None,
) -> StatusHistoryLedger:
    """
    Get or create the StatusHistoryLedger.

    Overrides build a fresh, uncached instance.
    """
    global _status_history_ledger

    if _status_history_ledger is not None and store is None and clock is None:
        return _status_history_ledger

    # Lazy import infrastructure to avoid circular imports
    from facturation.infrastructure.storage.sqlite import get_status_history_store

    ledger = StatusHistoryLedger(
        store=store or await get_status_history_store(),
        clock=clock or get_clock(),
    )

    if store is None and clock is None:
        _status_history_ledger = ledger

    return ledger


async def get_status_workflow(
    invoice_store: "IInvoiceStore | None" = None,
    line_item_store: "ILineItemStore | None" = None,
    ledger: StatusHistoryLedger | None = None,
    clock: Clock | None = None,
) -> StatusWorkflow:
    """
    Get or create the StatusWorkflow.

    Args:
        invoice_store: Optional invoice store override
        line_item_store: Optional line item store override
        ledger: Optional ledger override
        clock: Optional clock override

    Returns:
        Configured StatusWorkflow
    """
    global _status_workflow

    overridden = any(x is not None for x in (invoice_store, line_item_store, ledger, clock))
    if _status_workflow is not None and not overridden:
        return _status_workflow

    from facturation.infrastructure.storage.sqlite import (
        get_invoice_store,
        get_line_item_store,
    )

    workflow = StatusWorkflow(
        invoice_store=invoice_store or await get_invoice_store(),
        line_item_store=line_item_store or await get_line_item_store(),
        ledger=ledger or await get_status_history_ledger(clock=clock),
        clock=clock or get_clock(),
    )

    if not overridden:
        _status_workflow = workflow

    return workflow


def get_invoice_locks() -> InvoiceLockRegistry:
    """Process-wide per-invoice lock registry."""
    global _invoice_locks
    if _invoice_locks is None:
        _invoice_locks = InvoiceLockRegistry()
    return _invoice_locks


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _status_history_ledger, _status_workflow, _invoice_locks
    _status_history_ledger = None
    _status_workflow = None
    _invoice_locks = None
