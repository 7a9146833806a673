"""
Dependency injection container for FastAPI.

Provides use cases and stores to route handlers. Tests swap any of these
through ``app.dependency_overrides``.
"""

from facturation.application.use_cases import (
    AddLineItemUseCase,
    ArchiveClientUseCase,
    ChangeInvoiceStatusUseCase,
    CreateClientUseCase,
    CreateInvoiceUseCase,
    DeleteInvoiceUseCase,
    GetStatusHistoryUseCase,
    RecomputeInvoiceTotalsUseCase,
    RemoveLineItemUseCase,
    RunOverdueSweepUseCase,
    UpdateClientUseCase,
    UpdateInvoiceUseCase,
    UpdateLineItemUseCase,
)
from facturation.core.interfaces import IClientStore, IInvoiceStore, ILineItemStore
from facturation.infrastructure.storage.sqlite import (
    get_client_store,
    get_invoice_store,
    get_line_item_store,
)


# Use case dependencies
def get_create_client_use_case() -> CreateClientUseCase:
    return CreateClientUseCase()


def get_update_client_use_case() -> UpdateClientUseCase:
    return UpdateClientUseCase()


def get_archive_client_use_case() -> ArchiveClientUseCase:
    return ArchiveClientUseCase()


def get_create_invoice_use_case() -> CreateInvoiceUseCase:
    return CreateInvoiceUseCase()


def get_update_invoice_use_case() -> UpdateInvoiceUseCase:
    return UpdateInvoiceUseCase()


def get_delete_invoice_use_case() -> DeleteInvoiceUseCase:
    return DeleteInvoiceUseCase()


def get_add_line_item_use_case() -> AddLineItemUseCase:
    return AddLineItemUseCase()


def get_update_line_item_use_case() -> UpdateLineItemUseCase:
    return UpdateLineItemUseCase()


def get_remove_line_item_use_case() -> RemoveLineItemUseCase:
    return RemoveLineItemUseCase()


def get_recompute_totals_use_case() -> RecomputeInvoiceTotalsUseCase:
    return RecomputeInvoiceTotalsUseCase()


def get_change_status_use_case() -> ChangeInvoiceStatusUseCase:
    """Get change invoice status use case."""
    return ChangeInvoiceStatusUseCase()


def get_status_history_use_case() -> GetStatusHistoryUseCase:
    """Get status history use case."""
    return GetStatusHistoryUseCase()


def get_overdue_sweep_use_case() -> RunOverdueSweepUseCase:
    """Get overdue sweep use case."""
    return RunOverdueSweepUseCase()


# Store dependencies
async def get_clients() -> IClientStore:
    """Get client store."""
    return await get_client_store()


async def get_invoices() -> IInvoiceStore:
    """Get invoice store."""
    return await get_invoice_store()


async def get_line_items() -> ILineItemStore:
    """Get line item store."""
    return await get_line_item_store()
