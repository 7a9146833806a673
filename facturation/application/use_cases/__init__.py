"""Application use cases."""

from facturation.application.use_cases.add_line_item import (
    AddLineItemUseCase,
    LineItemChangeResult,
)
from facturation.application.use_cases.archive_client import ArchiveClientUseCase
from facturation.application.use_cases.change_invoice_status import (
    ChangeInvoiceStatusUseCase,
)
from facturation.application.use_cases.create_client import CreateClientUseCase
from facturation.application.use_cases.create_invoice import (
    CreateInvoiceResult,
    CreateInvoiceUseCase,
)
from facturation.application.use_cases.delete_invoice import DeleteInvoiceUseCase
from facturation.application.use_cases.get_status_history import (
    GetStatusHistoryUseCase,
    StatusHistoryResult,
)
from facturation.application.use_cases.recompute_invoice_totals import (
    RecomputeInvoiceTotalsUseCase,
    RecomputeTotalsResult,
)
from facturation.application.use_cases.remove_line_item import RemoveLineItemUseCase
from facturation.application.use_cases.run_overdue_sweep import (
    OverdueSweepResult,
    RunOverdueSweepUseCase,
)
from facturation.application.use_cases.update_client import UpdateClientUseCase
from facturation.application.use_cases.update_invoice import (
    UpdateInvoiceResult,
    UpdateInvoiceUseCase,
)
from facturation.application.use_cases.update_line_item import UpdateLineItemUseCase

__all__ = [
    "ChangeInvoiceStatusUseCase",
    "GetStatusHistoryUseCase",
    "StatusHistoryResult",
    "RecomputeInvoiceTotalsUseCase",
    "RecomputeTotalsResult",
    "RunOverdueSweepUseCase",
    "OverdueSweepResult",
    "CreateInvoiceUseCase",
    "CreateInvoiceResult",
    "UpdateInvoiceUseCase",
    "UpdateInvoiceResult",
    "DeleteInvoiceUseCase",
    "AddLineItemUseCase",
    "UpdateLineItemUseCase",
    "RemoveLineItemUseCase",
    "LineItemChangeResult",
    "CreateClientUseCase",
    "UpdateClientUseCase",
    "ArchiveClientUseCase",
]
