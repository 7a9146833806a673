"""API route modules."""

from facturation.api.routes.clients import router as clients_router
from facturation.api.routes.health import router as health_router
from facturation.api.routes.invoice_status import router as invoice_status_router
from facturation.api.routes.invoices import router as invoices_router
from facturation.api.routes.line_items import router as line_items_router

__all__ = [
    "health_router",
    "clients_router",
    "invoices_router",
    "line_items_router",
    "invoice_status_router",
]
