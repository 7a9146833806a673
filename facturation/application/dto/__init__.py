"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from facturation.application.dto.requests import (
    ChangeStatusRequest,
    CreateClientRequest,
    CreateInvoiceRequest,
    CreateLineItemRequest,
    UpdateClientRequest,
    UpdateInvoiceRequest,
    UpdateLineItemRequest,
)
from facturation.application.dto.responses import (
    AllowedTransitionsResponse,
    ClientListResponse,
    ClientResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceTotalsResponse,
    LineItemChangeResponse,
    LineItemListResponse,
    LineItemResponse,
    OverdueSweepResponse,
    PaginationResponse,
    DatabaseHealthResponse,
    StatusChangeResponse,
    StatusHistoryEntryResponse,
    StatusHistoryResponse,
    TransitionOptionResponse,
)

__all__ = [
    # Requests
    "CreateClientRequest",
    "UpdateClientRequest",
    "CreateInvoiceRequest",
    "UpdateInvoiceRequest",
    "CreateLineItemRequest",
    "UpdateLineItemRequest",
    "ChangeStatusRequest",
    # Responses
    "ClientResponse",
    "ClientListResponse",
    "InvoiceResponse",
    "InvoiceListResponse",
    "InvoiceTotalsResponse",
    "LineItemResponse",
    "LineItemListResponse",
    "LineItemChangeResponse",
    "StatusChangeResponse",
    "StatusHistoryEntryResponse",
    "StatusHistoryResponse",
    "PaginationResponse",
    "AllowedTransitionsResponse",
    "TransitionOptionResponse",
    "OverdueSweepResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    "ErrorResponse",
]
