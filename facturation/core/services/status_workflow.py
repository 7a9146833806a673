"""
Invoice status workflow.

Finite-state machine over ``InvoiceStatus``:

    DRAFT    -> SENT, CANCELLED
    SENT     -> PAID, OVERDUE, CANCELLED
    OVERDUE  -> PAID, CANCELLED
    PAID     -> CANCELLED
    CANCELLED   (terminal)

Each edge is a ``TransitionRule`` carrying its preconditions, the
timestamp column it stamps and whether the scheduler may take it on its
own. The allowed-next map is derived from the rule table.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.invoice import Invoice, InvoiceStatus, StatusTimestamp
from facturation.core.entities.status_history import StatusHistoryEntry
from facturation.core.exceptions import (
    EmptyInvoiceError,
    IllegalTransitionError,
    InvoiceNotFoundError,
    NotYetOverdueError,
    TransitionNotAllowedError,
)
from facturation.core.interfaces.invoice_store import IInvoiceStore
from facturation.core.interfaces.line_item_store import ILineItemStore
from facturation.core.services.status_history_ledger import StatusHistoryLedger

logger = get_logger(__name__)


class PreconditionCheck(str, Enum):
    """Gate that must pass before an edge may be taken."""

    HAS_LINE_ITEMS = "has_line_items"
    DUE_DATE_PASSED = "due_date_passed"


CHECK_MESSAGES: dict[PreconditionCheck, str] = {
    PreconditionCheck.HAS_LINE_ITEMS: "Invoice must have at least one line item to be sent",
    PreconditionCheck.DUE_DATE_PASSED: "Invoice is not overdue yet",
}

# Raised when this check is the only one that failed
CHECK_ERRORS: dict[PreconditionCheck, type[TransitionNotAllowedError]] = {
    PreconditionCheck.HAS_LINE_ITEMS: EmptyInvoiceError,
    PreconditionCheck.DUE_DATE_PASSED: NotYetOverdueError,
}


@dataclass(frozen=True)
class TransitionRule:
    """One legal edge of the status graph."""

    from_status: InvoiceStatus
    to_status: InvoiceStatus
    description: str
    checks: tuple[PreconditionCheck, ...] = ()
    sets_timestamp: StatusTimestamp | None = None
    automatic: bool = False


_S = InvoiceStatus

_RULES = (
    TransitionRule(
        _S.DRAFT, _S.SENT, "Sending invoice",
        checks=(PreconditionCheck.HAS_LINE_ITEMS,),
        sets_timestamp=StatusTimestamp.SENT_AT,
    ),
    TransitionRule(_S.DRAFT, _S.CANCELLED, "Cancelling draft invoice"),
    TransitionRule(
        _S.SENT, _S.PAID, "Marking invoice as paid",
        sets_timestamp=StatusTimestamp.PAID_AT,
    ),
    TransitionRule(
        _S.SENT, _S.OVERDUE, "Auto-marking invoice as overdue",
        checks=(PreconditionCheck.DUE_DATE_PASSED,),
        automatic=True,
    ),
    TransitionRule(_S.SENT, _S.CANCELLED, "Cancelling sent invoice"),
    TransitionRule(
        _S.OVERDUE, _S.PAID, "Marking overdue invoice as paid",
        sets_timestamp=StatusTimestamp.PAID_AT,
    ),
    TransitionRule(_S.OVERDUE, _S.CANCELLED, "Cancelling overdue invoice"),
    TransitionRule(_S.PAID, _S.CANCELLED, "Cancelling paid invoice (reversal)"),
)

TRANSITION_RULES: dict[tuple[InvoiceStatus, InvoiceStatus], TransitionRule] = {
    (rule.from_status, rule.to_status): rule for rule in _RULES
}

ALLOWED_TRANSITIONS: dict[InvoiceStatus, tuple[InvoiceStatus, ...]] = {
    status: tuple(rule.to_status for rule in _RULES if rule.from_status == status)
    for status in InvoiceStatus
}


def get_transition_rule(
    from_status: InvoiceStatus, to_status: InvoiceStatus
) -> TransitionRule | None:
    return TRANSITION_RULES.get((InvoiceStatus(from_status), InvoiceStatus(to_status)))


def can_transition(from_status: InvoiceStatus, to_status: InvoiceStatus) -> bool:
    return get_transition_rule(from_status, to_status) is not None


def allowed_next_statuses(status: InvoiceStatus) -> list[InvoiceStatus]:
    """Statuses reachable in one step from ``status``."""
    return list(ALLOWED_TRANSITIONS[InvoiceStatus(status)])


def transition_description(from_status: InvoiceStatus, to_status: InvoiceStatus) -> str:
    """Human-readable label for an edge."""
    rule = get_transition_rule(from_status, to_status)
    if rule is not None:
        return rule.description
    return f"Transition from {InvoiceStatus(from_status).value} to {InvoiceStatus(to_status).value}"


def is_automatic_transition(from_status: InvoiceStatus, to_status: InvoiceStatus) -> bool:
    rule = get_transition_rule(from_status, to_status)
    return rule is not None and rule.automatic


def timestamp_field_for(
    from_status: InvoiceStatus, to_status: InvoiceStatus
) -> StatusTimestamp | None:
    rule = get_transition_rule(from_status, to_status)
    return rule.sets_timestamp if rule is not None else None


def is_overdue(invoice: Invoice, today: date) -> bool:
    """
    SENT or OVERDUE with a due date strictly before ``today``.

    Day granularity only; paid and cancelled invoices are never overdue.
    """
    if invoice.status not in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE):
        return False
    return invoice.due_date < today


@dataclass
class StatusChangeResult:
    """Outcome of an accepted transition."""

    invoice: Invoice
    history_entry: StatusHistoryEntry
    allowed_next_statuses: list[InvoiceStatus] = field(default_factory=list)


class StatusWorkflow:
    """Validates and applies invoice status transitions."""

    def __init__(
        self,
        invoice_store: IInvoiceStore,
        line_item_store: ILineItemStore,
        ledger: StatusHistoryLedger,
        clock: Clock | None = None,
    ):
        self._invoice_store = invoice_store
        self._line_item_store = line_item_store
        self._ledger = ledger
        self._clock = clock or get_clock()

    def is_overdue(self, invoice: Invoice) -> bool:
        return is_overdue(invoice, self._clock.today())

    async def _check_passes(self, check: PreconditionCheck, invoice: Invoice) -> bool:
        if check == PreconditionCheck.HAS_LINE_ITEMS:
            items = await self._line_item_store.find_active_line_items(invoice.id)  # type: ignore[arg-type]
            return len(items) > 0
        if check == PreconditionCheck.DUE_DATE_PASSED:
            return invoice.due_date < self._clock.today()
        raise ValueError(f"Unknown precondition: {check}")

    async def validate_transition(
        self, invoice: Invoice, requested_status: InvoiceStatus
    ) -> TransitionRule:
        """
        Check that ``invoice`` may move to ``requested_status``.

        Every precondition of the edge is evaluated so the caller gets the
        complete list of failures.

        Raises:
            IllegalTransitionError: edge not in the transition table
            TransitionNotAllowedError: one or more preconditions failed
                (``EmptyInvoiceError`` / ``NotYetOverdueError`` when a
                single dedicated check failed)
        """
        current = invoice.status
        rule = get_transition_rule(current, requested_status)
        if rule is None:
            raise IllegalTransitionError(current.value, InvoiceStatus(requested_status).value)

        failed = [
            check for check in rule.checks
            if not await self._check_passes(check, invoice)
        ]
        if not failed:
            return rule

        errors = [CHECK_MESSAGES[check] for check in failed]
        error_cls = CHECK_ERRORS[failed[0]] if len(failed) == 1 else TransitionNotAllowedError
        raise error_cls(current.value, rule.to_status.value, errors)

    async def change_status(
        self,
        invoice_id: int,
        requested_status: InvoiceStatus,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> StatusChangeResult:
        """
        Move an invoice to ``requested_status``.

        The status write, the timestamp stamp and the ledger entry are
        committed together against the status read here; a concurrent
        change in between raises ``ConcurrentModificationError`` and
        nothing is written.
        """
        requested = InvoiceStatus(requested_status)

        invoice = await self._invoice_store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        try:
            rule = await self.validate_transition(invoice, requested)
        except (IllegalTransitionError, TransitionNotAllowedError) as e:
            logger.info(
                "invoice_transition_rejected",
                invoice_id=invoice_id,
                from_status=invoice.status.value,
                to_status=requested.value,
                error_code=e.code,
            )
            raise

        entry = self._ledger.build_entry(
            invoice_id=invoice_id,
            user_id=user_id,
            to_status=requested,
            from_status=invoice.status,
            reason=reason,
            metadata=metadata,
        )

        updated, saved_entry = await self._invoice_store.commit_status_change(
            invoice_id=invoice_id,
            expected_status=invoice.status,
            new_status=requested,
            timestamp_field=rule.sets_timestamp,
            changed_at=entry.created_at,
            entry=entry,
        )

        logger.info(
            "invoice_status_changed",
            invoice_id=invoice_id,
            from_status=invoice.status.value,
            to_status=requested.value,
            automatic=rule.automatic,
            history_id=saved_entry.id,
        )

        return StatusChangeResult(
            invoice=updated,
            history_entry=saved_entry,
            allowed_next_statuses=allowed_next_statuses(requested),
        )
