"""Status lifecycle actions on saved journal entries and vouchers."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from ..domain.accounting import lifecycle
from ..domain.accounting.enums import EntryAction, EntryKind, TransactionStatus
from ..domain.accounting.exceptions import (
    AuthenticationError,
    BackendRejectedError,
    IllegalTransitionError,
)
from .ledger_api import LedgerApi

logger = structlog.get_logger()

# (kind, action) -> LedgerApi method performing it
ACTION_CALLS = {
    (EntryKind.JOURNAL_ENTRY, EntryAction.POST): "post_transaction_group",
    (EntryKind.JOURNAL_ENTRY, EntryAction.REVERSE): "reverse_transaction_group",
    (EntryKind.JOURNAL_ENTRY, EntryAction.DELETE): "delete_transaction_group",
    (EntryKind.VOUCHER, EntryAction.SUBMIT_FOR_APPROVAL): "submit_voucher_for_approval",
    (EntryKind.VOUCHER, EntryAction.POST): "post_voucher",
    (EntryKind.VOUCHER, EntryAction.REVERSE): "cancel_voucher",
    (EntryKind.VOUCHER, EntryAction.DELETE): "delete_voucher",
}

FETCH_CALLS = {
    EntryKind.JOURNAL_ENTRY: "get_transaction_group",
    EntryKind.VOUCHER: "get_voucher",
}


@dataclass(frozen=True)
class RecordRef:
    """A saved record and the status the caller last saw."""
    kind: EntryKind
    record_id: str
    status: Optional[TransactionStatus]


@dataclass
class BulkResult:
    """Outcome of one action applied to several records."""
    action: EntryAction
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # record id -> error message

    @property
    def ok(self) -> bool:
        return not self.failed


class EntryWorkflow:
    """
    Run lifecycle actions against the backend.

    An action not offered for the known status is refused before any request
    is sent. After the backend accepts, the record is re-fetched and returned
    so callers replace their cached status with the confirmed one.
    """

    def __init__(self, api: LedgerApi):
        self.api = api

    def refresh(self, kind: EntryKind, record_id: str):
        return getattr(self.api, FETCH_CALLS[kind])(record_id)

    def apply(self, kind: EntryKind, record_id: str, status: TransactionStatus, action: EntryAction):
        """
        Perform ``action`` and return the re-fetched record (None once deleted).

        Raises:
            IllegalTransitionError: If the action is not offered in ``status``
            ApiError: If the backend rejects the action or is unreachable
        """
        expected = lifecycle.next_status(status, action, kind)
        getattr(self.api, ACTION_CALLS[(kind, action)])(record_id)

        if expected is None:
            logger.info("Record deleted", kind=kind.value, record_id=record_id)
            return None

        record = self.refresh(kind, record_id)
        if record.status != expected:
            logger.warning(
                "Backend reported unexpected status",
                kind=kind.value,
                record_id=record_id,
                expected=expected.value,
                actual=record.status.value,
            )
        return record

    def post(self, kind: EntryKind, record_id: str, status: TransactionStatus):
        return self.apply(kind, record_id, status, EntryAction.POST)

    def reverse(self, kind: EntryKind, record_id: str, status: TransactionStatus):
        return self.apply(kind, record_id, status, EntryAction.REVERSE)

    def delete(self, kind: EntryKind, record_id: str, status: TransactionStatus) -> None:
        self.apply(kind, record_id, status, EntryAction.DELETE)

    def submit_for_approval(self, record_id: str, status: TransactionStatus):
        return self.apply(EntryKind.VOUCHER, record_id, status, EntryAction.SUBMIT_FOR_APPROVAL)

    def cancel_voucher(self, record_id: str, status: TransactionStatus):
        """Cancel a posted voucher; the backend books the compensating entry."""
        return self.apply(EntryKind.VOUCHER, record_id, status, EntryAction.REVERSE)

    def apply_many(self, records: Iterable[RecordRef], action: EntryAction) -> BulkResult:
        """
        Apply ``action`` to each record in turn.

        A record whose status does not offer the action, or that the backend
        rejects, is reported in ``failed`` and the rest still run. An expired
        session or an unreachable backend stops the batch.
        """
        result = BulkResult(action=action)
        for record in records:
            try:
                self.apply(record.kind, record.record_id, record.status, action)
            except AuthenticationError:
                raise
            except (IllegalTransitionError, BackendRejectedError) as e:
                result.failed[record.record_id] = str(e)
            else:
                result.succeeded.append(record.record_id)

        logger.info(
            "Bulk action finished",
            action=action.value,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    def post_many(self, records: Iterable[RecordRef]) -> BulkResult:
        return self.apply_many(records, EntryAction.POST)

    def delete_many(self, records: Iterable[RecordRef]) -> BulkResult:
        return self.apply_many(records, EntryAction.DELETE)
