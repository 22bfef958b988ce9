"""Submission bookkeeping shared by the journal entry and voucher builders."""

import logging
from contextlib import contextmanager

from .enums import EntryAction, EntryKind, TransactionStatus
from .exceptions import ApiError, SubmissionInProgressError
from . import lifecycle

logger = logging.getLogger(__name__)


class FormState:
    """
    Locally held copy of one record being edited.

    ``status`` is a cache of what the backend last reported. ``submit_error``
    holds the banner message of the last failed backend call and
    ``is_submitting`` stays True only while a single request is in flight.
    """

    kind: EntryKind

    def __init__(self, record_id: str | None = None, status: TransactionStatus | None = None):
        self.record_id = record_id
        self.status = status
        self.submit_error: str | None = None
        self._submitting = False

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_read_only(self) -> bool:
        return lifecycle.is_read_only(self.status)

    @property
    def is_editable(self) -> bool:
        """Fields can change only while the record can still be saved."""
        return lifecycle.can_transition(self.status, EntryAction.SAVE, self.kind)

    @property
    def can_submit(self) -> bool:
        return not self._submitting and not self.is_read_only

    def allowed_actions(self):
        return lifecycle.allowed_actions(self.status, self.kind)

    @contextmanager
    def _in_flight(self):
        """Disable re-submission while a request is pending; record backend errors."""
        if self._submitting:
            raise SubmissionInProgressError(f"A {self.kind.value.replace('_', ' ')} submission is already in progress")
        self._submitting = True
        self.submit_error = None
        try:
            yield
        except ApiError as e:
            self.submit_error = e.message
            logger.warning(f"Backend rejected {self.kind.value} {self.record_id or '(new)'}: {e.message}")
            raise
        finally:
            self._submitting = False
