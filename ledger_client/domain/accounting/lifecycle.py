"""
Transaction status lifecycle shared by journal entries and vouchers.

The table below only decides which actions the client offers. The backend is
the source of truth: after every mutating call the record is re-fetched and
its reported status replaces the local one.
"""

import logging

from .enums import EntryAction, EntryKind, TransactionStatus
from .exceptions import IllegalTransitionError

logger = logging.getLogger(__name__)

BOTH = frozenset({EntryKind.JOURNAL_ENTRY, EntryKind.VOUCHER})

# (from_status, action) -> (to_status, kinds). None as target means deleted.
TRANSITIONS: dict[tuple[TransactionStatus | None, EntryAction], tuple[TransactionStatus | None, frozenset]] = {
    (None, EntryAction.SAVE): (TransactionStatus.DRAFT, BOTH),
    (TransactionStatus.DRAFT, EntryAction.SAVE): (TransactionStatus.DRAFT, BOTH),
    (TransactionStatus.DRAFT, EntryAction.SUBMIT_FOR_APPROVAL): (
        TransactionStatus.PENDING,
        frozenset({EntryKind.VOUCHER}),
    ),
    (TransactionStatus.DRAFT, EntryAction.POST): (TransactionStatus.POSTED, BOTH),
    (TransactionStatus.PENDING, EntryAction.POST): (TransactionStatus.POSTED, BOTH),
    (TransactionStatus.POSTED, EntryAction.REVERSE): (TransactionStatus.REVERSED, BOTH),
    (TransactionStatus.DRAFT, EntryAction.DELETE): (None, BOTH),
    (TransactionStatus.PENDING, EntryAction.DELETE): (None, BOTH),
}

READ_ONLY_STATUSES = frozenset({TransactionStatus.POSTED, TransactionStatus.REVERSED})


def allowed_actions(status: TransactionStatus | None, kind: EntryKind) -> set[EntryAction]:
    """Actions enabled for a record of ``kind`` in ``status``."""
    return {
        action
        for (from_status, action), (_, kinds) in TRANSITIONS.items()
        if from_status == status and kind in kinds
    }


def can_transition(status: TransactionStatus | None, action: EntryAction, kind: EntryKind) -> bool:
    return action in allowed_actions(status, kind)


def next_status(
    status: TransactionStatus | None,
    action: EntryAction,
    kind: EntryKind,
) -> TransactionStatus | None:
    """
    Return the status a record should reach after ``action``.

    Returns None when the action deletes the record.

    Raises:
        IllegalTransitionError: If the action is not offered for this status
    """
    if not can_transition(status, action, kind):
        current = status.value if status else "NEW"
        logger.warning(f"Rejected {action.value} on {kind.value} in status {current}")
        raise IllegalTransitionError(
            f"Cannot {action.value.replace('_', ' ')} a {kind.value.replace('_', ' ')} in status {current}",
            status=status,
            action=action,
        )
    return TRANSITIONS[(status, action)][0]


def is_read_only(status: TransactionStatus | None) -> bool:
    """Posted and reversed records cannot be edited."""
    return status in READ_ONLY_STATUSES
