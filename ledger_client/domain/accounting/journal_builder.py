"""Journal entry builder: assemble balanced debit/credit lines and submit them."""

import logging
from datetime import date

from ...schemas.journal import (
    CreditAmount,
    DebitAmount,
    JournalEntryRequest,
    JournalLine,
    Totals,
)
from ...schemas.ledger import TransactionGroup
from .amounts import ZERO, format_amount, to_amount
from .enums import EntryAction, EntryKind, LedgerState
from .exceptions import IllegalTransitionError, LedgerValidationError
from .form_state import FormState
from . import lifecycle

logger = logging.getLogger(__name__)

MIN_LINES = 2


class JournalEntryBuilder(FormState):
    """Editable multi-line journal entry."""

    kind = EntryKind.JOURNAL_ENTRY

    def __init__(
        self,
        entry_date: date | None = None,
        description: str = "",
        reference: str | None = None,
        record_id: str | None = None,
        status=None,
    ):
        super().__init__(record_id=record_id, status=status)
        self.entry_date = entry_date or date.today()
        self.description = description
        self.reference = reference
        self.lines: list[JournalLine] = [JournalLine() for _ in range(MIN_LINES)]

    @classmethod
    def from_group(cls, group: TransactionGroup) -> "JournalEntryBuilder":
        """Load an existing transaction group for editing (or read-only display)."""
        builder = cls(
            entry_date=group.group_date,
            description=group.description or "",
            reference=group.reference,
            record_id=group.id,
            status=group.status,
        )
        lines = []
        for transaction in group.ledger_transaction_list:
            amount = None
            if transaction.amount > 0:
                if transaction.transaction_state == LedgerState.CREDIT:
                    amount = CreditAmount(amount=transaction.amount)
                elif transaction.transaction_state == LedgerState.DEBIT:
                    amount = DebitAmount(amount=transaction.amount)
                else:
                    # left empty so validation flags the line until a side is chosen
                    logger.warning(
                        f"Transaction {transaction.id} in group {group.id} has no debit/credit side"
                    )
            lines.append(JournalLine(
                account_id=transaction.ledger_account.id if transaction.ledger_account else None,
                amount=amount,
                description=transaction.description,
            ))
        while len(lines) < MIN_LINES:
            lines.append(JournalLine())
        builder.lines = lines
        return builder

    # ------------------------------------------------------------------
    # Line editing
    # ------------------------------------------------------------------

    def _ensure_editable(self) -> None:
        if not self.is_editable:
            raise IllegalTransitionError(
                f"Journal entry in status {self.status.value} cannot be edited",
                status=self.status,
                action=EntryAction.SAVE,
            )

    def _line(self, index: int) -> JournalLine:
        if index < 0 or index >= len(self.lines):
            raise IndexError(f"Line {index} does not exist")
        return self.lines[index]

    def add_line(self) -> int:
        """Append an empty line and return its index."""
        self._ensure_editable()
        self.lines.append(JournalLine())
        return len(self.lines) - 1

    def remove_line(self, index: int) -> None:
        """
        Remove a line.

        Raises:
            LedgerValidationError: If only the minimum number of lines remains
        """
        self._ensure_editable()
        self._line(index)
        if len(self.lines) <= MIN_LINES:
            raise LedgerValidationError(
                f"Minimum {MIN_LINES} lines required",
                field="lines",
                line_index=index,
            )
        del self.lines[index]

    def set_line_account(self, index: int, account_id: str | None) -> None:
        self._ensure_editable()
        line = self._line(index)
        self.lines[index] = line.model_copy(update={"account_id": account_id or None})

    def set_line_description(self, index: int, description: str | None) -> None:
        self._ensure_editable()
        line = self._line(index)
        self.lines[index] = line.model_copy(update={"description": description})

    def set_line_debit(self, index: int, value) -> None:
        """Set the debit side; a positive debit replaces any credit on the line."""
        self._set_side(index, value, DebitAmount)

    def set_line_credit(self, index: int, value) -> None:
        """Set the credit side; a positive credit replaces any debit on the line."""
        self._set_side(index, value, CreditAmount)

    def _set_side(self, index: int, value, side_cls) -> None:
        self._ensure_editable()
        line = self._line(index)
        field = "debit_amount" if side_cls is DebitAmount else "credit_amount"
        amount = to_amount(value, field=field, line_index=index)
        if amount > 0:
            new_amount = side_cls(amount=amount)
        elif isinstance(line.amount, side_cls):
            new_amount = None
        else:
            # zero on the other side leaves the line as it is
            return
        self.lines[index] = line.model_copy(update={"amount": new_amount})

    # ------------------------------------------------------------------
    # Totals and validation
    # ------------------------------------------------------------------

    def totals(self) -> Totals:
        total_debit = sum((line.debit_amount for line in self.lines), ZERO)
        total_credit = sum((line.credit_amount for line in self.lines), ZERO)
        return Totals(
            total_debit=total_debit,
            total_credit=total_credit,
            is_balanced=total_debit == total_credit,
            difference=abs(total_debit - total_credit),
        )

    def validate(self) -> list[LedgerValidationError]:
        """Return every local validation problem, in display order."""
        errors = []
        if not self.description or not self.description.strip():
            errors.append(LedgerValidationError("Description is required", field="description"))
        if self.entry_date is None:
            errors.append(LedgerValidationError("Entry date is required", field="entry_date"))
        if len(self.lines) < MIN_LINES:
            errors.append(LedgerValidationError(f"At least {MIN_LINES} lines are required", field="lines"))
        for index, line in enumerate(self.lines):
            if not line.account_id:
                errors.append(LedgerValidationError("Account is required", field="account_id", line_index=index))
            if line.amount is None:
                errors.append(LedgerValidationError(
                    "Each line must have either a debit or credit amount",
                    field="amount",
                    line_index=index,
                ))
        totals = self.totals()
        if not totals.is_balanced:
            errors.append(LedgerValidationError(
                f"Debits and credits must be equal, difference: {format_amount(totals.difference)}",
                field="lines",
            ))
        return errors

    def to_request(self) -> JournalEntryRequest:
        errors = self.validate()
        if errors:
            raise errors[0]
        return JournalEntryRequest(
            entry_date=self.entry_date,
            description=self.description.strip(),
            reference=self.reference or None,
            lines=self.lines,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, api, post: bool = False) -> TransactionGroup:
        """
        Save the entry as a draft, or save and post it.

        Local validation runs first and nothing is sent when it fails. After
        the backend accepts, the entry is re-fetched and the reported status
        replaces the local one.

        Args:
            api: LedgerApi used to reach the backend
            post: Post the entry after saving it

        Returns:
            The transaction group as confirmed by the backend

        Raises:
            LedgerValidationError: If the entry is incomplete or unbalanced
            IllegalTransitionError: If the entry is posted or reversed
            ApiError: If the backend rejects the request or is unreachable
        """
        lifecycle.next_status(self.status, EntryAction.SAVE, self.kind)
        request = self.to_request()

        with self._in_flight():
            if self.record_id:
                group = api.update_transaction_group(self.record_id, request)
            else:
                group = api.create_transaction_group(request)
            self.record_id = group.id
            self.status = group.status

            if post:
                lifecycle.next_status(self.status, EntryAction.POST, self.kind)
                api.post_transaction_group(group.id)

            group = api.get_transaction_group(group.id)
            self.status = group.status

        logger.info(
            f"Saved journal entry {group.id} with {len(request.lines)} lines, status={group.status.value}"
        )
        return group
