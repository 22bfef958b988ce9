"""Voucher builder: a two-line entry derived from one amount and a voucher type."""

import logging
from datetime import date
from decimal import Decimal

from ...schemas.journal import CreditAmount, DebitAmount, JournalLine
from ...schemas.voucher import (
    ClientBeneficiary,
    OtherBeneficiary,
    StaffBeneficiary,
    VendorBeneficiary,
    Voucher,
    VoucherRequest,
)
from .amounts import ZERO, to_amount
from .enums import BeneficiaryType, EntryAction, EntryKind, TransactionStatus, VoucherType
from .exceptions import IllegalTransitionError, LedgerValidationError
from .form_state import FormState
from . import lifecycle

logger = logging.getLogger(__name__)

# Account fields that apply to each voucher type, as (debit field, credit field)
POLARITY = {
    VoucherType.PAYMENT: ("expense_account_id", "cash_account_id"),
    VoucherType.RECEIPT: ("cash_account_id", "income_account_id"),
    VoucherType.DEPOSIT: ("bank_account_id", "cash_account_id"),
}

COUNTER_ACCOUNT_FIELDS = ("expense_account_id", "income_account_id", "bank_account_id")

ACCOUNT_LABELS = {
    "cash_account_id": "Bank/Cash account",
    "expense_account_id": "Expense account",
    "income_account_id": "Income account",
    "bank_account_id": "Bank account",
}

BENEFICIARY_VARIANTS = {
    BeneficiaryType.CLIENT: lambda value: ClientBeneficiary(client_id=value),
    BeneficiaryType.VENDOR: lambda value: VendorBeneficiary(vendor_id=value),
    BeneficiaryType.STAFF: lambda value: StaffBeneficiary(staff_id=value),
    BeneficiaryType.OTHER: lambda value: OtherBeneficiary(name=value),
}


def default_beneficiary_type(voucher_type: VoucherType) -> BeneficiaryType:
    """Payments usually go to vendors; receipts and deposits come from clients."""
    if voucher_type == VoucherType.PAYMENT:
        return BeneficiaryType.VENDOR
    return BeneficiaryType.CLIENT


class VoucherBuilder(FormState):
    """Editable payment, receipt or deposit voucher."""

    kind = EntryKind.VOUCHER

    def __init__(
        self,
        voucher_type: VoucherType = VoucherType.PAYMENT,
        voucher_date: date | None = None,
        description: str = "",
        reference: str | None = None,
        record_id: str | None = None,
        status=None,
    ):
        super().__init__(record_id=record_id, status=status)
        self.voucher_type = VoucherType(voucher_type)
        self.voucher_date = voucher_date or date.today()
        self.description = description
        self.reference = reference
        self.amount: Decimal = ZERO
        self.cash_account_id: str | None = None
        self.expense_account_id: str | None = None
        self.income_account_id: str | None = None
        self.bank_account_id: str | None = None
        self.beneficiary_type = default_beneficiary_type(self.voucher_type)
        self.beneficiary = None
        self._beneficiary_type_chosen = False

    @classmethod
    def from_voucher(cls, voucher: Voucher) -> "VoucherBuilder":
        builder = cls(
            voucher_type=voucher.voucher_type,
            voucher_date=voucher.voucher_date,
            description=voucher.description or "",
            reference=voucher.reference,
            record_id=voucher.id,
            status=voucher.status,
        )
        builder.amount = voucher.amount
        builder.cash_account_id = voucher.cash_account.id if voucher.cash_account else None
        builder.expense_account_id = voucher.expense_account.id if voucher.expense_account else None
        builder.income_account_id = voucher.income_account.id if voucher.income_account else None
        builder.bank_account_id = voucher.bank_account.id if voucher.bank_account else None
        builder.beneficiary_type = voucher.voucher_to
        builder.beneficiary = voucher.beneficiary()
        builder._beneficiary_type_chosen = True
        return builder

    def _ensure_editable(self) -> None:
        if not self.is_editable:
            raise IllegalTransitionError(
                f"Voucher in status {self.status.value} cannot be edited",
                status=self.status,
                action=EntryAction.SAVE,
            )

    # ------------------------------------------------------------------
    # Form fields
    # ------------------------------------------------------------------

    @property
    def required_account_fields(self) -> tuple[str, str]:
        return POLARITY[self.voucher_type]

    def select_type(self, voucher_type: VoucherType) -> None:
        """Switch voucher type, clearing counter accounts that no longer apply."""
        self._ensure_editable()
        self.voucher_type = VoucherType(voucher_type)
        applicable = set(self.required_account_fields)
        for field in COUNTER_ACCOUNT_FIELDS:
            if field not in applicable:
                setattr(self, field, None)
        if not self._beneficiary_type_chosen:
            new_kind = default_beneficiary_type(self.voucher_type)
            if new_kind != self.beneficiary_type:
                self.beneficiary_type = new_kind
                self.beneficiary = None

    def select_beneficiary_type(self, beneficiary_type: BeneficiaryType) -> None:
        """Switch beneficiary kind; the previous reference no longer applies."""
        self._ensure_editable()
        beneficiary_type = BeneficiaryType(beneficiary_type)
        self._beneficiary_type_chosen = True
        if beneficiary_type != self.beneficiary_type:
            self.beneficiary_type = beneficiary_type
            self.beneficiary = None

    def set_beneficiary(self, value: str | None) -> None:
        """Set the client/vendor/staff id, or the free-text name for OTHER."""
        self._ensure_editable()
        if value is None or not str(value).strip():
            self.beneficiary = None
            return
        self.beneficiary = BENEFICIARY_VARIANTS[self.beneficiary_type](str(value).strip())

    def set_amount(self, value) -> None:
        self._ensure_editable()
        self.amount = to_amount(value, field="amount")

    def _set_account(self, field: str, account_id: str | None) -> None:
        self._ensure_editable()
        if field != "cash_account_id" and field not in self.required_account_fields:
            raise LedgerValidationError(
                f"{ACCOUNT_LABELS[field]} does not apply to {self.voucher_type.value.lower()} vouchers",
                field=field,
            )
        setattr(self, field, account_id or None)

    def set_cash_account(self, account_id: str | None) -> None:
        self._set_account("cash_account_id", account_id)

    def set_expense_account(self, account_id: str | None) -> None:
        self._set_account("expense_account_id", account_id)

    def set_income_account(self, account_id: str | None) -> None:
        self._set_account("income_account_id", account_id)

    def set_bank_account(self, account_id: str | None) -> None:
        self._set_account("bank_account_id", account_id)

    # ------------------------------------------------------------------
    # Preview and validation
    # ------------------------------------------------------------------

    def preview(self) -> list[JournalLine]:
        """
        Derive the two journal lines this voucher will produce.

        Both lines carry the voucher amount, so the result is always balanced.

        Raises:
            LedgerValidationError: If the amount is not positive
        """
        if self.amount <= 0:
            raise LedgerValidationError("Amount must be greater than 0", field="amount")
        debit_field, credit_field = self.required_account_fields
        return [
            JournalLine(
                account_id=getattr(self, debit_field),
                amount=DebitAmount(amount=self.amount),
                description=self.description or None,
            ),
            JournalLine(
                account_id=getattr(self, credit_field),
                amount=CreditAmount(amount=self.amount),
                description=self.description or None,
            ),
        ]

    def validate(self) -> list[LedgerValidationError]:
        errors = []
        if self.voucher_date is None:
            errors.append(LedgerValidationError("Date is required", field="voucher_date"))
        if not self.description or not self.description.strip():
            errors.append(LedgerValidationError("Description is required", field="description"))
        if self.amount <= 0:
            errors.append(LedgerValidationError("Amount must be greater than 0", field="amount"))
        if not self.cash_account_id:
            errors.append(LedgerValidationError("Bank/Cash account is required", field="cash_account_id"))
        for field in self.required_account_fields:
            if field != "cash_account_id" and not getattr(self, field):
                errors.append(LedgerValidationError(
                    f"{ACCOUNT_LABELS[field]} is required for {self.voucher_type.value.lower()} vouchers",
                    field=field,
                ))
        if self.beneficiary is None:
            errors.append(LedgerValidationError(
                f"{self.beneficiary_type.value.title()} beneficiary is required",
                field="beneficiary",
            ))
        return errors

    def to_request(self) -> VoucherRequest:
        errors = self.validate()
        if errors:
            raise errors[0]
        return VoucherRequest(
            voucher_type=self.voucher_type,
            beneficiary=self.beneficiary,
            voucher_date=self.voucher_date,
            amount=self.amount,
            description=self.description.strip(),
            reference=self.reference or None,
            cash_account_id=self.cash_account_id,
            expense_account_id=self.expense_account_id,
            income_account_id=self.income_account_id,
            bank_account_id=self.bank_account_id,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, api, post: bool = False) -> Voucher:
        """
        Save the voucher as a draft, or save and post it.

        A voucher awaiting approval is no longer editable, so posting it
        skips the save.

        Raises:
            LedgerValidationError: If a required field is missing
            IllegalTransitionError: If the voucher is posted or reversed, or
                awaiting approval and ``post`` is False
            ApiError: If the backend rejects the request or is unreachable
        """
        if post and self.status == TransactionStatus.PENDING:
            return self._post_pending(api)

        lifecycle.next_status(self.status, EntryAction.SAVE, self.kind)
        request = self.to_request()

        with self._in_flight():
            if self.record_id:
                voucher = api.update_voucher(self.record_id, request)
            else:
                voucher = api.create_voucher(request)
            self.record_id = voucher.id
            self.status = voucher.status

            if post:
                lifecycle.next_status(self.status, EntryAction.POST, self.kind)
                api.post_voucher(voucher.id)

            voucher = api.get_voucher(voucher.id)
            self.status = voucher.status

        logger.info(
            f"Saved {voucher.voucher_type.value.lower()} voucher {voucher.id} "
            f"for {voucher.amount}, status={voucher.status.value}"
        )
        return voucher

    def _post_pending(self, api) -> Voucher:
        lifecycle.next_status(self.status, EntryAction.POST, self.kind)
        with self._in_flight():
            api.post_voucher(self.record_id)
            voucher = api.get_voucher(self.record_id)
            self.status = voucher.status
        logger.info(f"Posted approved voucher {voucher.id}, status={voucher.status.value}")
        return voucher

    def submit_for_approval(self, api) -> Voucher:
        """Move a saved draft voucher to PENDING."""
        if not self.record_id:
            raise LedgerValidationError("Save the voucher before submitting it for approval", field="id")
        lifecycle.next_status(self.status, EntryAction.SUBMIT_FOR_APPROVAL, self.kind)
        with self._in_flight():
            api.submit_voucher_for_approval(self.record_id)
            voucher = api.get_voucher(self.record_id)
            self.status = voucher.status
        logger.info(f"Submitted voucher {voucher.id} for approval, status={voucher.status.value}")
        return voucher
