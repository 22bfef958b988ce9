"""Voucher schemas."""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..domain.accounting.enums import BeneficiaryType, TransactionStatus, VoucherType
from .ledger import Reference, WireModel


class ClientBeneficiary(BaseModel):
    kind: Literal["CLIENT"] = "CLIENT"
    client_id: str = Field(..., min_length=1)


class VendorBeneficiary(BaseModel):
    kind: Literal["VENDOR"] = "VENDOR"
    vendor_id: str = Field(..., min_length=1)


class StaffBeneficiary(BaseModel):
    kind: Literal["STAFF"] = "STAFF"
    staff_id: str = Field(..., min_length=1)


class OtherBeneficiary(BaseModel):
    kind: Literal["OTHER"] = "OTHER"
    name: str = Field(..., min_length=1)


Beneficiary = Annotated[
    Union[ClientBeneficiary, VendorBeneficiary, StaffBeneficiary, OtherBeneficiary],
    Field(discriminator="kind"),
]


class VoucherRequest(BaseModel):
    """Validated voucher ready to be sent to the backend."""
    voucher_type: VoucherType
    beneficiary: Beneficiary
    voucher_date: date
    amount: Decimal = Field(..., gt=0)
    description: str
    reference: Optional[str] = None
    cash_account_id: str
    expense_account_id: Optional[str] = None
    income_account_id: Optional[str] = None
    bank_account_id: Optional[str] = None

    def to_payload(self) -> dict:
        """Build the voucher JSON body, foreign keys nested as ``{"id": ...}``."""
        body = {
            "voucherType": self.voucher_type.value,
            "voucherTo": self.beneficiary.kind,
            "voucherDate": self.voucher_date.isoformat(),
            "amount": str(self.amount),
            "description": self.description,
            "reference": self.reference,
        }
        if isinstance(self.beneficiary, ClientBeneficiary):
            body["client"] = {"id": self.beneficiary.client_id}
        elif isinstance(self.beneficiary, VendorBeneficiary):
            body["vendor"] = {"id": self.beneficiary.vendor_id}
        elif isinstance(self.beneficiary, StaffBeneficiary):
            body["staff"] = {"id": self.beneficiary.staff_id}
        else:
            body["beneficiaryName"] = self.beneficiary.name

        body["cashAccount"] = {"id": self.cash_account_id}
        if self.expense_account_id:
            body["expenseAccount"] = {"id": self.expense_account_id}
        if self.income_account_id:
            body["incomeAccount"] = {"id": self.income_account_id}
        if self.bank_account_id:
            body["bankAccount"] = {"id": self.bank_account_id}
        return body


class Voucher(WireModel):
    """Voucher as returned by the backend."""
    id: str
    voucher_number: Optional[str] = None
    voucher_type: VoucherType
    voucher_to: BeneficiaryType
    voucher_date: Optional[date] = None
    beneficiary_name: Optional[str] = None
    client: Optional[Reference] = None
    vendor: Optional[Reference] = None
    staff: Optional[Reference] = None
    amount: Decimal
    description: Optional[str] = None
    reference: Optional[str] = None
    cash_account: Optional[Reference] = None
    expense_account: Optional[Reference] = None
    income_account: Optional[Reference] = None
    bank_account: Optional[Reference] = None
    status: TransactionStatus = TransactionStatus.DRAFT

    def beneficiary(self):
        """Return the beneficiary as its tagged variant, or None when incomplete."""
        if self.voucher_to == BeneficiaryType.CLIENT and self.client:
            return ClientBeneficiary(client_id=self.client.id)
        if self.voucher_to == BeneficiaryType.VENDOR and self.vendor:
            return VendorBeneficiary(vendor_id=self.vendor.id)
        if self.voucher_to == BeneficiaryType.STAFF and self.staff:
            return StaffBeneficiary(staff_id=self.staff.id)
        if self.voucher_to == BeneficiaryType.OTHER and self.beneficiary_name:
            return OtherBeneficiary(name=self.beneficiary_name)
        return None
