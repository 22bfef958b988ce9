"""Transaction register schemas: one row per ledger line of a journal entry or voucher."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..domain.accounting.enums import EntryKind, RegisterEntryType, TransactionStatus


class RegisterRow(BaseModel):
    """A single debit or credit line as listed in the register."""
    id: str
    source_id: str
    kind: EntryKind
    entry_type: RegisterEntryType
    entry_date: Optional[date] = None
    transaction_id: str
    description: str = ""
    account_id: Optional[str] = None
    account_code: str = ""
    account_name: str = ""
    debit_amount: Decimal = Decimal("0")
    credit_amount: Decimal = Decimal("0")
    status: TransactionStatus = TransactionStatus.DRAFT

    @property
    def amount(self) -> Decimal:
        return self.debit_amount if self.debit_amount > 0 else self.credit_amount


class RegisterFilters(BaseModel):
    """Register filters; unset fields do not filter."""
    search: Optional[str] = None
    status: Optional[TransactionStatus] = None
    entry_type: Optional[RegisterEntryType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    account_id: Optional[str] = None
    min_amount: Optional[Decimal] = Field(None, ge=0)
    max_amount: Optional[Decimal] = Field(None, ge=0)


class RegisterPage(BaseModel):
    rows: list[RegisterRow] = Field(default_factory=list)
    page: int
    page_size: int
    total: int
    total_pages: int
